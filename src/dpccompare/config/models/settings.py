"""dpccompare Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dpccompare.config.models.api_settings import APISettings
from dpccompare.config.models.app_settings import AppSettings, LoggingSettings
from dpccompare.config.models.cache_settings import CacheSettings
from dpccompare.config.models.comparison_settings import ComparisonSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Settings facade for all configuration domains.

    Environment variables use the ``DPC_COMPARE_`` prefix and ``__`` between
    nesting levels, e.g. ``DPC_COMPARE_API__MARKETPLACE__API_KEY``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DPC_COMPARE_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: APISettings = Field(default_factory=APISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    comparison: ComparisonSettings = Field(default_factory=ComparisonSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from a TOML file; environment variables fill the rest."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to a TOML file.

        The API key is written as-is; config files are not logs.
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(exclude_none=True)
        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)

        logger.info("Configuration saved to %s", file_path)


__all__ = ["Settings"]
