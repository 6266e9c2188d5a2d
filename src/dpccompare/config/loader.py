"""Settings loader and singleton manager.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- The legacy ``HEALTHCARE_GOV_API_KEY`` variable
- A process-wide Settings instance for the CLI

Library code takes a Settings object explicitly; only the CLI uses
``get_config``.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

import toml
from dotenv import load_dotenv
from pydantic import ValidationError

from dpccompare.config.models.settings import Settings
from dpccompare.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)

LEGACY_API_KEY_ENV = "HEALTHCARE_GOV_API_KEY"
CONFIG_PATH_ENV = "DPC_COMPARE_CONFIG"

DEFAULT_CONFIG_PATHS = (
    Path("config/config.toml"),
    Path("dpccompare.toml"),
)


def _load_env_file(env_file: Path | None = None) -> bool:
    """Load variables from a .env file if one exists.

    Variables already set in the environment win.

    Returns:
        True if a file was loaded
    """
    env_file = env_file or Path(".env")
    if not env_file.exists():
        return False
    load_dotenv(env_file, override=False)
    logger.debug("Loaded environment from %s", env_file.name)
    return True


def _apply_legacy_api_key(settings: Settings) -> Settings:
    legacy_key = os.getenv(LEGACY_API_KEY_ENV, "").strip()
    if legacy_key and not settings.api.marketplace.api_key:
        settings.api.marketplace.api_key = legacy_key
    return settings


def load_settings(
    config_path: str | Path | None = None,
    env_file: Path | None = None,
) -> Settings:
    """Load settings from TOML, environment and .env.

    Args:
        config_path: Optional TOML file. When None, ``DPC_COMPARE_CONFIG`` and
            the default locations are tried, then environment only.
        env_file: Optional .env path (default: ./.env)

    Returns:
        Settings instance

    Raises:
        ApplicationError: If an explicit config file is missing or any
            configuration value is invalid
    """
    _load_env_file(env_file)

    explicit = config_path or os.getenv(CONFIG_PATH_ENV)
    candidates = [Path(explicit)] if explicit else [p for p in DEFAULT_CONFIG_PATHS if p.exists()]

    try:
        if candidates:
            settings = Settings.from_toml_file(candidates[0])
            logger.debug("Configuration loaded from %s", candidates[0])
        else:
            settings = Settings()
    except FileNotFoundError as e:
        raise ApplicationError(
            code=ErrorCode.MISSING_CONFIG,
            message=str(e),
            context=ErrorContext(
                operation="load_settings",
                additional_data={"config_path": str(candidates[0])},
            ),
            original_error=e,
        ) from e
    except (toml.TomlDecodeError, ValidationError) as e:
        raise ApplicationError(
            code=ErrorCode.INVALID_CONFIG,
            message=f"Invalid configuration: {e}",
            context=ErrorContext(
                operation="load_settings",
                additional_data={"config_path": str(candidates[0]) if candidates else "environment"},
            ),
            original_error=e,
        ) from e

    return _apply_legacy_api_key(settings)


class SettingsLoader:
    """Thread-safe holder of the process-wide Settings instance."""

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()
        return self._instance

    def reload_config(self, config_path: str | Path | None = None) -> Settings:
        with self._lock:
            self._instance = load_settings(config_path)
        return self._instance


_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance, loading it if necessary."""
    return _loader.get_config()


def reload_config(config_path: str | Path | None = None) -> Settings:
    """Reload the global settings instance."""
    return _loader.reload_config(config_path)


__all__ = [
    "SettingsLoader",
    "get_config",
    "load_settings",
    "reload_config",
]
