"""Daily request budget gate.

This module provides an advisory, in-process counter that keeps calls to an
external free-tier API (the Census geocoder) under its daily quota. It is
not persisted: a process restart starts a fresh budget.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from dpccompare.shared.constants import CensusConfig
from dpccompare.shared.errors import ApplicationError, ErrorCode, ErrorContext
from dpccompare.shared.logging import log_operation_error

logger = logging.getLogger(__name__)


@dataclass
class RateBudget:
    """Requests made on the calendar day identified by ``day_key``."""

    count_today: int
    day_key: str


class RateGate:
    """Rolling daily request budget.

    ``try_consume`` grants at most ``max_daily_budget`` requests per calendar
    day and resets on day rollover. Callers that are denied skip the network
    and move on to their next fallback.

    The counter is mutated without a lock; it relies on single-threaded
    event-loop scheduling.

    Args:
        max_daily_budget: Requests allowed per day (default: 2400)
        today: Callable returning the current date (injectable for tests)
    """

    def __init__(
        self,
        max_daily_budget: int = CensusConfig.MAX_DAILY_REQUESTS,
        today: Callable[[], date] = date.today,
    ):
        """Initialize the gate.

        Raises:
            ApplicationError: If max_daily_budget is not positive
        """
        if max_daily_budget <= 0:
            error = ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Daily budget must be positive, got: {max_daily_budget}",
                context=ErrorContext(
                    operation="rate_gate_init",
                    additional_data={"max_daily_budget": max_daily_budget},
                ),
            )
            log_operation_error(logger=logger, error=error)
            raise error

        self.max_daily_budget = max_daily_budget
        self._today = today
        self._budget = RateBudget(count_today=0, day_key=self._current_day_key())

    def _current_day_key(self) -> str:
        return self._today().isoformat()

    def _roll_over(self) -> None:
        day_key = self._current_day_key()
        if day_key != self._budget.day_key:
            logger.debug(
                "Daily budget reset: %s -> %s (%d used)",
                self._budget.day_key,
                day_key,
                self._budget.count_today,
            )
            self._budget = RateBudget(count_today=0, day_key=day_key)

    def try_consume(self) -> bool:
        """Consume one request from today's budget.

        Returns:
            True if the request may proceed, False if today's budget is spent
        """
        self._roll_over()

        if self._budget.count_today < self.max_daily_budget:
            self._budget.count_today += 1
            return True

        logger.warning(
            "Daily request budget of %d exhausted for %s",
            self.max_daily_budget,
            self._budget.day_key,
        )
        return False

    def remaining(self) -> int:
        """Requests still available today."""
        self._roll_over()
        return self.max_daily_budget - self._budget.count_today

    @property
    def budget(self) -> RateBudget:
        self._roll_over()
        return RateBudget(self._budget.count_today, self._budget.day_key)

    def reset(self) -> None:
        """Reset today's counter."""
        self._budget = RateBudget(count_today=0, day_key=self._current_day_key())

    def stats(self) -> dict[str, int | str]:
        budget = self.budget
        return {
            "count_today": budget.count_today,
            "day_key": budget.day_key,
            "max_daily_budget": self.max_daily_budget,
        }
