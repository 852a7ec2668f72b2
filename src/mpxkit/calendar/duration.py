from __future__ import annotations

import enum
from dataclasses import dataclass

from .config import DEFAULT_CONTEXT, FileContext


class TimeUnit(enum.Enum):
    """Duration units with their MPX suffixes."""

    MINUTES = "m"
    HOURS = "h"
    DAYS = "d"
    WEEKS = "w"
    MONTHS = "mo"

    def minutes(self, context: FileContext = DEFAULT_CONTEXT) -> float:
        """Length of one unit in working minutes under ``context``."""
        if self is TimeUnit.MINUTES:
            return 1.0
        if self is TimeUnit.HOURS:
            return 60.0
        if self is TimeUnit.DAYS:
            return float(context.minutes_per_day)
        if self is TimeUnit.WEEKS:
            return float(context.minutes_per_week)
        return float(context.minutes_per_day * context.days_per_month)


@dataclass(frozen=True, slots=True)
class Duration:
    duration: float
    units: TimeUnit = TimeUnit.DAYS

    def convert_units(
        self, units: TimeUnit, context: FileContext = DEFAULT_CONTEXT
    ) -> "Duration":
        if units is self.units:
            return self
        minutes = self.duration * self.units.minutes(context)
        return Duration(minutes / units.minutes(context), units)

    def __str__(self) -> str:
        return f"{self.duration}{self.units.value}"
