from __future__ import annotations

import enum


class DayFlag(enum.IntEnum):
    """
    Working state stored for one weekday.  The integer values are the ones
    written to MPX calendar records.
    """

    NON_WORKING = 0
    WORKING = 1
    DEFAULT = 2


class Day(enum.IntEnum):
    """MPX day numbers (1=Sunday, 7=Saturday)."""

    SUNDAY = 1
    MONDAY = 2
    TUESDAY = 3
    WEDNESDAY = 4
    THURSDAY = 5
    FRIDAY = 6
    SATURDAY = 7


class CalendarKind(enum.Enum):
    BASE = "base"
    DERIVED = "derived"


DAYS_PER_WEEK = 7
