from __future__ import annotations

from typing import Sequence


class CalendarError(Exception):
    """Base exception for all calendar-related errors."""


class MaximumRecordsExceeded(CalendarError):
    """
    A record could not be added because the MPX format limit for it is
    reached: an hours slot outside 1..7, a third hours range, or more than
    250 exceptions on one calendar.
    """

    def __init__(self, message: str, limit: int | None = None) -> None:
        super().__init__(message)
        self.limit = limit


class InvalidTimeFormat(CalendarError, ValueError):
    """A date or time field does not match the configured format."""

    def __init__(self, value: str, fmt: str) -> None:
        super().__init__(f"Cannot parse {value!r} with format {fmt!r}.")
        self.value = value
        self.format = fmt


class BaseCalendarNotFound(CalendarError, LookupError):
    """A derived calendar names a base calendar that cannot be found."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Base calendar {name!r} not found.")
        self.name = name


class CalendarCycle(CalendarError):
    """The base-calendar chain loops back on itself."""

    def __init__(self, chain: Sequence[str | None]) -> None:
        self.chain: tuple[str | None, ...] = tuple(chain)
        path = " -> ".join(repr(n) for n in self.chain)
        super().__init__(f"Base calendar cycle detected: {path}.")
