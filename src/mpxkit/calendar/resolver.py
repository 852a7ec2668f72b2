"""
Base-calendar resolution.

A weekday flagged ``DEFAULT`` takes its working state from the base
calendar, which is referenced by name and looked up on every call through
an injected lookup (normally the owning ``CalendarRegistry``).  The walk is
iterative and remembers every calendar it has visited, so a chain that loops
raises ``CalendarCycle`` instead of recursing forever, and a name that does
not resolve raises ``BaseCalendarNotFound``.  Both errors propagate to the
caller; nothing is silently treated as working.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Protocol

from ._exceptions import BaseCalendarNotFound, CalendarCycle
from .flags import DayFlag

if TYPE_CHECKING:
    from .calendar import CalendarDefinition

logger = logging.getLogger(__name__)


class BaseCalendarLookup(Protocol):
    def get_base_calendar(self, name: str) -> "CalendarDefinition | None": ...


class CalendarResolver:
    """
    Resolves a weekday of a calendar to working/non-working, following
    DEFAULT flags through the base-calendar chain via ``lookup``.
    """

    def __init__(self, lookup: BaseCalendarLookup | None = None) -> None:
        self._lookup = lookup

    @property
    def lookup(self) -> BaseCalendarLookup | None:
        return self._lookup

    def base_calendar_of(self, calendar: "CalendarDefinition") -> "CalendarDefinition | None":
        if self._lookup is None:
            return None
        return self._lookup.get_base_calendar(calendar.base_lookup_name)

    def is_working_day(self, calendar: "CalendarDefinition", day: int) -> bool:
        visited: list["CalendarDefinition"] = [calendar]
        current = calendar

        while True:
            flag = current.get_working_day(day)
            if flag is not DayFlag.DEFAULT:
                return flag is DayFlag.WORKING

            name = current.base_lookup_name
            base = self.base_calendar_of(current)
            if base is None:
                logger.warning(
                    "Day %d of calendar %r defers to missing base calendar %r",
                    day, calendar.label, name,
                )
                raise BaseCalendarNotFound(name)

            if any(base is seen for seen in visited):
                chain = [c.label for c in visited] + [base.label]
                logger.warning("Base calendar cycle while resolving day %d: %s", day, chain)
                raise CalendarCycle(chain)

            logger.debug("Day %d of %r deferred to base calendar %r", day, current.label, name)
            visited.append(base)
            current = base

    def resolve_week(self, calendar: "CalendarDefinition", days: Iterable[int]) -> dict[int, bool]:
        """Resolve only the requested weekdays."""
        return {int(day): self.is_working_day(calendar, int(day)) for day in days}
