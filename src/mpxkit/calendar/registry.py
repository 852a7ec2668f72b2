from __future__ import annotations

import logging
from typing import Iterator, Sequence

from .calendar import DEFAULT_BASE_CALENDAR_NAME, CalendarDefinition
from .config import DEFAULT_CONTEXT, FileContext
from .flags import CalendarKind, Day

logger = logging.getLogger(__name__)


class CalendarRegistry:
    """
    In-memory name lookup for calendars belonging to one file.

    Calendars created through the registry resolve their base calendars
    through it and render with its ``context``.  Unique ids are whatever the
    caller passes in.
    """

    def __init__(self, context: FileContext = DEFAULT_CONTEXT) -> None:
        self.context = context
        self._base: dict[str, CalendarDefinition] = {}
        self._calendars: list[CalendarDefinition] = []

    # ── creation ─────────────────────────────────────────────────────────

    def add_base_calendar(self, name: str | None = None, *, unique_id: int = 0) -> CalendarDefinition:
        return self._register(
            CalendarDefinition(CalendarKind.BASE, name, registry=self, unique_id=unique_id)
        )

    def add_derived_calendar(
        self, base_calendar_name: str | None = None, *, unique_id: int = 0
    ) -> CalendarDefinition:
        return self._register(
            CalendarDefinition(
                CalendarKind.DERIVED, base_calendar_name, registry=self, unique_id=unique_id
            )
        )

    def add_calendar_record(
        self, fields: Sequence[str], kind: CalendarKind, *, unique_id: int = 0
    ) -> CalendarDefinition:
        return self._register(
            CalendarDefinition.from_record(fields, kind, registry=self, unique_id=unique_id)
        )

    def add_default_base_calendar(self, *, unique_id: int = 0) -> CalendarDefinition:
        """'Standard' calendar: Monday to Friday working, default hours."""
        cal = self.add_base_calendar(DEFAULT_BASE_CALENDAR_NAME, unique_id=unique_id)
        cal.set_working_day(Day.SUNDAY, False)
        cal.set_working_day(Day.SATURDAY, False)
        cal.add_default_calendar_hours()
        return cal

    def _register(self, calendar: CalendarDefinition) -> CalendarDefinition:
        self._calendars.append(calendar)
        if calendar.is_base_calendar and calendar.name is not None:
            if calendar.name in self._base:
                logger.debug("Base calendar %r redefined", calendar.name)
            self._base[calendar.name] = calendar
        return calendar

    # ── lookup ───────────────────────────────────────────────────────────

    def get_base_calendar(self, name: str) -> CalendarDefinition | None:
        cal = self._base.get(name)
        if cal is not None and cal.name != name:
            # renamed after registration
            del self._base[name]
            cal = None
        if cal is None:
            cal = next(
                (c for c in self._calendars if c.is_base_calendar and c.name == name),
                None,
            )
            if cal is not None:
                self._base[name] = cal
        return cal

    def __iter__(self) -> Iterator[CalendarDefinition]:
        return iter(self._calendars)

    def __len__(self) -> int:
        return len(self._calendars)

    def to_mpx(self) -> str:
        return "".join(c.to_mpx(self.context) for c in self._calendars)

    def __repr__(self) -> str:
        return (
            f"CalendarRegistry(calendars={len(self._calendars)}, "
            f"base={sorted(self._base)}, "
            f"delimiter={self.context.delimiter!r})"
        )
