from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np

from ._dates import DateLike, field, parse_time, to_ordinal, to_ordinals, weekday
from ._exceptions import MaximumRecordsExceeded
from .arithmetic import DurationCalculator
from .config import DEFAULT_CONTEXT, FileContext
from .duration import Duration
from .exception import CalendarException
from .flags import DAYS_PER_WEEK, CalendarKind, Day, DayFlag
from .hours import CalendarHours
from .resolver import BaseCalendarLookup, CalendarResolver

logger = logging.getLogger(__name__)

FlagValue = Union[DayFlag, int, bool, None]

DEFAULT_BASE_CALENDAR_NAME = "Standard"
MAX_CALENDAR_EXCEPTIONS = 250

BASE_CALENDAR_RECORD_NUMBER = 20
RESOURCE_CALENDAR_RECORD_NUMBER = 55
BASE_CALENDAR_HOURS_RECORD_NUMBER = 25
RESOURCE_CALENDAR_HOURS_RECORD_NUMBER = 56
BASE_CALENDAR_EXCEPTION_RECORD_NUMBER = 26
RESOURCE_CALENDAR_EXCEPTION_RECORD_NUMBER = 57

_DEFAULT_TIME_FORMAT = "%H:%M"
_DEFAULT_HOURS = (("08:00", "12:00"), ("13:00", "17:00"))


class CalendarDefinition:
    """
    MPX calendar definition record.

    Base calendars are self-contained; derived (resource) calendars name a
    base calendar and inherit every weekday flagged ``DEFAULT`` from it.  The
    base is looked up by name through ``registry`` each time it is needed,
    so later changes to the base are always seen.

    Day numbers run 1=Sunday .. 7=Saturday.  Passing a day outside that range
    to the flag accessors is a caller error.
    """

    def __init__(
        self,
        kind: CalendarKind = CalendarKind.BASE,
        name: str | None = None,
        *,
        registry: BaseCalendarLookup | None = None,
        unique_id: int = 0,
        context: FileContext | None = None,
    ) -> None:
        self._kind: CalendarKind = CalendarKind(kind)
        self.unique_id: int = unique_id
        self._name: str | None = None
        self._base_calendar_name: str | None = None
        if self._kind is CalendarKind.BASE:
            self._name = name
        else:
            self._base_calendar_name = name

        self._days: list[DayFlag] = [DayFlag.NON_WORKING] * DAYS_PER_WEEK
        for day in Day:
            self.set_working_day(day, None)

        self._hours: list[CalendarHours | None] = [None] * DAYS_PER_WEEK
        self._exceptions: list[CalendarException] = []
        self._resolver = CalendarResolver(registry)
        self._context = context

    @classmethod
    def from_record(
        cls,
        fields: Sequence[str],
        kind: CalendarKind = CalendarKind.BASE,
        *,
        registry: BaseCalendarLookup | None = None,
        unique_id: int = 0,
        context: FileContext | None = None,
    ) -> "CalendarDefinition":
        """
        Build from raw record fields ``[name, d1, ..., d7]``.  Blank day
        fields follow the same substitution as ``set_working_day(day, None)``.
        """
        cal = cls(kind, field(fields, 0), registry=registry, unique_id=unique_id, context=context)
        for day in Day:
            raw = field(fields, int(day))
            cal.set_working_day(day, None if raw is None else int(raw))
        logger.debug("Read %s calendar %r", cal.kind.value, cal.label)
        return cal

    # ── identity ─────────────────────────────────────────────────────────

    @property
    def kind(self) -> CalendarKind:
        return self._kind

    @property
    def is_base_calendar(self) -> bool:
        return self._kind is CalendarKind.BASE

    @property
    def name(self) -> str | None:
        return self._name

    @name.setter
    def name(self, value: str | None) -> None:
        if not self.is_base_calendar:
            raise ValueError("Derived calendars are identified by their base calendar name.")
        self._name = value

    @property
    def base_calendar_name(self) -> str | None:
        """
        Name of the calendar DEFAULT days defer to.  On a base calendar this
        is only the link used when one of its own days is DEFAULT; it is not
        rendered.
        """
        return self._base_calendar_name

    @base_calendar_name.setter
    def base_calendar_name(self, value: str | None) -> None:
        self._base_calendar_name = value

    @property
    def base_lookup_name(self) -> str:
        return self._base_calendar_name or DEFAULT_BASE_CALENDAR_NAME

    @property
    def label(self) -> str | None:
        return self._name if self.is_base_calendar else self._base_calendar_name

    @property
    def registry(self) -> BaseCalendarLookup | None:
        return self._resolver.lookup

    @property
    def context(self) -> FileContext:
        if self._context is not None:
            return self._context
        return getattr(self._resolver.lookup, "context", DEFAULT_CONTEXT)

    def get_base_calendar(self) -> "CalendarDefinition | None":
        return self._resolver.base_calendar_of(self)

    # ── day flags ────────────────────────────────────────────────────────

    def set_working_day(self, day: int, working: FlagValue) -> None:
        """
        Store the flag for ``day``.  ``True``/``False`` map to WORKING and
        NON_WORKING.  ``None`` means "no value": WORKING on a base calendar,
        DEFAULT (inherit) on a derived one.
        """
        if not 1 <= day <= DAYS_PER_WEEK:
            raise ValueError(f"Day must be in 1..7; got {day}.")
        if working is None:
            flag = DayFlag.WORKING if self.is_base_calendar else DayFlag.DEFAULT
        elif isinstance(working, bool):
            flag = DayFlag.WORKING if working else DayFlag.NON_WORKING
        else:
            flag = DayFlag(working)
        self._days[day - 1] = flag

    def get_working_day(self, day: int) -> DayFlag:
        """Raw flag, without consulting the base calendar."""
        return self._days[day - 1]

    @property
    def days(self) -> tuple[DayFlag, ...]:
        return tuple(self._days)

    def is_working_day(self, day: int) -> bool:
        return self._resolver.is_working_day(self, day)

    # ── working dates ────────────────────────────────────────────────────

    def is_working_date(self, value: DateLike) -> bool:
        """
        Exceptions are scanned in insertion order and the first one whose
        range contains the date decides, even if a later exception is more
        specific.  Without a match the weekday flag decides.
        """
        for exc in self._exceptions:
            if exc.contains(value):
                return exc.get_working_value()
        return self.is_working_day(weekday(to_ordinal(value)))

    def working_mask(self, dates: "DateLike | np.ndarray | Sequence") -> np.ndarray:
        """
        Vectorized ``is_working_date``.  Accepts epoch-day ordinals,
        ``datetime64`` values or a sequence of dates and returns a boolean
        array of the same shape.
        """
        ords = to_ordinals(dates)
        shape = ords.shape
        ords = np.atleast_1d(ords).ravel()

        result, covered = self.exception_mask(ords)
        rest = ~covered
        if rest.any():
            days = weekday(ords[rest])
            table = np.zeros(DAYS_PER_WEEK + 1, dtype=bool)
            for day, working in self._resolver.resolve_week(self, np.unique(days)).items():
                table[day] = working
            result[rest] = table[days]

        return result.reshape(shape)

    def exception_mask(self, ordinals: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Exception pass of ``working_mask`` for a 1-D ordinal array.  Returns
        ``(working, covered)``; ``working`` is only meaningful where
        ``covered`` is set.  Never consults the base calendar.
        """
        result = np.zeros(ordinals.shape, dtype=bool)
        covered = np.zeros(ordinals.shape, dtype=bool)
        for exc in self._exceptions:
            bounds = exc.ordinal_bounds()
            if bounds is None:
                continue
            hit = (ordinals >= bounds[0]) & (ordinals <= bounds[1]) & ~covered
            result[hit] = exc.working
            covered |= hit
            if covered.all():
                break
        return result, covered

    # ── duration arithmetic ──────────────────────────────────────────────

    @property
    def calculator(self) -> DurationCalculator:
        return DurationCalculator(self)

    def get_duration(self, start_date: DateLike, end_date: DateLike) -> Duration:
        return self.calculator.get_duration(start_date, end_date)

    def get_date(self, start_date: DateLike, duration: Duration | float) -> DateLike:
        return self.calculator.get_date(start_date, duration)

    # ── hours ────────────────────────────────────────────────────────────

    def add_calendar_hours(self, day: int) -> CalendarHours:
        """
        Create an empty hours entry for ``day``.  Each weekday has one slot;
        adding the same day again replaces the earlier entry.
        """
        return self._store_hours(CalendarHours(day))

    def add_calendar_hours_record(self, fields: Sequence[str]) -> CalendarHours:
        return self._store_hours(CalendarHours.from_record(fields, self.context))

    def _store_hours(self, hours: CalendarHours) -> CalendarHours:
        slot = hours.day - 1
        if not 0 <= slot < DAYS_PER_WEEK:
            raise MaximumRecordsExceeded(
                f"Calendar hours day must be in 1..7; got {hours.day}.",
                limit=DAYS_PER_WEEK,
            )
        if self._hours[slot] is not None:
            logger.debug("Replacing hours for day %d of calendar %r", hours.day, self.label)
        self._hours[slot] = hours
        return hours

    def get_calendar_hours(self, day: int) -> CalendarHours | None:
        if not 1 <= day <= DAYS_PER_WEEK:
            raise ValueError(f"Day must be in 1..7; got {day}.")
        return self._hours[day - 1]

    @property
    def calendar_hours(self) -> tuple[CalendarHours, ...]:
        return tuple(h for h in self._hours if h is not None)

    def add_default_calendar_hours(self) -> None:
        """Monday to Friday 08:00-12:00 and 13:00-17:00; empty weekends."""
        ranges = [
            (parse_time(start, _DEFAULT_TIME_FORMAT), parse_time(end, _DEFAULT_TIME_FORMAT))
            for start, end in _DEFAULT_HOURS
        ]
        self.add_calendar_hours(Day.SUNDAY)
        for day in (Day.MONDAY, Day.TUESDAY, Day.WEDNESDAY, Day.THURSDAY, Day.FRIDAY):
            hours = self.add_calendar_hours(day)
            for start, end in ranges:
                hours.add_range(start, end)
        self.add_calendar_hours(Day.SATURDAY)

    # ── exceptions ───────────────────────────────────────────────────────

    def add_calendar_exception(
        self,
        from_date: DateLike | None = None,
        to_date: DateLike | None = None,
        working: bool = False,
    ) -> CalendarException:
        self._check_exception_capacity()
        return self._append_exception(CalendarException(from_date, to_date, working))

    def add_calendar_exception_record(self, fields: Sequence[str]) -> CalendarException:
        self._check_exception_capacity()
        return self._append_exception(CalendarException.from_record(fields, self.context))

    def _check_exception_capacity(self) -> None:
        if len(self._exceptions) >= MAX_CALENDAR_EXCEPTIONS:
            raise MaximumRecordsExceeded(
                f"Calendar {self.label!r} already has "
                f"{MAX_CALENDAR_EXCEPTIONS} exceptions.",
                limit=MAX_CALENDAR_EXCEPTIONS,
            )

    def _append_exception(self, exc: CalendarException) -> CalendarException:
        self._exceptions.append(exc)
        return exc

    @property
    def calendar_exceptions(self) -> tuple[CalendarException, ...]:
        return tuple(self._exceptions)

    # ── rendering / repr ─────────────────────────────────────────────────

    def to_mpx(self, context: FileContext | None = None) -> str:
        ctx = context if context is not None else self.context
        if self.is_base_calendar:
            numbers = (
                BASE_CALENDAR_RECORD_NUMBER,
                BASE_CALENDAR_HOURS_RECORD_NUMBER,
                BASE_CALENDAR_EXCEPTION_RECORD_NUMBER,
            )
        else:
            numbers = (
                RESOURCE_CALENDAR_RECORD_NUMBER,
                RESOURCE_CALENDAR_HOURS_RECORD_NUMBER,
                RESOURCE_CALENDAR_EXCEPTION_RECORD_NUMBER,
            )
        record, hours_record, exception_record = numbers

        head = [str(record), self.label or "", *(str(int(f)) for f in self._days)]
        lines = [ctx.delimiter.join(head) + ctx.eol]
        lines.extend(h.to_mpx(hours_record, ctx) for h in self.calendar_hours)
        lines.extend(e.to_mpx(exception_record, ctx) for e in self._exceptions)
        return "".join(lines)

    def __str__(self) -> str:
        return self.to_mpx()

    def __repr__(self) -> str:
        flags = "".join(str(int(f)) for f in self._days)
        return (
            f"CalendarDefinition(kind={self._kind.value!r}, "
            f"label={self.label!r}, "
            f"unique_id={self.unique_id}, "
            f"days={flags!r}, "
            f"hours={len(self.calendar_hours)}, "
            f"exceptions={len(self._exceptions)})"
        )
