"""
mpxkit.calendar
~~~~~~~~~~~~~~~

Working calendars of MPX project files.  A calendar flags each weekday as
working, non-working or "default" (inherit from the named base calendar),
overrides date ranges with exceptions and carries per-day working hours.

Basic usage::

    from datetime import date
    from mpxkit.calendar import CalendarRegistry, Day, Duration

    registry = CalendarRegistry()
    standard = registry.add_default_base_calendar()     # Mon–Fri
    standard.add_calendar_exception(date(2024, 1, 3), date(2024, 1, 3))

    standard.is_working_date(date(2024, 1, 3))           # → False
    standard.get_duration(date(2024, 1, 1), date(2024, 1, 5))   # → 4.0d
    standard.get_date(date(2024, 1, 1), Duration(3))     # → 2024-01-04

Derived calendars inherit from a base by name::

    resource = registry.add_derived_calendar("Standard")
    resource.set_working_day(Day.SATURDAY, True)

NumPy arrays of ordinals or ``datetime64`` values are accepted by
``working_mask``::

    import numpy as np
    days = np.arange("2024-01-01", "2024-02-01", dtype="datetime64[D]")
    mask = standard.working_mask(days)

Public API
----------
CalendarDefinition      Base or derived calendar.
CalendarRegistry        Name lookup for base calendars.
CalendarException       Dated working/non-working override.
CalendarHours           Working hours of one weekday.
DurationCalculator      get_duration / get_date arithmetic.
Duration, TimeUnit      Durations and their units.
DayFlag, Day            Weekday flag values and day numbers.
FileContext             Delimiter, formats and unit conversion settings.
CalendarError           Base exception for all calendar-related errors.
"""

from __future__ import annotations

from mpxkit.calendar._exceptions import (
    BaseCalendarNotFound,
    CalendarCycle,
    CalendarError,
    InvalidTimeFormat,
    MaximumRecordsExceeded,
)
from mpxkit.calendar.arithmetic import DurationCalculator
from mpxkit.calendar.calendar import (
    DEFAULT_BASE_CALENDAR_NAME,
    MAX_CALENDAR_EXCEPTIONS,
    CalendarDefinition,
)
from mpxkit.calendar.config import DEFAULT_CONTEXT, FileContext
from mpxkit.calendar.duration import Duration, TimeUnit
from mpxkit.calendar.exception import CalendarException
from mpxkit.calendar.flags import CalendarKind, Day, DayFlag
from mpxkit.calendar.hours import CalendarHours
from mpxkit.calendar.registry import CalendarRegistry
from mpxkit.calendar.resolver import CalendarResolver

__all__ = [
    "BaseCalendarNotFound",
    "CalendarCycle",
    "CalendarDefinition",
    "CalendarError",
    "CalendarException",
    "CalendarHours",
    "CalendarKind",
    "CalendarRegistry",
    "CalendarResolver",
    "DEFAULT_BASE_CALENDAR_NAME",
    "DEFAULT_CONTEXT",
    "Day",
    "DayFlag",
    "Duration",
    "DurationCalculator",
    "FileContext",
    "InvalidTimeFormat",
    "MAX_CALENDAR_EXCEPTIONS",
    "MaximumRecordsExceeded",
    "TimeUnit",
]
