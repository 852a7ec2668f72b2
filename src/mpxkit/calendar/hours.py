from __future__ import annotations

import logging
from datetime import time
from typing import Sequence

from ._dates import field, parse_time
from ._exceptions import MaximumRecordsExceeded
from .config import DEFAULT_CONTEXT, FileContext

logger = logging.getLogger(__name__)

MAX_HOUR_RANGES = 2

TimeRange = tuple[time, time]


def _render_fields(record_number: int, values: Sequence[str], context: FileContext) -> str:
    values = list(values)
    while values and values[-1] == "":
        values.pop()
    return context.delimiter.join([str(record_number), *values]) + context.eol


class HoursRanges:
    """
    Ordered working-time intervals, at most two.  Intervals are opaque: no
    ordering or overlap checks are made.
    """

    def __init__(self, ranges: Sequence[TimeRange] = ()) -> None:
        self._ranges: list[TimeRange] = []
        for start, end in ranges:
            self.add_range(start, end)

    def add_range(self, start: time, end: time) -> TimeRange:
        if len(self._ranges) >= MAX_HOUR_RANGES:
            raise MaximumRecordsExceeded(
                f"At most {MAX_HOUR_RANGES} working ranges are allowed.",
                limit=MAX_HOUR_RANGES,
            )
        rng = (start, end)
        self._ranges.append(rng)
        return rng

    def clear_ranges(self) -> None:
        self._ranges.clear()

    @property
    def ranges(self) -> tuple[TimeRange, ...]:
        return tuple(self._ranges)

    def _parse_ranges(self, fields: Sequence[str], first: int, context: FileContext) -> None:
        for index in range(first, first + 2 * MAX_HOUR_RANGES, 2):
            start, end = field(fields, index), field(fields, index + 1)
            if start is None and end is None:
                continue
            if start is None or end is None:
                logger.debug("Ignoring half-open hours range at field %d", index)
                continue
            self.add_range(
                parse_time(start, context.time_format),
                parse_time(end, context.time_format),
            )

    def _range_fields(self, context: FileContext) -> list[str]:
        values: list[str] = []
        for start, end in self._ranges:
            values.append(start.strftime(context.time_format))
            values.append(end.strftime(context.time_format))
        return values


class CalendarHours(HoursRanges):
    """Working hours for one weekday (1=Sunday, 7=Saturday)."""

    def __init__(self, day: int, ranges: Sequence[TimeRange] = ()) -> None:
        super().__init__(ranges)
        self.day = int(day)

    @classmethod
    def from_record(
        cls, fields: Sequence[str], context: FileContext = DEFAULT_CONTEXT
    ) -> "CalendarHours":
        """Build from raw record fields ``[day, from1, to1, from2, to2]``."""
        raw_day = field(fields, 0)
        if raw_day is None:
            raise MaximumRecordsExceeded("Calendar hours record has no day number.", limit=7)
        hours = cls(int(raw_day))
        hours._parse_ranges(fields, 1, context)
        return hours

    def to_mpx(self, record_number: int, context: FileContext = DEFAULT_CONTEXT) -> str:
        return _render_fields(record_number, [str(self.day), *self._range_fields(context)], context)

    def __repr__(self) -> str:
        ranges = ", ".join(f"{s:%H:%M}-{e:%H:%M}" for s, e in self._ranges)
        return f"CalendarHours(day={self.day}, ranges=[{ranges}])"
