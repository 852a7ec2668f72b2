from __future__ import annotations

from datetime import date
from typing import Sequence

from ._dates import DateLike, as_date, field, parse_date, to_ordinal
from .config import DEFAULT_CONTEXT, FileContext
from .hours import HoursRanges, TimeRange, _render_fields


class CalendarException(HoursRanges):
    """
    Dated override of a calendar's working state.

    Covers the inclusive range ``[from_date, to_date]``.  When a date falls in
    the range, ``working`` replaces whatever the weekday flags say.  The
    optional hours ranges only matter for hour-level scheduling and are not
    consulted when deciding whether a date is worked.
    """

    def __init__(
        self,
        from_date: DateLike | None = None,
        to_date: DateLike | None = None,
        working: bool = False,
        ranges: Sequence[TimeRange] = (),
    ) -> None:
        super().__init__(ranges)
        self.from_date: date | None = as_date(from_date) if from_date is not None else None
        self.to_date: date | None = as_date(to_date) if to_date is not None else None
        self.working = bool(working)

    def contains(self, value: DateLike) -> bool:
        if self.from_date is None or self.to_date is None:
            return False
        return self.from_date <= as_date(value) <= self.to_date

    def get_working_value(self) -> bool:
        return self.working

    def ordinal_bounds(self) -> tuple[int, int] | None:
        """Inclusive epoch-day bounds, or None while the range is unset."""
        if self.from_date is None or self.to_date is None:
            return None
        return to_ordinal(self.from_date), to_ordinal(self.to_date)

    @classmethod
    def from_record(
        cls, fields: Sequence[str], context: FileContext = DEFAULT_CONTEXT
    ) -> "CalendarException":
        """
        Build from raw record fields
        ``[from_date, to_date, working, from1, to1, from2, to2]``.
        """
        start, end, working = field(fields, 0), field(fields, 1), field(fields, 2)
        exc = cls(
            parse_date(start, context.date_format) if start is not None else None,
            parse_date(end, context.date_format) if end is not None else None,
            working is not None and int(working) != 0,
        )
        exc._parse_ranges(fields, 3, context)
        return exc

    def to_mpx(self, record_number: int, context: FileContext = DEFAULT_CONTEXT) -> str:
        values = [
            self.from_date.strftime(context.date_format) if self.from_date else "",
            self.to_date.strftime(context.date_format) if self.to_date else "",
            "1" if self.working else "0",
            *self._range_fields(context),
        ]
        return _render_fields(record_number, values, context)

    def __repr__(self) -> str:
        return (
            f"CalendarException(from_date={self.from_date}, "
            f"to_date={self.to_date}, "
            f"working={self.working}, "
            f"ranges={len(self._ranges)})"
        )
