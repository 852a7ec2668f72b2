"""
Working-day arithmetic on top of ``CalendarDefinition`` exception and
weekday resolution.

Days are handled as int64 epoch-day ordinals.  Runs of days are resolved a
block at a time and walked with a prefix sum (cumsum + searchsorted).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np

from ._dates import DateLike, from_ordinal, to_ordinal, weekday
from ._exceptions import CalendarError
from .duration import Duration, TimeUnit
from .flags import DAYS_PER_WEEK

if TYPE_CHECKING:
    from .calendar import CalendarDefinition

logger = logging.getLogger(__name__)


class DurationCalculator:
    """
    ``get_duration`` / ``get_date`` for one calendar.  Stateless apart from
    the calendar, so every call sees the calendar's current flags,
    exceptions and base calendar.
    """

    _MIN_BLOCK: int = 8 * DAYS_PER_WEEK

    def __init__(self, calendar: "CalendarDefinition") -> None:
        self._calendar = calendar

    def get_duration(self, start_date: DateLike, end_date: DateLike) -> Duration:
        """
        Number of working days in the ``|end - start| + 1`` calendar days
        counted forward from ``start_date``.

        The count always runs forward from ``start_date``, also when
        ``end_date`` is earlier; only the length of the span is taken from
        the difference.
        """
        origin = to_ordinal(start_date)
        span = abs(to_ordinal(end_date) - origin) + 1
        mask = self._calendar.working_mask(origin + np.arange(span, dtype=np.int64))
        return Duration(float(np.count_nonzero(mask)), TimeUnit.DAYS)

    def get_date(self, start_date: DateLike, duration: Duration | float) -> DateLike:
        """
        Date reached by stepping ``duration`` working days from
        ``start_date``, forwards for positive and backwards for negative
        durations.

        The duration is converted to days and truncated toward zero, so this
        is only an approximate inverse of ``get_duration``.  ``start_date``
        itself counts when it is a working date, and the date on which the
        count reaches zero is returned.  A zero duration returns
        ``start_date`` unchanged.
        """
        days = self._whole_days(duration)
        if days == 0:
            return start_date

        step = 1 if days > 0 else -1
        remaining = abs(days)
        origin = to_ordinal(start_date)
        horizon = self._exception_horizon(step)
        block = max(2 * remaining, self._MIN_BLOCK)
        offset = 0

        while True:
            ords = origin + step * (offset + np.arange(block, dtype=np.int64))
            counted = self._count_block(ords, remaining)
            if counted[-1] >= remaining:
                hit = int(np.searchsorted(counted, remaining, side="left"))
                return self._like(start_date, from_ordinal(int(ords[hit])))

            tail = ords[-DAYS_PER_WEEK]
            past_exceptions = horizon is None or (tail - horizon) * step > 0
            if past_exceptions and counted[-1] == counted[-DAYS_PER_WEEK - 1]:
                raise CalendarError(
                    f"Calendar {self._calendar.label!r} has no working days; "
                    f"{remaining} working day(s) can never be consumed."
                )

            remaining -= int(counted[-1])
            offset += block
            logger.debug("get_date: %d working day(s) left after %d days", remaining, offset)

    # ── helpers ──────────────────────────────────────────────────────────

    def _count_block(self, ords: np.ndarray, remaining: int) -> np.ndarray:
        """
        Running working-day count over ``ords`` in walk order.

        Weekday flags are resolved one weekday at a time, in the order the
        walk first meets them, and counting stops as soon as ``remaining``
        is reached.  Weekdays past that point are never resolved.  The
        returned array is then a prefix of the block; otherwise it covers
        the whole block.
        """
        known, covered = self._calendar.exception_mask(ords)
        pending = np.flatnonzero(~covered)
        if pending.size == 0:
            return np.cumsum(known)

        days = weekday(ords[pending])
        uniq, first = np.unique(days, return_index=True)
        order = np.argsort(first)
        for i in order:
            cutoff = int(pending[first[i]])
            if cutoff:
                counted = np.cumsum(known[:cutoff])
                if counted[-1] >= remaining:
                    return counted
            known[pending[days == uniq[i]]] = self._calendar.is_working_day(int(uniq[i]))
        return np.cumsum(known)

    def _whole_days(self, duration: Duration | float) -> int:
        if isinstance(duration, Duration):
            value = duration.convert_units(TimeUnit.DAYS, self._calendar.context).duration
        else:
            value = float(duration)
        return int(value)

    def _exception_horizon(self, step: int) -> int | None:
        """Last exception ordinal in the direction of travel."""
        bounds = [
            b for b in (e.ordinal_bounds() for e in self._calendar.calendar_exceptions)
            if b is not None
        ]
        if not bounds:
            return None
        if step > 0:
            return max(hi for _, hi in bounds)
        return min(lo for lo, _ in bounds)

    @staticmethod
    def _like(start_date: DateLike, result) -> DateLike:
        if isinstance(start_date, datetime):
            return datetime.combine(result, start_date.timetz())
        if isinstance(start_date, np.datetime64):
            return np.datetime64(result, "D")
        return result
