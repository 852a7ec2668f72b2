"""
Epoch-day ordinals and MPX field parsing.

All day stepping works on integer day counts since 1970-01-01 (numpy
``datetime64[D]``), so month, year and leap-year rollover never needs
field-by-field arithmetic.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Union

import numpy as np

from ._exceptions import CalendarError, InvalidTimeFormat

DateLike = Union[date, datetime, np.datetime64]

# 1970-01-01 was a Thursday, MPX day 5.
_EPOCH_WEEKDAY_OFFSET = 4


def as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, np.datetime64):
        return value.astype("datetime64[D]").item()
    return value


def to_ordinal(value: DateLike) -> int:
    return int(np.datetime64(as_date(value), "D").astype(np.int64))


_MIN_ORDINAL = to_ordinal(date.min)
_MAX_ORDINAL = to_ordinal(date.max)


def to_ordinals(values: "DateLike | np.ndarray | list") -> np.ndarray:
    """Accept int ordinals, ``datetime64`` arrays or sequences of dates."""
    arr = np.asarray(values)
    if arr.dtype.kind == "M":
        return arr.astype("datetime64[D]").astype(np.int64)
    if arr.dtype.kind == "O":
        return np.array([to_ordinal(v) for v in arr.ravel()], dtype=np.int64).reshape(arr.shape)
    return arr.astype(np.int64)


def from_ordinal(ordinal: int) -> date:
    if not _MIN_ORDINAL <= ordinal <= _MAX_ORDINAL:
        raise CalendarError(f"Day ordinal {ordinal} is outside {date.min}..{date.max}.")
    return np.datetime64(int(ordinal), "D").item()


def weekday(ordinals: int | np.ndarray) -> int | np.ndarray:
    """MPX weekday (1=Sunday, 7=Saturday) of one or more ordinals."""
    result = (np.asarray(ordinals, dtype=np.int64) + _EPOCH_WEEKDAY_OFFSET) % 7 + 1
    return int(result) if np.ndim(result) == 0 else result


def parse_time(value: str, fmt: str) -> time:
    try:
        return datetime.strptime(value.strip(), fmt).time()
    except ValueError as ex:
        raise InvalidTimeFormat(value, fmt) from ex


def parse_date(value: str, fmt: str) -> date:
    try:
        return datetime.strptime(value.strip(), fmt).date()
    except ValueError as ex:
        raise InvalidTimeFormat(value, fmt) from ex


def field(fields: list[str] | tuple[str, ...], index: int) -> str | None:
    """Return a raw record field, treating missing and blank fields as None."""
    if index >= len(fields):
        return None
    value = fields[index]
    if value is None or not str(value).strip():
        return None
    return str(value).strip()
