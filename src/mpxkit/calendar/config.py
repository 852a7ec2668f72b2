from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class FileContext:
    """
    Settings the owning MPX file supplies to its calendars: the field
    delimiter, date/time formats for record rendering and the conversion
    factors used when durations are expressed in days.
    """

    delimiter: str = ","
    date_format: str = "%d/%m/%Y"
    time_format: str = "%H:%M"
    minutes_per_day: int = 480
    minutes_per_week: int = 2400
    days_per_month: int = 20
    eol: str = "\r\n"

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1:
            raise ValueError(f"Delimiter must be a single character; got {self.delimiter!r}.")
        for field in ("minutes_per_day", "minutes_per_week", "days_per_month"):
            if getattr(self, field) <= 0:
                raise ValueError(f"{field} must be positive; got {getattr(self, field)}.")

    def with_delimiter(self, delimiter: str) -> "FileContext":
        return replace(self, delimiter=delimiter)


DEFAULT_CONTEXT = FileContext()
