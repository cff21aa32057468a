"""
Temporal value types

Validated wrappers for calendar dates and date-times, plus the fixed-width
digit encodings used at the feed and storage boundaries.

DateOnly and DateTime are distinct types: neither is accepted where the other
is expected, and converting between them always goes through a named method.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import NewType

DateString = NewType("DateString", str)
DateTimeString = NewType("DateTimeString", str)
DateTimeMsString = NewType("DateTimeMsString", str)

_DATE_STRING_RE = re.compile(r"[0-9]{8}")
_DATE_TIME_STRING_RE = re.compile(r"[0-9]{14}")
_DATE_TIME_MS_STRING_RE = re.compile(r"[0-9]{17}")


class TemporalValueError(ValueError):
    """Base class for every date/time validation failure"""

    def __init__(self, message: str, value: object = None):
        super().__init__(message)
        self.value = value


class InvalidFormatError(TemporalValueError):
    """Token has the wrong width or contains non-digit characters"""


class InvalidRangeError(TemporalValueError):
    """A component lies outside its valid numeric range"""


class InvalidCalendarDateError(TemporalValueError):
    """Components are plausible but the date does not exist in the calendar"""


class InvalidTimeTokenError(TemporalValueError):
    """Malformed extended-clock broadcast time token"""


class UnrecognizedFormatError(TemporalValueError):
    """Token length matches none of the known date/time encodings"""


def to_date_string(value: str) -> DateString:
    """Validate a yyyyMMdd string (format only, no calendar check)."""
    if not isinstance(value, str) or not _DATE_STRING_RE.fullmatch(value):
        raise InvalidFormatError(f"Invalid DateString format: {value!r} (expected: yyyyMMdd)", value)
    return DateString(value)


def to_date_time_string(value: str) -> DateTimeString:
    """
    Validate a yyyyMMddHHmmss string (format only, no calendar check).

    Shorter input is right-padded with '0', so "2024010112" becomes
    "20240101120000". Hours above 23 are accepted as-is.
    """
    if not isinstance(value, str):
        raise InvalidFormatError(f"Invalid DateTimeString format: {value!r}", value)
    padded = value.ljust(14, "0")
    if not _DATE_TIME_STRING_RE.fullmatch(padded):
        raise InvalidFormatError(
            f"Invalid DateTimeString format: {value!r} (expected: yyyyMMddHHmmss)", value
        )
    return DateTimeString(padded)


def to_date_time_ms_string(value: str) -> DateTimeMsString:
    """Validate a yyyyMMddHHmmssSSS string, right-padding with '0'."""
    if not isinstance(value, str):
        raise InvalidFormatError(f"Invalid DateTimeMsString format: {value!r}", value)
    padded = value.ljust(17, "0")
    if not _DATE_TIME_MS_STRING_RE.fullmatch(padded):
        raise InvalidFormatError(
            f"Invalid DateTimeMsString format: {value!r} (expected: yyyyMMddHHmmssSSS)", value
        )
    return DateTimeMsString(padded)


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise InvalidRangeError(f"Invalid {name}: {value} (expected {low}-{high})", value)


def _build_datetime(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    millisecond: int,
) -> datetime:
    """Construct a datetime and verify that reading it back reproduces the input."""
    label = (
        f"{year:04d}-{month:02d}-{day:02d} "
        f"{hour:02d}:{minute:02d}:{second:02d}.{millisecond:03d}"
    )
    try:
        value = datetime(year, month, day, hour, minute, second, millisecond * 1000)
    except (ValueError, OverflowError) as exc:
        raise InvalidCalendarDateError(f"Invalid date: {label} (does not exist in calendar)", label) from exc

    read_back = (
        value.year,
        value.month,
        value.day,
        value.hour,
        value.minute,
        value.second,
        value.microsecond // 1000,
    )
    if read_back != (year, month, day, hour, minute, second, millisecond):
        raise InvalidCalendarDateError(f"Invalid date: {label} (does not exist in calendar)", label)
    return value


@dataclass(frozen=True, slots=True)
class DateOnly:
    """A calendar date; time of day is always 00:00:00.000"""
    value: date

    def __post_init__(self) -> None:
        # datetime is a date subclass; keep only its calendar part
        if isinstance(self.value, datetime):
            object.__setattr__(self, "value", self.value.date())
        elif not isinstance(self.value, date):
            raise InvalidFormatError(f"DateOnly expects a date, got {type(self.value).__name__}", self.value)

    @classmethod
    def from_components(cls, year: int, month: int, day: int) -> DateOnly:
        _check_range("year", year, 1, 9999)
        _check_range("month", month, 1, 12)
        return cls(_build_datetime(year, month, day, 0, 0, 0, 0).date())

    @classmethod
    def from_datetime(cls, value: datetime | date) -> DateOnly:
        """Drop the time of day, keeping only the calendar date."""
        return cls(value)

    @property
    def year(self) -> int:
        return self.value.year

    @property
    def month(self) -> int:
        return self.value.month

    @property
    def day(self) -> int:
        return self.value.day

    def add_days(self, days: int) -> DateOnly:
        try:
            return DateOnly(self.value + timedelta(days=days))
        except OverflowError as exc:
            raise InvalidCalendarDateError(
                f"Date {self.to_date_string()} + {days} days is out of range", self.value
            ) from exc

    def to_date_time(self) -> DateTime:
        return DateTime(datetime(self.year, self.month, self.day))

    def to_date_string(self) -> DateString:
        return DateString(f"{self.year:04d}{self.month:02d}{self.day:02d}")

    def __str__(self) -> str:
        return self.to_date_string()


@dataclass(frozen=True, slots=True)
class DateTime:
    """A calendar date plus time of day at millisecond resolution"""
    value: datetime

    @classmethod
    def from_components(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
    ) -> DateTime:
        _check_range("year", year, 1, 9999)
        _check_range("month", month, 1, 12)
        _check_range("hour", hour, 0, 23)
        _check_range("minute", minute, 0, 59)
        _check_range("second", second, 0, 59)
        _check_range("millisecond", millisecond, 0, 999)
        return cls(_build_datetime(year, month, day, hour, minute, second, millisecond))

    @classmethod
    def from_datetime(cls, value: datetime) -> DateTime:
        """Keep the time of day, truncated to milliseconds."""
        return cls(value.replace(microsecond=value.microsecond - value.microsecond % 1000))

    @property
    def millisecond(self) -> int:
        return self.value.microsecond // 1000

    def to_date_only(self) -> DateOnly:
        return DateOnly.from_datetime(self.value)

    def to_date_time_string(self) -> DateTimeString:
        v = self.value
        return DateTimeString(
            f"{v.year:04d}{v.month:02d}{v.day:02d}{v.hour:02d}{v.minute:02d}{v.second:02d}"
        )

    def to_date_time_ms_string(self) -> DateTimeMsString:
        return DateTimeMsString(f"{self.to_date_time_string()}{self.millisecond:03d}")

    def __str__(self) -> str:
        return self.to_date_time_string()
