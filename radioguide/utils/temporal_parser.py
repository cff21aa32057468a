"""
Date and date-time token parsing

Strict parsers raise a TemporalValueError subclass on any malformed or
calendar-invalid token; the try_* variants return None instead so callers
processing a batch can skip a bad field without aborting.
"""
import re

from radioguide.utils.temporal_types import (
    DateOnly,
    DateTime,
    InvalidFormatError,
    TemporalValueError,
    UnrecognizedFormatError,
)

_DATE_RE = re.compile(r"[0-9]{8}")
_DATE_TIME_RE = re.compile(r"[0-9]{14}")
_DATE_TIME_MS_RE = re.compile(r"[0-9]{17}")


def parse_date_only(token: str) -> DateOnly:
    """
    Parse a yyyyMMdd token.

    Raises:
        InvalidFormatError: token is not exactly 8 digits
        InvalidRangeError: month outside 1-12
        InvalidCalendarDateError: date does not exist (e.g. 20250230)
    """
    if not isinstance(token, str) or not _DATE_RE.fullmatch(token):
        raise InvalidFormatError(f"Invalid date format: {token!r} (expected: yyyyMMdd)", token)

    return DateOnly.from_components(int(token[0:4]), int(token[4:6]), int(token[6:8]))


def parse_date_time(token: str) -> DateTime:
    """
    Parse a yyyyMMddHHmmss (14 digits) or yyyyMMddHHmmssSSS (17 digits) token.

    Raises:
        InvalidFormatError: token is neither 14 nor 17 digits
        InvalidRangeError: month, hour, minute, second or millisecond out of range
        InvalidCalendarDateError: date does not exist in the calendar
    """
    if not isinstance(token, str):
        raise InvalidFormatError(f"Invalid datetime format: {token!r}", token)

    if _DATE_TIME_RE.fullmatch(token):
        millisecond = 0
    elif _DATE_TIME_MS_RE.fullmatch(token):
        millisecond = int(token[14:17])
    else:
        raise InvalidFormatError(
            f"Invalid datetime format: {token!r} (expected: yyyyMMddHHmmss or yyyyMMddHHmmssSSS)",
            token,
        )

    return DateTime.from_components(
        int(token[0:4]),
        int(token[4:6]),
        int(token[6:8]),
        int(token[8:10]),
        int(token[10:12]),
        int(token[12:14]),
        millisecond,
    )


def try_parse_date_only(token: str) -> DateOnly | None:
    try:
        return parse_date_only(token)
    except TemporalValueError:
        return None


def try_parse_date_time(token: str) -> DateTime | None:
    try:
        return parse_date_time(token)
    except TemporalValueError:
        return None


def parse_auto(token: str) -> DateOnly | DateTime:
    """Dispatch on token length: 8 digits -> DateOnly, 14 or 17 -> DateTime."""
    if isinstance(token, str):
        if _DATE_RE.fullmatch(token):
            return parse_date_only(token)
        if _DATE_TIME_RE.fullmatch(token) or _DATE_TIME_MS_RE.fullmatch(token):
            return parse_date_time(token)
    raise UnrecognizedFormatError(f"Invalid date/datetime format: {token!r}", token)


def try_parse_auto(token: str) -> DateOnly | DateTime | None:
    try:
        return parse_auto(token)
    except TemporalValueError:
        return None
