"""
Broadcast time conversion

Program guide feeds file every program under a nominal broadcast date and
give its times on an extended clock: hours 24-29 stand for 00:00-05:59 of the
following calendar day. This module turns those tokens into normalized
yyyyMMddHHmmss timestamps and back.
"""
import re

from radioguide.utils.temporal_parser import parse_date_only, parse_date_time
from radioguide.utils.temporal_types import (
    DateOnly,
    DateTime,
    DateTimeString,
    InvalidTimeTokenError,
    to_date_time_string,
)

# Seconds used when the feed omits them (HHmm tokens)
START_SECONDS_FILL = "05"
END_SECONDS_FILL = "29"

HOURS_PER_DAY = 24
MAX_EXTENDED_HOUR = 29
EXTENDED_DAY_END_TOKEN = "290000"
# Where an ingested block's timeline starts unless configured otherwise
DEFAULT_DAY_START_TOKEN = "000000"
BROADCAST_DAY_START_HOUR = 5

_TIME_TOKEN_RE = re.compile(r"[0-9]{2,6}")
_SECONDS_FILL_RE = re.compile(r"[0-9]{2}")


def _pad_time_token(token: str, seconds_fill: str) -> str:
    """Right-pad to HHmmss: missing minutes become '0', missing seconds come from the fill."""
    if len(token) < 4:
        return token.ljust(4, "0") + seconds_fill
    return token + seconds_fill[len(token) - 4:]


def _as_date_only(broadcast_date: DateOnly | str) -> DateOnly:
    if isinstance(broadcast_date, DateOnly):
        return broadcast_date
    return parse_date_only(broadcast_date)


def convert_broadcast_time(
    token: str,
    broadcast_date: DateOnly | str,
    seconds_fill: str = START_SECONDS_FILL,
) -> DateTimeString:
    """
    Convert an extended-clock time token into a normalized timestamp.

    Args:
        token: HHmmss digits, possibly truncated (HH, HHmm, ...); hour 0-29
        broadcast_date: nominal date of the schedule block (DateOnly or yyyyMMdd)
        seconds_fill: two digits used for missing seconds

    Returns:
        yyyyMMddHHmmss on the real calendar day, e.g. 25:00:00 on 20250101
        becomes 20250102010000

    Raises:
        InvalidTimeTokenError: token is not 2-6 digits, fill is not 2 digits,
            or hour is 30 or more
        InvalidFormatError / InvalidRangeError / InvalidCalendarDateError:
            propagated from the date and time construction
    """
    if not isinstance(token, str) or not _TIME_TOKEN_RE.fullmatch(token):
        raise InvalidTimeTokenError(f"Invalid broadcast time token: {token!r} (expected 2-6 digits)", token)
    if not isinstance(seconds_fill, str) or not _SECONDS_FILL_RE.fullmatch(seconds_fill):
        raise InvalidTimeTokenError(f"Invalid seconds fill: {seconds_fill!r} (expected 2 digits)", seconds_fill)

    padded = _pad_time_token(token, seconds_fill)
    hour = int(padded[0:2])
    minute = int(padded[2:4])
    second = int(padded[4:6])

    if hour > MAX_EXTENDED_HOUR:
        raise InvalidTimeTokenError(f"Broadcast hour out of range: {hour} in {token!r} (max {MAX_EXTENDED_HOUR})", token)

    day = _as_date_only(broadcast_date)
    if hour >= HOURS_PER_DAY:
        hour -= HOURS_PER_DAY
        day = day.add_days(1)

    return DateTime.from_components(day.year, day.month, day.day, hour, minute, second).to_date_time_string()


def extended_boundary(broadcast_date: DateOnly | str) -> DateTimeString:
    """
    End of the broadcast day filed under the given date, on the extended clock.

    20250101 gives 20250101290000. The value is kept in its extended form, so
    compare it against normalized timestamps through extended_boundary_instant.
    """
    day = _as_date_only(broadcast_date)
    return DateTimeString(f"{day.to_date_string()}{EXTENDED_DAY_END_TOKEN}")


def extended_boundary_instant(broadcast_date: DateOnly | str) -> DateTimeString:
    """Normalized instant of the extended boundary (05:00:00 the next day)."""
    return convert_broadcast_time(EXTENDED_DAY_END_TOKEN, broadcast_date, "00")


def normalize_extended_timestamp(value: str) -> DateTimeString:
    """yyyyMMddHHmmss with an extended hour (e.g. 20250101253000) -> normalized timestamp."""
    padded = to_date_time_string(value)
    return convert_broadcast_time(padded[8:14], padded[0:8], "00")


def to_extended_timestamp(value: str, day_start_hour: int = BROADCAST_DAY_START_HOUR) -> DateTimeString:
    """
    Render a timestamp on the extended clock.

    Times before the broadcast day start belong to the previous nominal date:
    20240201023000 becomes 20240131263000. Values already carrying an
    extended hour (such as a day's 290000 boundary) are validated and kept.
    """
    padded = to_date_time_string(value)
    if int(padded[8:10]) >= HOURS_PER_DAY:
        normalize_extended_timestamp(padded)
        return padded

    moment = parse_date_time(padded)
    hour = moment.value.hour
    if hour >= day_start_hour:
        return moment.to_date_time_string()

    previous = moment.to_date_only().add_days(-1)
    rest = moment.to_date_time_string()[10:14]
    return DateTimeString(f"{previous.to_date_string()}{hour + HOURS_PER_DAY:02d}{rest}")


def time_span_seconds(start: str, end: str) -> int:
    """Seconds from start to end; both may use the extended clock."""
    start_moment = parse_date_time(normalize_extended_timestamp(start))
    end_moment = parse_date_time(normalize_extended_timestamp(end))
    return int((end_moment.value - start_moment.value).total_seconds())


def check_program_time(ft: str, to: str, now: str) -> int:
    """
    Position of a program relative to now.

    Returns:
        0 while airing, otherwise seconds from now until the start
        (negative once the program is in the past)
    """
    ft = normalize_extended_timestamp(ft)
    to = normalize_extended_timestamp(to)
    now = normalize_extended_timestamp(now)
    if ft <= now < to:
        return 0
    return time_span_seconds(now, ft)
