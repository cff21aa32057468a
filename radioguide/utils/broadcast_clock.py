"""
Broadcast clock

Answers "what time is it" in broadcast terms: wall clock in the broadcaster's
timezone, shifted back by the stream delay, with the broadcast day starting
at 05:00 rather than midnight.
"""
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

from radioguide.utils.broadcast_time import BROADCAST_DAY_START_HOUR
from radioguide.utils.temporal_types import (
    DateOnly,
    DateString,
    DateTime,
    DateTimeString,
)

logger = logging.getLogger(__name__)


class TimezoneError(ValueError):
    """Raised when the configured timezone is unknown"""
    pass


def load_timezone(name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name

    Raises:
        TimezoneError: If the name is not a known timezone
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise TimezoneError(f"Invalid timezone: '{name}'") from e


class BroadcastClock:
    """Current time and date as seen by a delayed broadcast stream"""

    def __init__(
        self,
        timezone_name: str = "Asia/Tokyo",
        delay_sec: int = 20,
        *,
        now_func: Callable[[], datetime] | None = None,
    ):
        self._zone = load_timezone(timezone_name)
        self._delay = timedelta(seconds=delay_sec)
        self._day_offset = self._delay + timedelta(hours=BROADCAST_DAY_START_HOUR)
        self._now_func = now_func or (lambda: datetime.now(timezone.utc))

    def now(self) -> datetime:
        """Naive wall-clock time in the broadcast timezone"""
        current = self._now_func()
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        return current.astimezone(self._zone).replace(tzinfo=None)

    def current_time(self) -> DateTimeString:
        return DateTime.from_datetime(self.now()).to_date_time_string()

    def current_date(self) -> DateString:
        return DateOnly.from_datetime(self.now()).to_date_string()

    def current_broadcast_time(self) -> DateTimeString:
        """Now minus the stream delay"""
        return DateTime.from_datetime(self.now() - self._delay).to_date_time_string()

    def current_broadcast_date(self) -> DateString:
        """Nominal broadcast date: 00:00-04:59 still belongs to the previous day"""
        return DateOnly.from_datetime(self.now() - self._day_offset).to_date_string()

    def broadcast_week(self, begin: int, end: int) -> list[DateString]:
        """
        Nominal broadcast dates from begin to end days relative to today.

        Args:
            begin: first offset, e.g. -6 for six days ago
            end: last offset (inclusive), e.g. 0 for today
        """
        base = DateOnly.from_datetime(self.now() - self._day_offset)
        return [base.add_days(offset).to_date_string() for offset in range(begin, end + 1)]
