from dataclasses import FrozenInstanceError
from datetime import date, datetime

import pytest

from radioguide.utils.temporal_types import (
    DateOnly,
    DateTime,
    InvalidCalendarDateError,
    InvalidFormatError,
    InvalidRangeError,
    to_date_string,
    to_date_time_ms_string,
    to_date_time_string,
)


def test_date_time_string_right_pads_with_zeros() -> None:
    assert to_date_time_string("2024010112") == "20240101120000"
    assert to_date_time_ms_string("20240101") == "20240101000000000"


def test_date_time_string_checks_format_only() -> None:
    # Extended hours are not a calendar concern at this layer
    assert to_date_time_string("20250101290000") == "20250101290000"

    with pytest.raises(InvalidFormatError):
        to_date_time_string("2024010112ab")
    with pytest.raises(InvalidFormatError):
        to_date_time_string("202401011200001")


def test_date_string_requires_eight_digits() -> None:
    assert to_date_string("20250101") == "20250101"
    with pytest.raises(InvalidFormatError):
        to_date_string("2025011")
    with pytest.raises(InvalidFormatError):
        to_date_string("2025-1-1")


def test_date_only_rejects_calendar_correction() -> None:
    with pytest.raises(InvalidCalendarDateError):
        DateOnly.from_components(2025, 2, 30)
    with pytest.raises(InvalidCalendarDateError):
        DateOnly.from_components(2025, 4, 31)

    assert DateOnly.from_components(2024, 2, 29).to_date_string() == "20240229"


def test_components_out_of_range() -> None:
    with pytest.raises(InvalidRangeError):
        DateOnly.from_components(2025, 13, 1)
    with pytest.raises(InvalidRangeError):
        DateTime.from_components(2025, 1, 1, 24)
    with pytest.raises(InvalidRangeError):
        DateTime.from_components(2025, 1, 1, 12, 0, 60)
    with pytest.raises(InvalidRangeError):
        DateTime.from_components(2025, 1, 1, 12, 0, 0, 1000)


def test_conversions_between_types() -> None:
    day = DateOnly.from_datetime(datetime(2025, 1, 1, 13, 45, 10))
    assert day.value == date(2025, 1, 1)
    assert day.to_date_time().value == datetime(2025, 1, 1)

    moment = DateTime.from_datetime(datetime(2025, 1, 1, 13, 45, 10, 123456))
    assert moment.to_date_time_ms_string() == "20250101134510123"
    assert moment.to_date_time_string() == "20250101134510"
    assert moment.to_date_only() == day

    # Same instant, different types
    assert day != day.to_date_time()


def test_add_days_crosses_year_boundary() -> None:
    assert DateOnly.from_components(2024, 12, 31).add_days(1).to_date_string() == "20250101"
    assert DateOnly.from_components(2024, 3, 1).add_days(-1).to_date_string() == "20240229"


def test_values_are_immutable() -> None:
    day = DateOnly.from_components(2025, 1, 1)
    with pytest.raises(FrozenInstanceError):
        day.value = date(2025, 1, 2)  # type: ignore[misc]


def test_date_only_constructor_drops_time_of_day() -> None:
    day = DateOnly(datetime(2025, 1, 1, 12, 30))

    assert type(day.value) is date
    assert day == DateOnly.from_components(2025, 1, 1)
    assert day.to_date_time().value == datetime(2025, 1, 1)

    with pytest.raises(InvalidFormatError):
        DateOnly("20250101")
