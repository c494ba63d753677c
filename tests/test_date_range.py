from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from educa_especial.domain.date_range import (
    InvalidDateRangeError,
    MissingDateRangeError,
    as_utc,
    day_bounds,
    parse_datetime,
)


def test_day_bounds_cover_the_whole_utc_day():
    start, end = day_bounds("2024-05-01", "2024-05-03")

    assert start == datetime(2024, 5, 1, 0, 0, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 5, 3, 23, 59, 59, 999999, tzinfo=timezone.utc)


def test_day_bounds_single_day():
    start, end = day_bounds("2024-05-01", "2024-05-01")
    assert end - start == timedelta(days=1) - timedelta(microseconds=1)


@pytest.mark.parametrize("start,end", [(None, "2024-05-01"), ("2024-05-01", ""), ("  ", "2024-05-01")])
def test_day_bounds_requires_both_dates(start, end):
    with pytest.raises(MissingDateRangeError):
        day_bounds(start, end)


@pytest.mark.parametrize("value", ["2024-13-01", "01/05/2024", "ontem", "2024-05-01T10:00:00"])
def test_day_bounds_rejects_invalid_days(value):
    with pytest.raises(InvalidDateRangeError):
        day_bounds(value, "2024-05-02")


def test_reversed_range_is_returned_as_is():
    start, end = day_bounds("2024-05-03", "2024-05-01")
    assert start > end


def test_parse_datetime_handles_zulu_and_offsets():
    assert parse_datetime("2024-05-01T10:00:00Z") == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)
    assert parse_datetime("2024-05-01T22:30:00-03:00") == datetime(2024, 5, 2, 1, 30, tzinfo=timezone.utc)
    assert parse_datetime("") is None


def test_as_utc_reads_naive_values_as_utc():
    naive = datetime(2024, 5, 1, 12, 0)
    assert as_utc(naive).tzinfo is timezone.utc
    assert as_utc(naive).hour == 12
