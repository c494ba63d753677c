"""Day-boundary helpers for the date range searches."""
from __future__ import annotations

from datetime import date, datetime, time, timezone


class DateRangeError(ValueError):
    """Base class for date range problems."""


class MissingDateRangeError(DateRangeError):
    pass


class InvalidDateRangeError(DateRangeError):
    pass


def as_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value) -> datetime | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise InvalidDateRangeError("Datas invalidas.") from exc


def day_bounds(start_date: str | None, end_date: str | None) -> tuple[datetime, datetime]:
    """
    Build the inclusive UTC window for two ``YYYY-MM-DD`` days.

    The start is the first instant of ``start_date`` and the end the last
    microsecond of ``end_date``, both in UTC.
    """
    if not (start_date or "").strip() or not (end_date or "").strip():
        raise MissingDateRangeError("As datas de inicio e fim sao obrigatorias.")
    start_day = _parse_day(start_date)
    end_day = _parse_day(end_date)
    start = datetime.combine(start_day, time.min, tzinfo=timezone.utc)
    end = datetime.combine(end_day, time.max, tzinfo=timezone.utc)
    return start, end
