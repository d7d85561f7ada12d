"""Datetime utilities for reporting windows. Everything is computed in UTC."""

from datetime import datetime, date, time, timedelta, timezone


def now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _utc_day(dt: datetime | date) -> date:
    if isinstance(dt, datetime):
        return ensure_aware(dt).astimezone(timezone.utc).date()
    return dt


def start_of_day(dt: datetime | date) -> datetime:
    """Midnight UTC of the day containing ``dt``."""
    return datetime.combine(_utc_day(dt), time.min, tzinfo=timezone.utc)


def end_of_day(dt: datetime | date) -> datetime:
    """Last microsecond of the UTC day containing ``dt``; inclusive upper bound for date filters."""
    return datetime.combine(_utc_day(dt), time.max, tzinfo=timezone.utc)


def start_of_week(dt: datetime | date) -> date:
    """Monday of the ISO week containing ``dt``."""
    day = _utc_day(dt)
    return day - timedelta(days=day.weekday())


def days_ago(reference: datetime, days: int) -> datetime:
    """Start of the day ``days`` before ``reference``."""
    return start_of_day(reference) - timedelta(days=days)
