"""Date manipulation utilities"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def same_calendar_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()


def months_until(deadline: date, today: date, days_per_month: int = 30) -> int:
    """Whole months left before a deadline, never less than 1"""
    return max(1, (deadline - today).days // days_per_month)
