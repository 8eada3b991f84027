# luckyspin/utils/dates.py
from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_db(dt: datetime) -> datetime:
    """Aware (or naive-UTC) datetime -> naive UTC, the storage convention."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def from_db(dt: datetime | None) -> datetime | None:
    """Naive UTC from the database -> aware UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def local_day(now: datetime, tz_name: str) -> date:
    """
    Calendar date of `now` in the given IANA zone.
    Unknown zones fall back to UTC so a bad admin entry can't break spinning.
    """
    aware = now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        tz = ZoneInfo("UTC")
    return aware.astimezone(tz).date()


def isoformat_utc(dt: datetime | None) -> str | None:
    aware = from_db(dt)
    return aware.isoformat() if aware else None
