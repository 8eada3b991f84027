from __future__ import annotations

from datetime import date, datetime, timezone

from luckyspin.utils.dates import from_db, local_day, to_db


def test_local_day_follows_restaurant_timezone():
    late_utc = datetime(2026, 3, 1, 23, 30, tzinfo=timezone.utc)
    assert local_day(late_utc, "UTC") == date(2026, 3, 1)
    assert local_day(late_utc, "Europe/Zurich") == date(2026, 3, 2)
    assert local_day(late_utc, "America/New_York") == date(2026, 3, 1)


def test_unknown_timezone_falls_back_to_utc():
    now = datetime(2026, 3, 1, 23, 30, tzinfo=timezone.utc)
    assert local_day(now, "Mars/Olympus_Mons") == date(2026, 3, 1)


def test_db_roundtrip_is_naive_utc():
    aware = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    stored = to_db(aware)
    assert stored.tzinfo is None
    assert from_db(stored) == aware
    assert from_db(None) is None
