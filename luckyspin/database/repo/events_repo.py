# luckyspin/database/repo/events_repo.py
from __future__ import annotations

import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from luckyspin.database.models import AnalyticsEvent, AnalyticsEventType


def add_event(
    session: AsyncSession,
    *,
    restaurant_id: int,
    event_type: AnalyticsEventType,
    prize_id: int | None = None,
    spin_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> AnalyticsEvent:
    ev = AnalyticsEvent(
        restaurant_id=restaurant_id,
        event_type=event_type,
        prize_id=prize_id,
        spin_id=spin_id,
        metadata_json=json.dumps(metadata, ensure_ascii=False)[:2000] if metadata else None,
    )
    session.add(ev)
    return ev
