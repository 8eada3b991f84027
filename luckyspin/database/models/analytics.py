# luckyspin/database/models/analytics.py
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from luckyspin.database.base import Base


class AnalyticsEventType(str, enum.Enum):
    LANDING_VIEW = "landing_view"
    REVIEW_CLICK = "review_click"
    SPIN_ATTEMPT = "spin_attempt"
    WIN = "win"
    CLAIM_COMPLETED = "claim_completed"
    DAILY_CAP_HIT = "daily_cap_hit"


class AnalyticsEvent(Base):
    """
    Raw event feed for the (external) dashboards. Written best-effort,
    never inside the spin transaction. Payload is a JSON string.
    """
    __tablename__ = "analytics_events"
    __table_args__ = (
        Index("ix_analytics_events_restaurant_type_time", "restaurant_id", "event_type", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id", ondelete="CASCADE"), index=True)
    event_type: Mapped[AnalyticsEventType] = mapped_column(Enum(AnalyticsEventType, native_enum=False))

    prize_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    spin_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    metadata_json: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now())
