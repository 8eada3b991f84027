# luckyspin/database/models/counters.py
from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from luckyspin.database.base import Base


class DailyPrizeCounter(Base):
    """
    Wins per prize per local calendar day (restaurant timezone).
    Created on first win, only ever incremented (upsert on the unique key).
    """
    __tablename__ = "prize_daily_counters"
    __table_args__ = (
        UniqueConstraint("prize_id", "day", name="uq_prize_daily_counter_prize_day"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    prize_id: Mapped[int] = mapped_column(ForeignKey("prizes.id", ondelete="CASCADE"), index=True)
    day: Mapped[date] = mapped_column(Date, index=True)
    wins: Mapped[int] = mapped_column(Integer, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        onupdate=func.now(),
    )


class DailyRestaurantCounter(Base):
    """Total wins per restaurant per local calendar day. Same semantics as above."""
    __tablename__ = "restaurant_daily_counters"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "day", name="uq_restaurant_daily_counter_restaurant_day"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id", ondelete="CASCADE"), index=True)
    day: Mapped[date] = mapped_column(Date, index=True)
    wins: Mapped[int] = mapped_column(Integer, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        onupdate=func.now(),
    )
