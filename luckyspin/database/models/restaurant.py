# luckyspin/database/models/restaurant.py
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from luckyspin.database.base import Base

if TYPE_CHECKING:
    from luckyspin.database.models.spin import Spin


class Restaurant(Base):
    """
    Owned by the admin side; the spin core only reads it.
    `timezone` defines where "today" starts and ends for the daily caps.
    """
    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(primary_key=True)
    slug: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(128))

    timezone: Mapped[str] = mapped_column(String(64), default="UTC")
    daily_win_cap: Mapped[int | None] = mapped_column(Integer, nullable=True)  # None = unlimited
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    logo_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    google_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now())

    prizes: Mapped[list["Prize"]] = relationship(back_populates="restaurant")
    spins: Mapped[list["Spin"]] = relationship(back_populates="restaurant")


class Prize(Base):
    __tablename__ = "prizes"
    __table_args__ = (
        CheckConstraint("weight > 0", name="ck_prizes_weight_positive"),
        Index("ix_prizes_restaurant_active", "restaurant_id", "active"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id", ondelete="CASCADE"), index=True)

    label: Mapped[str] = mapped_column(String(128))
    description: Mapped[str | None] = mapped_column(String(512), nullable=True)
    emoji: Mapped[str | None] = mapped_column(String(16), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    weight: Mapped[int] = mapped_column(Integer, default=1)
    daily_cap: Mapped[int | None] = mapped_column(Integer, nullable=True)  # None = unlimited

    active: Mapped[bool] = mapped_column(Boolean, default=True)
    # at most one per restaurant (admin side enforces it)
    is_fallback: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now())

    restaurant: Mapped["Restaurant"] = relationship(back_populates="prizes")
