# luckyspin/database/models/spin.py
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from luckyspin.database.base import Base

if TYPE_CHECKING:
    from luckyspin.database.models.restaurant import Prize, Restaurant


class Spin(Base):
    """
    One row per spin attempt that got past the rate limiter.
    Append-only, except `claimed_at` which goes NULL -> timestamp exactly once.
    """
    __tablename__ = "spins"
    __table_args__ = (
        # rate limiter lookups (rolling window)
        Index("ix_spins_restaurant_device_time", "restaurant_id", "device_hash", "spun_at"),
        Index("ix_spins_restaurant_ip_time", "restaurant_id", "ip_hash", "spun_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # uuid4, public handle

    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id", ondelete="CASCADE"))
    device_hash: Mapped[str] = mapped_column(String(64))
    ip_hash: Mapped[str] = mapped_column(String(64))

    # naive UTC
    spun_at: Mapped[datetime] = mapped_column(DateTime(timezone=False))

    # NULL prize = no win; reason says why
    prize_id: Mapped[int | None] = mapped_column(
        ForeignKey("prizes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    outcome_reason: Mapped[str | None] = mapped_column(String(32), nullable=True)

    claim_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    claim_short_code: Mapped[str | None] = mapped_column(String(16), nullable=True, index=True)
    claimed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    restaurant: Mapped["Restaurant"] = relationship(back_populates="spins")
    prize: Mapped["Prize | None"] = relationship()
