# luckyspin/services/claims.py
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from sqlalchemy.ext.asyncio import AsyncSession

from luckyspin.database.models import AnalyticsEventType
from luckyspin.database.repo.spins_repo import get_spin_by_token, mark_claimed
from luckyspin.database.tx import transactional
from luckyspin.services.analytics import EventRecorder

log = logging.getLogger(__name__)

TOKEN_BYTES = 16      # 128 bits
SHORT_CODE_LEN = 8


def new_claim_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def short_code(token: str, length: int = SHORT_CODE_LEN) -> str:
    """Cashier-readable code: last `length` alphanumerics of the token, uppercased."""
    cleaned = "".join(ch for ch in token if ch.isalnum())
    return cleaned[-length:].upper()


@dataclass(frozen=True, slots=True)
class ClaimView:
    token: str
    short_code: str | None
    restaurant_name: str
    timezone: str
    prize_id: int
    prize_label: str | None
    prize_description: str | None
    prize_emoji: str | None
    prize_image_url: str | None
    won_at: datetime
    claimed_at: datetime | None

    @property
    def status(self) -> str:
        return "redeemed" if self.claimed_at else "pending"


@dataclass(frozen=True, slots=True)
class Redeemed:
    claimed_at: datetime


@dataclass(frozen=True, slots=True)
class AlreadyRedeemed:
    claimed_at: datetime


RedeemResult = Union[Redeemed, AlreadyRedeemed]


class ClaimService:
    @staticmethod
    async def lookup(session: AsyncSession, *, token: str) -> ClaimView | None:
        """Read-only; safe to poll."""
        row = await get_spin_by_token(session, token)
        if row is None or row.prize_id is None:
            return None

        return ClaimView(
            token=token,
            short_code=row.claim_short_code,
            restaurant_name=row.restaurant_name,
            timezone=row.timezone,
            prize_id=row.prize_id,
            prize_label=row.prize_label,
            prize_description=row.prize_description,
            prize_emoji=row.prize_emoji,
            prize_image_url=row.prize_image_url,
            won_at=row.spun_at,
            claimed_at=row.claimed_at,
        )

    @staticmethod
    async def redeem(
        session: AsyncSession,
        *,
        token: str,
        now: datetime,
        events: EventRecorder | None = None,
    ) -> RedeemResult | None:
        """
        Exactly-once redemption.

        The write is a single conditional UPDATE (claimed_at IS NULL), so of any
        number of concurrent taps exactly one sees rowcount=1. Everyone then
        reads back the same stored claimed_at. None = unknown token.
        """
        async with transactional(session):
            fresh = await mark_claimed(session, token=token, now=now)

        async with transactional(session):
            row = await get_spin_by_token(session, token)

        if row is None or row.claimed_at is None:
            return None

        if not fresh:
            return AlreadyRedeemed(claimed_at=row.claimed_at)

        log.info("Claim redeemed spin=%s restaurant=%s", row.id, row.restaurant_id)
        if events is not None:
            events.record_silent(
                row.restaurant_id,
                AnalyticsEventType.CLAIM_COMPLETED,
                prize_id=row.prize_id,
                spin_id=row.id,
            )
            events.notify_redeemed(
                restaurant_name=row.restaurant_name,
                prize_label=row.prize_label,
                short_code=row.claim_short_code,
            )

        return Redeemed(claimed_at=row.claimed_at)
