# luckyspin/services/rate_limit.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Union

from sqlalchemy.ext.asyncio import AsyncSession

from luckyspin.database.repo.spins_repo import count_spins, most_recent_spin_at


class DenyReason(str, enum.Enum):
    DEVICE_ALREADY_SPUN = "device_already_spun"
    IP_LIMIT = "ip_limit"


@dataclass(frozen=True, slots=True)
class Eligible:
    pass


@dataclass(frozen=True, slots=True)
class Denied:
    reason: DenyReason
    retry_after: datetime | None = None


Eligibility = Union[Eligible, Denied]


class RateLimiter:
    """
    Rolling-window spin limiter, read-only over the spin history.

    - device: one spin per window per restaurant (retry_after = last spin + window)
    - ip: at most `ip_limit` spins per window per restaurant (no retry_after)
    """

    WINDOW_HOURS = 24
    IP_LIMIT = 3

    def __init__(self, *, window_hours: int = WINDOW_HOURS, ip_limit: int = IP_LIMIT) -> None:
        self.window = timedelta(hours=window_hours)
        self.ip_limit = ip_limit

    async def device_denial(
        self,
        session: AsyncSession,
        *,
        restaurant_id: int,
        device_hash: str,
        now: datetime,
    ) -> Denied | None:
        since = now - self.window
        if await count_spins(session, restaurant_id=restaurant_id, since=since, device_hash=device_hash) == 0:
            return None

        last = await most_recent_spin_at(session, restaurant_id=restaurant_id, device_hash=device_hash)
        return Denied(
            reason=DenyReason.DEVICE_ALREADY_SPUN,
            retry_after=(last + self.window) if last else None,
        )

    async def check_eligibility(
        self,
        session: AsyncSession,
        *,
        restaurant_id: int,
        device_hash: str,
        ip_hash: str,
        now: datetime,
    ) -> Eligibility:
        denied = await self.device_denial(
            session,
            restaurant_id=restaurant_id,
            device_hash=device_hash,
            now=now,
        )
        if denied is not None:
            return denied

        ip_count = await count_spins(
            session,
            restaurant_id=restaurant_id,
            since=now - self.window,
            ip_hash=ip_hash,
        )
        if ip_count >= self.ip_limit:
            return Denied(reason=DenyReason.IP_LIMIT)

        return Eligible()
