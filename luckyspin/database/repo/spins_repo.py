# luckyspin/database/repo/spins_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from luckyspin.database.models import Prize, Restaurant, Spin
from luckyspin.utils.dates import from_db, to_db


@dataclass(frozen=True, slots=True)
class SpinRow:
    id: str
    restaurant_id: int
    restaurant_name: str
    timezone: str
    prize_id: int | None
    prize_label: str | None
    prize_description: str | None
    prize_emoji: str | None
    prize_image_url: str | None
    outcome_reason: str | None
    spun_at: datetime
    claim_token: str | None
    claim_short_code: str | None
    claimed_at: datetime | None


async def count_spins(
    session: AsyncSession,
    *,
    restaurant_id: int,
    since: datetime,
    device_hash: str | None = None,
    ip_hash: str | None = None,
) -> int:
    """Spins for this restaurant at/after `since`, filtered by device OR ip hash."""
    if (device_hash is None) == (ip_hash is None):
        raise ValueError("count_spins needs exactly one of device_hash / ip_hash")

    stmt = (
        select(func.count())
        .select_from(Spin)
        .where(Spin.restaurant_id == restaurant_id, Spin.spun_at >= to_db(since))
    )
    if device_hash is not None:
        stmt = stmt.where(Spin.device_hash == device_hash)
    else:
        stmt = stmt.where(Spin.ip_hash == ip_hash)

    return int(await session.scalar(stmt) or 0)


async def most_recent_spin_at(
    session: AsyncSession,
    *,
    restaurant_id: int,
    device_hash: str,
) -> datetime | None:
    value = await session.scalar(
        select(func.max(Spin.spun_at)).where(
            Spin.restaurant_id == restaurant_id,
            Spin.device_hash == device_hash,
        )
    )
    return from_db(value)


def add_spin(
    session: AsyncSession,
    *,
    spin_id: str,
    restaurant_id: int,
    device_hash: str,
    ip_hash: str,
    spun_at: datetime,
    prize_id: int | None,
    outcome_reason: str | None,
    claim_token: str | None,
    claim_short_code: str | None,
) -> Spin:
    spin = Spin(
        id=spin_id,
        restaurant_id=restaurant_id,
        device_hash=device_hash,
        ip_hash=ip_hash,
        spun_at=to_db(spun_at),
        prize_id=prize_id,
        outcome_reason=outcome_reason,
        claim_token=claim_token,
        claim_short_code=claim_short_code,
    )
    session.add(spin)
    return spin


def _spin_row_select():
    return (
        select(
            Spin.id,
            Spin.restaurant_id,
            Restaurant.name,
            Restaurant.timezone,
            Spin.prize_id,
            Prize.label,
            Prize.description,
            Prize.emoji,
            Prize.image_url,
            Spin.outcome_reason,
            Spin.spun_at,
            Spin.claim_token,
            Spin.claim_short_code,
            Spin.claimed_at,
        )
        .join(Restaurant, Restaurant.id == Spin.restaurant_id)
        .outerjoin(Prize, Prize.id == Spin.prize_id)
    )


def _to_spin_row(r) -> SpinRow:
    return SpinRow(
        id=r[0],
        restaurant_id=r[1],
        restaurant_name=r[2],
        timezone=r[3],
        prize_id=r[4],
        prize_label=r[5],
        prize_description=r[6],
        prize_emoji=r[7],
        prize_image_url=r[8],
        outcome_reason=r[9],
        spun_at=from_db(r[10]),
        claim_token=r[11],
        claim_short_code=r[12],
        claimed_at=from_db(r[13]),
    )


async def get_spin(session: AsyncSession, spin_id: str) -> SpinRow | None:
    res = await session.execute(_spin_row_select().where(Spin.id == spin_id))
    row = res.first()
    return _to_spin_row(row) if row else None


async def get_spin_by_token(session: AsyncSession, token: str) -> SpinRow | None:
    res = await session.execute(_spin_row_select().where(Spin.claim_token == token))
    row = res.first()
    return _to_spin_row(row) if row else None


async def mark_claimed(session: AsyncSession, *, token: str, now: datetime) -> bool:
    """
    Compare-and-set: claimed_at NULL -> now in one UPDATE.
    True only for the caller whose write landed.
    """
    res = await session.execute(
        update(Spin)
        .where(Spin.claim_token == token, Spin.claimed_at.is_(None))
        .values(claimed_at=to_db(now))
        .execution_options(synchronize_session=False)
    )
    return (res.rowcount or 0) > 0

