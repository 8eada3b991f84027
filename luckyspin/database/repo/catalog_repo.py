# luckyspin/database/repo/catalog_repo.py
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from luckyspin.database.models import Prize, Restaurant


@dataclass(frozen=True, slots=True)
class PrizeDTO:
    id: int
    label: str
    description: str | None
    emoji: str | None
    image_url: str | None
    weight: int
    daily_cap: int | None
    is_fallback: bool


@dataclass(frozen=True, slots=True)
class RestaurantDTO:
    id: int
    slug: str
    name: str
    timezone: str
    daily_win_cap: int | None
    logo_url: str | None
    google_url: str | None


@dataclass(frozen=True, slots=True)
class Catalog:
    restaurant: RestaurantDTO
    prizes: tuple[PrizeDTO, ...]  # active prizes, catalog order (fallback included)


def _prize_dto(p: Prize) -> PrizeDTO:
    return PrizeDTO(
        id=p.id,
        label=p.label,
        description=p.description,
        emoji=p.emoji,
        image_url=p.image_url,
        weight=int(p.weight),
        daily_cap=int(p.daily_cap) if p.daily_cap is not None else None,
        is_fallback=bool(p.is_fallback),
    )


def _restaurant_dto(r: Restaurant) -> RestaurantDTO:
    return RestaurantDTO(
        id=r.id,
        slug=r.slug,
        name=r.name,
        timezone=r.timezone or "UTC",
        daily_win_cap=int(r.daily_win_cap) if r.daily_win_cap is not None else None,
        logo_url=r.logo_url,
        google_url=r.google_url,
    )


async def get_active_restaurant(session: AsyncSession, slug: str) -> Restaurant | None:
    res = await session.execute(
        select(Restaurant).where(Restaurant.slug == slug, Restaurant.active.is_(True))
    )
    return res.scalar_one_or_none()


async def get_active_catalog(session: AsyncSession, slug: str) -> Catalog | None:
    """
    Active restaurant + its active prizes in stable catalog order
    (created_at, then id). None if the slug is unknown or inactive.
    """
    restaurant = await get_active_restaurant(session, slug)
    if restaurant is None:
        return None

    res = await session.execute(
        select(Prize)
        .where(Prize.restaurant_id == restaurant.id, Prize.active.is_(True))
        .order_by(Prize.created_at.asc(), Prize.id.asc())
    )
    prizes = tuple(_prize_dto(p) for p in res.scalars().all())
    return Catalog(restaurant=_restaurant_dto(restaurant), prizes=prizes)
