# luckyspin/database/repo/counters_repo.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from luckyspin.database.models import DailyPrizeCounter, DailyRestaurantCounter


@dataclass(frozen=True, slots=True)
class DailyCounts:
    restaurant_wins: int
    prize_wins: dict[int, int] = field(default_factory=dict)

    def for_prize(self, prize_id: int) -> int:
        return self.prize_wins.get(prize_id, 0)


def _insert_for(session: AsyncSession):
    # ON CONFLICT is dialect specific; both dialects share the same API shape
    if session.bind is not None and session.bind.dialect.name == "postgresql":
        return pg_insert
    return sqlite_insert


async def read_daily_counts(
    session: AsyncSession,
    *,
    restaurant_id: int,
    prize_ids: Iterable[int],
    day: date,
) -> DailyCounts:
    """Today's counters; missing rows read as 0."""
    restaurant_wins = await session.scalar(
        select(DailyRestaurantCounter.wins).where(
            DailyRestaurantCounter.restaurant_id == restaurant_id,
            DailyRestaurantCounter.day == day,
        )
    )

    ids = list(prize_ids)
    prize_wins: dict[int, int] = {}
    if ids:
        res = await session.execute(
            select(DailyPrizeCounter.prize_id, DailyPrizeCounter.wins).where(
                DailyPrizeCounter.prize_id.in_(ids),
                DailyPrizeCounter.day == day,
            )
        )
        prize_wins = {int(pid): int(wins) for pid, wins in res.all()}

    return DailyCounts(restaurant_wins=int(restaurant_wins or 0), prize_wins=prize_wins)


async def increment_prize_counter(session: AsyncSession, *, prize_id: int, day: date) -> None:
    insert = _insert_for(session)
    stmt = insert(DailyPrizeCounter).values(prize_id=prize_id, day=day, wins=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=["prize_id", "day"],
        set_={"wins": DailyPrizeCounter.wins + 1, "updated_at": func.now()},
    )
    await session.execute(stmt)


async def increment_restaurant_counter(session: AsyncSession, *, restaurant_id: int, day: date) -> None:
    insert = _insert_for(session)
    stmt = insert(DailyRestaurantCounter).values(restaurant_id=restaurant_id, day=day, wins=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=["restaurant_id", "day"],
        set_={"wins": DailyRestaurantCounter.wins + 1, "updated_at": func.now()},
    )
    await session.execute(stmt)
