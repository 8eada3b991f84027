from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from luckyspin.database.models import Prize, Restaurant
from luckyspin.database.repo.catalog_repo import Catalog, get_active_catalog
from luckyspin.database.session import Database

T0 = datetime(2026, 3, 14, 12, 0, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'luckyspin-test.db'}")
    await database.init_models()
    try:
        yield database
    finally:
        await database.close()


@pytest.fixture
def make_catalog(db):
    """
    Create a restaurant with prizes and return its Catalog (None when inactive).

    prizes: list of dicts with label / weight / daily_cap / is_fallback / active
    """
    counter = {"n": 0}

    async def _make(
        *,
        prizes: list[dict] | None = None,
        daily_win_cap: int | None = None,
        tz: str = "UTC",
        slug: str | None = None,
        active: bool = True,
    ) -> Catalog | None:
        counter["n"] += 1
        slug = slug or f"resto-{counter['n']}"
        async with db.session() as session:
            restaurant = Restaurant(
                slug=slug,
                name=f"Resto {counter['n']}",
                timezone=tz,
                daily_win_cap=daily_win_cap,
                active=active,
            )
            session.add(restaurant)
            await session.flush()

            for row in prizes or []:
                session.add(
                    Prize(
                        restaurant_id=restaurant.id,
                        label=row.get("label", "Prize"),
                        weight=row.get("weight", 1),
                        daily_cap=row.get("daily_cap"),
                        is_fallback=row.get("is_fallback", False),
                        active=row.get("active", True),
                    )
                )
                await session.flush()
            await session.commit()

        async with db.session() as session:
            return await get_active_catalog(session, slug)

    return _make
