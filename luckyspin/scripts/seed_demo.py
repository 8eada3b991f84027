# luckyspin/scripts/seed_demo.py
from __future__ import annotations

import asyncio
import logging

from sqlalchemy import select

from luckyspin.config import Settings
from luckyspin.database.models import Prize, Restaurant
from luckyspin.database.session import Database

log = logging.getLogger(__name__)

DEMO_SLUG = "demo-cafe"

# (label, emoji, weight, daily_cap, is_fallback) in wheel order
DEMO_PRIZES = [
    ("Free Coffee", "☕", 5, 10, False),
    ("10% Off", "🏷️", 10, 20, False),
    ("Free Dessert", "🍰", 3, 5, False),
    ("Free Upgrade", "⬆️", 8, 15, False),
    ("Free Drink", "🥤", 6, 12, False),
    # awarded once every prize above is capped for the day
    ("5% Off Your Next Visit", "🎁", 1, None, True),
]


async def seed(db: Database) -> Restaurant:
    """Idempotent: re-running keeps the existing restaurant and only adds missing prizes."""
    async with db.session() as session:
        res = await session.execute(select(Restaurant).where(Restaurant.slug == DEMO_SLUG))
        restaurant = res.scalar_one_or_none()
        if restaurant is None:
            restaurant = Restaurant(
                slug=DEMO_SLUG,
                name="Demo Café",
                google_url="https://maps.google.com/?cid=1234567890",
                timezone="Europe/Zurich",
                daily_win_cap=50,
            )
            session.add(restaurant)
            await session.flush()

        res = await session.execute(select(Prize.label).where(Prize.restaurant_id == restaurant.id))
        existing = {row[0] for row in res.all()}

        # one at a time so created_at/id follow wheel order
        for label, emoji, weight, daily_cap, is_fallback in DEMO_PRIZES:
            if label in existing:
                continue
            session.add(
                Prize(
                    restaurant_id=restaurant.id,
                    label=label,
                    emoji=emoji,
                    weight=weight,
                    daily_cap=daily_cap,
                    is_fallback=is_fallback,
                )
            )
            await session.flush()

        await session.commit()
        return restaurant


async def main() -> None:
    settings = Settings.load()
    db = Database(settings.database_url)
    await db.init_models()
    try:
        restaurant = await seed(db)
        log.info("Seeded %s -> /api/r/%s", restaurant.name, restaurant.slug)
    finally:
        await db.close()


def run() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    asyncio.run(main())


if __name__ == "__main__":
    run()
