from __future__ import annotations

from sqlalchemy import select

from luckyspin.config import Settings
from luckyspin.database.models import AnalyticsEvent, AnalyticsEventType
from luckyspin.services.analytics import EventRecorder
from luckyspin.services.notify import StaffNotifier


class ExplodingNotifier:
    def __init__(self) -> None:
        self.calls = 0

    async def cap_hit(self, **kwargs) -> None:
        self.calls += 1
        raise RuntimeError("telegram is down")

    async def prize_redeemed(self, **kwargs) -> None:
        self.calls += 1
        raise RuntimeError("telegram is down")

    async def close(self) -> None:
        pass


def test_notifier_disabled_without_credentials():
    assert StaffNotifier.from_settings(Settings()) is None
    assert StaffNotifier.from_settings(Settings(staff_bot_token="123:abc")) is None


async def test_record_writes_event(db, make_catalog):
    catalog = await make_catalog(prizes=[{"label": "Coffee"}])
    recorder = EventRecorder(db)

    await recorder.record(
        catalog.restaurant.id,
        AnalyticsEventType.WIN,
        prize_id=catalog.prizes[0].id,
        spin_id="abc",
        metadata={"fallback": True},
    )

    async with db.session() as session:
        ev = (await session.execute(select(AnalyticsEvent))).scalar_one()
    assert ev.event_type == AnalyticsEventType.WIN
    assert ev.spin_id == "abc"
    assert ev.metadata_json == '{"fallback": true}'


async def test_silent_failures_are_swallowed(db):
    notifier = ExplodingNotifier()
    recorder = EventRecorder(db, notifier)  # type: ignore[arg-type]

    # restaurant 999 does not exist -> foreign key failure inside the task
    recorder.record_silent(999, AnalyticsEventType.SPIN_ATTEMPT)
    recorder.notify_cap_hit(restaurant_name="Nowhere", reason="all_prizes_capped")
    recorder.notify_redeemed(restaurant_name="Nowhere", prize_label="Coffee", short_code="ABCD1234")

    await recorder.drain()
    assert notifier.calls == 2

    async with db.session() as session:
        assert (await session.execute(select(AnalyticsEvent))).first() is None
