from __future__ import annotations

import asyncio
from datetime import timedelta

from sqlalchemy import select

from luckyspin.database.models import AnalyticsEvent, AnalyticsEventType
from luckyspin.services.allocation import SpinService
from luckyspin.services.analytics import EventRecorder
from luckyspin.services.claims import (
    AlreadyRedeemed,
    ClaimService,
    Redeemed,
    new_claim_token,
    short_code,
)

from tests.conftest import T0


async def _win(db, make_catalog, **spin_kwargs):
    catalog = await make_catalog(prizes=[{"label": "Free Coffee", "weight": 10}])
    outcome = await SpinService(db, **spin_kwargs).spin(
        catalog, device_hash="dev", ip_hash="ip", now=T0, draw=0.0
    )
    assert outcome.claim_token is not None
    return catalog, outcome


def test_tokens_are_unique_and_long():
    tokens = {new_claim_token() for _ in range(200)}
    assert len(tokens) == 200
    assert all(len(t) == 32 for t in tokens)


def test_short_code_is_uppercase_tail():
    assert short_code("0f3a9c1d2b7e4f60a1b2c3d4e5f6a7b8") == "E5F6A7B8"
    assert short_code("123e4567-e89b-12d3-a456-426614174000") == "14174000"


async def test_lookup_pending_then_redeemed(db, make_catalog):
    catalog, outcome = await _win(db, make_catalog)
    token = outcome.claim_token

    async with db.session() as session:
        view = await ClaimService.lookup(session, token=token)
    assert view is not None
    assert view.status == "pending"
    assert view.prize_label == "Free Coffee"
    assert view.restaurant_name == catalog.restaurant.name
    assert view.won_at == T0
    assert view.claimed_at is None
    assert view.short_code == outcome.claim_short_code

    at = T0 + timedelta(hours=2)
    async with db.session() as session:
        result = await ClaimService.redeem(session, token=token, now=at)
    assert result == Redeemed(claimed_at=at)

    async with db.session() as session:
        view = await ClaimService.lookup(session, token=token)
    assert view.status == "redeemed"
    assert view.claimed_at == at


async def test_second_redeem_reports_original_time(db, make_catalog):
    _, outcome = await _win(db, make_catalog)
    first_at = T0 + timedelta(minutes=5)

    async with db.session() as session:
        first = await ClaimService.redeem(session, token=outcome.claim_token, now=first_at)
    async with db.session() as session:
        second = await ClaimService.redeem(session, token=outcome.claim_token, now=first_at + timedelta(days=30))

    assert first == Redeemed(claimed_at=first_at)
    assert second == AlreadyRedeemed(claimed_at=first_at)


async def test_concurrent_redeems_exactly_once(db, make_catalog):
    _, outcome = await _win(db, make_catalog)

    async def tap(n: int):
        async with db.session() as session:
            return await ClaimService.redeem(
                session,
                token=outcome.claim_token,
                now=T0 + timedelta(minutes=10, seconds=n),
            )

    results = await asyncio.gather(*(tap(n) for n in range(10)))

    fresh = [r for r in results if isinstance(r, Redeemed)]
    already = [r for r in results if isinstance(r, AlreadyRedeemed)]
    assert len(fresh) == 1
    assert len(already) == 9
    assert {r.claimed_at for r in results} == {fresh[0].claimed_at}


async def test_unknown_token(db, make_catalog):
    await _win(db, make_catalog)
    async with db.session() as session:
        assert await ClaimService.lookup(session, token="nope") is None
        assert await ClaimService.redeem(session, token="nope", now=T0) is None


async def test_lookup_is_side_effect_free(db, make_catalog):
    _, outcome = await _win(db, make_catalog)
    for _ in range(5):
        async with db.session() as session:
            view = await ClaimService.lookup(session, token=outcome.claim_token)
        assert view.status == "pending"


async def test_fresh_redeem_emits_claim_event(db, make_catalog):
    events = EventRecorder(db)
    _, outcome = await _win(db, make_catalog, events=events)

    for _ in range(2):
        async with db.session() as session:
            await ClaimService.redeem(session, token=outcome.claim_token, now=T0, events=events)
    await events.drain()

    async with db.session() as session:
        res = await session.execute(select(AnalyticsEvent.event_type, AnalyticsEvent.spin_id))
        rows = res.all()

    types = [t for t, _ in rows]
    assert types.count(AnalyticsEventType.CLAIM_COMPLETED) == 1
    assert types.count(AnalyticsEventType.SPIN_ATTEMPT) == 1
    assert types.count(AnalyticsEventType.WIN) == 1
    assert (AnalyticsEventType.CLAIM_COMPLETED, outcome.spin_id) in rows
