from __future__ import annotations

import sqlite3

import pytest

from luckyspin.database.tx import acquire_writer
from luckyspin.services.allocation import SpinService
from luckyspin.services.claims import ClaimService

from tests.conftest import T0


def _db_path(db) -> str:
    return db.database_url.split(":///", 1)[1]


def _try_write_lock(db) -> bool:
    """Open BEGIN IMMEDIATE from an outside connection without waiting."""
    conn = sqlite3.connect(_db_path(db), timeout=0, isolation_level=None)
    try:
        conn.execute("BEGIN IMMEDIATE")
        conn.execute("ROLLBACK")
        return True
    except sqlite3.OperationalError as e:
        assert "locked" in str(e)
        return False
    finally:
        conn.close()


async def test_open_lookup_session_does_not_block_writers(db, make_catalog):
    catalog = await make_catalog(prizes=[{"label": "Coffee", "weight": 10}])
    outcome = await SpinService(db).spin(catalog, device_hash="dev", ip_hash="ip", now=T0, draw=0.0)

    async with db.session() as session:
        view = await ClaimService.lookup(session, token=outcome.claim_token)
        assert view is not None
        assert session.in_transaction()
        assert _try_write_lock(db) is True


async def test_writer_session_holds_the_lock_from_the_start(db):
    async with db.session() as session:
        async with session.begin():
            await acquire_writer(session)
            assert _try_write_lock(db) is False

    assert _try_write_lock(db) is True


@pytest.mark.parametrize("polls", [1, 5])
async def test_spin_succeeds_while_lookups_are_open(db, make_catalog, polls):
    catalog = await make_catalog(prizes=[{"label": "Coffee", "weight": 10}])
    service = SpinService(db, max_attempts=1)
    first = await service.spin(catalog, device_hash="dev-0", ip_hash="ip-0", now=T0, draw=0.0)

    sessions = [db.SessionLocal() for _ in range(polls)]
    try:
        for s in sessions:
            assert await ClaimService.lookup(s, token=first.claim_token) is not None

        second = await service.spin(catalog, device_hash="dev-1", ip_hash="ip-1", now=T0, draw=0.0)
        assert second.won
    finally:
        for s in sessions:
            await s.close()
