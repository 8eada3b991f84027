# luckyspin/services/analytics.py
from __future__ import annotations

import asyncio
import logging
from typing import Any

from luckyspin.database.models import AnalyticsEventType
from luckyspin.database.repo.events_repo import add_event
from luckyspin.database.session import Database
from luckyspin.services.notify import StaffNotifier

log = logging.getLogger(__name__)


class EventRecorder:
    """
    Analytics feed.

    `record` writes one event on its own session and raises on failure.
    `record_silent` is fire-and-forget: it runs in a background task and every
    error is logged and dropped, so it can never fail or roll back a spin.
    """

    def __init__(self, db: Database, notifier: StaffNotifier | None = None) -> None:
        self.db = db
        self.notifier = notifier
        self._tasks: set[asyncio.Task] = set()

    async def record(
        self,
        restaurant_id: int,
        event_type: AnalyticsEventType,
        *,
        prize_id: int | None = None,
        spin_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        async with self.db.session() as session:
            add_event(
                session,
                restaurant_id=restaurant_id,
                event_type=event_type,
                prize_id=prize_id,
                spin_id=spin_id,
                metadata=metadata,
            )
            await session.commit()

    def record_silent(
        self,
        restaurant_id: int,
        event_type: AnalyticsEventType,
        *,
        prize_id: int | None = None,
        spin_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self._spawn(
            self.record(
                restaurant_id,
                event_type,
                prize_id=prize_id,
                spin_id=spin_id,
                metadata=metadata,
            ),
            what=event_type.value,
        )

    def notify_cap_hit(self, *, restaurant_name: str, reason: str) -> None:
        if self.notifier is None:
            return
        self._spawn(
            self.notifier.cap_hit(restaurant_name=restaurant_name, reason=reason),
            what="staff cap_hit",
        )

    def notify_redeemed(self, *, restaurant_name: str, prize_label: str | None, short_code: str | None) -> None:
        if self.notifier is None:
            return
        self._spawn(
            self.notifier.prize_redeemed(
                restaurant_name=restaurant_name,
                prize_label=prize_label,
                short_code=short_code,
            ),
            what="staff prize_redeemed",
        )

    def _spawn(self, coro, *, what: str) -> None:
        async def _run() -> None:
            try:
                await coro
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.warning("Analytics emission failed (%s): %s", what, e)

        try:
            task = asyncio.get_running_loop().create_task(_run())
        except RuntimeError:
            # no running loop: nothing to schedule on
            coro.close()
            log.debug("No event loop; dropped %s", what)
            return

        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for pending emissions (shutdown / tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        if self.notifier is not None:
            await self.notifier.close()
