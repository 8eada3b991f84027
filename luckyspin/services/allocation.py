# luckyspin/services/allocation.py
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from random import SystemRandom
from typing import Callable, Union

from sqlalchemy.exc import DBAPIError

from luckyspin.database.models import AnalyticsEventType
from luckyspin.database.repo.catalog_repo import Catalog, PrizeDTO
from luckyspin.database.repo.counters_repo import (
    increment_prize_counter,
    increment_restaurant_counter,
    read_daily_counts,
)
from luckyspin.database.repo.spins_repo import add_spin
from luckyspin.database.session import Database
from luckyspin.database.tx import acquire_writer, is_serialization_failure
from luckyspin.errors import TransientConflict
from luckyspin.services.analytics import EventRecorder
from luckyspin.services.claims import new_claim_token, short_code
from luckyspin.services.rate_limit import Denied, DenyReason, RateLimiter
from luckyspin.services.selection import (
    DEFAULT_MISS_RATIO,
    Decision,
    NoWin,
    NoWinReason,
    PrizeOption,
    Win,
    select_prize,
    split_fallback,
)
from luckyspin.utils.dates import local_day

log = logging.getLogger(__name__)

_sysrand = SystemRandom()


@dataclass(frozen=True, slots=True)
class SpinOutcome:
    spin_id: str
    day: date
    decision: Decision
    prize: PrizeDTO | None = None
    claim_token: str | None = None
    claim_short_code: str | None = None
    # set when this win used up the last slot of a daily cap
    cap_filled: NoWinReason | None = None

    @property
    def won(self) -> bool:
        return isinstance(self.decision, Win)


@dataclass(frozen=True, slots=True)
class RateLimited:
    reason: DenyReason
    retry_after: datetime | None = None


SpinResult = Union[SpinOutcome, RateLimited]


class SpinService:
    """
    One spin, end to end:

    1) rate limiter (outside the transaction, read-only)
    2) serializable transaction: re-check device, read today's counters,
       select, upsert-increment counters on a win, insert the spin row
    3) on a serialization conflict replay step 2 (same inputs, same draw)
       up to `max_attempts` times, then raise TransientConflict
    4) best-effort analytics after commit

    No in-process lock: the cap invariant rests on the transaction alone.
    """

    MAX_ATTEMPTS = 3
    BACKOFF_SECONDS = 0.05

    def __init__(
        self,
        db: Database,
        *,
        limiter: RateLimiter | None = None,
        events: EventRecorder | None = None,
        miss_ratio: float = DEFAULT_MISS_RATIO,
        max_attempts: int = MAX_ATTEMPTS,
        backoff_seconds: float = BACKOFF_SECONDS,
        draw: Callable[[], float] | None = None,
    ) -> None:
        self.db = db
        self.limiter = limiter or RateLimiter()
        self.events = events
        self.miss_ratio = miss_ratio
        self.max_attempts = max(1, int(max_attempts))
        self.backoff_seconds = backoff_seconds
        self._draw = draw or _sysrand.random

    async def spin(
        self,
        catalog: Catalog,
        *,
        device_hash: str,
        ip_hash: str,
        now: datetime,
        draw: float | None = None,
    ) -> SpinResult:
        restaurant = catalog.restaurant

        # 1) Early rejection
        async with self.db.session() as session:
            eligibility = await self.limiter.check_eligibility(
                session,
                restaurant_id=restaurant.id,
                device_hash=device_hash,
                ip_hash=ip_hash,
                now=now,
            )
        if isinstance(eligibility, Denied):
            log.info("Spin rate-limited restaurant=%s reason=%s", restaurant.id, eligibility.reason.value)
            return RateLimited(reason=eligibility.reason, retry_after=eligibility.retry_after)

        if self.events is not None:
            self.events.record_silent(restaurant.id, AnalyticsEventType.SPIN_ATTEMPT)

        # "today" is fixed once per request, from the caller's clock
        today = local_day(now, restaurant.timezone)
        draw_value = self._draw() if draw is None else draw

        # 2) + 3) Allocation with bounded replay
        result: SpinResult | None = None
        last_error: BaseException | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await self._allocate_once(
                    catalog,
                    device_hash=device_hash,
                    ip_hash=ip_hash,
                    now=now,
                    today=today,
                    draw=draw_value,
                )
                break
            except DBAPIError as e:
                if not is_serialization_failure(e):
                    raise
                last_error = e
                log.warning(
                    "Spin conflict restaurant=%s attempt=%s/%s: %s",
                    restaurant.id,
                    attempt,
                    self.max_attempts,
                    e.__class__.__name__,
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.backoff_seconds * attempt)

        if result is None:
            raise TransientConflict() from last_error

        # 4) Post-commit analytics
        if isinstance(result, SpinOutcome):
            self._emit(catalog, result)
        return result

    async def _allocate_once(
        self,
        catalog: Catalog,
        *,
        device_hash: str,
        ip_hash: str,
        now: datetime,
        today: date,
        draw: float,
    ) -> SpinResult:
        restaurant = catalog.restaurant

        async with self.db.session() as session:
            async with session.begin():
                await acquire_writer(session)

                # Same device racing itself between the limiter check and here
                denied = await self.limiter.device_denial(
                    session,
                    restaurant_id=restaurant.id,
                    device_hash=device_hash,
                    now=now,
                )
                if denied is not None:
                    log.info("Spin rejected in-transaction restaurant=%s (device raced)", restaurant.id)
                    return RateLimited(reason=denied.reason, retry_after=denied.retry_after)

                counts = await read_daily_counts(
                    session,
                    restaurant_id=restaurant.id,
                    prize_ids=[p.id for p in catalog.prizes],
                    day=today,
                )

                normal, fallback = split_fallback(
                    PrizeOption(
                        id=p.id,
                        weight=p.weight,
                        daily_cap=p.daily_cap,
                        wins_today=counts.for_prize(p.id),
                        is_fallback=p.is_fallback,
                    )
                    for p in catalog.prizes
                )

                decision = select_prize(
                    normal,
                    fallback,
                    counts.restaurant_wins,
                    restaurant.daily_win_cap,
                    draw,
                    miss_ratio=self.miss_ratio,
                )

                spin_id = str(uuid.uuid4())
                prize: PrizeDTO | None = None
                token: str | None = None
                code: str | None = None
                cap_filled: NoWinReason | None = None

                if isinstance(decision, Win):
                    prize = next(p for p in catalog.prizes if p.id == decision.prize_id)
                    cap_filled = _cap_filled_by(decision, normal, counts.restaurant_wins, restaurant.daily_win_cap)
                    await increment_prize_counter(session, prize_id=prize.id, day=today)
                    await increment_restaurant_counter(session, restaurant_id=restaurant.id, day=today)
                    token = new_claim_token()
                    code = short_code(token)

                add_spin(
                    session,
                    spin_id=spin_id,
                    restaurant_id=restaurant.id,
                    device_hash=device_hash,
                    ip_hash=ip_hash,
                    spun_at=now,
                    prize_id=prize.id if prize else None,
                    outcome_reason=decision.reason.value if isinstance(decision, NoWin) else None,
                    claim_token=token,
                    claim_short_code=code,
                )
                await session.flush()

        if prize is not None:
            log.info("Spin win restaurant=%s prize=%s day=%s spin=%s", restaurant.id, prize.id, today, spin_id)
        else:
            log.info("Spin no-win restaurant=%s reason=%s spin=%s", restaurant.id, decision.reason.value, spin_id)

        return SpinOutcome(
            spin_id=spin_id,
            day=today,
            decision=decision,
            prize=prize,
            claim_token=token,
            claim_short_code=code,
            cap_filled=cap_filled,
        )

    def _emit(self, catalog: Catalog, outcome: SpinOutcome) -> None:
        if self.events is None:
            return

        restaurant = catalog.restaurant
        decision = outcome.decision
        if isinstance(decision, Win):
            self.events.record_silent(
                restaurant.id,
                AnalyticsEventType.WIN,
                prize_id=decision.prize_id,
                spin_id=outcome.spin_id,
                metadata={"fallback": True} if decision.is_fallback else None,
            )
            if outcome.cap_filled is not None:
                self.events.notify_cap_hit(restaurant_name=restaurant.name, reason=outcome.cap_filled.value)
        elif decision.reason.is_cap_hit:
            self.events.record_silent(
                restaurant.id,
                AnalyticsEventType.DAILY_CAP_HIT,
                spin_id=outcome.spin_id,
                metadata={"reason": decision.reason.value},
            )


def _cap_filled_by(
    win: Win,
    normal: list[PrizeOption],
    restaurant_wins_before: int,
    restaurant_cap: int | None,
) -> NoWinReason | None:
    """Which daily limit (if any) this win just exhausted."""
    if restaurant_cap is not None and restaurant_wins_before + 1 >= restaurant_cap:
        return NoWinReason.RESTAURANT_CAP_REACHED
    if win.is_fallback or not normal:
        return None

    def remaining_after(p: PrizeOption) -> bool:
        wins = p.wins_today + (1 if p.id == win.prize_id else 0)
        return p.daily_cap is None or wins < p.daily_cap

    if not any(remaining_after(p) for p in normal):
        return NoWinReason.ALL_PRIZES_CAPPED
    return None
