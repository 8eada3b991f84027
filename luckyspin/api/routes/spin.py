# luckyspin/api/routes/spin.py
from __future__ import annotations

from typing import Union

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from luckyspin.api.deps import get_db, get_settings, get_spin_service
from luckyspin.api.schemas import (
    PrizeOut,
    RateLimitedOut,
    SpinNoWinOut,
    SpinRequest,
    SpinViewOut,
    SpinWinOut,
)
from luckyspin.config.settings import Settings
from luckyspin.database.repo.catalog_repo import get_active_catalog
from luckyspin.database.repo.spins_repo import get_spin
from luckyspin.database.session import Database
from luckyspin.errors import RestaurantNotFound, SpinNotFound
from luckyspin.services.allocation import RateLimited, SpinService
from luckyspin.services.identity import hash_fingerprint, hash_ip
from luckyspin.services.rate_limit import DenyReason
from luckyspin.services.selection import NoWinReason
from luckyspin.utils.client_ip import real_ip
from luckyspin.utils.dates import utc_now

router = APIRouter()

DENY_MESSAGES = {
    DenyReason.DEVICE_ALREADY_SPUN: "You already spun today. Come back tomorrow!",
    DenyReason.IP_LIMIT: "Too many spins from this network today. Come back tomorrow!",
}

NO_WIN_MESSAGES = {
    NoWinReason.RANDOM_MISS: "No luck this time. Try again tomorrow!",
    NoWinReason.ALL_PRIZES_CAPPED: "All of today's prizes are gone. Come back tomorrow!",
    NoWinReason.RESTAURANT_CAP_REACHED: "No more prizes today. Come back tomorrow!",
    NoWinReason.NO_PRIZES_CONFIGURED: "No prizes on the wheel yet. Check back soon!",
}


@router.post("/r/{slug}/spin", response_model=Union[SpinWinOut, SpinNoWinOut])
async def spin(
    slug: str,
    body: SpinRequest,
    request: Request,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
    spins: SpinService = Depends(get_spin_service),
):
    async with db.session() as session:
        catalog = await get_active_catalog(session, slug)
    if catalog is None:
        raise RestaurantNotFound()

    device_hash = hash_fingerprint(body.fingerprint, settings.hash_salt)
    ip_hash = hash_ip(real_ip(request), settings.hash_salt)

    result = await spins.spin(catalog, device_hash=device_hash, ip_hash=ip_hash, now=utc_now())

    if isinstance(result, RateLimited):
        payload = RateLimitedOut(
            reason=result.reason.value,
            retry_after=result.retry_after,
            message=DENY_MESSAGES[result.reason],
        )
        return JSONResponse(status_code=429, content=payload.model_dump(mode="json"))

    if result.prize is not None and result.claim_token and result.claim_short_code:
        p = result.prize
        return SpinWinOut(
            spin_id=result.spin_id,
            prize=PrizeOut(
                id=p.id,
                label=p.label,
                description=p.description,
                emoji=p.emoji,
                image_url=p.image_url,
            ),
            claim_token=result.claim_token,
            claim_short_code=result.claim_short_code,
            message=f"You won {p.label}!",
        )

    reason = result.decision.reason  # type: ignore[union-attr]
    return SpinNoWinOut(
        spin_id=result.spin_id,
        reason=reason.value,
        cap_reached=reason.is_cap_hit,
        message=NO_WIN_MESSAGES[reason],
    )


@router.get("/spin/{spin_id}", response_model=SpinViewOut)
async def spin_view(spin_id: str, db: Database = Depends(get_db)) -> SpinViewOut:
    async with db.session() as session:
        row = await get_spin(session, spin_id)
    if row is None:
        raise SpinNotFound()

    prize = None
    if row.prize_id is not None:
        prize = PrizeOut(
            id=row.prize_id,
            label=row.prize_label or "",
            description=row.prize_description,
            emoji=row.prize_emoji,
            image_url=row.prize_image_url,
        )

    return SpinViewOut(
        spin_id=row.id,
        outcome="win" if row.prize_id is not None else "no_win",
        reason=row.outcome_reason,
        spun_at=row.spun_at,
        prize=prize,
        claim_token=row.claim_token,
        claim_short_code=row.claim_short_code,
        restaurant_name=row.restaurant_name,
        timezone=row.timezone,
    )
