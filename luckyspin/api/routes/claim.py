# luckyspin/api/routes/claim.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from luckyspin.api.deps import get_db, get_events
from luckyspin.api.schemas import ClaimViewOut, PrizeOut, RedeemOut
from luckyspin.database.session import Database
from luckyspin.errors import ClaimNotFound
from luckyspin.services.analytics import EventRecorder
from luckyspin.services.claims import AlreadyRedeemed, ClaimService
from luckyspin.utils.dates import utc_now

router = APIRouter()


@router.get("/claim/{token}", response_model=ClaimViewOut)
async def claim_view(token: str, db: Database = Depends(get_db)) -> ClaimViewOut:
    async with db.session() as session:
        view = await ClaimService.lookup(session, token=token)
    if view is None:
        raise ClaimNotFound()

    return ClaimViewOut(
        restaurant_name=view.restaurant_name,
        timezone=view.timezone,
        prize=PrizeOut(
            id=view.prize_id,
            label=view.prize_label or "",
            description=view.prize_description,
            emoji=view.prize_emoji,
            image_url=view.prize_image_url,
        ),
        claim_short_code=view.short_code,
        won_at=view.won_at,
        claimed_at=view.claimed_at,
        status=view.status,
    )


@router.post("/claim/{token}", response_model=RedeemOut)
async def claim_redeem(
    token: str,
    db: Database = Depends(get_db),
    events: EventRecorder = Depends(get_events),
) -> RedeemOut:
    async with db.session() as session:
        result = await ClaimService.redeem(session, token=token, now=utc_now(), events=events)
    if result is None:
        raise ClaimNotFound()

    return RedeemOut(
        claimed_at=result.claimed_at,
        already_claimed=isinstance(result, AlreadyRedeemed),
    )
