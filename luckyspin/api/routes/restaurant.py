# luckyspin/api/routes/restaurant.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from luckyspin.api.deps import get_db, get_events
from luckyspin.api.schemas import ClientEventRequest, PublicPrizeOut, RestaurantOut
from luckyspin.database.models import AnalyticsEventType
from luckyspin.database.repo.catalog_repo import get_active_catalog, get_active_restaurant
from luckyspin.database.session import Database
from luckyspin.errors import RestaurantNotFound, ValidationError
from luckyspin.services.analytics import EventRecorder

router = APIRouter()

# events the browser may report; everything else is server-side only
CLIENT_EVENTS = {AnalyticsEventType.LANDING_VIEW, AnalyticsEventType.REVIEW_CLICK}


@router.get("/r/{slug}", response_model=RestaurantOut)
async def restaurant_view(slug: str, db: Database = Depends(get_db)) -> RestaurantOut:
    async with db.session() as session:
        catalog = await get_active_catalog(session, slug)
    if catalog is None:
        raise RestaurantNotFound()

    r = catalog.restaurant
    return RestaurantOut(
        id=r.id,
        name=r.name,
        slug=r.slug,
        logo_url=r.logo_url,
        google_url=r.google_url,
        timezone=r.timezone,
        prizes=[
            PublicPrizeOut(
                id=p.id,
                label=p.label,
                description=p.description,
                emoji=p.emoji,
                image_url=p.image_url,
                is_fallback=p.is_fallback,
            )
            for p in catalog.prizes
        ],
    )


@router.post("/r/{slug}/event", status_code=204)
async def client_event(
    slug: str,
    body: ClientEventRequest,
    db: Database = Depends(get_db),
    events: EventRecorder = Depends(get_events),
) -> Response:
    try:
        event_type = AnalyticsEventType(body.event_type)
    except ValueError:
        raise ValidationError("Invalid event type.") from None
    if event_type not in CLIENT_EVENTS:
        raise ValidationError("Invalid event type.")

    async with db.session() as session:
        restaurant = await get_active_restaurant(session, slug)
        restaurant_id = restaurant.id if restaurant else None
    if restaurant_id is None:
        raise RestaurantNotFound()

    await events.record(restaurant_id, event_type)
    return Response(status_code=204)
