# luckyspin/api/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SpinRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # raw device fingerprint from the browser; hashed before it touches storage
    fingerprint: Optional[str] = Field(
        default=None,
        max_length=512,
        validation_alias=AliasChoices("fingerprint", "fingerprintToken"),
    )


class ClientEventRequest(BaseModel):
    event_type: str = Field(
        min_length=1,
        max_length=32,
        validation_alias=AliasChoices("event_type", "eventType"),
    )


class PrizeOut(BaseModel):
    id: int
    label: str
    description: Optional[str] = None
    emoji: Optional[str] = None
    image_url: Optional[str] = None


class PublicPrizeOut(PrizeOut):
    # weight / caps are never exposed
    is_fallback: bool = False


class RestaurantOut(BaseModel):
    id: int
    name: str
    slug: str
    logo_url: Optional[str] = None
    google_url: Optional[str] = None
    timezone: str
    prizes: list[PublicPrizeOut]


class SpinWinOut(BaseModel):
    spin_id: str
    outcome: Literal["win"] = "win"
    prize: PrizeOut
    claim_token: str
    claim_short_code: str
    message: str


class SpinNoWinOut(BaseModel):
    spin_id: str
    outcome: Literal["no_win"] = "no_win"
    reason: str
    cap_reached: bool
    message: str


class RateLimitedOut(BaseModel):
    error: Literal["rate_limited"] = "rate_limited"
    reason: str
    retry_after: Optional[datetime] = None
    message: str


class SpinViewOut(BaseModel):
    spin_id: str
    outcome: Literal["win", "no_win"]
    reason: Optional[str] = None
    spun_at: datetime
    prize: Optional[PrizeOut] = None
    claim_token: Optional[str] = None
    claim_short_code: Optional[str] = None
    restaurant_name: str
    timezone: str


class ClaimViewOut(BaseModel):
    restaurant_name: str
    timezone: str
    prize: PrizeOut
    claim_short_code: Optional[str] = None
    won_at: datetime
    claimed_at: Optional[datetime] = None
    status: Literal["pending", "redeemed"]


class RedeemOut(BaseModel):
    claimed_at: datetime
    already_claimed: bool


class ErrorOut(BaseModel):
    error: str
    message: str
