# luckyspin/services/selection.py
"""
Weighted prize selection with per-prize and per-restaurant daily caps.

Pure: takes today's counts and a draw in [0, 1), returns a decision.
No I/O and no randomness of its own, so a fixed draw always gives the same
answer.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

log = logging.getLogger(__name__)

# Miss band = this share of the available prize weight.
DEFAULT_MISS_RATIO = 0.30


class NoWinReason(str, enum.Enum):
    RESTAURANT_CAP_REACHED = "restaurant_cap_reached"
    ALL_PRIZES_CAPPED = "all_prizes_capped"
    NO_PRIZES_CONFIGURED = "no_prizes_configured"
    RANDOM_MISS = "random_miss"

    @property
    def is_cap_hit(self) -> bool:
        return self in (NoWinReason.RESTAURANT_CAP_REACHED, NoWinReason.ALL_PRIZES_CAPPED)


@dataclass(frozen=True, slots=True)
class PrizeOption:
    id: int
    weight: int
    daily_cap: int | None
    wins_today: int = 0
    is_fallback: bool = False

    @property
    def has_capacity(self) -> bool:
        return self.daily_cap is None or self.wins_today < self.daily_cap


@dataclass(frozen=True, slots=True)
class Win:
    prize_id: int
    is_fallback: bool = False


@dataclass(frozen=True, slots=True)
class NoWin:
    reason: NoWinReason


Decision = Union[Win, NoWin]


def split_fallback(options: Iterable[PrizeOption]) -> tuple[list[PrizeOption], PrizeOption | None]:
    """
    Separate the normal pool from the fallback prize, keeping catalog order.
    More than one fallback is a catalog error: the first one wins, the rest
    are dropped from both pools.
    """
    normal: list[PrizeOption] = []
    fallback: PrizeOption | None = None
    for opt in options:
        if not opt.is_fallback:
            normal.append(opt)
        elif fallback is None:
            fallback = opt
        else:
            log.warning("Ignoring extra fallback prize id=%s (fallback is id=%s)", opt.id, fallback.id)
    return normal, fallback


def select_prize(
    prizes: Sequence[PrizeOption],
    fallback: PrizeOption | None,
    restaurant_wins_today: int,
    restaurant_daily_cap: int | None,
    draw: float,
    *,
    miss_ratio: float = DEFAULT_MISS_RATIO,
) -> Decision:
    """
    Decide one spin.

    Order of checks:
    1) restaurant cap (outer gate)
    2) no normal prizes configured
    3) every normal prize capped -> fallback if it has room, else all_prizes_capped
    4) weighted walk over available prizes plus a trailing miss band
    """
    if not 0.0 <= draw < 1.0:
        raise ValueError(f"draw must be in [0, 1), got {draw!r}")

    if restaurant_daily_cap is not None and restaurant_wins_today >= restaurant_daily_cap:
        return NoWin(NoWinReason.RESTAURANT_CAP_REACHED)

    if not prizes:
        return NoWin(NoWinReason.NO_PRIZES_CONFIGURED)

    available = [p for p in prizes if p.has_capacity]

    if not available:
        if fallback is not None and fallback.has_capacity:
            return Win(prize_id=fallback.id, is_fallback=True)
        return NoWin(NoWinReason.ALL_PRIZES_CAPPED)

    total = sum(p.weight for p in available)
    miss = total * max(miss_ratio, 0.0)
    roll = draw * (total + miss)

    cursor = 0
    for p in available:
        cursor += p.weight
        if roll < cursor:
            return Win(prize_id=p.id)

    # roll landed in [total, total + miss)
    return NoWin(NoWinReason.RANDOM_MISS)
