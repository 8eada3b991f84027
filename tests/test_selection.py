from __future__ import annotations

import pytest

from luckyspin.services.selection import (
    NoWin,
    NoWinReason,
    PrizeOption,
    Win,
    select_prize,
    split_fallback,
)


def _p(pid: int, weight: int = 10, cap: int | None = None, wins: int = 0, fallback: bool = False) -> PrizeOption:
    return PrizeOption(id=pid, weight=weight, daily_cap=cap, wins_today=wins, is_fallback=fallback)


def test_restaurant_cap_checked_first():
    prizes = [_p(1)]
    fallback = _p(9, fallback=True)
    assert select_prize(prizes, fallback, 5, 5, 0.0) == NoWin(NoWinReason.RESTAURANT_CAP_REACHED)
    assert select_prize(prizes, fallback, 6, 5, 0.0) == NoWin(NoWinReason.RESTAURANT_CAP_REACHED)


def test_no_prizes_configured():
    assert select_prize([], None, 0, None, 0.5) == NoWin(NoWinReason.NO_PRIZES_CONFIGURED)
    # a lone fallback is not a wheel
    assert select_prize([], _p(9, fallback=True), 0, None, 0.5) == NoWin(NoWinReason.NO_PRIZES_CONFIGURED)


def test_scenario_a_single_capped_prize():
    # weight 10, miss band 3 -> draw 0.05 lands at 0.65, inside the prize band
    first = select_prize([_p(1, weight=10, cap=1, wins=0)], None, 0, None, 0.05)
    assert first == Win(prize_id=1)

    for draw in (0.0, 0.05, 0.5, 0.999):
        second = select_prize([_p(1, weight=10, cap=1, wins=1)], None, 1, None, draw)
        assert second == NoWin(NoWinReason.ALL_PRIZES_CAPPED)


def test_scenario_c_fallback_when_everything_capped():
    prizes = [_p(1, cap=2, wins=2), _p(2, cap=1, wins=1)]
    fallback = _p(9, weight=1, cap=None, fallback=True)
    for draw in (0.0, 0.42, 0.999):
        assert select_prize(prizes, fallback, 3, None, draw) == Win(prize_id=9, is_fallback=True)


def test_capped_fallback_gives_all_prizes_capped():
    prizes = [_p(1, cap=1, wins=1)]
    fallback = _p(9, cap=4, wins=4, fallback=True)
    assert select_prize(prizes, fallback, 5, None, 0.1) == NoWin(NoWinReason.ALL_PRIZES_CAPPED)


def test_fallback_not_used_while_normal_prizes_available():
    prizes = [_p(1, weight=10)]
    fallback = _p(9, weight=100, fallback=True)
    # 10 prize + 3 miss; 0.9 * 13 = 11.7 -> miss, never the fallback
    assert select_prize(prizes, fallback, 0, None, 0.9) == NoWin(NoWinReason.RANDOM_MISS)


def test_weighted_walk_in_catalog_order():
    prizes = [_p(1, weight=10), _p(2, weight=20), _p(3, weight=10)]
    # total 40, miss 12, grand 52
    assert select_prize(prizes, None, 0, None, 0.0) == Win(prize_id=1)
    assert select_prize(prizes, None, 0, None, 9.9 / 52) == Win(prize_id=1)
    assert select_prize(prizes, None, 0, None, 10.5 / 52) == Win(prize_id=2)
    assert select_prize(prizes, None, 0, None, 35 / 52) == Win(prize_id=3)
    assert select_prize(prizes, None, 0, None, 40.5 / 52) == NoWin(NoWinReason.RANDOM_MISS)
    assert select_prize(prizes, None, 0, None, 0.9999) == NoWin(NoWinReason.RANDOM_MISS)


def test_capped_prizes_drop_out_of_the_walk():
    prizes = [_p(1, weight=10, cap=1, wins=1), _p(2, weight=10)]
    # only prize 2 left: 10 + 3 miss; the first band now belongs to prize 2
    assert select_prize(prizes, None, 0, None, 0.0) == Win(prize_id=2)


def test_equal_weights_tie_break_on_order():
    prizes = [_p(5, weight=1), _p(6, weight=1)]
    grand = 2 * 1.3
    assert select_prize(prizes, None, 0, None, 0.99 / grand) == Win(prize_id=5)
    assert select_prize(prizes, None, 0, None, 1.1 / grand) == Win(prize_id=6)


def test_zero_miss_ratio_always_wins():
    prizes = [_p(1, weight=3)]
    assert select_prize(prizes, None, 0, None, 0.999, miss_ratio=0.0) == Win(prize_id=1)


def test_fixed_draw_is_deterministic():
    prizes = [_p(1, weight=7, cap=3, wins=1), _p(2, weight=2), _p(3, weight=5, cap=1)]
    fallback = _p(9, fallback=True)
    results = {select_prize(prizes, fallback, 2, 10, 0.05) for _ in range(50)}
    assert len(results) == 1


@pytest.mark.parametrize("draw", [-0.1, 1.0, 1.5])
def test_draw_out_of_range(draw):
    with pytest.raises(ValueError):
        select_prize([_p(1)], None, 0, None, draw)


def test_split_fallback_uses_first_and_keeps_order():
    opts = [_p(1), _p(7, fallback=True), _p(2), _p(8, fallback=True), _p(3)]
    normal, fallback = split_fallback(opts)
    assert [p.id for p in normal] == [1, 2, 3]
    assert fallback is not None and fallback.id == 7


def test_split_fallback_without_fallback():
    normal, fallback = split_fallback([_p(1), _p(2)])
    assert [p.id for p in normal] == [1, 2]
    assert fallback is None
