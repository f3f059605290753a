import itertools
import math

import pytest

from walkthrough.design.geometry import Rect, Size
from walkthrough.design.placement import (
    ArrowSide,
    HintPosition,
    Side,
    candidate_sides,
    place,
    place_floating,
    place_hint_bubble,
    place_hint_indicator,
)

PHONE = Size(375, 812)
PANEL = Size(200, 100)


def _panel(p, size=PANEL):
    return p.panel_rect(size)


def test_target_in_lower_half_goes_on_top():
    target = Rect(100, 600, 100, 50)
    result = place(target, PANEL, PHONE)
    assert result.side is Side.TOP
    assert result.y < 600
    assert result.anchor is ArrowSide.BOTTOM


def test_target_in_upper_half_goes_below():
    target = Rect(100, 100, 100, 50)
    result = place(target, PANEL, PHONE)
    assert result.side is Side.BOTTOM
    assert result.y == target.bottom + 16
    assert result.anchor is ArrowSide.TOP


def test_floating_is_centered():
    result = place_floating(PANEL, PHONE)
    assert (result.x, result.y) == (87.5, 356)
    assert result.side is Side.BOTTOM
    assert result.anchor is ArrowSide.CENTER


def test_preferred_side_is_tried_first():
    target = Rect(150, 300, 60, 40)
    result = place(target, Size(100, 60), PHONE, preferred="right")
    assert result.side is Side.RIGHT
    assert result.x == target.right + 16
    assert result.anchor is ArrowSide.LEFT


def test_preferred_side_falls_through_when_it_does_not_fit():
    # no room above a target at the very top
    target = Rect(100, 5, 100, 40)
    result = place(target, PANEL, PHONE, preferred=Side.TOP)
    assert result.side is Side.BOTTOM


def test_candidate_order_is_deduplicated():
    order = candidate_sides(Rect(0, 0, 10, 10), PHONE, "bottom")
    assert order == [Side.BOTTOM, Side.TOP, Side.RIGHT, Side.LEFT]
    lower = candidate_sides(Rect(0, 700, 10, 10), PHONE)
    assert lower == [Side.TOP, Side.BOTTOM, Side.LEFT, Side.RIGHT]


def test_cross_axis_is_clamped_into_viewport():
    # target hugging the left edge: centred panel would start at x < 0
    target = Rect(0, 100, 40, 40)
    result = place(target, PANEL, PHONE)
    assert result.side is Side.BOTTOM
    assert result.x == 10


def test_negative_padding_or_gap_rejected():
    target = Rect(100, 100, 10, 10)
    with pytest.raises(ValueError):
        place(target, PANEL, PHONE, padding=-1)
    with pytest.raises(ValueError):
        place(target, PANEL, PHONE, gap=-0.5)


def test_deterministic():
    target = Rect(33, 410, 71, 22)
    results = {place(target, PANEL, PHONE) for _ in range(5)}
    assert len(results) == 1


def test_panel_larger_than_viewport_still_finite():
    target = Rect(100, 300, 100, 50)
    result = place(target, Size(2000, 3000), PHONE)
    assert math.isfinite(result.x) and math.isfinite(result.y)
    assert result.side in set(Side)


def test_fallback_never_overlaps_target_even_when_target_fills_screen():
    target = Rect(0, 0, 375, 812)
    result = place(target, PANEL, PHONE)
    assert not _panel(result).intersects(target)
    # part of the panel stays on screen along the cross axis
    if result.side.is_vertical:
        assert -PANEL.width + 50 <= result.x <= PHONE.width - 50
    else:
        assert -PANEL.height + 50 <= result.y <= PHONE.height - 50


def test_wide_panel_is_clamped_clear_of_target():
    # panel wider than the padded band gets pinned to the left padding
    viewport = Size(300, 600)
    target = Rect(130, 280, 40, 40)
    panel = Size(290, 100)
    result = place(target, panel, viewport)
    assert not _panel(result, panel).intersects(target)


@pytest.mark.parametrize(
    "tx,ty,tw,th",
    list(itertools.product([10, 90, 200], [10, 300, 650], [20, 120], [20, 120])),
)
def test_visible_targets_get_overlap_free_in_viewport_panels(tx, ty, tw, th):
    target = Rect(tx, ty, tw, th)
    if not Rect(10, 10, PHONE.width - 20, PHONE.height - 20).contains(target):
        pytest.skip("target not inside padded viewport")
    result = place(target, PANEL, PHONE)
    panel = _panel(result)
    assert not panel.intersects(target)
    assert panel.x >= 10 and panel.y >= 10
    assert panel.right <= PHONE.width - 10 and panel.bottom <= PHONE.height - 10


@pytest.mark.parametrize(
    "pw,ph",
    [(10, 10), (370, 20), (20, 800), (374, 811), (1000, 50), (50, 1000), (5000, 5000)],
)
@pytest.mark.parametrize(
    "target",
    [Rect(0, 0, 1, 1), Rect(180, 400, 10, 10), Rect(0, 0, 375, 812), Rect(-50, -50, 500, 100), Rect(300, 780, 75, 32)],
)
def test_extreme_ratios_never_overlap_and_stay_finite(pw, ph, target):
    panel = Size(pw, ph)
    result = place(target, panel, PHONE)
    assert math.isfinite(result.x) and math.isfinite(result.y)
    assert not _panel(result, panel).intersects(target)


def test_hint_indicator_positions():
    target = Rect(100, 200, 80, 40)
    assert place_hint_indicator(target, HintPosition.TOP_RIGHT, 20) == (170, 190)
    assert place_hint_indicator(target, "bottom-center", 20) == (130, 230)
    assert place_hint_indicator(target, "middle-left", 10) == (95, 215)


def test_hint_bubble_flips_above_near_bottom():
    viewport = Size(375, 812)
    below = place_hint_bubble(Rect(100, 100, 20, 20), Size(200, 80), viewport)
    assert below[1] == 132
    above = place_hint_bubble(Rect(100, 700, 20, 20), Size(200, 80), viewport)
    assert above[1] == 700 - 80 - 12
    # horizontally clamped into the viewport
    edge = place_hint_bubble(Rect(0, 100, 20, 20), Size(200, 80), viewport)
    assert edge[0] == 12
