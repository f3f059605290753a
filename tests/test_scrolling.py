import pytest

from walkthrough.design.geometry import EdgePadding, Rect, Size
from walkthrough.design.scrolling import check_visibility, scroll_delta, scroll_to_center

VIEWPORT = Size(375, 812)


def test_visible_target_needs_no_scroll():
    target = Rect(100, 400, 100, 40)
    assert check_visibility(target, VIEWPORT).is_visible
    assert scroll_delta(target, VIEWPORT, 120) is None


def test_target_above_scrolls_up_to_padding():
    target = Rect(100, 10, 100, 40)
    vis = check_visibility(target, VIEWPORT)
    assert vis.is_above and not vis.is_below
    offset = scroll_delta(target, VIEWPORT, current_scroll_y=300)
    assert offset.delta_y == -40
    assert offset.y == 260


def test_target_below_aligns_bottom_edge():
    target = Rect(100, 800, 100, 40)
    offset = scroll_delta(target, VIEWPORT, current_scroll_y=0)
    assert offset.delta_y == 78
    # after scrolling, the same element is inside the band
    moved = target.translated(-offset.delta_x, -offset.delta_y)
    assert check_visibility(moved, VIEWPORT).is_visible


def test_oversized_target_aligns_top_edge():
    target = Rect(100, 900, 100, 1000)
    offset = scroll_delta(target, VIEWPORT)
    assert offset.delta_y == 850


def test_absolute_offset_clamped_at_zero():
    target = Rect(100, -100, 100, 40)
    offset = scroll_delta(target, VIEWPORT, current_scroll_y=20)
    assert offset.delta_y == -150
    assert offset.y == 0


def test_horizontal_overflow():
    target = Rect(340, 400, 100, 40)
    vis = check_visibility(target, VIEWPORT)
    assert vis.is_right
    offset = scroll_delta(target, VIEWPORT, current_scroll_x=10)
    assert offset.delta_x == 440 - 375 + 50
    assert offset.delta_y == 0


def test_per_edge_padding():
    target = Rect(100, 60, 100, 40)
    assert check_visibility(target, VIEWPORT).is_visible
    assert not check_visibility(target, VIEWPORT, {"top": 80}).is_visible
    offset = scroll_delta(target, VIEWPORT, 0, EdgePadding(80, 50, 50, 50))
    assert offset.delta_y == -20


@pytest.mark.parametrize("y", [-500, -10, 0, 30, 400, 790, 1500])
def test_visibility_and_delta_agree(y):
    target = Rect(100, y, 100, 40)
    visible = check_visibility(target, VIEWPORT).is_visible
    assert (scroll_delta(target, VIEWPORT) is None) == visible


def test_scroll_to_center():
    target = Rect(100, 1000, 100, 40)
    offset = scroll_to_center(target, VIEWPORT)
    assert offset.delta_y == 1020 - 406
    assert offset.y == 614
    near_top = scroll_to_center(Rect(100, 0, 100, 40), VIEWPORT, current_scroll_y=0)
    assert near_top.y == 0
