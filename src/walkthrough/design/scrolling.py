"""Scroll offset helpers for bringing tour targets into view.

Pure functions; the caller owns the scroll container and decides which
strategy to apply:

 - ``check_visibility``: is the target fully inside the padded viewport band?
 - ``scroll_delta``: minimal scroll so the nearer edge of the target sits
   exactly on the padding boundary (no centring). Returns ``None`` iff the
   target is already visible, so the two functions always agree.
 - ``scroll_to_center``: centres the target's vertical midpoint in the padded
   band; used when a freshly revealed target should be framed fully. Never
   composed with ``scroll_delta`` automatically.

Targets are expressed in viewport coordinates (as returned by a measurement
provider). Returned absolute offsets are ``current + delta`` clamped to >= 0.

Edge Cases:
 - A target taller (wider) than the band is aligned on its top (left) edge so
   the start of the element is shown.
 - Padding accepts a number, an ``EdgePadding`` or a per-edge mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from walkthrough.config import settings

from .geometry import PaddingLike, Rect, Size, resolve_padding

__all__ = [
    "Visibility",
    "ScrollOffset",
    "check_visibility",
    "scroll_delta",
    "scroll_to_center",
]


@dataclass(frozen=True)
class Visibility:
    is_visible: bool
    is_above: bool
    is_below: bool
    is_left: bool
    is_right: bool


@dataclass(frozen=True)
class ScrollOffset:
    """Absolute scroll position (x, y) plus the signed delta that produced it."""

    x: float
    y: float
    delta_x: float = 0.0
    delta_y: float = 0.0


def check_visibility(
    target: Rect,
    viewport: Size,
    padding: PaddingLike = settings.DEFAULT_SCROLL_PADDING,
) -> Visibility:
    pad = resolve_padding(padding, settings.DEFAULT_SCROLL_PADDING)
    is_above = target.y < pad.top
    is_below = target.bottom > viewport.height - pad.bottom
    is_left = target.x < pad.left
    is_right = target.right > viewport.width - pad.right
    return Visibility(
        is_visible=not (is_above or is_below or is_left or is_right),
        is_above=is_above,
        is_below=is_below,
        is_left=is_left,
        is_right=is_right,
    )


def scroll_delta(
    target: Rect,
    viewport: Size,
    current_scroll_y: float = 0.0,
    padding: PaddingLike = settings.DEFAULT_SCROLL_PADDING,
    current_scroll_x: float = 0.0,
) -> Optional[ScrollOffset]:
    """Return the scroll needed to bring ``target`` into the padded band, or None."""
    pad = resolve_padding(padding, settings.DEFAULT_SCROLL_PADDING)
    vis = check_visibility(target, viewport, pad)
    if vis.is_visible:
        return None

    band_height = viewport.height - pad.top - pad.bottom
    band_width = viewport.width - pad.left - pad.right

    dy = 0.0
    if vis.is_above or (vis.is_below and target.height > band_height):
        dy = target.y - pad.top
    elif vis.is_below:
        dy = target.bottom - viewport.height + pad.bottom

    dx = 0.0
    if vis.is_left or (vis.is_right and target.width > band_width):
        dx = target.x - pad.left
    elif vis.is_right:
        dx = target.right - viewport.width + pad.right

    return ScrollOffset(
        x=max(0.0, current_scroll_x + dx),
        y=max(0.0, current_scroll_y + dy),
        delta_x=dx,
        delta_y=dy,
    )


def scroll_to_center(
    target: Rect,
    viewport: Size,
    current_scroll_y: float = 0.0,
    padding: PaddingLike = settings.DEFAULT_SCROLL_PADDING,
) -> ScrollOffset:
    """Return the scroll offset placing the target's midpoint in the band's middle."""
    pad = resolve_padding(padding, settings.DEFAULT_SCROLL_PADDING)
    band_mid = (viewport.height - pad.bottom + pad.top) / 2
    dy = target.center_y - band_mid
    return ScrollOffset(x=0.0, y=max(0.0, current_scroll_y + dy), delta_x=0.0, delta_y=dy)
