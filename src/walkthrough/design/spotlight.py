"""Spotlight cutout geometry.

The dimming overlay is drawn as four rectangles around a padded cutout.
The morph between two cutouts is sampled with a cubic ease-out.
"""

from __future__ import annotations

from typing import Optional, Tuple

from walkthrough.config import settings

from .geometry import Rect, Size

__all__ = ["spotlight_rect", "cutout_regions", "ease_out_cubic", "morph_frame"]


def spotlight_rect(
    target: Rect,
    padding: float = settings.DEFAULT_SPOTLIGHT_PADDING,
    viewport: Optional[Size] = None,
) -> Rect:
    x = max(0.0, target.x - padding)
    y = max(0.0, target.y - padding)
    right = target.right + padding
    bottom = target.bottom + padding
    if viewport is not None:
        right = min(right, viewport.width)
        bottom = min(bottom, viewport.height)
    return Rect(x, y, max(0.0, right - x), max(0.0, bottom - y))


def cutout_regions(cutout: Rect, viewport: Size) -> Tuple[Rect, Rect, Rect, Rect]:
    """Return (top, bottom, left, right) dimming rectangles around ``cutout``."""
    top = Rect(0, 0, viewport.width, cutout.y)
    bottom = Rect(0, cutout.bottom, viewport.width, max(0.0, viewport.height - cutout.bottom))
    left = Rect(0, cutout.y, cutout.x, cutout.height)
    right = Rect(cutout.right, cutout.y, max(0.0, viewport.width - cutout.right), cutout.height)
    return top, bottom, left, right


def ease_out_cubic(t: float) -> float:
    if t <= 0:
        return 0.0
    if t >= 1:
        return 1.0
    return 1 - (1 - t) ** 3


def morph_frame(start: Optional[Rect], end: Rect, progress: float) -> Rect:
    """Cutout for ``progress`` in [0, 1]; no start rect means appear in place."""
    if start is None:
        return end
    return start.lerp(end, ease_out_cubic(progress))
