"""Floating panel placement solver.

Computes where a tour panel (tooltip) is drawn relative to a target rectangle
without obscuring the target or leaving the viewport.

Algorithm (``place``):
 1. Candidate sides: ``[preferred, bottom, top, right, left]`` (deduplicated)
    for an explicit side. For ``auto`` the order follows the target's vertical
    half: ``bottom, top, right, left`` in the top half, otherwise
    ``top, bottom, left, right``, biasing the panel away from the nearer edge.
 2. Per side the panel is centred on the cross axis and offset by ``gap`` on
    the primary axis. The cross-axis coordinate is clamped into
    ``[padding, viewport - padding - panel]``.
 3. A candidate is rejected when its raw primary coordinate falls outside that
    band, or when the clamped panel intersects the target grown by ``gap``.
 4. The first survivor wins. The anchor (arrow) side is the opposite side.
 5. Fallback when nothing survives: each side gets an overflow score (sum of
    positive overflow beyond the padded viewport edges). Sides whose fully
    clamped panel does not overlap the target are preferred, lowest score
    first. When every side overlaps, the lowest-score side is forced apart
    from the target by ``gap`` and its cross-axis coordinate is clamped into
    ``[-panel + 50, viewport - 50]`` so part of the panel stays visible.

The solver is pure and deterministic. Finite inputs always produce finite
coordinates; the only error raised is ``ValueError`` for negative padding or
gap.

Hint helpers (``place_hint_indicator`` / ``place_hint_bubble``) position the
small hint indicator dot on a target and the hint bubble next to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import List, Sequence, Tuple, Union

from walkthrough.config import settings

from .geometry import Rect, Size

__all__ = [
    "Side",
    "ArrowSide",
    "HintPosition",
    "Placement",
    "PreferredSide",
    "candidate_sides",
    "place",
    "place_floating",
    "place_hint_indicator",
    "place_hint_bubble",
]

log = logging.getLogger(__name__)


class Side(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Side":
        return _OPPOSITE[self]

    @property
    def is_vertical(self) -> bool:
        """True for top/bottom, whose primary axis is y."""
        return self in (Side.TOP, Side.BOTTOM)


_OPPOSITE = {
    Side.TOP: Side.BOTTOM,
    Side.BOTTOM: Side.TOP,
    Side.LEFT: Side.RIGHT,
    Side.RIGHT: Side.LEFT,
}


class ArrowSide(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


class HintPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_CENTER = "top-center"
    TOP_RIGHT = "top-right"
    MIDDLE_LEFT = "middle-left"
    MIDDLE_RIGHT = "middle-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_CENTER = "bottom-center"
    BOTTOM_RIGHT = "bottom-right"


PreferredSide = Union[Side, str]

AUTO = "auto"


@dataclass(frozen=True)
class Placement:
    side: Side
    x: float
    y: float
    anchor: ArrowSide

    def panel_rect(self, panel: Size) -> Rect:
        return Rect(self.x, self.y, panel.width, panel.height)


def _clamp(value: float, lo: float, hi: float) -> float:
    # Panel larger than the band: pin to the low edge
    if hi < lo:
        return lo
    return max(lo, min(value, hi))


def _anchor_for(side: Side) -> ArrowSide:
    return ArrowSide(side.opposite.value)


def candidate_sides(target: Rect, viewport: Size, preferred: PreferredSide = AUTO) -> List[Side]:
    """Return the ordered, deduplicated list of sides to try."""
    if preferred != AUTO:
        first = Side(preferred)
        order = [first, Side.BOTTOM, Side.TOP, Side.RIGHT, Side.LEFT]
    elif target.center_y < viewport.height / 2:
        order = [Side.BOTTOM, Side.TOP, Side.RIGHT, Side.LEFT]
    else:
        order = [Side.TOP, Side.BOTTOM, Side.LEFT, Side.RIGHT]
    seen: List[Side] = []
    for side in order:
        if side not in seen:
            seen.append(side)
    return seen


def _raw_position(target: Rect, panel: Size, side: Side, gap: float) -> Tuple[float, float]:
    if side is Side.BOTTOM:
        return target.x + (target.width - panel.width) / 2, target.bottom + gap
    if side is Side.TOP:
        return target.x + (target.width - panel.width) / 2, target.y - panel.height - gap
    if side is Side.RIGHT:
        return target.right + gap, target.y + (target.height - panel.height) / 2
    return target.x - panel.width - gap, target.y + (target.height - panel.height) / 2


def _cross_clamped(
    x: float, y: float, side: Side, panel: Size, viewport: Size, padding: float
) -> Tuple[float, float]:
    if side.is_vertical:
        return _clamp(x, padding, viewport.width - padding - panel.width), y
    return x, _clamp(y, padding, viewport.height - padding - panel.height)


def _primary_fits(x: float, y: float, side: Side, panel: Size, viewport: Size, padding: float) -> bool:
    if side.is_vertical:
        return padding <= y <= viewport.height - padding - panel.height
    return padding <= x <= viewport.width - padding - panel.width


def _overflow_score(x: float, y: float, panel: Size, viewport: Size, padding: float) -> float:
    return (
        max(0.0, padding - x)
        + max(0.0, x + panel.width - (viewport.width - padding))
        + max(0.0, padding - y)
        + max(0.0, y + panel.height - (viewport.height - padding))
    )


def _try_side(
    target: Rect, panel: Size, viewport: Size, side: Side, padding: float, gap: float
) -> Placement | None:
    raw_x, raw_y = _raw_position(target, panel, side, gap)
    if not _primary_fits(raw_x, raw_y, side, panel, viewport, padding):
        return None
    x, y = _cross_clamped(raw_x, raw_y, side, panel, viewport, padding)
    if Rect(x, y, panel.width, panel.height).intersects(target.expanded(gap)):
        return None
    return Placement(side, x, y, _anchor_for(side))


def _fallback(
    target: Rect,
    panel: Size,
    viewport: Size,
    order: Sequence[Side],
    padding: float,
    gap: float,
) -> Placement:
    # Evaluate all four sides; candidate order breaks score ties.
    sides = list(order) + [s for s in Side if s not in order]
    scored = []
    for rank, side in enumerate(sides):
        raw_x, raw_y = _raw_position(target, panel, side, gap)
        cx, cy = _cross_clamped(raw_x, raw_y, side, panel, viewport, padding)
        score = _overflow_score(cx, cy, panel, viewport, padding)
        fx = _clamp(cx, padding, viewport.width - padding - panel.width)
        fy = _clamp(cy, padding, viewport.height - padding - panel.height)
        overlaps = Rect(fx, fy, panel.width, panel.height).intersects(target)
        scored.append((score, rank, side, fx, fy, overlaps, raw_x, raw_y, cx, cy))

    clear = [entry for entry in scored if not entry[5]]
    if clear:
        score, _, side, fx, fy, *_ = min(clear, key=lambda e: (e[0], e[1]))
        log.debug("placement fallback: clamped %s (score=%.1f)", side.value, score)
        return Placement(side, fx, fy, _anchor_for(side))

    score, _, side, _, _, _, raw_x, raw_y, cx, cy = min(scored, key=lambda e: (e[0], e[1]))
    keep = settings.MIN_VISIBLE_PANEL_PX
    if side.is_vertical:
        y = raw_y  # already gap past the target edge
        x = min(max(cx, -panel.width + keep), viewport.width - keep)
    else:
        x = raw_x
        y = min(max(cy, -panel.height + keep), viewport.height - keep)
    log.debug("placement fallback: forced separation on %s (score=%.1f)", side.value, score)
    return Placement(side, x, y, _anchor_for(side))


def place(
    target: Rect,
    panel: Size,
    viewport: Size,
    preferred: PreferredSide = AUTO,
    padding: float = settings.DEFAULT_EDGE_PADDING,
    gap: float = settings.DEFAULT_GAP,
) -> Placement:
    """Compute the panel placement for ``target``.

    Parameters
    ----------
    target: Rect
        Target rectangle in viewport coordinates.
    panel: Size
        Measured (or estimated) panel size.
    viewport: Size
        Visible area the panel must stay inside.
    preferred: Side | "auto"
        Side tried first; ``"auto"`` orders sides by the target's vertical half.
    padding: float
        Minimum distance between the panel and the viewport edges.
    gap: float
        Distance kept between the panel and the target.
    """
    if padding < 0:
        raise ValueError("padding must be >= 0")
    if gap < 0:
        raise ValueError("gap must be >= 0")
    order = candidate_sides(target, viewport, preferred)
    for side in order:
        result = _try_side(target, panel, viewport, side, padding, gap)
        if result is not None:
            return result
    return _fallback(target, panel, viewport, order, padding, gap)


def place_floating(panel: Size, viewport: Size) -> Placement:
    """Centre a panel that has no target (floating step)."""
    return Placement(
        Side.BOTTOM,
        (viewport.width - panel.width) / 2,
        (viewport.height - panel.height) / 2,
        ArrowSide.CENTER,
    )


def place_hint_indicator(
    target: Rect,
    position: HintPosition | str = HintPosition.TOP_RIGHT,
    size: float = settings.DEFAULT_HINT_INDICATOR_SIZE,
) -> Tuple[float, float]:
    """Return the (left, top) of a hint indicator centred on an anchor of ``target``."""
    vertical, horizontal = HintPosition(position).value.split("-")
    half = size / 2
    if horizontal == "left":
        left = target.x - half
    elif horizontal == "center":
        left = target.center_x - half
    else:
        left = target.right - half
    if vertical == "top":
        top = target.y - half
    elif vertical == "middle":
        top = target.center_y - half
    else:
        top = target.bottom - half
    return left, top


def place_hint_bubble(
    indicator: Rect,
    bubble: Size,
    viewport: Size,
    padding: float = 12,
    bottom_reserve: float = 100,
) -> Tuple[float, float]:
    """Position a hint bubble below its indicator, flipping above near the bottom.

    ``bottom_reserve`` keeps the lower strip of the viewport free (for system
    bars or navigation); the horizontal position is centred on the indicator
    and clamped into the viewport.
    """
    top = indicator.bottom + padding
    left = indicator.center_x - bubble.width / 2
    if top + bubble.height > viewport.height - bottom_reserve:
        top = indicator.y - bubble.height - padding
    left = _clamp(left, padding, viewport.width - bubble.width - padding)
    return left, top
