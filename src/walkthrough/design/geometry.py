"""Geometry primitives shared by placement, scrolling and spotlight math.

All values are pixels in viewport coordinates (origin top-left, y grows
downward). The types are immutable; measurements are replaced wholesale when
an element is re-measured.

Public API:
 - Rect (x, y, width, height, measured)
 - Size / Viewport
 - EdgePadding + resolve_padding()

``Rect.measured`` distinguishes "never measured" (False) from "measured,
zero-sized" (True with width == height == 0).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Union

__all__ = [
    "Rect",
    "Size",
    "Viewport",
    "EdgePadding",
    "PaddingLike",
    "resolve_padding",
]


@dataclass(frozen=True)
class Size:
    width: float
    height: float


# Viewports are plain sizes; the alias keeps call sites readable.
Viewport = Size


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    measured: bool = True

    @classmethod
    def unmeasured(cls) -> "Rect":
        return cls(0.0, 0.0, 0.0, 0.0, measured=False)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    def expanded(self, amount: float) -> "Rect":
        """Return a copy grown by ``amount`` on every side."""
        return Rect(
            self.x - amount,
            self.y - amount,
            self.width + amount * 2,
            self.height + amount * 2,
            self.measured,
        )

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.width, self.height, self.measured)

    def intersects(self, other: "Rect") -> bool:
        """Strict overlap test; rectangles sharing only an edge do not intersect."""
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )

    def contains(self, other: "Rect") -> bool:
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def lerp(self, other: "Rect", t: float) -> "Rect":
        """Linear interpolation towards ``other`` (t clamped to [0, 1])."""
        if t <= 0:
            return self
        if t >= 1:
            return other
        return Rect(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t,
            self.width + (other.width - self.width) * t,
            self.height + (other.height - self.height) * t,
            other.measured,
        )


@dataclass(frozen=True)
class EdgePadding:
    top: float
    bottom: float
    left: float
    right: float

    @classmethod
    def uniform(cls, value: float) -> "EdgePadding":
        return cls(value, value, value, value)


PaddingLike = Union[float, int, EdgePadding, Mapping[str, float], None]


def resolve_padding(padding: PaddingLike, default: float = 50) -> EdgePadding:
    """Normalize a padding value into an :class:`EdgePadding`.

    Accepts a single number (uniform), an ``EdgePadding`` or a mapping with any
    of ``top``/``bottom``/``left``/``right``; missing edges use ``default``.
    """
    if padding is None:
        return EdgePadding.uniform(default)
    if isinstance(padding, EdgePadding):
        return padding
    if isinstance(padding, (int, float)):
        return EdgePadding.uniform(float(padding))
    unknown = set(padding) - {"top", "bottom", "left", "right"}
    if unknown:
        raise ValueError(f"Unknown padding edges: {sorted(unknown)}")
    return EdgePadding(
        top=padding.get("top", default),
        bottom=padding.get("bottom", default),
        left=padding.get("left", default),
        right=padding.get("right", default),
    )
