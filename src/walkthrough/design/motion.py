"""Motion preference (reduced motion) for tour transitions.

A ``MotionPreference`` instance is injected into the transition coordinator
and the Qt layer instead of living in module state, so two overlays in one
process can disagree and tests never leak the flag.

Patterns:
- Environment bootstrap: ``WALKTHROUGH_PREFER_REDUCED_MOTION=1`` (or "true",
  "yes", "on") enables reduced motion via ``MotionPreference.from_env()``.
- ``animate`` tour option: ``True`` forces animation, ``False`` disables it,
  ``"auto"`` follows the preference.
- ``adjust_duration(ms)`` returns ``minimum_ms`` when reduced, otherwise the
  duration clamped to >= 0.
- ``override(reduced)`` temporarily flips the preference and restores it on
  exit (also on exception).
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from typing import Iterator, Union

from walkthrough.config import settings

__all__ = ["AnimateMode", "MotionPreference"]

AnimateMode = Union[bool, str]


@dataclass
class MotionPreference:
    reduced: bool = False

    @classmethod
    def from_env(cls) -> "MotionPreference":
        return cls(reduced=settings.env_flag(settings.REDUCED_MOTION_ENV))

    def animations_enabled(self, animate: AnimateMode = "auto") -> bool:
        if animate is True:
            return True
        if animate is False:
            return False
        if animate != "auto":
            raise ValueError(f"animate must be True, False or 'auto', got {animate!r}")
        return not self.reduced

    def adjust_duration(self, ms: float, minimum_ms: float = 0) -> float:
        minimum_ms = max(0, minimum_ms)
        return minimum_ms if self.reduced else max(0, ms)

    def hide_delay_ms(self, animate: AnimateMode, duration_ms: float) -> float:
        """Delay between hiding the old panel and scrolling (half the duration)."""
        if not self.animations_enabled(animate):
            return 0
        return max(0, duration_ms) / 2

    @contextlib.contextmanager
    def override(self, reduced: bool = True) -> Iterator["MotionPreference"]:
        prev = self.reduced
        try:
            self.reduced = reduced
            yield self
        finally:
            self.reduced = prev
