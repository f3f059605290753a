"""Global configuration and constants for tours, hints and placement."""

from __future__ import annotations

import os
from typing import Final


def env_flag(name: str) -> bool:
    """Return True when environment variable *name* holds a truthy value."""
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


DEFAULT_EDGE_PADDING: Final = 10  # px kept free between a panel and the viewport edge
DEFAULT_GAP: Final = 16  # px between target and panel
DEFAULT_SCROLL_PADDING: Final = 50
DEFAULT_ANIMATION_DURATION_MS: Final = 300
DEFAULT_SCROLL_SETTLE_MS: Final = 350
DEFAULT_SPOTLIGHT_PADDING: Final = 8
DEFAULT_HINT_INDICATOR_SIZE: Final = 20
DEFAULT_OVERLAY_OPACITY: Final = 0.75

# Fallback placement keeps at least this many pixels of the panel on screen
MIN_VISIBLE_PANEL_PX: Final = 50

STORAGE_KEY: Final = "walkthrough.state"
STORAGE_VERSION: Final = 1
DATA_DIR: Final = os.environ.get("WALKTHROUGH_DATA_DIR", "data")

DEBUG_ENV: Final = "WALKTHROUGH_DEBUG"
REDUCED_MOTION_ENV: Final = "WALKTHROUGH_PREFER_REDUCED_MOTION"
