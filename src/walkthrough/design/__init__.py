"""Pure layout math: geometry, placement, scrolling, spotlight and motion.

Nothing in this package imports Qt; every function is deterministic and can be
tested headlessly.
"""

from .geometry import Rect, Size, Viewport, EdgePadding, resolve_padding  # noqa: F401
from .placement import (  # noqa: F401
    Side,
    ArrowSide,
    HintPosition,
    Placement,
    place,
    place_floating,
    place_hint_indicator,
    place_hint_bubble,
)
from .scrolling import (  # noqa: F401
    Visibility,
    ScrollOffset,
    check_visibility,
    scroll_delta,
    scroll_to_center,
)
from .spotlight import spotlight_rect, cutout_regions, morph_frame  # noqa: F401
from .motion import MotionPreference  # noqa: F401
