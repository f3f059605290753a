"""PyQt6 rendering layer: providers, spotlight overlay, tour panel, hint
indicators and the asyncio pump. Importing this package requires PyQt6.
"""

from .async_bridge import QtAsyncioPump  # noqa: F401
from .qt_providers import QtAnnouncer, QtMeasurementProvider, QtScrollProvider  # noqa: F401
from .spotlight_overlay import SpotlightOverlay  # noqa: F401
from .tour_panel import TourPanel  # noqa: F401
from .tour_overlay import TourOverlay  # noqa: F401
from .hints_overlay import HintBubble, HintIndicator, HintsOverlay  # noqa: F401
