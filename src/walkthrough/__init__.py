"""walkthrough: guided tours and contextual hints for desktop applications.

The core (``design``, ``state``, ``services``) is toolkit independent and
fully headless; ``walkthrough.components`` adds the PyQt6 overlay.
"""

from .design import MotionPreference, Rect, Size, place, place_floating, scroll_delta  # noqa: F401
from .state import (  # noqa: F401
    Hint,
    HintOptions,
    HintRegistration,
    IntroStore,
    Step,
    StepRegistration,
    TourOptions,
    TourState,
)
from .services import (  # noqa: F401
    DismissedToursPersistence,
    HintsShowRequest,
    IntroController,
    JsonFileStorage,
    LoggingService,
    TourCallbacks,
    HintCallbacks,
    TourStartRequest,
    TransitionCoordinator,
    TransitionPhase,
)

__version__ = "0.1.0"
