"""Effectful services: providers, persistence, accessibility, logging and the
transition / controller orchestration built on top of the pure state layer.
"""

from .providers import (  # noqa: F401
    MeasurementProvider,
    ScrollProvider,
    Announcer,
    StorageAdapter,
    CachedMeasurementProvider,
    safe_measure,
    safe_scroll,
)
from .persistence import (  # noqa: F401
    PersistedPayload,
    InMemoryStorage,
    JsonFileStorage,
    DismissedToursPersistence,
)
from .accessibility import LoggingAnnouncer  # noqa: F401
from .logging_service import LoggingService, LogEntry  # noqa: F401
from .transition_coordinator import (  # noqa: F401
    TransitionCoordinator,
    TransitionPhase,
    TransitionTicket,
)
from .intro_controller import (  # noqa: F401
    IntroController,
    TourCallbacks,
    HintCallbacks,
    TourStartRequest,
    HintsShowRequest,
    TourSnapshot,
    HintsSnapshot,
)
