"""Tour / hint state: immutable models, actions, the reducer and the store."""

from .models import (  # noqa: F401
    TourState,
    EndReason,
    HintType,
    Step,
    ButtonLabels,
    TourOptions,
    HintOptions,
    Hint,
    StepRegistration,
    HintRegistration,
    RegistryEntry,
    TourSlice,
    HintsSlice,
    UISlice,
    PersistenceSlice,
    IntroState,
    initial_state,
)
from .reducer import reduce  # noqa: F401
from .store import IntroStore, StoreSubscription  # noqa: F401
from .validation import (  # noqa: F401
    ValidationResult,
    validate_tour,
    validate_step,
    validate_hint,
    validate_hints,
)
