"""Actions accepted by the reducer.

One frozen dataclass per action type; the reducer dispatches on the class.
Option overrides travel as mappings (or full option objects) and are merged
against the state's defaults inside the reducer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence, Union

from walkthrough.design.geometry import Rect

from .models import (
    EndReason,
    Hint,
    HintOptions,
    RegistryEntry,
    Step,
    TourOptions,
    TourState,
)

__all__ = [
    "Action",
    "StartTour",
    "NextStep",
    "PrevStep",
    "GoToStep",
    "EndTour",
    "SetTransitioning",
    "SetDontShowAgain",
    "ShowTooltip",
    "HideTooltip",
    "ShowHints",
    "HideHints",
    "ShowHint",
    "HideHint",
    "RemoveHint",
    "RegisterStep",
    "UnregisterStep",
    "RegisterHint",
    "UnregisterHint",
    "UpdateMeasurement",
    "ClearMeasurements",
    "DismissTourPermanently",
    "ClearDismissedTour",
    "LoadPersistedState",
    "SetPersistenceInitialized",
]

TourOptionsLike = Union[TourOptions, Mapping[str, Any], None]
HintOptionsLike = Union[HintOptions, Mapping[str, Any], None]


# Tour ------------------------------------------------------------------------


@dataclass(frozen=True)
class StartTour:
    tour_id: str
    steps: Sequence[Step]
    options: TourOptionsLike = None


@dataclass(frozen=True)
class NextStep:
    pass


@dataclass(frozen=True)
class PrevStep:
    pass


@dataclass(frozen=True)
class GoToStep:
    step_index: int


@dataclass(frozen=True)
class EndTour:
    reason: EndReason = TourState.COMPLETED

    def __post_init__(self) -> None:
        reason = TourState(self.reason)
        if not reason.is_terminal:
            raise ValueError(f"EndTour reason must be completed, skipped or dismissed, got {reason.value!r}")
        object.__setattr__(self, "reason", reason)


@dataclass(frozen=True)
class SetTransitioning:
    is_transitioning: bool


@dataclass(frozen=True)
class SetDontShowAgain:
    checked: bool


@dataclass(frozen=True)
class ShowTooltip:
    pass


@dataclass(frozen=True)
class HideTooltip:
    pass


# Hints -----------------------------------------------------------------------


@dataclass(frozen=True)
class ShowHints:
    hints: Sequence[Hint]
    options: HintOptionsLike = None


@dataclass(frozen=True)
class HideHints:
    pass


@dataclass(frozen=True)
class ShowHint:
    hint_id: str


@dataclass(frozen=True)
class HideHint:
    hint_id: str


@dataclass(frozen=True)
class RemoveHint:
    hint_id: str


# Registry / measurement ------------------------------------------------------


@dataclass(frozen=True)
class RegisterStep:
    entry: RegistryEntry


@dataclass(frozen=True)
class UnregisterStep:
    id: str


@dataclass(frozen=True)
class RegisterHint:
    entry: RegistryEntry


@dataclass(frozen=True)
class UnregisterHint:
    id: str


@dataclass(frozen=True)
class UpdateMeasurement:
    id: str
    rect: Rect


@dataclass(frozen=True)
class ClearMeasurements:
    pass


# Persistence -----------------------------------------------------------------


@dataclass(frozen=True)
class DismissTourPermanently:
    tour_id: str


@dataclass(frozen=True)
class ClearDismissedTour:
    tour_id: str


@dataclass(frozen=True)
class LoadPersistedState:
    dismissed_tours: Iterable[str] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "dismissed_tours", tuple(self.dismissed_tours))


@dataclass(frozen=True)
class SetPersistenceInitialized:
    pass


Action = Union[
    StartTour,
    NextStep,
    PrevStep,
    GoToStep,
    EndTour,
    SetTransitioning,
    SetDontShowAgain,
    ShowTooltip,
    HideTooltip,
    ShowHints,
    HideHints,
    ShowHint,
    HideHint,
    RemoveHint,
    RegisterStep,
    UnregisterStep,
    RegisterHint,
    UnregisterHint,
    UpdateMeasurement,
    ClearMeasurements,
    DismissTourPermanently,
    ClearDismissedTour,
    LoadPersistedState,
    SetPersistenceInitialized,
]
