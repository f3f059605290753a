"""Immutable data model for tours, hints and the overlay UI.

Every record is a frozen dataclass; the reducer never mutates, it builds a
new ``IntroState`` with ``dataclasses.replace``. Sequences are stored as
tuples, sets as frozensets and maps as plain dicts that are copied on write
(never mutated in place after construction).

Options follow a "defaults + overrides" pattern: ``TourOptions.merged`` takes
either another ``TourOptions`` or a mapping of field names and returns a new
instance; unknown keys raise ``ValueError`` so typos surface early.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from walkthrough.config import settings
from walkthrough.design.geometry import Rect
from walkthrough.design.placement import ArrowSide, HintPosition, Side

__all__ = [
    "TourState",
    "EndReason",
    "Side",
    "ArrowSide",
    "HintPosition",
    "HintType",
    "Step",
    "ButtonLabels",
    "TourOptions",
    "HintOptions",
    "Hint",
    "StepRegistration",
    "HintRegistration",
    "RegistryEntry",
    "TourSlice",
    "HintsSlice",
    "UISlice",
    "PersistenceSlice",
    "IntroState",
    "initial_state",
]


class TourState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    DISMISSED = "dismissed"

    @property
    def is_terminal(self) -> bool:
        return self in _END_REASONS


_END_REASONS = (TourState.COMPLETED, TourState.SKIPPED, TourState.DISMISSED)

# Terminal tour states double as the reason passed to ``EndTour``.
EndReason = TourState


class HintType(str, Enum):
    DEFAULT = "default"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


PreferredSide = Union[Side, str]


# Tours ---------------------------------------------------------------------


@dataclass(frozen=True)
class Step:
    id: str
    content: str
    target_id: Optional[str] = None  # None -> floating (centred) step
    title: Optional[str] = None
    preferred_side: PreferredSide = "auto"
    disable_interaction: bool = False
    hide_buttons: bool = False

    @property
    def is_floating(self) -> bool:
        return not self.target_id


@dataclass(frozen=True)
class ButtonLabels:
    next: str = "Next"
    prev: str = "Back"
    done: str = "Done"
    skip: str = "Skip"
    dont_show_again: str = "Don't show again"


def _merge_fields(obj: Any, overrides: Mapping[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(obj)}
    unknown = sorted(set(overrides) - names)
    if unknown:
        raise ValueError(f"Unknown {type(obj).__name__} field(s): {', '.join(unknown)}")
    return dict(overrides)


@dataclass(frozen=True)
class TourOptions:
    show_progress: bool = True
    show_bullets: bool = True
    show_buttons: bool = True
    exit_on_overlay_click: bool = False
    dont_show_again: bool = False
    disable_interaction: bool = False
    scroll_to_element: bool = True
    scroll_padding: float = settings.DEFAULT_SCROLL_PADDING
    overlay_opacity: float = settings.DEFAULT_OVERLAY_OPACITY
    overlay_color: Optional[str] = None
    animate: Union[bool, str] = "auto"
    animation_duration: float = settings.DEFAULT_ANIMATION_DURATION_MS
    button_labels: ButtonLabels = field(default_factory=ButtonLabels)

    def validate(self) -> None:
        if not 0.0 <= self.overlay_opacity <= 1.0:
            raise ValueError("overlay_opacity must be within [0, 1]")
        if self.animation_duration < 0:
            raise ValueError("animation_duration must be >= 0")
        if self.scroll_padding < 0:
            raise ValueError("scroll_padding must be >= 0")
        if self.animate not in (True, False, "auto"):
            raise ValueError("animate must be True, False or 'auto'")

    def merged(self, overrides: Union["TourOptions", Mapping[str, Any], None]) -> "TourOptions":
        """Return a copy with ``overrides`` applied (defaults + per-tour options)."""
        if overrides is None:
            return self
        if isinstance(overrides, TourOptions):
            return overrides
        changes = _merge_fields(self, overrides)
        labels = changes.get("button_labels")
        if isinstance(labels, Mapping):
            changes["button_labels"] = replace(self.button_labels, **_merge_fields(self.button_labels, labels))
        result = replace(self, **changes)
        result.validate()
        return result


@dataclass(frozen=True)
class HintOptions:
    auto_show: bool = False
    animation: bool = True
    close_on_outside_click: bool = True
    indicator_size: float = settings.DEFAULT_HINT_INDICATOR_SIZE

    def validate(self) -> None:
        if self.indicator_size <= 0:
            raise ValueError("indicator_size must be > 0")

    def merged(self, overrides: Union["HintOptions", Mapping[str, Any], None]) -> "HintOptions":
        if overrides is None:
            return self
        if isinstance(overrides, HintOptions):
            return overrides
        result = replace(self, **_merge_fields(self, overrides))
        result.validate()
        return result


# Hints ---------------------------------------------------------------------


@dataclass(frozen=True)
class Hint:
    id: str
    target_id: str
    content: str
    position: Union[HintPosition, str] = HintPosition.TOP_RIGHT
    type: Union[HintType, str] = HintType.DEFAULT
    animation: bool = True


# Element registry ------------------------------------------------------------


@dataclass(frozen=True)
class StepRegistration:
    """Declarative step attached to a registered element by the UI layer."""

    content: str
    title: Optional[str] = None
    preferred_side: PreferredSide = "auto"
    disable_interaction: bool = False
    group: Optional[str] = None
    floating: bool = False


@dataclass(frozen=True)
class HintRegistration:
    content: str
    position: Union[HintPosition, str] = HintPosition.TOP_RIGHT
    type: Union[HintType, str] = HintType.DEFAULT
    animation: bool = True


@dataclass(frozen=True)
class RegistryEntry:
    id: str
    order: int = 0
    registration: Union[StepRegistration, HintRegistration, None] = None


# Store slices ----------------------------------------------------------------


@dataclass(frozen=True)
class TourSlice:
    state: TourState = TourState.IDLE
    id: Optional[str] = None
    current_step_index: int = 0
    steps: Tuple[Step, ...] = ()
    options: TourOptions = field(default_factory=TourOptions)
    dont_show_again_checked: bool = False

    @property
    def is_active(self) -> bool:
        return self.state is TourState.ACTIVE

    @property
    def current_step(self) -> Optional[Step]:
        if 0 <= self.current_step_index < len(self.steps):
            return self.steps[self.current_step_index]
        return None


@dataclass(frozen=True)
class HintsSlice:
    visible: bool = False
    items: Tuple[Hint, ...] = ()
    active_hint_id: Optional[str] = None
    options: HintOptions = field(default_factory=HintOptions)

    def find(self, hint_id: str) -> Optional[Hint]:
        for hint in self.items:
            if hint.id == hint_id:
                return hint
        return None


@dataclass(frozen=True)
class UISlice:
    tooltip_visible: bool = False
    is_transitioning: bool = False
    overlay_visible: bool = False


@dataclass(frozen=True)
class PersistenceSlice:
    dismissed_tours: frozenset = frozenset()
    initialized: bool = False


@dataclass(frozen=True)
class IntroState:
    tour: TourSlice = field(default_factory=TourSlice)
    hints: HintsSlice = field(default_factory=HintsSlice)
    ui: UISlice = field(default_factory=UISlice)
    persistence: PersistenceSlice = field(default_factory=PersistenceSlice)
    measurements: Mapping[str, Rect] = field(default_factory=dict)
    step_registry: Mapping[str, RegistryEntry] = field(default_factory=dict)
    hint_registry: Mapping[str, RegistryEntry] = field(default_factory=dict)
    default_tour_options: TourOptions = field(default_factory=TourOptions)
    default_hint_options: HintOptions = field(default_factory=HintOptions)


def initial_state(
    tour_options: Union[TourOptions, Mapping[str, Any], None] = None,
    hint_options: Union[HintOptions, Mapping[str, Any], None] = None,
) -> IntroState:
    """Build an idle state, optionally with provider-level default options."""
    tour_defaults = TourOptions().merged(tour_options)
    hint_defaults = HintOptions().merged(hint_options)
    return IntroState(
        tour=TourSlice(options=tour_defaults),
        hints=HintsSlice(options=hint_defaults),
        default_tour_options=tour_defaults,
        default_hint_options=hint_defaults,
    )
