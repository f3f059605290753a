"""IntroController: programmatic tour and hint API.

Combines the store, one ``TransitionCoordinator`` per active tour, the
external providers and the caller's lifecycle callbacks.

Design Goals
------------
 - Explicit request objects (``TourStartRequest``, ``HintsShowRequest``)
   instead of positional argument sniffing; every field is optional.
 - "Before" hooks gate user-visible changes. They may be plain callables or
   coroutines; returning ``False`` vetoes the change, exceptions propagate to
   the caller of the method that triggered them.
 - Configuration problems (no steps, invalid steps, a tour already running)
   are logged at WARNING and the call returns ``False``.
 - Screen reader announcements for step reveals, tour end and hint reveals
   are derived from store changes, so they fire no matter which path caused
   the change.
 - Permanently dismissed tours are saved whenever the dismissed set changes
   after ``initialize()`` loaded the persisted state.

Public API
----------
Registry: ``register_step``, ``unregister_step``, ``register_hint``,
``unregister_hint``, ``build_steps``, ``build_hints``.
Tour: ``start_tour``, ``next_step``, ``prev_step``, ``go_to_step``,
``stop_tour``, ``skip_tour``, ``restart``, ``overlay_pressed``,
``set_dont_show_again``, ``is_dismissed``, ``clear_dismissed``,
``dismiss_permanently``, ``refresh``.
Hints: ``show_hints``, ``hide_hints``, ``show_hint``, ``hide_hint``,
``remove_hint``, ``refresh_hints``.
Rendering plumbing: ``add_spotlight_listener``, ``add_phase_listener``,
``notify_morph_complete``, ``coordinator``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import inspect
import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from walkthrough.design.motion import MotionPreference
from walkthrough.state import actions as a
from walkthrough.state.models import (
    EndReason,
    Hint,
    HintOptions,
    HintRegistration,
    IntroState,
    RegistryEntry,
    Step,
    StepRegistration,
    TourOptions,
    TourState,
)
from walkthrough.state.store import IntroStore
from walkthrough.state.validation import validate_hints, validate_tour

from .accessibility import (
    LoggingAnnouncer,
    announce_safely,
    hint_revealed_message,
    step_change_message,
    tour_complete_message,
)
from .persistence import DismissedToursPersistence
from .providers import (
    Announcer,
    CachedMeasurementProvider,
    MeasurementProvider,
    ScrollProvider,
    safe_measure,
)
from .transition_coordinator import (
    PhaseListener,
    SpotlightListener,
    TransitionCoordinator,
)

__all__ = [
    "DEFAULT_TOUR_ID",
    "TourCallbacks",
    "HintCallbacks",
    "TourStartRequest",
    "HintsShowRequest",
    "TourSnapshot",
    "HintsSnapshot",
    "IntroController",
]

_logger = logging.getLogger(__name__)

DEFAULT_TOUR_ID = "default"

Hook = Optional[Callable[..., Any]]


@dataclass
class TourCallbacks:
    on_before_start: Hook = None  # (tour_id) -> bool | Awaitable[bool]
    on_start: Hook = None  # (tour_id)
    on_before_change: Hook = None  # (current, target, direction) -> bool | Awaitable[bool]
    on_change: Hook = None  # (current, previous)
    on_before_exit: Hook = None  # (reason) -> bool | Awaitable[bool]
    on_complete: Hook = None  # (tour_id, reason)


@dataclass
class HintCallbacks:
    on_hints_show: Hook = None
    on_hints_hide: Hook = None
    on_hint_click: Hook = None  # (hint_id)
    on_hint_close: Hook = None  # (hint_id)


@dataclass(frozen=True)
class TourStartRequest:
    tour_id: Optional[str] = None
    steps: Optional[Sequence[Step]] = None
    options: Union[TourOptions, Mapping[str, Any], None] = None
    group: Optional[str] = None


@dataclass(frozen=True)
class HintsShowRequest:
    hints: Optional[Sequence[Hint]] = None
    options: Union[HintOptions, Mapping[str, Any], None] = None


@dataclass(frozen=True)
class TourSnapshot:
    is_active: bool
    tour_id: Optional[str]
    current_step: int
    total_steps: int
    current_step_config: Optional[Step]
    is_transitioning: bool


@dataclass(frozen=True)
class HintsSnapshot:
    is_visible: bool
    active_hint_id: Optional[str]
    hints: Tuple[Hint, ...]


async def _gate(hook: Hook, *args) -> bool:
    """Run a before-hook; only an explicit ``False`` vetoes."""
    if hook is None:
        return True
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result is not False


class IntroController:
    def __init__(
        self,
        store: Optional[IntroStore] = None,
        *,
        measurement: Optional[MeasurementProvider] = None,
        scroll: Optional[ScrollProvider] = None,
        announcer: Optional[Announcer] = None,
        persistence: Optional[DismissedToursPersistence] = None,
        motion: Optional[MotionPreference] = None,
        tour_callbacks: Optional[TourCallbacks] = None,
        hint_callbacks: Optional[HintCallbacks] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Optional[Callable] = None,
    ) -> None:
        self._log = logger or _logger
        self.store = store or IntroStore(logger=self._log)
        self.measurement = measurement or CachedMeasurementProvider(self.store)
        self.scroll = scroll
        self.announcer = announcer if announcer is not None else LoggingAnnouncer(self._log)
        self.persistence = persistence
        self.motion = motion or MotionPreference.from_env()
        self.tour_callbacks = tour_callbacks or TourCallbacks()
        self.hint_callbacks = hint_callbacks or HintCallbacks()
        self._sleep = sleep or asyncio.sleep
        self._coordinator: Optional[TransitionCoordinator] = None
        self._spotlight_listeners: List[SpotlightListener] = []
        self._phase_listeners: List[PhaseListener] = []
        self._pending: Set[asyncio.Task] = set()
        self._next_order = 0
        self._sub = self.store.subscribe(self._on_state)

    # State -------------------------------------------------------------------
    @property
    def state(self) -> IntroState:
        return self.store.state

    @property
    def tour(self) -> TourSnapshot:
        state = self.store.state
        t = state.tour
        return TourSnapshot(
            is_active=t.is_active,
            tour_id=t.id,
            current_step=t.current_step_index,
            total_steps=len(t.steps),
            current_step_config=t.current_step,
            is_transitioning=state.ui.is_transitioning,
        )

    @property
    def hints(self) -> HintsSnapshot:
        h = self.store.state.hints
        return HintsSnapshot(is_visible=h.visible, active_hint_id=h.active_hint_id, hints=h.items)

    @property
    def coordinator(self) -> Optional[TransitionCoordinator]:
        return self._coordinator

    # Persistence ---------------------------------------------------------------
    async def initialize(self) -> None:
        """Load dismissed tours; without persistence just mark initialized."""
        if self.persistence is None:
            self.store.dispatch(a.SetPersistenceInitialized())
            return
        payload = await self.persistence.load()
        if payload is None:
            self.store.dispatch(a.SetPersistenceInitialized())
        else:
            self.store.dispatch(a.LoadPersistedState(payload.dismissed_tours))

    def _schedule_save(self, dismissed) -> None:
        if self.persistence is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._log.warning("no running event loop; dismissed tours not saved")
            return
        task = loop.create_task(self.persistence.save(dismissed))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # Store listener ------------------------------------------------------------
    def _on_state(self, state: IntroState, previous: IntroState) -> None:
        persisted, prev_persisted = state.persistence, previous.persistence
        if (
            prev_persisted.initialized
            and persisted.initialized
            and persisted.dismissed_tours != prev_persisted.dismissed_tours
        ):
            self._schedule_save(persisted.dismissed_tours)

        tour, prev_tour = state.tour, previous.tour
        if prev_tour.is_active and not tour.is_active:
            if tour.state.is_terminal:
                announce_safely(self.announcer, tour_complete_message(tour.state), self._log)
            self._dispose_coordinator()
        elif tour.is_active and state.ui.tooltip_visible and not previous.ui.tooltip_visible:
            step = tour.current_step
            if step is not None:
                message = step_change_message(tour.current_step_index, len(tour.steps), step.title, step.content)
                announce_safely(self.announcer, message, self._log)

        active = state.hints.active_hint_id
        if active is not None and active != previous.hints.active_hint_id:
            hint = state.hints.find(active)
            if hint is not None:
                announce_safely(self.announcer, hint_revealed_message(hint.content), self._log)

    # Coordinator plumbing ------------------------------------------------------
    def _create_coordinator(self) -> TransitionCoordinator:
        self._dispose_coordinator()
        coordinator = TransitionCoordinator(
            self.store,
            self.measurement,
            self.scroll,
            motion=self.motion,
            logger=self._log,
            sleep=self._sleep,
        )
        for listener in self._spotlight_listeners:
            coordinator.add_spotlight_listener(listener)
        for listener in self._phase_listeners:
            coordinator.add_phase_listener(listener)
        self._coordinator = coordinator
        return coordinator

    def _dispose_coordinator(self) -> None:
        if self._coordinator is not None:
            self._coordinator.dispose()
            self._coordinator = None

    def add_spotlight_listener(self, listener: SpotlightListener) -> Callable[[], None]:
        """Listener survives coordinator re-creation until the remover is called."""
        self._spotlight_listeners.append(listener)
        if self._coordinator is not None:
            self._coordinator.add_spotlight_listener(listener)

        def remove() -> None:
            if listener in self._spotlight_listeners:
                self._spotlight_listeners.remove(listener)
            if self._coordinator is not None:
                self._coordinator.remove_spotlight_listener(listener)

        return remove

    def add_phase_listener(self, listener: PhaseListener) -> Callable[[], None]:
        self._phase_listeners.append(listener)
        if self._coordinator is not None:
            self._coordinator.add_phase_listener(listener)

        def remove() -> None:
            if listener in self._phase_listeners:
                self._phase_listeners.remove(listener)
            if self._coordinator is not None:
                self._coordinator.remove_phase_listener(listener)

        return remove

    def notify_morph_complete(self) -> bool:
        if self._coordinator is None:
            return False
        return self._coordinator.notify_morph_complete()

    async def wait_idle(self) -> None:
        """Wait for in-flight transitions and pending saves."""
        if self._coordinator is not None:
            await self._coordinator.wait_idle()
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def dispose(self) -> None:
        self._dispose_coordinator()
        self.store.unsubscribe(self._sub)

    # Registry ------------------------------------------------------------------
    def register_step(self, target_id: str, registration: StepRegistration, order: Optional[int] = None) -> None:
        if order is None:
            order = self._next_order
        self._next_order = max(self._next_order, order) + 1
        self.store.dispatch(a.RegisterStep(RegistryEntry(target_id, order, registration)))

    def unregister_step(self, target_id: str) -> None:
        self.store.dispatch(a.UnregisterStep(target_id))

    def register_hint(self, target_id: str, registration: HintRegistration) -> None:
        order = self._next_order
        self._next_order += 1
        self.store.dispatch(a.RegisterHint(RegistryEntry(target_id, order, registration)))

    def unregister_hint(self, target_id: str) -> None:
        self.store.dispatch(a.UnregisterHint(target_id))

    def build_steps(self, group: Optional[str] = None) -> List[Step]:
        """Steps from registered elements, ordered by ``order`` (``step-1``...)."""
        entries = [
            e
            for e in self.store.state.step_registry.values()
            if isinstance(e.registration, StepRegistration)
            and e.registration.content
            and (group is None or e.registration.group == group)
        ]
        entries.sort(key=lambda e: e.order)
        steps = []
        for index, entry in enumerate(entries, start=1):
            reg = entry.registration
            steps.append(
                Step(
                    id=f"step-{index}",
                    content=reg.content,
                    target_id=None if reg.floating else entry.id,
                    title=reg.title,
                    preferred_side=reg.preferred_side,
                    disable_interaction=reg.disable_interaction,
                )
            )
        return steps

    def build_hints(self) -> List[Hint]:
        hints = []
        for entry in self.store.state.hint_registry.values():
            reg = entry.registration
            if not isinstance(reg, HintRegistration) or not reg.content:
                continue
            hints.append(
                Hint(
                    id=f"hint-{entry.id}",
                    target_id=entry.id,
                    content=reg.content,
                    position=reg.position,
                    type=reg.type,
                    animation=reg.animation,
                )
            )
        return hints

    # Tour ----------------------------------------------------------------------
    async def start_tour(self, request: Optional[TourStartRequest] = None) -> bool:
        req = request or TourStartRequest()
        tour_id = req.tour_id or req.group or DEFAULT_TOUR_ID
        state = self.store.state
        if state.tour.is_active:
            self._log.warning(
                "cannot start tour %r: tour %r is already active; stop it first", tour_id, state.tour.id
            )
            return False
        if tour_id in state.persistence.dismissed_tours:
            self._log.info("tour %r was dismissed permanently; not starting", tour_id)
            return False

        if req.steps is not None:
            steps = list(req.steps)
        else:
            group = req.group if req.group is not None else req.tour_id
            steps = self.build_steps(group)
        if not steps:
            self._log.warning("no steps found for tour %r", tour_id)
            return False
        result = validate_tour(tour_id, steps)
        if not result.valid:
            self._log.warning("invalid tour %r: %s", tour_id, "; ".join(result.errors))
            return False

        if not await _gate(self.tour_callbacks.on_before_start, tour_id):
            return False

        self._create_coordinator()
        self.store.dispatch(a.StartTour(tour_id, tuple(steps), req.options))
        if not self.store.state.tour.is_active:
            self._dispose_coordinator()
            return False
        if self.tour_callbacks.on_start:
            self.tour_callbacks.on_start(tour_id)
        return True

    async def _change(self, target: int, direction: str, action: object) -> bool:
        current = self.store.state.tour.current_step_index
        if not await _gate(self.tour_callbacks.on_before_change, current, target, direction):
            return False
        if not self.store.state.tour.is_active:
            return False
        self.store.dispatch(action)
        if self.tour_callbacks.on_change:
            self.tour_callbacks.on_change(target, current)
        return True

    async def next_step(self) -> bool:
        tour = self.store.state.tour
        if not tour.is_active:
            return False
        target = tour.current_step_index + 1
        if target >= len(tour.steps):
            return await self._end(TourState.COMPLETED)
        return await self._change(target, "next", a.NextStep())

    async def prev_step(self) -> bool:
        tour = self.store.state.tour
        if not tour.is_active or tour.current_step_index == 0:
            return False
        return await self._change(tour.current_step_index - 1, "prev", a.PrevStep())

    async def go_to_step(self, step_index: int) -> bool:
        tour = self.store.state.tour
        if not tour.is_active:
            return False
        if step_index == tour.current_step_index or not 0 <= step_index < len(tour.steps):
            return False
        return await self._change(step_index, "goto", a.GoToStep(step_index))

    async def stop_tour(self, reason: EndReason = TourState.DISMISSED) -> bool:
        if not self.store.state.tour.is_active:
            return False
        return await self._end(TourState(reason))

    async def skip_tour(self) -> bool:
        return await self.stop_tour(TourState.SKIPPED)

    async def overlay_pressed(self) -> bool:
        tour = self.store.state.tour
        if not tour.is_active or not tour.options.exit_on_overlay_click:
            return False
        return await self.stop_tour(TourState.DISMISSED)

    async def _end(self, reason: TourState) -> bool:
        if not await _gate(self.tour_callbacks.on_before_exit, reason):
            return False
        tour = self.store.state.tour
        if not tour.is_active:
            return False
        forget = tour.dont_show_again_checked and tour.options.dont_show_again
        self.store.dispatch(a.EndTour(reason))
        if forget and tour.id:
            self.store.dispatch(a.DismissTourPermanently(tour.id))
        if self.tour_callbacks.on_complete and tour.id:
            self.tour_callbacks.on_complete(tour.id, reason)
        return True

    async def restart(self) -> bool:
        """Back to the first step, or start the last tour again once it ended."""
        tour = self.store.state.tour
        if tour.is_active:
            if tour.current_step_index == 0:
                return False
            return await self._change(0, "goto", a.GoToStep(0))
        if tour.id is None or not tour.steps:
            return False
        return await self.start_tour(TourStartRequest(tour.id, tour.steps, tour.options))

    def set_dont_show_again(self, checked: bool) -> None:
        self.store.dispatch(a.SetDontShowAgain(checked))

    def is_dismissed(self, tour_id: str) -> bool:
        return tour_id in self.store.state.persistence.dismissed_tours

    def clear_dismissed(self, tour_id: str) -> None:
        self.store.dispatch(a.ClearDismissedTour(tour_id))

    def dismiss_permanently(self, tour_id: str) -> None:
        self.store.dispatch(a.DismissTourPermanently(tour_id))

    async def refresh(self) -> None:
        """Re-measure every step target of the active tour and redo the current step."""
        tour = self.store.state.tour
        if not tour.is_active:
            return
        await self._measure_all(s.target_id for s in tour.steps if not s.is_floating)
        if self._coordinator is not None:
            self._coordinator.refresh()

    async def _measure_all(self, target_ids) -> None:
        for target_id in dict.fromkeys(target_ids):
            rect = await safe_measure(self.measurement, target_id, self._log)
            if rect is not None:
                self.store.dispatch(a.UpdateMeasurement(target_id, rect))

    # Hints ---------------------------------------------------------------------
    def show_hints(self, request: Optional[HintsShowRequest] = None) -> bool:
        req = request or HintsShowRequest()
        hints = list(req.hints) if req.hints is not None else self.build_hints()
        if not hints:
            self._log.warning("no hints found")
            return False
        result = validate_hints(hints)
        if not result.valid:
            self._log.warning("invalid hints: %s", "; ".join(result.errors))
            return False
        self.store.dispatch(a.ShowHints(tuple(hints), req.options))
        if self.hint_callbacks.on_hints_show:
            self.hint_callbacks.on_hints_show()
        return True

    def hide_hints(self) -> None:
        self.store.dispatch(a.HideHints())
        if self.hint_callbacks.on_hints_hide:
            self.hint_callbacks.on_hints_hide()

    def show_hint(self, hint_id: str) -> bool:
        if self.store.state.hints.find(hint_id) is None:
            return False
        self.store.dispatch(a.ShowHint(hint_id))
        if self.hint_callbacks.on_hint_click:
            self.hint_callbacks.on_hint_click(hint_id)
        return True

    def hide_hint(self, hint_id: str) -> None:
        self.store.dispatch(a.HideHint(hint_id))
        if self.hint_callbacks.on_hint_close:
            self.hint_callbacks.on_hint_close(hint_id)

    def remove_hint(self, hint_id: str) -> None:
        self.store.dispatch(a.RemoveHint(hint_id))

    async def refresh_hints(self) -> None:
        await self._measure_all(h.target_id for h in self.store.state.hints.items)
