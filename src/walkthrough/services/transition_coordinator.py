"""Transition coordinator: sequences hide -> scroll -> measure -> morph -> show.

One coordinator serves one active tour. It subscribes to the store and turns
every step-index change into a transition run on the running asyncio loop.

Phases
------
``idle -> hiding-panel -> scrolling -> morphing -> ready``; any departure of
the tour from ``active`` resets to ``idle`` immediately.

Staleness
---------
Each request receives a ``TransitionTicket(generation, step_index)``. The
generation counter is bumped by every request and every reset; after each
suspension point (hide delay, scroll, measure, morph) the run compares its
ticket against the current generation and the tour-active flag and quietly
stops when either changed. Last request wins: a placement computed for step
N-1 is never shown after step N was requested. A request for the index that
is already being processed is ignored.

Rendering handshake
-------------------
Spotlight listeners receive ``(rect_or_None, animate)``. When ``animate`` is
true the run waits until the rendering layer calls ``notify_morph_complete``.
With no listener attached nothing can animate, so the wait is skipped. The
first step of a tour never animates.

Failure semantics
-----------------
Scroll and measurement failures never stall a tour: a failed measurement
yields ``None`` (full-screen dim, no cutout) and the run still reaches
``ready``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Awaitable, Callable, List, Optional, Set

from walkthrough.design.geometry import Rect
from walkthrough.design.motion import MotionPreference
from walkthrough.state.actions import HideTooltip, ShowTooltip, UpdateMeasurement
from walkthrough.state.models import IntroState
from walkthrough.state.store import IntroStore

from .providers import MeasurementProvider, ScrollProvider, safe_measure, safe_scroll

__all__ = [
    "TransitionPhase",
    "TransitionTicket",
    "TransitionCoordinator",
    "SpotlightListener",
    "PhaseListener",
]

_logger = logging.getLogger(__name__)

SpotlightListener = Callable[[Optional[Rect], bool], None]
PhaseListener = Callable[["TransitionPhase"], None]
Sleep = Callable[[float], Awaitable[None]]


class TransitionPhase(str, Enum):
    IDLE = "idle"
    HIDING_PANEL = "hiding-panel"
    SCROLLING = "scrolling"
    MORPHING = "morphing"
    READY = "ready"


@dataclass(frozen=True)
class TransitionTicket:
    generation: int
    step_index: int


class TransitionCoordinator:
    def __init__(
        self,
        store: IntroStore,
        measurement: MeasurementProvider,
        scroll: Optional[ScrollProvider] = None,
        *,
        motion: Optional[MotionPreference] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._store = store
        self._measurement = measurement
        self._scroll = scroll
        self._motion = motion or MotionPreference()
        self._log = logger or _logger
        self._sleep = sleep

        self._phase = TransitionPhase.IDLE
        self._generation = 0
        self._processing_index: Optional[int] = None
        self._first = True
        self._morph_waiter: Optional[asyncio.Future] = None
        self._spotlight: Optional[Rect] = None
        self._tasks: Set[asyncio.Task] = set()
        self._spotlight_listeners: List[SpotlightListener] = []
        self._phase_listeners: List[PhaseListener] = []
        self._disposed = False
        self._sub = store.subscribe(self._on_state)

    # Introspection ---------------------------------------------------------
    @property
    def phase(self) -> TransitionPhase:
        return self._phase

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def processing_index(self) -> Optional[int]:
        return self._processing_index

    @property
    def spotlight_target(self) -> Optional[Rect]:
        return self._spotlight

    @property
    def awaiting_morph(self) -> bool:
        return self._morph_waiter is not None and not self._morph_waiter.done()

    @property
    def disposed(self) -> bool:
        return self._disposed

    # Listeners -------------------------------------------------------------
    def add_spotlight_listener(self, listener: SpotlightListener) -> Callable[[], None]:
        self._spotlight_listeners.append(listener)
        return lambda: self.remove_spotlight_listener(listener)

    def remove_spotlight_listener(self, listener: SpotlightListener) -> None:
        if listener in self._spotlight_listeners:
            self._spotlight_listeners.remove(listener)

    def add_phase_listener(self, listener: PhaseListener) -> Callable[[], None]:
        self._phase_listeners.append(listener)
        return lambda: self.remove_phase_listener(listener)

    def remove_phase_listener(self, listener: PhaseListener) -> None:
        if listener in self._phase_listeners:
            self._phase_listeners.remove(listener)

    def _set_phase(self, phase: TransitionPhase) -> None:
        if phase is self._phase:
            return
        self._log.debug("transition phase %s -> %s", self._phase.value, phase.value)
        self._phase = phase
        for listener in list(self._phase_listeners):
            try:
                listener(phase)
            except Exception:  # noqa: BLE001
                self._log.exception("phase listener failed")

    def _publish_spotlight(self, rect: Optional[Rect], animate: bool) -> None:
        self._spotlight = rect
        for listener in list(self._spotlight_listeners):
            try:
                listener(rect, animate)
            except Exception:  # noqa: BLE001
                self._log.exception("spotlight listener failed")

    # Store wiring ----------------------------------------------------------
    def _on_state(self, state: IntroState, previous: IntroState) -> None:
        tour, prev = state.tour, previous.tour
        if not tour.is_active:
            if prev.is_active or self._phase is not TransitionPhase.IDLE:
                self.reset()
            return
        if not prev.is_active or prev.id != tour.id:
            self.reset()
            self.request(tour.current_step_index)
        elif tour.current_step_index != prev.current_step_index:
            self.request(tour.current_step_index)

    # Requests --------------------------------------------------------------
    def request(self, step_index: int) -> Optional[TransitionTicket]:
        """Schedule a transition to ``step_index`` on the running loop."""
        if self._disposed:
            return None
        if step_index == self._processing_index:
            self._log.debug("step %d already in progress; ignoring", step_index)
            return None
        self._generation += 1
        ticket = TransitionTicket(self._generation, step_index)
        self._processing_index = step_index
        self._release_morph_waiter(False)
        first, self._first = self._first, False
        task = asyncio.get_running_loop().create_task(self._run(ticket, first))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return ticket

    def refresh(self) -> Optional[TransitionTicket]:
        """Re-run the current step (re-measure after layout changes)."""
        tour = self._store.state.tour
        if self._disposed or not tour.is_active:
            return None
        self._processing_index = None
        return self.request(tour.current_step_index)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log.error("transition failed", exc_info=exc)

    def is_current(self, ticket: TransitionTicket) -> bool:
        return (
            not self._disposed
            and ticket.generation == self._generation
            and self._store.state.tour.is_active
        )

    async def _run(self, ticket: TransitionTicket, first: bool) -> None:
        if not self.is_current(ticket):
            return
        tour = self._store.state.tour
        if not 0 <= ticket.step_index < len(tour.steps):
            return
        step = tour.steps[ticket.step_index]
        options = tour.options

        if not first:
            self._set_phase(TransitionPhase.HIDING_PANEL)
            self._store.dispatch(HideTooltip())
            delay = self._motion.hide_delay_ms(options.animate, options.animation_duration)
            if delay > 0:
                await self._sleep(delay / 1000)
            if not self.is_current(ticket):
                return

        if step.is_floating:
            self._publish_spotlight(None, False)
            self._set_phase(TransitionPhase.MORPHING)
            self._finish(ticket)
            return

        self._set_phase(TransitionPhase.SCROLLING)
        if options.scroll_to_element and self._scroll is not None:
            await safe_scroll(self._scroll, step.target_id, self._log, padding=options.scroll_padding)
            if not self.is_current(ticket):
                return
        rect = await safe_measure(self._measurement, step.target_id, self._log)
        if not self.is_current(ticket):
            return
        if rect is not None:
            self._store.dispatch(UpdateMeasurement(step.target_id, rect))
        else:
            self._log.info("step %r: target %r unavailable, showing without spotlight", step.id, step.target_id)

        self._set_phase(TransitionPhase.MORPHING)
        animate = (
            not first
            and rect is not None
            and bool(self._spotlight_listeners)
            and self._motion.animations_enabled(options.animate)
        )
        waiter = None
        if animate:
            waiter = asyncio.get_running_loop().create_future()
            self._morph_waiter = waiter
        self._publish_spotlight(rect, animate)
        if waiter is not None:
            await waiter
            if self._morph_waiter is waiter:
                self._morph_waiter = None
        self._finish(ticket)

    def _finish(self, ticket: TransitionTicket) -> None:
        if not self.is_current(ticket):
            return
        self._set_phase(TransitionPhase.READY)
        self._store.dispatch(ShowTooltip())

    # Rendering handshake ---------------------------------------------------
    def notify_morph_complete(self) -> bool:
        """Called by the rendering layer when the spotlight animation ends."""
        return self._release_morph_waiter(True)

    def _release_morph_waiter(self, completed: bool) -> bool:
        waiter, self._morph_waiter = self._morph_waiter, None
        if waiter is None or waiter.done():
            return False
        waiter.set_result(completed)
        return True

    # Lifecycle -------------------------------------------------------------
    def reset(self) -> None:
        """Invalidate in-flight work and return to ``idle``."""
        self._generation += 1
        self._processing_index = None
        self._first = True
        self._release_morph_waiter(False)
        self._set_phase(TransitionPhase.IDLE)

    def dispose(self) -> None:
        if self._disposed:
            return
        self.reset()
        self._disposed = True
        self._store.unsubscribe(self._sub)
        for task in list(self._tasks):
            task.cancel()
        self._spotlight_listeners.clear()
        self._phase_listeners.clear()

    async def wait_idle(self) -> None:
        """Wait until no transition run is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
