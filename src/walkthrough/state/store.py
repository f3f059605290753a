"""IntroStore: single-writer state container.

``dispatch`` is the only way state changes. Listeners are called with
``(state, previous)`` after every dispatch that produced a new state object.

Behaviour:
 - Re-entrant dispatches (a listener dispatching while notifications are in
   progress) are queued and applied in order after the current action, so
   every listener observes the same sequence of states.
 - Listener failures are isolated: logged, recorded in ``errors`` and the
   remaining listeners still run.
 - Listeners are snapshotted per notification round; a cancelled
   subscription is skipped even when cancelled mid-round.
 - Optional action tracing keeps a bounded ring buffer of the most recent
   action type names (debug aid for transition ordering).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
from typing import Callable, Deque, List, Optional, Tuple

from .models import IntroState, initial_state
from .reducer import reduce

__all__ = ["IntroStore", "StoreListener", "StoreSubscription"]

_logger = logging.getLogger(__name__)

StoreListener = Callable[[IntroState, IntroState], None]


@dataclass
class StoreSubscription:
    listener: StoreListener
    active: bool = True

    def cancel(self) -> None:
        self.active = False


class IntroStore:
    DEFAULT_TRACE_CAPACITY = 50

    def __init__(self, initial: Optional[IntroState] = None, *, logger: Optional[logging.Logger] = None) -> None:
        self._state = initial if initial is not None else initial_state()
        self._log = logger or _logger
        self._subs: List[StoreSubscription] = []
        self._queue: Deque[object] = deque()
        self._dispatching = False
        self._errors: List[Tuple[object, BaseException]] = []
        self._tracing_enabled = False
        self._traces: Deque[str] = deque(maxlen=self.DEFAULT_TRACE_CAPACITY)

    @property
    def state(self) -> IntroState:
        return self._state

    # Subscriptions ---------------------------------------------------------
    def subscribe(self, listener: StoreListener) -> StoreSubscription:
        sub = StoreSubscription(listener)
        self._subs.append(sub)
        return sub

    def unsubscribe(self, sub: StoreSubscription) -> None:
        sub.cancel()
        self._subs = [s for s in self._subs if s is not sub]

    @property
    def subscriber_count(self) -> int:
        return sum(1 for s in self._subs if s.active)

    # Dispatch --------------------------------------------------------------
    def dispatch(self, action: object) -> IntroState:
        """Apply ``action``; returns the state after the queue has drained."""
        self._queue.append(action)
        if self._dispatching:
            return self._state
        self._dispatching = True
        try:
            while self._queue:
                self._apply(self._queue.popleft())
        finally:
            self._dispatching = False
            self._queue.clear()
        return self._state

    def _apply(self, action: object) -> None:
        if self._tracing_enabled:
            self._traces.append(type(action).__name__)
        previous = self._state
        state = reduce(previous, action)
        if state is previous:
            return
        self._state = state
        self._log.debug("store: %s", type(action).__name__)
        for sub in list(self._subs):
            if not sub.active:
                continue
            try:
                sub.listener(state, previous)
            except Exception as exc:  # noqa: BLE001 - isolate listener failures
                self._errors.append((action, exc))
                self._log.exception("store listener failed for %s", type(action).__name__)

    # Introspection ---------------------------------------------------------
    @property
    def errors(self) -> List[Tuple[object, BaseException]]:
        return list(self._errors)

    def enable_tracing(self, enabled: bool = True, *, capacity: Optional[int] = None) -> None:
        self._tracing_enabled = enabled
        if capacity is not None and capacity != self._traces.maxlen:
            self._traces = deque(self._traces, maxlen=capacity)

    def recent_traces(self) -> List[str]:
        return list(self._traces)
