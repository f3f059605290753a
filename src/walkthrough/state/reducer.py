"""Pure reducer for tour / hint state.

``reduce(state, action)`` never mutates its input and returns the *same*
object when an action has no effect, which the store relies on to skip
listener notifications.

Tour lifecycle: ``idle -> active -> completed | skipped | dismissed``.
Invariant violations (navigation while inactive, out-of-range indices,
starting a dismissed tour, unknown hint ids) are rejected silently by
returning the state unchanged; callers navigate speculatively.

Dispatch is a class -> handler table; unknown action types fall through to
the identity.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Type

from . import actions as a
from .models import IntroState, TourSlice, TourState, UISlice

__all__ = ["reduce"]

Handler = Callable[[IntroState, object], IntroState]


def _with_ui(state: IntroState, **changes) -> IntroState:
    ui = replace(state.ui, **changes)
    if ui == state.ui:
        return state
    return replace(state, ui=ui)


_HIDDEN = UISlice(tooltip_visible=False, is_transitioning=False, overlay_visible=False)


# Tour ------------------------------------------------------------------------


def _start_tour(state: IntroState, action: a.StartTour) -> IntroState:
    if action.tour_id in state.persistence.dismissed_tours:
        return state
    if not action.steps:
        return state
    tour = TourSlice(
        state=TourState.ACTIVE,
        id=action.tour_id,
        current_step_index=0,
        steps=tuple(action.steps),
        options=state.default_tour_options.merged(action.options),
        dont_show_again_checked=False,
    )
    ui = UISlice(tooltip_visible=False, is_transitioning=True, overlay_visible=True)
    return replace(state, tour=tour, ui=ui)


def _next_step(state: IntroState, action: a.NextStep) -> IntroState:
    tour = state.tour
    if not tour.is_active:
        return state
    next_index = tour.current_step_index + 1
    if next_index >= len(tour.steps):
        return replace(state, tour=replace(tour, state=TourState.COMPLETED), ui=_HIDDEN)
    return replace(
        state,
        tour=replace(tour, current_step_index=next_index),
        ui=replace(state.ui, tooltip_visible=False, is_transitioning=True),
    )


def _prev_step(state: IntroState, action: a.PrevStep) -> IntroState:
    tour = state.tour
    if not tour.is_active or tour.current_step_index <= 0:
        return state
    return replace(
        state,
        tour=replace(tour, current_step_index=tour.current_step_index - 1),
        ui=replace(state.ui, tooltip_visible=False, is_transitioning=True),
    )


def _go_to_step(state: IntroState, action: a.GoToStep) -> IntroState:
    tour = state.tour
    if not tour.is_active:
        return state
    index = action.step_index
    if index < 0 or index >= len(tour.steps) or index == tour.current_step_index:
        return state
    return replace(state, tour=replace(tour, current_step_index=index))


def _end_tour(state: IntroState, action: a.EndTour) -> IntroState:
    tour = state.tour
    if tour.is_active:
        tour = replace(tour, state=action.reason)
    if tour is state.tour and state.ui == _HIDDEN:
        return state
    return replace(state, tour=tour, ui=_HIDDEN)


def _set_transitioning(state: IntroState, action: a.SetTransitioning) -> IntroState:
    return _with_ui(state, is_transitioning=action.is_transitioning)


def _set_dont_show_again(state: IntroState, action: a.SetDontShowAgain) -> IntroState:
    if state.tour.dont_show_again_checked == action.checked:
        return state
    return replace(state, tour=replace(state.tour, dont_show_again_checked=action.checked))


def _show_tooltip(state: IntroState, action: a.ShowTooltip) -> IntroState:
    return _with_ui(state, tooltip_visible=True, is_transitioning=False)


def _hide_tooltip(state: IntroState, action: a.HideTooltip) -> IntroState:
    return _with_ui(state, tooltip_visible=False)


# Hints -----------------------------------------------------------------------


def _show_hints(state: IntroState, action: a.ShowHints) -> IntroState:
    hints = replace(
        state.hints,
        visible=True,
        items=tuple(action.hints),
        active_hint_id=None,
        options=state.default_hint_options.merged(action.options),
    )
    return replace(state, hints=hints)


def _hide_hints(state: IntroState, action: a.HideHints) -> IntroState:
    if not state.hints.visible and state.hints.active_hint_id is None:
        return state
    return replace(state, hints=replace(state.hints, visible=False, active_hint_id=None))


def _show_hint(state: IntroState, action: a.ShowHint) -> IntroState:
    if state.hints.find(action.hint_id) is None or state.hints.active_hint_id == action.hint_id:
        return state
    return replace(state, hints=replace(state.hints, active_hint_id=action.hint_id))


def _hide_hint(state: IntroState, action: a.HideHint) -> IntroState:
    if state.hints.active_hint_id != action.hint_id:
        return state
    return replace(state, hints=replace(state.hints, active_hint_id=None))


def _remove_hint(state: IntroState, action: a.RemoveHint) -> IntroState:
    hints = state.hints
    if hints.find(action.hint_id) is None:
        return state
    items = tuple(h for h in hints.items if h.id != action.hint_id)
    active = None if hints.active_hint_id == action.hint_id else hints.active_hint_id
    return replace(state, hints=replace(hints, items=items, active_hint_id=active))


# Registry / measurements -----------------------------------------------------


def _register_step(state: IntroState, action: a.RegisterStep) -> IntroState:
    entry = action.entry
    if state.step_registry.get(entry.id) == entry:
        return state
    return replace(state, step_registry={**state.step_registry, entry.id: entry})


def _unregister_step(state: IntroState, action: a.UnregisterStep) -> IntroState:
    if action.id not in state.step_registry:
        return state
    registry = {k: v for k, v in state.step_registry.items() if k != action.id}
    return replace(state, step_registry=registry)


def _register_hint(state: IntroState, action: a.RegisterHint) -> IntroState:
    entry = action.entry
    if state.hint_registry.get(entry.id) == entry:
        return state
    return replace(state, hint_registry={**state.hint_registry, entry.id: entry})


def _unregister_hint(state: IntroState, action: a.UnregisterHint) -> IntroState:
    if action.id not in state.hint_registry:
        return state
    registry = {k: v for k, v in state.hint_registry.items() if k != action.id}
    return replace(state, hint_registry=registry)


def _update_measurement(state: IntroState, action: a.UpdateMeasurement) -> IntroState:
    if state.measurements.get(action.id) == action.rect:
        return state
    return replace(state, measurements={**state.measurements, action.id: action.rect})


def _clear_measurements(state: IntroState, action: a.ClearMeasurements) -> IntroState:
    if not state.measurements:
        return state
    return replace(state, measurements={})


# Persistence -----------------------------------------------------------------


def _dismiss_permanently(state: IntroState, action: a.DismissTourPermanently) -> IntroState:
    dismissed = state.persistence.dismissed_tours
    if action.tour_id in dismissed:
        return state
    persistence = replace(state.persistence, dismissed_tours=dismissed | {action.tour_id})
    return replace(state, persistence=persistence)


def _clear_dismissed(state: IntroState, action: a.ClearDismissedTour) -> IntroState:
    dismissed = state.persistence.dismissed_tours
    if action.tour_id not in dismissed:
        return state
    persistence = replace(state.persistence, dismissed_tours=dismissed - {action.tour_id})
    return replace(state, persistence=persistence)


def _load_persisted(state: IntroState, action: a.LoadPersistedState) -> IntroState:
    persistence = replace(
        state.persistence,
        dismissed_tours=frozenset(action.dismissed_tours),
        initialized=True,
    )
    if persistence == state.persistence:
        return state
    return replace(state, persistence=persistence)


def _set_initialized(state: IntroState, action: a.SetPersistenceInitialized) -> IntroState:
    if state.persistence.initialized:
        return state
    return replace(state, persistence=replace(state.persistence, initialized=True))


_HANDLERS: Dict[Type, Handler] = {
    a.StartTour: _start_tour,
    a.NextStep: _next_step,
    a.PrevStep: _prev_step,
    a.GoToStep: _go_to_step,
    a.EndTour: _end_tour,
    a.SetTransitioning: _set_transitioning,
    a.SetDontShowAgain: _set_dont_show_again,
    a.ShowTooltip: _show_tooltip,
    a.HideTooltip: _hide_tooltip,
    a.ShowHints: _show_hints,
    a.HideHints: _hide_hints,
    a.ShowHint: _show_hint,
    a.HideHint: _hide_hint,
    a.RemoveHint: _remove_hint,
    a.RegisterStep: _register_step,
    a.UnregisterStep: _unregister_step,
    a.RegisterHint: _register_hint,
    a.UnregisterHint: _unregister_hint,
    a.UpdateMeasurement: _update_measurement,
    a.ClearMeasurements: _clear_measurements,
    a.DismissTourPermanently: _dismiss_permanently,
    a.ClearDismissedTour: _clear_dismissed,
    a.LoadPersistedState: _load_persisted,
    a.SetPersistenceInitialized: _set_initialized,
}


def reduce(state: IntroState, action: object) -> IntroState:
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action)
