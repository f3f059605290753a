"""TourOverlay: binds the controller and store to the Qt overlay widgets.

Owns a ``SpotlightOverlay`` and a ``TourPanel`` on top of the root widget and
keeps them in sync with the store:

 - ``overlay_visible`` shows / hides the dimming layer.
 - ``tooltip_visible`` shows the panel, placed with ``place`` next to the
   coordinator's current spotlight target or centred with ``place_floating``
   for floating steps and targets the last run could not measure.
 - Spotlight updates from the coordinator move / morph the cutout; the morph
   completion is reported back through ``notify_morph_complete``.
 - Root resizes re-cover the root and trigger a controller refresh.

Button presses are forwarded to controller coroutines via the asyncio pump.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PyQt6.QtCore import QEvent, QObject
from PyQt6.QtWidgets import QWidget

from walkthrough.design.geometry import Rect
from walkthrough.design.motion import MotionPreference
from walkthrough.design.placement import Placement, place, place_floating
from walkthrough.services.intro_controller import IntroController
from walkthrough.state.models import IntroState

from .async_bridge import QtAsyncioPump
from .qt_providers import QtMeasurementProvider
from .spotlight_overlay import SpotlightOverlay
from .tour_panel import TourPanel

__all__ = ["TourOverlay"]

_logger = logging.getLogger(__name__)


class TourOverlay(QObject):
    def __init__(
        self,
        root: QWidget,
        controller: IntroController,
        measurement: QtMeasurementProvider,
        pump: QtAsyncioPump,
        *,
        motion: Optional[MotionPreference] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(root)
        self.root = root
        self.controller = controller
        self.measurement = measurement
        self.pump = pump
        self.motion = motion or controller.motion
        self._log = logger or _logger
        self.placement: Optional[Placement] = None

        self.spotlight = SpotlightOverlay(root)
        self.panel = TourPanel(root)

        self.panel.nextClicked.connect(lambda: self.pump.spawn(self.controller.next_step()))
        self.panel.prevClicked.connect(lambda: self.pump.spawn(self.controller.prev_step()))
        self.panel.skipClicked.connect(lambda: self.pump.spawn(self.controller.skip_tour()))
        self.panel.dontShowAgainToggled.connect(self.controller.set_dont_show_again)
        self.spotlight.clicked.connect(lambda: self.pump.spawn(self.controller.overlay_pressed()))

        self._detach: List[Callable[[], None]] = [
            controller.add_spotlight_listener(self._on_spotlight),
        ]
        sub = controller.store.subscribe(self._on_state)
        self._detach.append(lambda: controller.store.unsubscribe(sub))
        root.installEventFilter(self)

    # Store -------------------------------------------------------------------
    def _on_state(self, state: IntroState, previous: IntroState) -> None:
        self.sync(state)

    def sync(self, state: Optional[IntroState] = None) -> None:
        state = state or self.controller.store.state
        tour, ui = state.tour, state.ui
        if not (tour.is_active and ui.overlay_visible):
            self.spotlight.hide()
            self.panel.hide()
            return
        step = tour.current_step
        options = tour.options
        self.spotlight.set_appearance(options.overlay_opacity, options.overlay_color)
        blocked = options.disable_interaction or (step is not None and step.disable_interaction)
        self.spotlight.set_interaction_enabled(not blocked)
        if not self.spotlight.isVisible():
            self.spotlight.cover_parent()
            self.spotlight.show()
        if ui.tooltip_visible:
            self.panel.update_from(tour)
            self.position_panel(state)
            self.panel.show()
            self.panel.raise_()
        else:
            self.panel.hide()

    def position_panel(self, state: Optional[IntroState] = None) -> Optional[Placement]:
        state = state or self.controller.store.state
        step = state.tour.current_step
        if step is None:
            return None
        size = self.panel.panel_size()
        viewport = self.measurement.viewport()
        # placed from the latest measurement only, never a stale store entry
        coordinator = self.controller.coordinator
        target: Optional[Rect] = None
        if not step.is_floating and coordinator is not None:
            target = coordinator.spotlight_target
        if target is None:
            placement = place_floating(size, viewport)
        else:
            placement = place(target, size, viewport, step.preferred_side)
        self._log.debug("panel for %r placed %s at (%.1f, %.1f)", step.id, placement.side.value, placement.x, placement.y)
        self.panel.setGeometry(int(round(placement.x)), int(round(placement.y)), int(size.width), int(size.height))
        self.panel.set_anchor(placement.anchor)
        self.placement = placement
        return placement

    # Coordinator -------------------------------------------------------------
    def _on_spotlight(self, rect: Optional[Rect], animate: bool) -> None:
        options = self.controller.store.state.tour.options
        duration = self.motion.adjust_duration(options.animation_duration)
        self.spotlight.set_target(
            rect,
            animate=animate,
            duration_ms=duration,
            on_finished=self.controller.notify_morph_complete if animate else None,
        )

    # Qt ----------------------------------------------------------------------
    def eventFilter(self, obj, event):  # type: ignore[override]
        if obj is self.root and event.type() == QEvent.Type.Resize:
            self.spotlight.cover_parent()
            if self.controller.store.state.tour.is_active:
                self.pump.spawn(self.controller.refresh())
        return False

    def dispose(self) -> None:
        self.root.removeEventFilter(self)
        for detach in self._detach:
            detach()
        self._detach.clear()
        self.spotlight.hide()
        self.panel.hide()
        self.spotlight.deleteLater()
        self.panel.deleteLater()
