"""Hint indicators and bubbles drawn over the root widget.

``HintsOverlay`` mirrors the hints slice of the store:

 - While hints are visible every hint whose target can be measured gets a
   ``HintIndicator`` dot at ``place_hint_indicator`` sized by
   ``HintOptions.indicator_size``. Unmeasurable targets get no indicator.
 - Inactive indicators pulse when ``HintOptions.animation`` and
   ``Hint.animation`` are both set and reduced motion is off.
 - Clicking an indicator toggles its hint; the active hint shows a
   ``HintBubble`` placed with ``place_hint_bubble``.
 - With ``close_on_outside_click`` a transparent backdrop below the bubble
   closes the active hint when pressed.
 - ``auto_show`` in the default hint options shows the registered hints as
   soon as the overlay is attached.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from PyQt6.QtCore import QEvent, QObject, QPointF, Qt, QVariantAnimation, pyqtSignal
from PyQt6.QtGui import QColor, QPainter
from PyQt6.QtWidgets import QFrame, QHBoxLayout, QLabel, QPushButton, QWidget

from walkthrough.design.geometry import Rect, Size
from walkthrough.design.motion import MotionPreference
from walkthrough.design.placement import place_hint_bubble, place_hint_indicator
from walkthrough.services.accessibility import (
    hint_accessibility_hint,
    hint_indicator_label,
    hint_revealed_message,
)
from walkthrough.services.intro_controller import HintsShowRequest, IntroController
from walkthrough.state.models import Hint, HintOptions, HintType, IntroState

from .qt_providers import QtMeasurementProvider

__all__ = ["HintIndicator", "HintBubble", "HintsOverlay"]

_logger = logging.getLogger(__name__)

_TYPE_COLORS = {
    HintType.DEFAULT: "#2f80ed",
    HintType.INFO: "#2d9cdb",
    HintType.WARNING: "#f2994a",
    HintType.ERROR: "#eb5757",
    HintType.SUCCESS: "#27ae60",
}


class HintIndicator(QWidget):
    """Round hint dot; the widget is enlarged so the pulse ring fits."""

    clicked = pyqtSignal(str)

    PULSE_SCALE = 1.4
    PULSE_MS = 1200

    def __init__(self, hint_id: str, parent: QWidget) -> None:
        super().__init__(parent)
        self.setObjectName("HintIndicator")
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.hint_id = hint_id
        self.target_rect: Optional[Rect] = None
        self.active = False
        self._color = QColor(_TYPE_COLORS[HintType.DEFAULT])
        self._scale = 1.0
        self._pulse: Optional[QVariantAnimation] = None

    @property
    def pulsing(self) -> bool:
        return self._pulse is not None

    def set_hint(self, hint: Hint) -> None:
        self._color = QColor(_TYPE_COLORS[HintType(hint.type)])
        self.setAccessibleName(hint_indicator_label(hint.content))
        self.setAccessibleDescription(hint_accessibility_hint(hint.content))

    def place(self, rect: Rect) -> None:
        """Centre the widget on ``rect``, the indicator's logical bounds."""
        self.target_rect = rect
        side = int(round(rect.width * self.PULSE_SCALE))
        self.setGeometry(
            int(round(rect.center_x - side / 2)),
            int(round(rect.center_y - side / 2)),
            side,
            side,
        )

    def set_active(self, active: bool) -> None:
        self.active = active
        self.update()

    def set_pulsing(self, enabled: bool) -> None:
        if enabled == self.pulsing:
            return
        if not enabled:
            anim, self._pulse = self._pulse, None
            anim.stop()
            self._scale = 1.0
            self.update()
            return
        anim = QVariantAnimation(self)
        anim.setStartValue(1.0)
        anim.setKeyValueAt(0.5, self.PULSE_SCALE)
        anim.setEndValue(1.0)
        anim.setDuration(self.PULSE_MS)
        anim.setLoopCount(-1)
        anim.valueChanged.connect(self._on_pulse)
        self._pulse = anim
        anim.start()

    def _on_pulse(self, value) -> None:
        self._scale = float(value)
        self.update()

    # Qt overrides ------------------------------------------------------------
    def paintEvent(self, event):  # type: ignore[override]
        p = QPainter(self)
        p.setRenderHint(QPainter.RenderHint.Antialiasing)
        p.setPen(Qt.PenStyle.NoPen)
        centre = QPointF(self.width() / 2, self.height() / 2)
        radius = min(self.width(), self.height()) / self.PULSE_SCALE / 2
        if self.pulsing:
            ring = QColor(self._color)
            ring.setAlphaF(0.35)
            p.setBrush(ring)
            p.drawEllipse(centre, radius * self._scale, radius * self._scale)
        color = QColor(self._color)
        if self.active:
            color = color.darker(130)
        p.setBrush(color)
        p.drawEllipse(centre, radius, radius)

    def mousePressEvent(self, event):  # type: ignore[override]
        self.clicked.emit(self.hint_id)
        event.accept()

    def keyPressEvent(self, event):  # type: ignore[override]
        if event.key() in (Qt.Key.Key_Space, Qt.Key.Key_Return, Qt.Key.Key_Enter):
            self.clicked.emit(self.hint_id)
            event.accept()
            return
        super().keyPressEvent(event)


class HintBubble(QFrame):
    closeClicked = pyqtSignal()

    MAX_WIDTH = 260

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("HintBubble")
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setAutoFillBackground(True)
        self.setMaximumWidth(self.MAX_WIDTH)
        self.hint_id: Optional[str] = None

        self.content_label = QLabel(self)
        self.content_label.setObjectName("HintBubbleContent")
        self.content_label.setWordWrap(True)
        self.close_button = QPushButton("×", self)
        self.close_button.setObjectName("HintBubbleClose")
        self.close_button.setAccessibleName("Close hint")
        self.close_button.setFlat(True)

        layout = QHBoxLayout(self)
        layout.addWidget(self.content_label, 1)
        layout.addWidget(self.close_button, 0, Qt.AlignmentFlag.AlignTop)
        self.close_button.clicked.connect(self.closeClicked.emit)
        self.hide()

    def set_hint(self, hint: Hint) -> None:
        self.hint_id = hint.id
        self.content_label.setText(hint.content)
        self.setAccessibleName(hint_revealed_message(hint.content))

    def bubble_size(self) -> Size:
        self.adjustSize()
        hint = self.sizeHint()
        return Size(min(hint.width(), self.MAX_WIDTH), hint.height())


class _Backdrop(QWidget):
    clicked = pyqtSignal()

    def __init__(self, parent: QWidget) -> None:
        super().__init__(parent)
        self.setObjectName("HintBackdrop")
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)
        self.setAccessibleName("Dismiss hint")
        self.hide()

    def mousePressEvent(self, event):  # type: ignore[override]
        self.clicked.emit()
        event.accept()


class HintsOverlay(QObject):
    def __init__(
        self,
        root: QWidget,
        controller: IntroController,
        measurement: QtMeasurementProvider,
        *,
        motion: Optional[MotionPreference] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(root)
        self.root = root
        self.controller = controller
        self.measurement = measurement
        self.motion = motion or controller.motion
        self._log = logger or _logger
        self.indicators: Dict[str, HintIndicator] = {}
        self.bubble_position: Optional[Tuple[float, float]] = None

        self.backdrop = _Backdrop(root)
        self.bubble = HintBubble(root)
        self.backdrop.clicked.connect(self._on_outside_click)
        self.bubble.closeClicked.connect(self._close_active)

        self._sub = controller.store.subscribe(self._on_state)
        root.installEventFilter(self)

        state = controller.state
        if state.default_hint_options.auto_show and not state.hints.visible:
            hints = controller.build_hints()
            if hints:
                controller.show_hints(HintsShowRequest(hints))
        self.sync()

    # Store -------------------------------------------------------------------
    def _on_state(self, state: IntroState, previous: IntroState) -> None:
        if state.hints is previous.hints and state.measurements is previous.measurements:
            return
        self.sync(state)

    def sync(self, state: Optional[IntroState] = None) -> None:
        state = state or self.controller.store.state
        hints = state.hints
        if not hints.visible:
            self._clear()
            return
        options = hints.options
        wanted = {hint.id for hint in hints.items}
        for hint_id in [h for h in self.indicators if h not in wanted]:
            self._drop(hint_id)

        active: Optional[Tuple[Hint, Rect]] = None
        placed = []
        for hint in hints.items:
            indicator = self.indicators.get(hint.id)
            target = self.measurement.measure_now(hint.target_id)
            if target is None:
                self._log.debug("hint %r: target %r not measurable", hint.id, hint.target_id)
                if indicator is not None:
                    indicator.set_pulsing(False)
                    indicator.hide()
                continue
            if indicator is None:
                indicator = HintIndicator(hint.id, self.root)
                indicator.clicked.connect(self._on_indicator_clicked)
                self.indicators[hint.id] = indicator
            left, top = place_hint_indicator(target, hint.position, options.indicator_size)
            rect = Rect(left, top, options.indicator_size, options.indicator_size)
            is_active = hint.id == hints.active_hint_id
            indicator.set_hint(hint)
            indicator.place(rect)
            indicator.set_active(is_active)
            indicator.set_pulsing(not is_active and self._pulse_enabled(hint, options))
            indicator.show()
            placed.append(indicator)
            if is_active:
                active = (hint, rect)

        # stacking: backdrop, indicators, bubble
        if active is not None and options.close_on_outside_click:
            self.backdrop.setGeometry(0, 0, self.root.width(), self.root.height())
            self.backdrop.show()
            self.backdrop.raise_()
        else:
            self.backdrop.hide()
        for indicator in placed:
            indicator.raise_()
        self._show_bubble(active)

    def _pulse_enabled(self, hint: Hint, options: HintOptions) -> bool:
        return options.animation and hint.animation and self.motion.animations_enabled()

    def _show_bubble(self, active: Optional[Tuple[Hint, Rect]]) -> None:
        if active is None:
            self.bubble.hide()
            self.bubble_position = None
            return
        hint, rect = active
        self.bubble.set_hint(hint)
        size = self.bubble.bubble_size()
        left, top = place_hint_bubble(rect, size, self.measurement.viewport())
        self.bubble.setGeometry(int(round(left)), int(round(top)), int(size.width), int(size.height))
        self.bubble_position = (left, top)
        self.bubble.show()
        self.bubble.raise_()

    def _drop(self, hint_id: str) -> None:
        indicator = self.indicators.pop(hint_id)
        indicator.set_pulsing(False)
        indicator.hide()
        indicator.deleteLater()

    def _clear(self) -> None:
        for hint_id in list(self.indicators):
            self._drop(hint_id)
        self.backdrop.hide()
        self.bubble.hide()
        self.bubble_position = None

    # Interaction -------------------------------------------------------------
    def _on_indicator_clicked(self, hint_id: str) -> None:
        if self.controller.state.hints.active_hint_id == hint_id:
            self.controller.hide_hint(hint_id)
        else:
            self.controller.show_hint(hint_id)

    def _on_outside_click(self) -> None:
        hints = self.controller.state.hints
        if hints.active_hint_id is not None and hints.options.close_on_outside_click:
            self.controller.hide_hint(hints.active_hint_id)

    def _close_active(self) -> None:
        active = self.controller.state.hints.active_hint_id
        if active is not None:
            self.controller.hide_hint(active)

    # Qt ----------------------------------------------------------------------
    def eventFilter(self, obj, event):  # type: ignore[override]
        if obj is self.root and event.type() == QEvent.Type.Resize:
            self.sync()
        return False

    def dispose(self) -> None:
        self.root.removeEventFilter(self)
        self.controller.store.unsubscribe(self._sub)
        self._clear()
        self.backdrop.deleteLater()
        self.bubble.deleteLater()
