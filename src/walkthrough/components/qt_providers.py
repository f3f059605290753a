"""Qt implementations of the measurement, scroll and announcer providers.

Coordinates
-----------
All rectangles are expressed in the coordinate system of the *root* widget
(the widget the overlay covers). Mapping goes through global coordinates so
targets do not have to be direct descendants of the root.

Scrolling
---------
``QtScrollProvider`` computes the minimal offset with ``scroll_delta`` in the
scroll area's viewport coordinates and animates the scroll bars towards it.
The coroutine returns once the animation settled (immediately when reduced
motion is active or when the target is already visible).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from PyQt6.QtCore import QEasingCurve, QPoint, QPropertyAnimation
from PyQt6.QtWidgets import QLabel, QScrollArea, QWidget

from walkthrough.config import settings
from walkthrough.design.geometry import PaddingLike, Rect, Size
from walkthrough.design.motion import MotionPreference
from walkthrough.design.scrolling import scroll_delta

__all__ = ["QtMeasurementProvider", "QtScrollProvider", "QtAnnouncer", "widget_rect"]

_logger = logging.getLogger(__name__)


def widget_rect(widget: QWidget, root: QWidget) -> Rect:
    """Geometry of ``widget`` mapped into ``root`` coordinates."""
    top_left = root.mapFromGlobal(widget.mapToGlobal(QPoint(0, 0)))
    return Rect(top_left.x(), top_left.y(), widget.width(), widget.height())


class QtMeasurementProvider:
    """Registry of target widgets keyed by target id."""

    def __init__(self, root: QWidget, *, logger: Optional[logging.Logger] = None) -> None:
        self.root = root
        self._widgets: Dict[str, QWidget] = {}
        self._log = logger or _logger

    def register(self, target_id: str, widget: QWidget) -> None:
        self._widgets[target_id] = widget

    def unregister(self, target_id: str) -> None:
        self._widgets.pop(target_id, None)

    def widget_for(self, target_id: str) -> Optional[QWidget]:
        return self._widgets.get(target_id)

    def viewport(self) -> Size:
        return Size(self.root.width(), self.root.height())

    def measure_now(self, target_id: str) -> Optional[Rect]:
        widget = self._widgets.get(target_id)
        if widget is None:
            self._log.debug("no widget registered for %r", target_id)
            return None
        if not widget.isVisible():
            return None
        return widget_rect(widget, self.root)

    async def measure(self, target_id: str) -> Optional[Rect]:
        return self.measure_now(target_id)


class QtScrollProvider:
    def __init__(
        self,
        scroll_area: QScrollArea,
        measurement: QtMeasurementProvider,
        padding: PaddingLike = settings.DEFAULT_SCROLL_PADDING,
        settle_ms: float = settings.DEFAULT_SCROLL_SETTLE_MS,
        motion: Optional[MotionPreference] = None,
        *,
        sleep=asyncio.sleep,
    ) -> None:
        self.scroll_area = scroll_area
        self.measurement = measurement
        self.padding = padding
        self.settle_ms = settle_ms
        self.motion = motion or MotionPreference()
        self._sleep = sleep
        self._animations = []

    def _animate(self, bar, value: int, duration: float) -> None:
        if duration <= 0 or value == bar.value():
            bar.setValue(value)
            return
        anim = QPropertyAnimation(bar, b"value")
        anim.setStartValue(bar.value())
        anim.setEndValue(value)
        anim.setDuration(int(duration))
        anim.setEasingCurve(QEasingCurve.Type.OutCubic)
        anim.finished.connect(lambda: self._animations.remove(anim) if anim in self._animations else None)
        self._animations.append(anim)
        anim.start()

    async def scroll_into_view(self, target_id: str, padding: Optional[PaddingLike] = None) -> None:
        """Scroll ``target_id`` into view; ``padding`` overrides the provider default."""
        widget = self.measurement.widget_for(target_id)
        if widget is None:
            return
        viewport = self.scroll_area.viewport()
        target = widget_rect(widget, viewport)
        vbar = self.scroll_area.verticalScrollBar()
        hbar = self.scroll_area.horizontalScrollBar()
        offset = scroll_delta(
            target,
            Size(viewport.width(), viewport.height()),
            current_scroll_y=vbar.value(),
            padding=self.padding if padding is None else padding,
            current_scroll_x=hbar.value(),
        )
        if offset is None:
            return
        duration = self.motion.adjust_duration(self.settle_ms)
        self._animate(vbar, min(int(round(offset.y)), vbar.maximum()), duration)
        self._animate(hbar, min(int(round(offset.x)), hbar.maximum()), duration)
        if duration > 0:
            await self._sleep(duration / 1000)


class QtAnnouncer:
    """Writes announcements into an accessible live label (if any) and logs them."""

    def __init__(self, label: Optional[QLabel] = None, *, logger: Optional[logging.Logger] = None) -> None:
        self.label = label
        self._log = logger or _logger
        self.last_message: Optional[str] = None

    def announce(self, message: str) -> None:
        self.last_message = message
        self._log.info("announce: %s", message)
        if self.label is not None:
            self.label.setText(message)
            self.label.setAccessibleName(message)
