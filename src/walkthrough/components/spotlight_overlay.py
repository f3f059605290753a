"""Dimming overlay with a spotlight cutout.

Paints four dimming rectangles around the (padded) target and morphs the
cutout between targets with a ``QVariantAnimation`` driving ``progress`` in
[0, 1]; easing is applied by ``morph_frame`` so the animation itself runs
linear. Without a target the whole root is dimmed.

When interaction with the highlighted element is allowed the cutout is
removed from the widget mask so clicks fall through to the target.
"""

from __future__ import annotations

from typing import Callable, Optional

from PyQt6.QtCore import QRect, Qt, QVariantAnimation, pyqtSignal
from PyQt6.QtGui import QColor, QPainter, QRegion
from PyQt6.QtWidgets import QWidget

from walkthrough.config import settings
from walkthrough.design.geometry import Rect, Size
from walkthrough.design.spotlight import cutout_regions, morph_frame, spotlight_rect

__all__ = ["SpotlightOverlay"]


def _qrect(rect: Rect) -> QRect:
    return QRect(int(round(rect.x)), int(round(rect.y)), int(round(rect.width)), int(round(rect.height)))


class SpotlightOverlay(QWidget):
    clicked = pyqtSignal()

    def __init__(
        self,
        parent: QWidget,
        *,
        opacity: float = settings.DEFAULT_OVERLAY_OPACITY,
        color: str = "#000000",
        padding: float = settings.DEFAULT_SPOTLIGHT_PADDING,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("SpotlightOverlay")
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)
        self._opacity = opacity
        self._color = QColor(color)
        self._padding = padding
        self._target: Optional[Rect] = None
        self._start: Optional[Rect] = None
        self._cutout: Optional[Rect] = None
        self._interactive = True
        self._anim: Optional[QVariantAnimation] = None
        self._on_finished: Optional[Callable[[], None]] = None
        self.hide()

    # Appearance ------------------------------------------------------------
    def set_appearance(self, opacity: float, color: Optional[str] = None) -> None:
        self._opacity = max(0.0, min(1.0, opacity))
        if color:
            self._color = QColor(color)
        self.update()

    def set_interaction_enabled(self, enabled: bool) -> None:
        self._interactive = enabled
        self._update_mask()

    @property
    def cutout(self) -> Optional[Rect]:
        return self._cutout

    @property
    def animating(self) -> bool:
        return self._anim is not None

    def cover_parent(self) -> None:
        parent = self.parentWidget()
        if parent is not None:
            self.setGeometry(0, 0, parent.width(), parent.height())
        self._cutout = self._padded(self._target)
        self._update_mask()
        self.raise_()

    # Targets ---------------------------------------------------------------
    def _padded(self, target: Optional[Rect]) -> Optional[Rect]:
        if target is None:
            return None
        return spotlight_rect(target, self._padding, Size(self.width(), self.height()))

    def set_target(
        self,
        target: Optional[Rect],
        *,
        animate: bool = False,
        duration_ms: float = settings.DEFAULT_ANIMATION_DURATION_MS,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        """Move the cutout to ``target``; ``on_finished`` fires once it settled."""
        self._stop_animation()
        start = self._cutout
        self._target = target
        end = self._padded(target)
        if not animate or start is None or end is None or duration_ms <= 0:
            self._cutout = end
            self._update_mask()
            self.update()
            if on_finished is not None:
                on_finished()
            return
        self._start = start
        self._on_finished = on_finished
        anim = QVariantAnimation(self)
        anim.setStartValue(0.0)
        anim.setEndValue(1.0)
        anim.setDuration(int(duration_ms))
        anim.valueChanged.connect(lambda v: self._step(float(v), end))
        anim.finished.connect(lambda: self._finish(end))
        self._anim = anim
        anim.start()

    def _step(self, progress: float, end: Rect) -> None:
        self._cutout = morph_frame(self._start, end, progress)
        self.update()

    def _finish(self, end: Rect) -> None:
        self._anim = None
        self._cutout = end
        self._update_mask()
        self.update()
        callback, self._on_finished = self._on_finished, None
        if callback is not None:
            callback()

    def _stop_animation(self) -> None:
        if self._anim is None:
            return
        anim, self._anim = self._anim, None
        anim.stop()
        # a superseded morph never reports completion
        self._on_finished = None

    def _update_mask(self) -> None:
        if self._cutout is None or not self._interactive:
            self.clearMask()
            return
        self.setMask(QRegion(self.rect()).subtracted(QRegion(_qrect(self._cutout))))

    # Qt overrides ------------------------------------------------------------
    def paintEvent(self, event):  # type: ignore[override]
        p = QPainter(self)
        color = QColor(self._color)
        color.setAlphaF(self._opacity)
        if self._cutout is None:
            p.fillRect(self.rect(), color)
            return
        for region in cutout_regions(self._cutout, Size(self.width(), self.height())):
            if region.width > 0 and region.height > 0:
                p.fillRect(_qrect(region), color)

    def mousePressEvent(self, event):  # type: ignore[override]
        self.clicked.emit()
        event.accept()
