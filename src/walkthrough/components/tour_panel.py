"""Floating tour panel (tooltip) widget.

Shows the current step's title and content, progress (bar and bullets),
navigation buttons and the optional "don't show again" checkbox. The panel
only renders state; user intent is exposed through signals and wired to the
controller by ``TourOverlay``.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from walkthrough.design.geometry import Size
from walkthrough.design.placement import ArrowSide
from walkthrough.services.accessibility import navigation_button_label, progress_value, tour_step_label
from walkthrough.state.models import TourSlice

__all__ = ["TourPanel"]


class TourPanel(QFrame):
    nextClicked = pyqtSignal()
    prevClicked = pyqtSignal()
    skipClicked = pyqtSignal()
    dontShowAgainToggled = pyqtSignal(bool)

    MAX_WIDTH = 320

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("TourPanel")
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setAutoFillBackground(True)
        self.setMaximumWidth(self.MAX_WIDTH)
        self.anchor = ArrowSide.CENTER

        self.title_label = QLabel(self)
        self.title_label.setObjectName("TourPanelTitle")
        self.title_label.setWordWrap(True)
        self.content_label = QLabel(self)
        self.content_label.setObjectName("TourPanelContent")
        self.content_label.setWordWrap(True)
        self.progress = QProgressBar(self)
        self.progress.setRange(0, 100)
        self.progress.setTextVisible(False)
        self.bullets = QLabel(self)
        self.bullets.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.dont_show_again = QCheckBox(self)
        self.skip_button = QPushButton(self)
        self.prev_button = QPushButton(self)
        self.next_button = QPushButton(self)
        for button, name in (
            (self.skip_button, "TourPanelSkip"),
            (self.prev_button, "TourPanelPrev"),
            (self.next_button, "TourPanelNext"),
        ):
            button.setObjectName(name)
            button.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        buttons = QHBoxLayout()
        buttons.addWidget(self.skip_button)
        buttons.addStretch(1)
        buttons.addWidget(self.prev_button)
        buttons.addWidget(self.next_button)

        layout = QVBoxLayout(self)
        layout.addWidget(self.title_label)
        layout.addWidget(self.content_label)
        layout.addWidget(self.progress)
        layout.addWidget(self.bullets)
        layout.addWidget(self.dont_show_again)
        layout.addLayout(buttons)

        self.next_button.clicked.connect(self.nextClicked.emit)
        self.prev_button.clicked.connect(self.prevClicked.emit)
        self.skip_button.clicked.connect(self.skipClicked.emit)
        self.dont_show_again.toggled.connect(self.dontShowAgainToggled.emit)
        self.hide()

    def panel_size(self) -> Size:
        self.adjustSize()
        hint = self.sizeHint()
        return Size(min(hint.width(), self.MAX_WIDTH), hint.height())

    def set_anchor(self, anchor: ArrowSide) -> None:
        self.anchor = anchor
        self.setProperty("anchor", anchor.value)

    def update_from(self, tour: TourSlice) -> None:
        step = tour.current_step
        if step is None:
            return
        index, total = tour.current_step_index, len(tour.steps)
        options = tour.options
        labels = options.button_labels
        last = index == total - 1

        self.title_label.setText(step.title or "")
        self.title_label.setVisible(bool(step.title))
        self.content_label.setText(step.content)
        self.setAccessibleName(tour_step_label(index, total, step.title))

        value = progress_value(index, total)
        self.progress.setValue(value.now)
        self.progress.setAccessibleDescription(value.text)
        self.progress.setVisible(options.show_progress)
        self.bullets.setText(" ".join("●" if i == index else "○" for i in range(total)))
        self.bullets.setVisible(options.show_bullets and total > 1)

        self.dont_show_again.setText(labels.dont_show_again)
        self.dont_show_again.setVisible(options.dont_show_again)
        self.dont_show_again.blockSignals(True)
        self.dont_show_again.setChecked(tour.dont_show_again_checked)
        self.dont_show_again.blockSignals(False)

        show_buttons = options.show_buttons and not step.hide_buttons
        self.skip_button.setText(labels.skip)
        self.skip_button.setAccessibleName(navigation_button_label("skip", index, total))
        self.skip_button.setVisible(show_buttons and not last)
        self.prev_button.setText(labels.prev)
        self.prev_button.setAccessibleName(navigation_button_label("prev", index, total))
        self.prev_button.setVisible(show_buttons)
        self.prev_button.setEnabled(index > 0)
        self.next_button.setText(labels.done if last else labels.next)
        self.next_button.setAccessibleName(navigation_button_label("done" if last else "next", index, total))
        self.next_button.setVisible(show_buttons)
