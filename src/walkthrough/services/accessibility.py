"""Screen reader messages and accessible labels for tours and hints.

Pure string builders plus a default ``LoggingAnnouncer``. Announcements are
fire-and-forget: ``announce_safely`` logs announcer failures and never lets
them reach tour navigation.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Optional

from walkthrough.state.models import TourState

from .providers import Announcer

__all__ = [
    "ProgressValue",
    "step_change_message",
    "tour_complete_message",
    "hint_revealed_message",
    "tour_step_label",
    "navigation_button_label",
    "hint_accessibility_hint",
    "hint_indicator_label",
    "progress_value",
    "LoggingAnnouncer",
    "announce_safely",
]

_logger = logging.getLogger(__name__)

STEP_CONTENT_LIMIT = 100
HINT_CONTENT_LIMIT = 50


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def step_change_message(
    step_index: int, total_steps: int, title: Optional[str] = None, content: Optional[str] = None
) -> str:
    """``"Step 2 of 5: Title"``; falls back to truncated content when untitled."""
    message = f"Step {step_index + 1} of {total_steps}"
    if title:
        message += f": {title}"
    elif content:
        message += f": {_truncate(content, STEP_CONTENT_LIMIT)}"
    return message


_COMPLETE_MESSAGES = {
    TourState.COMPLETED: "Tour completed",
    TourState.SKIPPED: "Tour skipped",
    TourState.DISMISSED: "Tour dismissed",
}


def tour_complete_message(reason: TourState | str) -> str:
    return _COMPLETE_MESSAGES[TourState(reason)]


def hint_revealed_message(content: str) -> str:
    return f"Hint: {content}"


def tour_step_label(step_index: int, total_steps: int, title: Optional[str] = None) -> str:
    label = f"Tour step {step_index + 1} of {total_steps}"
    return f"{label}: {title}" if title else label


def navigation_button_label(action: str, step_index: int, total_steps: int) -> str:
    number = step_index + 1
    if action == "next":
        return "Complete tour" if number == total_steps else f"Go to step {number + 1} of {total_steps}"
    if action == "prev":
        return "Previous step (disabled)" if number == 1 else f"Go back to step {number - 1} of {total_steps}"
    if action == "skip":
        return "Skip the remaining tour"
    if action == "done":
        return "Complete the tour"
    return action


def hint_accessibility_hint(content: Optional[str] = None) -> str:
    if content:
        return f"Activate to reveal: {_truncate(content, HINT_CONTENT_LIMIT)}"
    return "Activate to reveal hint"


def hint_indicator_label(content: Optional[str] = None) -> str:
    if content:
        return f"Hint available: {_truncate(content, HINT_CONTENT_LIMIT)}"
    return "Hint available"


@dataclass(frozen=True)
class ProgressValue:
    minimum: int
    maximum: int
    now: int
    text: str


def progress_value(step_index: int, total_steps: int) -> ProgressValue:
    number = step_index + 1
    percent = round(number / total_steps * 100) if total_steps > 0 else 0
    return ProgressValue(0, 100, percent, f"{percent}% complete, step {number} of {total_steps}")


class LoggingAnnouncer:
    """Default announcer: logs each message and keeps a short history."""

    def __init__(self, logger: Optional[logging.Logger] = None, history: int = 20) -> None:
        self._log = logger or _logger
        self._limit = history
        self.messages: List[str] = []

    def announce(self, message: str) -> None:
        self._log.info("announce: %s", message)
        self.messages.append(message)
        del self.messages[: -self._limit]


def announce_safely(announcer: Optional[Announcer], message: str, logger: Optional[logging.Logger] = None) -> None:
    if announcer is None:
        return
    try:
        announcer.announce(message)
    except Exception:  # noqa: BLE001 - announcements are fire-and-forget
        (logger or _logger).warning("announcer failed for %r", message, exc_info=True)
