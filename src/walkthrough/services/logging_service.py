"""In-process log capture for the ``walkthrough`` logger namespace.

Attaches a handler to ``logging.getLogger("walkthrough")`` that keeps recent
records in a bounded ring buffer. Used by the demo's debug output and by
tests that assert on transition / placement tracing without touching the
root logger.

 - ``enable_debug()`` lowers the namespace level to DEBUG so placement
   fallbacks and coordinator phase changes are recorded.
 - ``WALKTHROUGH_DEBUG=1`` turns debug on at ``attach()`` time.
 - Entry listeners receive each ``LogEntry`` as it is captured; listener
   failures are dropped so logging can never recurse into itself.
"""

from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass
import json
import logging
import os
from typing import Callable, Deque, List, Optional

from walkthrough.config import settings

__all__ = ["LogEntry", "LoggingService", "NAMESPACE"]

NAMESPACE = "walkthrough"

EntryListener = Callable[["LogEntry"], None]


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float
    lineno: int


class _CaptureHandler(logging.Handler):
    def __init__(self, svc: "LoggingService") -> None:
        super().__init__(logging.DEBUG)
        self._svc = svc

    def emit(self, record: logging.LogRecord) -> None:
        self._svc._capture(record)


class LoggingService:
    def __init__(self, capacity: int = 500, namespace: str = NAMESPACE) -> None:
        self._logger = logging.getLogger(namespace)
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._handler = _CaptureHandler(self)
        self._listeners: List[EntryListener] = []
        self._attached = False
        self._previous_level: Optional[int] = None

    # Lifecycle ---------------------------------------------------------
    def attach(self) -> "LoggingService":
        if not self._attached:
            self._logger.addHandler(self._handler)
            self._attached = True
            if settings.env_flag(settings.DEBUG_ENV):
                self.enable_debug()
        return self

    def detach(self) -> None:
        if not self._attached:
            return
        self._logger.removeHandler(self._handler)
        self._attached = False
        self.enable_debug(False)

    @property
    def attached(self) -> bool:
        return self._attached

    def enable_debug(self, enabled: bool = True) -> None:
        if enabled:
            if self._previous_level is None:
                self._previous_level = self._logger.level
            self._logger.setLevel(logging.DEBUG)
        elif self._previous_level is not None:
            self._logger.setLevel(self._previous_level)
            self._previous_level = None

    @property
    def debug_enabled(self) -> bool:
        return self._logger.isEnabledFor(logging.DEBUG)

    def add_listener(self, listener: EntryListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _capture(self, record: logging.LogRecord) -> None:
        entry = LogEntry(
            level=record.levelname,
            name=record.name,
            message=record.getMessage(),
            created=record.created,
            lineno=record.lineno,
        )
        self._entries.append(entry)
        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception:  # noqa: BLE001 - never log from inside the handler
                continue

    # Query -------------------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        data = list(self._entries)
        return data[-limit:] if limit is not None else data

    def filter(self, *, level: Optional[str] = None, name_contains: Optional[str] = None) -> List[LogEntry]:
        return [
            e
            for e in self._entries
            if (not level or e.level == level) and (not name_contains or name_contains in e.name)
        ]

    def clear(self) -> None:
        self._entries.clear()

    def export_jsonl(self, path: str, *, level: Optional[str] = None, append: bool = False) -> int:
        """Write filtered entries as JSON Lines; returns the number written."""
        entries = self.filter(level=level)
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "a" if append else "w", encoding="utf-8") as f:
            for e in entries:
                f.write(json.dumps(asdict(e), sort_keys=True) + "\n")
        return len(entries)
