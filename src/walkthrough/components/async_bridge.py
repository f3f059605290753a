"""Run an asyncio event loop inside a Qt application.

``QtAsyncioPump`` owns a private event loop and advances it from a
``QTimer``: every tick schedules ``loop.stop`` and calls ``run_forever``,
which processes the callbacks that are ready (including expired timers)
and returns immediately. Qt stays in charge of the main loop; coroutine
code (controller methods, the transition coordinator) sees a normal
running asyncio loop.

Slots use ``spawn(coro)`` to start controller coroutines; failed tasks are
logged, never raised into Qt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Coroutine, Optional, Set

from PyQt6.QtCore import QObject, QTimer

__all__ = ["QtAsyncioPump"]

_logger = logging.getLogger(__name__)


class QtAsyncioPump(QObject):
    DEFAULT_INTERVAL_MS = 10

    def __init__(
        self,
        parent: Optional[QObject] = None,
        *,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(parent)
        self.loop = loop or asyncio.new_event_loop()
        self._log = logger or _logger
        self._tasks: Set[asyncio.Task] = set()
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.tick)

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    @property
    def running(self) -> bool:
        return self._timer.isActive()

    def tick(self) -> None:
        """Process the loop callbacks that are ready right now."""
        if self.loop.is_closed() or self.loop.is_running():
            return
        self.loop.call_soon(self.loop.stop)
        self.loop.run_forever()

    def spawn(self, coro: Coroutine) -> asyncio.Task:
        task = self.loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log.error("background task failed", exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def close(self) -> None:
        self.stop()
        for task in list(self._tasks):
            task.cancel()
        if not self.loop.is_closed():
            # let cancellations run before closing
            self.tick()
            self.loop.close()
