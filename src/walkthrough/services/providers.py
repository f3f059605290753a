"""Collaborator protocols consumed by the tour core.

The core never talks to a widget toolkit directly. It awaits a measurement
provider for target rectangles, a scroll provider to bring targets into view,
an announcer for screen reader messages and a storage adapter for persisted
state. Providers are expected not to raise; ``safe_measure`` and
``safe_scroll`` enforce that contract from the core side so a broken provider
degrades a single step (no spotlight / no scroll) instead of stalling a tour.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, runtime_checkable

from walkthrough.design.geometry import PaddingLike, Rect

__all__ = [
    "MeasurementProvider",
    "ScrollProvider",
    "Announcer",
    "StorageAdapter",
    "safe_measure",
    "safe_scroll",
    "CachedMeasurementProvider",
]

_logger = logging.getLogger(__name__)


@runtime_checkable
class MeasurementProvider(Protocol):
    async def measure(self, target_id: str) -> Optional[Rect]: ...  # pragma: no cover - structural


@runtime_checkable
class ScrollProvider(Protocol):
    async def scroll_into_view(self, target_id: str, padding: Optional[PaddingLike] = None) -> None: ...  # pragma: no cover - structural


@runtime_checkable
class Announcer(Protocol):
    def announce(self, message: str) -> None: ...  # pragma: no cover - structural


@runtime_checkable
class StorageAdapter(Protocol):
    async def get_item(self, key: str) -> Optional[str]: ...  # pragma: no cover - structural

    async def set_item(self, key: str, value: str) -> None: ...  # pragma: no cover - structural

    async def remove_item(self, key: str) -> None: ...  # pragma: no cover - structural


async def safe_measure(
    provider: MeasurementProvider, target_id: str, logger: Optional[logging.Logger] = None
) -> Optional[Rect]:
    """Measure ``target_id``; failures and unmeasured rects become ``None``."""
    log = logger or _logger
    try:
        rect = await provider.measure(target_id)
    except asyncio.CancelledError:
        raise
    except Exception:  # noqa: BLE001 - provider contract: never propagate
        log.warning("measurement failed for %r", target_id, exc_info=True)
        return None
    if rect is None or not rect.measured:
        log.debug("target %r not measurable", target_id)
        return None
    return rect


async def safe_scroll(
    provider: ScrollProvider,
    target_id: str,
    logger: Optional[logging.Logger] = None,
    *,
    padding: Optional[PaddingLike] = None,
) -> bool:
    """Scroll ``target_id`` into view; returns False when the provider failed.

    ``padding`` is the tour's ``scroll_padding``; ``None`` lets the provider
    use its own default.
    """
    log = logger or _logger
    try:
        await provider.scroll_into_view(target_id, padding=padding)
    except asyncio.CancelledError:
        raise
    except Exception:  # noqa: BLE001 - scroll failures are swallowed
        log.warning("scroll into view failed for %r", target_id, exc_info=True)
        return False
    return True


class CachedMeasurementProvider:
    """Serves rectangles already recorded in the store (headless default)."""

    def __init__(self, store) -> None:
        self._store = store

    async def measure(self, target_id: str) -> Optional[Rect]:
        return self._store.state.measurements.get(target_id)
