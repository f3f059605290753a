"""Persistence of permanently dismissed tours.

Payload (JSON, ``STORAGE_VERSION`` = 1)::

    {"version": 1, "dismissedTours": ["welcome"], "lastUpdated": "2024-01-01T00:00:00+00:00"}

Layers:
 - ``StorageAdapter`` implementations hold opaque strings by key:
   ``InMemoryStorage`` (process lifetime) and ``JsonFileStorage`` (one JSON
   sidecar file per key under a base directory).
 - ``DismissedToursPersistence`` encodes / decodes the versioned payload on
   top of any adapter.

Failure semantics:
 - A payload with a different version, or one that cannot be decoded, is
   treated as absent (``load()`` returns None).
 - ``JsonFileStorage`` renames unreadable / non-JSON files to
   ``<name>.corrupt.bak`` so the next save starts clean and the broken file
   remains inspectable.
 - Save / clear failures are logged and swallowed; persistence is optional.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
import os
import re
from typing import Callable, Dict, Iterable, Optional, Tuple

from walkthrough.config import settings

from .providers import StorageAdapter

__all__ = [
    "PersistedPayload",
    "InMemoryStorage",
    "JsonFileStorage",
    "DismissedToursPersistence",
]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersistedPayload:
    dismissed_tours: Tuple[str, ...] = ()
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = settings.STORAGE_VERSION

    def to_json(self) -> str:
        return json.dumps(
            {
                "version": self.version,
                "dismissedTours": list(self.dismissed_tours),
                "lastUpdated": self.last_updated.isoformat(),
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> Optional["PersistedPayload"]:
        """Decode ``raw``; returns None on a version mismatch.

        Raises ``ValueError`` for malformed payloads.
        """
        obj = json.loads(raw)
        if not isinstance(obj, dict):
            raise ValueError("payload must be a JSON object")
        if obj.get("version") != settings.STORAGE_VERSION:
            return None
        tours = obj.get("dismissedTours", [])
        if not isinstance(tours, list) or not all(isinstance(t, str) for t in tours):
            raise ValueError("dismissedTours must be a list of strings")
        stamp = obj.get("lastUpdated")
        updated = datetime.fromisoformat(stamp) if isinstance(stamp, str) else datetime.now(timezone.utc)
        return cls(dismissed_tours=tuple(tours), last_updated=updated, version=obj["version"])


# Storage adapters ------------------------------------------------------------


class InMemoryStorage:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    async def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """One ``<key>.json`` file per key inside ``base_dir`` (created on demand)."""

    def __init__(self, base_dir: Optional[str] = None) -> None:
        self.base_dir = base_dir or settings.DATA_DIR
        os.makedirs(self.base_dir, exist_ok=True)

    def path_for(self, key: str) -> str:
        safe = re.sub(r"[^A-Za-z0-9._-]", "_", key)
        return os.path.join(self.base_dir, f"{safe}.json")

    def _backup_corrupt(self, path: str) -> None:
        new_path = path + ".corrupt.bak"
        i = 1
        while os.path.exists(new_path) and i < 10:
            new_path = path + f".corrupt.bak.{i}"
            i += 1
        try:
            os.replace(path, new_path)
            _logger.warning("corrupt storage file moved to %s", new_path)
        except OSError:
            _logger.warning("could not back up corrupt storage file %s", path, exc_info=True)

    async def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
            json.loads(text)
        except (OSError, UnicodeDecodeError, ValueError):
            self._backup_corrupt(path)
            return None
        return text

    async def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp = path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(value)
        os.replace(tmp, path)

    async def remove_item(self, key: str) -> None:
        path = self.path_for(key)
        if os.path.exists(path):
            os.remove(path)


# Dismissed tours -------------------------------------------------------------


class DismissedToursPersistence:
    """Versioned load / save of the dismissed tour id set."""

    def __init__(
        self,
        adapter: Optional[StorageAdapter] = None,
        *,
        key: str = settings.STORAGE_KEY,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.adapter = adapter if adapter is not None else InMemoryStorage()
        self.key = key
        self._clock = clock
        self._log = logger or _logger

    async def load(self) -> Optional[PersistedPayload]:
        try:
            raw = await self.adapter.get_item(self.key)
            if not raw:
                return None
            payload = PersistedPayload.from_json(raw)
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001 - unreadable payload counts as absent
            self._log.warning("ignoring unreadable persisted state", exc_info=True)
            return None
        if payload is None:
            self._log.info("persisted state version mismatch; ignoring")
        return payload

    async def save(self, dismissed_tours: Iterable[str]) -> bool:
        payload = PersistedPayload(
            dismissed_tours=tuple(sorted(dismissed_tours)),
            last_updated=self._clock(),
        )
        try:
            await self.adapter.set_item(self.key, payload.to_json())
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001 - persistence is best effort
            self._log.warning("failed to save persisted state", exc_info=True)
            return False
        return True

    async def clear(self) -> bool:
        try:
            await self.adapter.remove_item(self.key)
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001
            self._log.warning("failed to clear persisted state", exc_info=True)
            return False
        return True
