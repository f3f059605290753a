import asyncio
from datetime import datetime, timezone
import json
import os

import pytest

from walkthrough.services.persistence import (
    DismissedToursPersistence,
    InMemoryStorage,
    JsonFileStorage,
    PersistedPayload,
)

FIXED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_payload_json_shape():
    raw = PersistedPayload(("welcome",), FIXED).to_json()
    assert json.loads(raw) == {
        "version": 1,
        "dismissedTours": ["welcome"],
        "lastUpdated": "2024-01-01T00:00:00+00:00",
    }
    decoded = PersistedPayload.from_json(raw)
    assert decoded.dismissed_tours == ("welcome",)
    assert decoded.last_updated == FIXED


def test_payload_version_mismatch_is_absent():
    raw = json.dumps({"version": 2, "dismissedTours": ["a"]})
    assert PersistedPayload.from_json(raw) is None


@pytest.mark.parametrize("raw", ["[]", '{"version": 1, "dismissedTours": "a"}', '{"version": 1, "dismissedTours": [1]}'])
def test_payload_malformed_raises(raw):
    with pytest.raises(ValueError):
        PersistedPayload.from_json(raw)


def test_save_and_load_in_memory():
    persistence = DismissedToursPersistence(InMemoryStorage(), clock=lambda: FIXED)

    async def scenario():
        assert await persistence.load() is None
        assert await persistence.save({"b", "a"}) is True
        payload = await persistence.load()
        assert payload.dismissed_tours == ("a", "b")
        assert await persistence.clear() is True
        assert await persistence.load() is None

    asyncio.run(scenario())


def test_unreadable_payload_counts_as_absent(caplog):
    storage = InMemoryStorage()
    persistence = DismissedToursPersistence(storage)

    async def scenario():
        await storage.set_item(persistence.key, "{not json")
        return await persistence.load()

    assert asyncio.run(scenario()) is None
    assert "ignoring unreadable persisted state" in caplog.text


class _BrokenStorage(InMemoryStorage):
    async def set_item(self, key, value):
        raise OSError("disk full")

    async def remove_item(self, key):
        raise OSError("read only")


def test_save_failures_return_false():
    persistence = DismissedToursPersistence(_BrokenStorage())
    assert asyncio.run(persistence.save(["a"])) is False
    assert asyncio.run(persistence.clear()) is False


def test_json_file_storage_roundtrip(tmp_path):
    storage = JsonFileStorage(str(tmp_path))
    persistence = DismissedToursPersistence(storage, clock=lambda: FIXED)
    asyncio.run(persistence.save(["tour"]))
    path = storage.path_for(persistence.key)
    assert os.path.basename(path) == "walkthrough.state.json"
    assert os.path.exists(path)
    assert not os.path.exists(path + ".tmp")
    assert asyncio.run(persistence.load()).dismissed_tours == ("tour",)
    asyncio.run(storage.remove_item(persistence.key))
    assert not os.path.exists(path)


def test_key_is_sanitized(tmp_path):
    storage = JsonFileStorage(str(tmp_path))
    assert os.path.basename(storage.path_for("a/b c")) == "a_b_c.json"


def test_corrupt_file_is_backed_up(tmp_path):
    storage = JsonFileStorage(str(tmp_path))
    path = storage.path_for("k")
    with open(path, "w", encoding="utf-8") as f:
        f.write("{{{")
    assert asyncio.run(storage.get_item("k")) is None
    assert not os.path.exists(path)
    assert os.path.exists(path + ".corrupt.bak")
    # a second corrupt file does not clobber the first backup
    with open(path, "w", encoding="utf-8") as f:
        f.write("[")
    asyncio.run(storage.get_item("k"))
    assert os.path.exists(path + ".corrupt.bak.1")
