import json
import logging

import pytest

from walkthrough.services.logging_service import LoggingService


@pytest.fixture
def svc():
    service = LoggingService(capacity=5).attach()
    yield service
    service.detach()


def test_captures_namespace_records(svc):
    logging.getLogger("walkthrough.tests").warning("spot %s", "light")
    logging.getLogger("elsewhere").warning("not captured")
    entries = svc.recent()
    assert [e.message for e in entries] == ["spot light"]
    assert entries[0].level == "WARNING"
    assert entries[0].name == "walkthrough.tests"


def test_ring_buffer_is_bounded(svc):
    log = logging.getLogger("walkthrough.tests")
    for i in range(8):
        log.warning("m%d", i)
    assert [e.message for e in svc.recent()] == ["m3", "m4", "m5", "m6", "m7"]
    assert [e.message for e in svc.recent(2)] == ["m6", "m7"]
    svc.clear()
    assert svc.recent() == []


def test_debug_toggle_restores_level(svc):
    ns = logging.getLogger("walkthrough")
    before = ns.level
    svc.enable_debug()
    assert svc.debug_enabled
    logging.getLogger("walkthrough.coordinator").debug("phase scrolling")
    assert svc.filter(level="DEBUG")[0].message == "phase scrolling"
    svc.enable_debug(False)
    assert ns.level == before


def test_debug_from_env(monkeypatch):
    monkeypatch.setenv("WALKTHROUGH_DEBUG", "1")
    service = LoggingService().attach()
    try:
        assert service.debug_enabled
    finally:
        service.detach()
    assert service.attached is False


def test_listeners_and_failures(svc):
    got = []
    remove = svc.add_listener(lambda e: got.append(e.message))

    def broken(entry):
        raise RuntimeError("listener")

    svc.add_listener(broken)
    logging.getLogger("walkthrough.x").warning("one")
    remove()
    logging.getLogger("walkthrough.x").warning("two")
    assert got == ["one"]
    assert len(svc.recent()) == 2


def test_filter_and_export(svc, tmp_path):
    logging.getLogger("walkthrough.store").warning("w")
    logging.getLogger("walkthrough.coordinator").error("e")
    assert [e.message for e in svc.filter(name_contains="coord")] == ["e"]
    path = tmp_path / "logs" / "capture.jsonl"
    assert svc.export_jsonl(str(path), level="ERROR") == 1
    assert svc.export_jsonl(str(path), append=True) == 2
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3
    assert json.loads(lines[0])["message"] == "e"
