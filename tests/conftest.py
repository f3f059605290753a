# Shared test setup. Qt tests run headless on the offscreen platform; the
# platform must be chosen before the first QApplication is created.

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def _no_env_motion(monkeypatch):
    # keep developer shells from changing motion / debug defaults in tests
    monkeypatch.delenv("WALKTHROUGH_PREFER_REDUCED_MOTION", raising=False)
    monkeypatch.delenv("WALKTHROUGH_DEBUG", raising=False)
