from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Sequence

from walkthrough.design.geometry import Rect
from walkthrough.state.models import Hint, Step


def make_steps(n: int = 3, *, floating: Sequence[int] = ()) -> List[Step]:
    return [
        Step(
            id=f"s{i}",
            content=f"Content {i}",
            target_id=None if i in floating else f"t{i}",
            title=f"Title {i}",
        )
        for i in range(n)
    ]


def make_hints(n: int = 2) -> List[Hint]:
    return [Hint(id=f"h{i}", target_id=f"t{i}", content=f"Hint {i}") for i in range(n)]


class FakeMeasurement:
    """Returns canned rects; optional per-target gates suspend ``measure``."""

    def __init__(self, rects: Optional[Dict[str, Rect]] = None, *, fail: Sequence[str] = ()) -> None:
        self.rects = dict(rects or {})
        self.fail = set(fail)
        self.calls: List[str] = []
        self.gates: Dict[str, asyncio.Event] = {}

    async def measure(self, target_id: str) -> Optional[Rect]:
        self.calls.append(target_id)
        gate = self.gates.get(target_id)
        if gate is not None:
            await gate.wait()
        if target_id in self.fail:
            raise RuntimeError(f"cannot measure {target_id}")
        return self.rects.get(target_id)


class FakeScroll:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[str] = []
        self.paddings: List[object] = []

    async def scroll_into_view(self, target_id: str, padding=None) -> None:
        self.calls.append(target_id)
        self.paddings.append(padding)
        if self.fail:
            raise RuntimeError("scroll failed")


class RecordingAnnouncer:
    def __init__(self) -> None:
        self.messages: List[str] = []

    def announce(self, message: str) -> None:
        self.messages.append(message)


async def no_sleep(_seconds: float) -> None:
    await asyncio.sleep(0)


def default_rects(n: int = 3) -> Dict[str, Rect]:
    return {f"t{i}": Rect(20, 100 + i * 120, 120, 40) for i in range(n)}


__all__ = [
    "make_steps",
    "make_hints",
    "FakeMeasurement",
    "FakeScroll",
    "RecordingAnnouncer",
    "no_sleep",
    "default_rects",
]
