from __future__ import annotations

import random
from concurrent.futures import Executor, Future
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
import pytest

from facecatch.config import GameConfig
from facecatch.errors import AcquisitionError
from facecatch.session import GameSession
from facecatch.types import FaceCandidate


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def submit(self, fn, *args, **kwargs):
        fut: Future = Future()
        fut.set_running_or_notify_cancel()
        try:
            fut.set_result(fn(*args, **kwargs))
        except Exception as e:
            fut.set_exception(e)
        return fut


class ManualExecutor(Executor):
    """Holds submitted work until the test calls ``run_all()``."""

    def __init__(self) -> None:
        self.pending: List[Tuple[Future, Callable, tuple, dict]] = []

    def submit(self, fn, *args, **kwargs):
        fut: Future = Future()
        self.pending.append((fut, fn, args, kwargs))
        return fut

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for fut, fn, args, kwargs in pending:
            if not fut.set_running_or_notify_cancel():
                continue
            try:
                fut.set_result(fn(*args, **kwargs))
            except Exception as e:
                fut.set_exception(e)


class ScriptedRandom(random.Random):
    """random() replays a fixed sequence; choice() picks the first element."""

    def __init__(self, values: Sequence[float]) -> None:
        super().__init__(0)
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0)

    def choice(self, seq):
        return seq[0]


class FakeStream:
    def __init__(self, size: Tuple[int, int] = (640, 360)) -> None:
        self.size = size
        self.stopped = False
        self.reads = 0

    @property
    def frame_size(self) -> Tuple[int, int]:
        return self.size

    def read(self):
        if self.stopped:
            return None
        self.reads += 1
        w, h = self.size
        return np.zeros((h, w, 3), dtype=np.uint8)

    def stop(self) -> None:
        self.stopped = True


class FakeCamera:
    def __init__(self, fail: Optional[str] = None, size: Tuple[int, int] = (640, 360)) -> None:
        self.fail = fail
        self.size = size
        self.streams: List[FakeStream] = []

    def acquire(self, constraints):
        if self.fail:
            raise AcquisitionError(self.fail)
        stream = FakeStream(self.size)
        self.streams.append(stream)
        return stream


class FakeDetector:
    def __init__(self, results=None, error: Optional[Exception] = None) -> None:
        self.results: List[FaceCandidate] = list(results or [])
        self.error = error
        self.calls = 0
        self.closed = False

    def detect(self, frame):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.results)

    def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, t: float = 0.0) -> None:
        self.t = t

    def __call__(self) -> float:
        return self.t


def face_at(x: int, y: int, score: float = 0.9, half: int = 40) -> FaceCandidate:
    """Face whose mouth keypoint is at (x, y)."""
    return FaceCandidate(
        score=score,
        bbox_px=(x - half, y - 2 * half, x + half, y + 10),
        center_px=(x, y - half),
        keypoints_px={"mouth": (x, y), "nose_tip": (x, y - 20)},
    )


@pytest.fixture
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def camera() -> FakeCamera:
    return FakeCamera()


@pytest.fixture
def detector() -> FakeDetector:
    return FakeDetector()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session(camera, detector, config, clock) -> GameSession:
    s = GameSession(
        camera=camera,
        detector_loader=lambda: detector,
        config=config,
        rng=random.Random(1234),
        clock=clock,
        loader_executor=InlineExecutor(),
        detect_executor=InlineExecutor(),
    )
    yield s
    s.teardown()
