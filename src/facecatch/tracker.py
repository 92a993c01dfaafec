from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

from .mapping import CoordinateMapper
from .types import FaceCandidate, PointF
from .utils import box_center


logger = logging.getLogger(__name__)

STATUS_IDLE = "Tracker idle"
STATUS_WAITING = "Waiting for camera"
STATUS_NO_FACE = "No face detected"


def reference_point(candidate: FaceCandidate, reference: str = "mouth") -> Tuple[float, float]:
    """Pick the point that drives the catcher. Falls back to the box center if a keypoint is missing."""
    if reference == "mouth":
        pt = candidate.keypoints_px.get("mouth")
        if pt is not None:
            return (float(pt[0]), float(pt[1]))
    return box_center(candidate.bbox_px)


def best_candidate(candidates: List[FaceCandidate]) -> Optional[FaceCandidate]:
    if not candidates:
        return None
    # Stable: with no scores the detector's first result wins.
    return max(candidates, key=lambda c: c.score if c.score is not None else float("-inf"))


class PositionTracker:
    """
    Publishes the latest known catcher position from an asynchronous face detector.

    ``poll()`` is meant to run on a fixed cadence and ``collect()`` once per
    frame, both from the game thread. Only the ``detector.detect`` call runs
    on the executor, and at most one is in flight at a time.
    """

    def __init__(
        self,
        detector,
        frame_source: Callable[[], object],
        mapper: CoordinateMapper,
        publish: Callable[[PointF], None],
        reference: str = "mouth",
        executor: Optional[Executor] = None,
    ) -> None:
        self.detector = detector
        self.frame_source = frame_source
        self.mapper = mapper
        self.publish = publish
        self.reference = reference
        self._executor = executor
        self._owns_executor = executor is None

        self.position: Optional[PointF] = None
        self.status = STATUS_IDLE
        self._inflight: Optional[Future] = None
        self._stopped = True

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None

    def start(self, initial: PointF) -> None:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="face-detect")
        self.position = initial
        self.status = STATUS_IDLE
        self._stopped = False

    def stop(self) -> None:
        """Stop publishing. A detection still running is left to finish and its result dropped."""
        self._stopped = True

    def close(self, then: Optional[Callable[[], None]] = None) -> None:
        """
        Stop and drop the executor. ``then`` runs once no detection is using
        the detector any more, which may be later, on the worker thread.
        """
        self.stop()
        fut, self._inflight = self._inflight, None
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        if then is None:
            return
        if fut is None or fut.done():
            then()
        else:
            fut.add_done_callback(lambda _f: then())

    def poll(self) -> None:
        if self._stopped:
            return
        self.collect()
        if self._inflight is not None:
            return

        frame = self.frame_source()
        if frame is None:
            self.status = STATUS_WAITING
            return

        self._inflight = self._executor.submit(self.detector.detect, frame)
        # Inline executors finish synchronously.
        self.collect()

    def collect(self) -> bool:
        """Consume a finished detection. Returns True if a new position was published."""
        fut = self._inflight
        if fut is None or not fut.done():
            return False
        self._inflight = None

        if self._stopped:
            return False

        try:
            candidates = fut.result()
        except Exception as e:
            self.status = f"Detection error: {e}"
            logger.debug("Face detection failed: %s", e)
            return False

        cand = best_candidate(list(candidates or []))
        if cand is None:
            self.status = STATUS_NO_FACE
            return False

        raw = reference_point(cand, self.reference)
        prev = self.position if self.position is not None else raw
        pos = self.mapper.map(raw, prev)
        self.position = pos
        self.publish(pos)
        self.status = f"Face detected ({int(round(pos[0]))}, {int(round(pos[1]))})"
        return True
