from __future__ import annotations

import logging
import random
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Set, Tuple

from .config import GameConfig
from .errors import AcquisitionError, InvalidTransition
from .mapping import CoordinateMapper
from .scheduler import Scheduler, TaskHandle
from .simulation import advance
from .spawner import SpawnScheduler
from .tracker import PositionTracker
from .types import GameEvent, Phase, PointF, World
from .utils import now_ms


logger = logging.getLogger(__name__)

TRANSITIONS: Dict[Phase, Set[Phase]] = {
    Phase.TITLE: {Phase.LOADING},
    Phase.LOADING: {Phase.PLAY, Phase.ERROR},
    Phase.PLAY: {Phase.GAME_OVER},
    Phase.GAME_OVER: {Phase.LOADING},
    Phase.ERROR: {Phase.TITLE},
}

Listener = Callable[[GameEvent, "GameSession"], None]


def _release_pair(stream, detector) -> None:
    try:
        if detector is not None:
            detector.close()
    finally:
        if stream is not None:
            stream.stop()


def _release_late(fut: Future) -> None:
    # Resources from a load nobody is waiting for any more.
    if fut.cancelled() or fut.exception() is not None:
        return
    stream, detector = fut.result()
    logger.info("Releasing camera/model that finished loading after it was abandoned")
    _release_pair(stream, detector)


class GameSession:
    """
    Phase state machine and owner of everything a round of play needs.

    The host calls ``update()`` once per displayed frame. Camera and model
    acquisition run on ``loader_executor`` and the detector runs on the
    tracker's executor; all game state is only touched from ``update()``.

    Args:
        camera: object with ``acquire(constraints) -> stream``; the stream
            exposes ``read()``, ``frame_size`` and ``stop()``.
        detector_loader: zero-argument callable returning a detector with
            ``detect(frame)`` and ``close()``.
        renderer: optional scene renderer (see ``facecatch.render``).
    """

    def __init__(
        self,
        camera,
        detector_loader: Callable[[], object],
        config: Optional[GameConfig] = None,
        renderer=None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = now_ms,
        loader_executor: Optional[Executor] = None,
        detect_executor: Optional[Executor] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.camera = camera
        self.detector_loader = detector_loader
        self.renderer = renderer
        self.clock = clock

        self.rng = rng if rng is not None else random.Random()
        self.spawner = SpawnScheduler(self.config, self.rng)
        self.mapper = CoordinateMapper(self.config.field_w, self.config.field_h)
        self.scheduler = Scheduler()

        self._loader_executor = loader_executor
        self._owns_loader = loader_executor is None
        self._detect_executor = detect_executor

        self.world = World(catcher=self.config.field_center, lives=self.config.max_lives)
        self.phase = Phase.TITLE
        self.running = False
        self.final_score: Optional[int] = None
        self.closed = False
        self._status = "Press start"
        self._listeners: List[Listener] = []

        self._loading: Optional[Future] = None
        self._loading_started_ms: Optional[float] = None
        self._stream = None
        self._detector = None
        self._tracker: Optional[PositionTracker] = None
        self._poll_task: Optional[TaskHandle] = None
        self._frame_task: Optional[TaskHandle] = None
        self._latest_frame = None
        self._now_ms = 0.0

    # ----------------------------
    # Observable state
    # ----------------------------

    @property
    def score(self) -> int:
        return self.world.score

    @property
    def lives(self) -> int:
        return self.world.lives

    @property
    def catcher(self) -> PointF:
        return self.world.catcher

    @property
    def status(self) -> str:
        if self.phase is Phase.PLAY and self._tracker is not None:
            return self._tracker.status
        return self._status

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # ----------------------------
    # Requests from the presentation layer
    # ----------------------------

    def request_start(self) -> None:
        """Title or GameOver -> Loading. Acquisition starts in the background."""
        self._check_open()
        self._transition(Phase.LOADING)
        self.release_resources()
        self.final_score = None
        self._status = "Starting camera and loading face model..."

        if self._loader_executor is None:
            self._loader_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="acquire")
        self._loading_started_ms = None
        self._loading = self._loader_executor.submit(self._acquire)

    def acknowledge_error(self) -> None:
        self._check_open()
        self._transition(Phase.TITLE)
        self._status = "Press start"

    def update(self, now: Optional[float] = None) -> None:
        """One pass of the host loop: finish loading if ready, then run due tasks."""
        if self.closed:
            return
        self._now_ms = self.clock() if now is None else now

        if self.phase is Phase.LOADING:
            self._check_loading()
        self.scheduler.run_pending(self._now_ms)

    def teardown(self) -> None:
        """Safe from any phase and more than once."""
        if self.closed:
            return
        self.closed = True
        self._abandon_loading()
        self.release_resources()
        self.scheduler.cancel_all()
        if self._owns_loader and self._loader_executor is not None:
            self._loader_executor.shutdown(wait=False)
            self._loader_executor = None
        self._status = "Session closed"
        logger.info("Session torn down in phase %s", self.phase.value)

    def release_resources(self) -> None:
        """Stop both loops and let go of camera and detector. Idempotent."""
        self.running = False
        for task in (self._frame_task, self._poll_task):
            if task is not None:
                task.cancel()
        self._frame_task = None
        self._poll_task = None

        stream, detector = self._stream, self._detector
        self._stream = None
        self._detector = None
        self._latest_frame = None

        tracker, self._tracker = self._tracker, None
        if tracker is not None:
            # The detector may still be busy with an in-flight detection.
            tracker.close(then=lambda: _release_pair(None, detector))
            detector = None
        _release_pair(stream, detector)

    # ----------------------------
    # Loading
    # ----------------------------

    def _acquire(self) -> Tuple[object, object]:
        stream = self.camera.acquire(self.config.capture)
        try:
            detector = self.detector_loader()
        except Exception as e:
            stream.stop()
            raise AcquisitionError(f"Could not load face model: {e}") from e
        return stream, detector

    def _check_loading(self) -> None:
        fut = self._loading
        if fut is None:
            return

        # Timed from the first update() after the request, in its time base.
        if self._loading_started_ms is None:
            self._loading_started_ms = self._now_ms
        if not fut.done():
            if self._now_ms - self._loading_started_ms > self.config.loading_timeout_ms:
                self._abandon_loading()
                self._fail(f"Timed out after {self.config.loading_timeout_ms / 1000:.0f}s waiting for camera/model")
            return

        self._loading = None
        try:
            stream, detector = fut.result()
        except Exception as e:
            self._fail(str(e) or e.__class__.__name__)
            return
        self._enter_play(stream, detector)

    def _abandon_loading(self) -> None:
        fut, self._loading = self._loading, None
        if fut is None:
            return
        fut.cancel()
        fut.add_done_callback(_release_late)

    def _fail(self, reason: str) -> None:
        logger.warning("Acquisition failed: %s", reason)
        self._status = f"Error: {reason}"
        self._transition(Phase.ERROR)

    # ----------------------------
    # Play
    # ----------------------------

    def _enter_play(self, stream, detector) -> None:
        cfg = self.config
        self._stream = stream
        self._detector = detector

        self.world = World(catcher=cfg.field_center, lives=cfg.max_lives)
        self.mapper.reset()

        self._tracker = PositionTracker(
            detector,
            frame_source=lambda: self._latest_frame,
            mapper=self.mapper,
            publish=self._publish_catcher,
            reference=cfg.reference,
            executor=self._detect_executor,
        )
        self._tracker.start(cfg.field_center)
        self.running = True
        self._poll_task = self.scheduler.every(cfg.poll_interval_ms, self._tracker.poll, name="face-poll")
        self._frame_task = self.scheduler.each_frame(self._frame_tick, name="render")
        self._transition(Phase.PLAY)

    def _publish_catcher(self, pos: PointF) -> None:
        if self.running:
            self.world.catcher = (float(pos[0]), float(pos[1]))

    def _frame_tick(self) -> bool:
        if not self.running or self.phase is not Phase.PLAY:
            return False

        frame = self._stream.read() if self._stream is not None else None
        if frame is not None:
            self._latest_frame = frame
            w, h = self._stream.frame_size
            self.mapper.update_source_size(w, h)

        renderer = self.renderer
        if renderer is not None:
            renderer.background(self._latest_frame, self.mapper.fit)

        if self._tracker is not None:
            self._tracker.collect()

        self.spawner.maybe_spawn(self.world, self._now_ms)
        result = advance(self.world, self.config)

        for _ in range(result.caught_good):
            self._emit(GameEvent.CAUGHT_GOOD)
        for _ in range(result.caught_bad):
            self._emit(GameEvent.CAUGHT_BAD)

        if result.game_over:
            self._enter_game_over()
            return False

        if renderer is not None:
            renderer.entities(self.world.entities)
            renderer.catcher(self.world.catcher, self.config.catch_radius)
            renderer.hud(self.world.score, self.world.lives, self.status)
        return True

    def _enter_game_over(self) -> None:
        self.running = False
        self.final_score = self.world.score
        self.release_resources()
        self._status = f"Game over! Score: {self.final_score}"
        self._transition(Phase.GAME_OVER)
        self._emit(GameEvent.GAME_OVER)

    # ----------------------------
    # Internals
    # ----------------------------

    def _transition(self, target: Phase) -> None:
        if target not in TRANSITIONS[self.phase]:
            raise InvalidTransition(f"Cannot go from {self.phase.value} to {target.value}")
        logger.info("Phase %s -> %s", self.phase.value, target.value)
        self.phase = target
        self._emit(GameEvent.PHASE_CHANGED)

    def _check_open(self) -> None:
        if self.closed:
            raise InvalidTransition("Session has been torn down")

    def _emit(self, event: GameEvent) -> None:
        for listener in list(self._listeners):
            listener(event, self)
