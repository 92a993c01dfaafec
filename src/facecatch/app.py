from __future__ import annotations

import argparse
import functools
import logging
import random
from typing import List, Optional

import cv2

from .camera import CameraSource
from .config import REFERENCE_POINTS, CaptureConstraints, GameConfig
from .detector import load_face_detector
from .drawing import Canvas
from .render import SceneRenderer
from .session import GameSession
from .types import Phase


logger = logging.getLogger(__name__)

WINDOW_TITLE = "facecatch"
KEY_SPACE = 32
KEY_ENTER = (10, 13)
KEY_QUIT = (ord("q"), 27)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Catch falling food with your face; dodge the bombs.")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument("--width", type=int, default=640, help="Capture width (best effort)")
    ap.add_argument("--height", type=int, default=360, help="Capture height (best effort)")
    ap.add_argument(
        "--reference",
        choices=REFERENCE_POINTS,
        default="mouth",
        help="Face point that drives the catcher (default: mouth)",
    )
    ap.add_argument("--model", default="models/blaze_face_short_range.tflite", help="Tasks API model path")
    ap.add_argument("--seed", type=int, default=None, help="Seed for spawn randomness")
    ap.add_argument("--no-sound", action="store_true", help="Disable sound cues")
    ap.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return ap


def config_from_args(args: argparse.Namespace) -> GameConfig:
    return GameConfig(
        reference=args.reference,
        capture=CaptureConstraints(camera_index=args.camera, width=args.width, height=args.height),
    )


def _start_sound(session: GameSession):
    try:
        from .audio import CueTone

        cues = CueTone()
        cues.start()
    except (OSError, ImportError) as e:
        # sounddevice raises OSError when PortAudio is missing.
        logger.warning("Sound disabled: %s", e)
        return None
    session.add_listener(cues.on_event)
    return cues


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = config_from_args(args)
    canvas = Canvas(config.field_w, config.field_h)
    renderer = SceneRenderer(canvas)
    session = GameSession(
        camera=CameraSource(),
        detector_loader=functools.partial(load_face_detector, tasks_model_path=args.model),
        config=config,
        renderer=renderer,
        rng=random.Random(args.seed),
    )
    cues = None if args.no_sound else _start_sound(session)

    game_over_snapshot = None
    try:
        while True:
            session.update()

            phase = session.phase
            if phase is Phase.TITLE:
                renderer.title_screen(session.status)
            elif phase is Phase.LOADING:
                renderer.loading_screen(session.status)
            elif phase is Phase.ERROR:
                renderer.error_screen(session.status)
            elif phase is Phase.GAME_OVER:
                if game_over_snapshot is None:
                    game_over_snapshot = canvas.image.copy()
                canvas.blit(game_over_snapshot)
                renderer.game_over_overlay(session.final_score or 0)
            if phase is not Phase.GAME_OVER:
                game_over_snapshot = None

            cv2.imshow(WINDOW_TITLE, canvas.image)
            key = cv2.waitKey(1) & 0xFF
            if key in KEY_QUIT:
                break
            if cv2.getWindowProperty(WINDOW_TITLE, cv2.WND_PROP_VISIBLE) < 1:
                break
            if key == KEY_SPACE and phase in (Phase.TITLE, Phase.GAME_OVER):
                session.request_start()
            elif key in KEY_ENTER and phase is Phase.ERROR:
                session.acknowledge_error()
    finally:
        session.teardown()
        if cues is not None:
            cues.stop()
        cv2.destroyAllWindows()
    return 0
