from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import cv2

from .errors import AcquisitionError
from .model_assets import ensure_face_detector_model
from .types import FaceCandidate
from .utils import clamp_int


# BlazeFace keypoint order, shared by the Solutions and Tasks APIs.
KEYPOINT_NAMES: Tuple[str, ...] = (
    "right_eye",
    "left_eye",
    "nose_tip",
    "mouth",
    "right_ear",
    "left_ear",
)


@dataclass(frozen=True)
class _SolutionsBackend:
    mp: object
    faces: object


@dataclass(frozen=True)
class _TasksBackend:
    mp: object
    detector: object


def _try_create_solutions_backend(model_selection: int, min_detection_confidence: float) -> Optional[_SolutionsBackend]:
    import mediapipe as mp  # type: ignore

    if not hasattr(mp, "solutions"):
        return None
    faces = mp.solutions.face_detection.FaceDetection(
        model_selection=model_selection,
        min_detection_confidence=min_detection_confidence,
    )
    return _SolutionsBackend(mp=mp, faces=faces)


def _try_create_tasks_backend(model_path: str, min_detection_confidence: float) -> _TasksBackend:
    """
    Fallback for MediaPipe distributions that do not include `mp.solutions`.

    Uses the MediaPipe Tasks FaceDetector API, which requires a `.tflite` model asset on disk.
    """

    import mediapipe as mp  # type: ignore

    # Import locations can differ slightly across builds.
    try:
        from mediapipe.tasks.python import BaseOptions  # type: ignore
        from mediapipe.tasks.python.vision import FaceDetector, FaceDetectorOptions, RunningMode  # type: ignore
    except ImportError:  # pragma: no cover
        from mediapipe.tasks import python as mp_python  # type: ignore

        BaseOptions = mp_python.BaseOptions
        vision = mp_python.vision
        FaceDetector = vision.FaceDetector
        FaceDetectorOptions = vision.FaceDetectorOptions
        RunningMode = vision.RunningMode

    model_path = ensure_face_detector_model(model_path)

    options = FaceDetectorOptions(
        base_options=BaseOptions(model_asset_path=model_path),
        running_mode=RunningMode.VIDEO,
        min_detection_confidence=min_detection_confidence,
    )
    return _TasksBackend(mp=mp, detector=FaceDetector.create_from_options(options))


class FaceDetector:
    """
    Face detector using MediaPipe Face Detection (BlazeFace).

    Input frames are expected as **BGR** images (OpenCV default). Results are
    in pixel coordinates of the unmirrored frame.
    """

    def __init__(
        self,
        model_selection: int = 0,
        min_detection_confidence: float = 0.5,
        tasks_model_path: str = "models/blaze_face_short_range.tflite",
    ) -> None:
        self._solutions: Optional[_SolutionsBackend] = _try_create_solutions_backend(
            model_selection=model_selection,
            min_detection_confidence=min_detection_confidence,
        )
        self._tasks: Optional[_TasksBackend] = None
        self._last_ts_ms = 0

        if self._solutions is None:
            try:
                self._tasks = _try_create_tasks_backend(tasks_model_path, min_detection_confidence)
            except FileNotFoundError as e:
                raise AcquisitionError(
                    "MediaPipe does not provide `mp.solutions` in your environment, so the Tasks\n"
                    "FaceDetector fallback is used, which needs a model file on disk:\n"
                    f"  {tasks_model_path}"
                ) from e
            except RuntimeError as e:
                raise AcquisitionError(str(e)) from e

    def close(self) -> None:
        if self._solutions is not None:
            self._solutions.faces.close()
        if self._tasks is not None:
            self._tasks.detector.close()

    def __enter__(self) -> "FaceDetector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def detect(self, frame_bgr) -> List[FaceCandidate]:
        h, w = frame_bgr.shape[:2]
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        if self._solutions is not None:
            results = self._solutions.faces.process(frame_rgb)
            faces = []
            for det in results.detections or []:
                loc = det.location_data
                rb = loc.relative_bounding_box
                box = (rb.xmin * w, rb.ymin * h, (rb.xmin + rb.width) * w, (rb.ymin + rb.height) * h)
                score = float(det.score[0]) if det.score else None
                faces.append(self._build_candidate(box, loc.relative_keypoints, score, w, h))
            return faces

        if self._tasks is None:
            return []

        mp = self._tasks.mp
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)

        # VIDEO mode requires strictly increasing timestamps.
        ts = max(int(time.monotonic() * 1000), self._last_ts_ms + 1)
        self._last_ts_ms = ts
        result = self._tasks.detector.detect_for_video(mp_image, ts)

        faces = []
        for det in getattr(result, "detections", None) or []:
            bb = det.bounding_box
            box = (bb.origin_x, bb.origin_y, bb.origin_x + bb.width, bb.origin_y + bb.height)
            score = float(det.categories[0].score) if det.categories else None
            faces.append(self._build_candidate(box, det.keypoints or [], score, w, h))
        return faces

    def _build_candidate(self, box, keypoints: Sequence, score: Optional[float], w: int, h: int) -> FaceCandidate:
        x0, y0, x1, y1 = (int(round(float(v))) for v in box)
        bbox_px = (
            clamp_int(x0, 0, w - 1),
            clamp_int(y0, 0, h - 1),
            clamp_int(x1, 0, w - 1),
            clamp_int(y1, 0, h - 1),
        )
        center_px = ((bbox_px[0] + bbox_px[2]) // 2, (bbox_px[1] + bbox_px[3]) // 2)

        kps: Dict[str, Tuple[int, int]] = {}
        for name, kp in zip(KEYPOINT_NAMES, keypoints):
            kps[name] = (
                clamp_int(int(round(float(kp.x) * w)), 0, w - 1),
                clamp_int(int(round(float(kp.y) * h)), 0, h - 1),
            )

        return FaceCandidate(score=score, bbox_px=bbox_px, center_px=center_px, keypoints_px=kps)


def load_face_detector(
    min_detection_confidence: float = 0.5,
    tasks_model_path: str = "models/blaze_face_short_range.tflite",
) -> FaceDetector:
    """Model loader handed to the session; failures surface as AcquisitionError."""
    return FaceDetector(min_detection_confidence=min_detection_confidence, tasks_model_path=tasks_model_path)
