from __future__ import annotations

import logging
import platform
import time
from typing import Optional, Tuple

import cv2

from .config import CaptureConstraints
from .errors import AcquisitionError


logger = logging.getLogger(__name__)


class CameraStream:
    """An opened capture device. ``frame_size`` follows whatever the driver actually delivers."""

    def __init__(self, cap, first_frame) -> None:
        self._cap = cap
        self._frame_size: Tuple[int, int] = (0, 0)
        self._remember_size(first_frame)

    @property
    def frame_size(self) -> Tuple[int, int]:
        return self._frame_size

    def read(self):
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None
        self._remember_size(frame)
        return frame

    def stop(self) -> None:
        cap, self._cap = self._cap, None
        if cap is not None:
            cap.release()
            logger.info("Camera released")

    def _remember_size(self, frame) -> None:
        if frame is None:
            return
        h, w = frame.shape[:2]
        self._frame_size = (int(w), int(h))


class CameraSource:
    """Opens OpenCV capture devices on request."""

    def acquire(self, constraints: CaptureConstraints) -> CameraStream:
        if platform.system() == "Darwin":
            cap = cv2.VideoCapture(constraints.camera_index, cv2.CAP_AVFOUNDATION)
        else:
            cap = cv2.VideoCapture(constraints.camera_index)
        if not cap.isOpened():
            cap.release()
            raise AcquisitionError(
                f"Could not open camera index {constraints.camera_index}. "
                "On macOS: System Settings -> Privacy & Security -> Camera -> allow your terminal."
            )

        # Best effort; drivers are free to pick another resolution.
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height)

        first = _wait_first_frame(cap, constraints.first_frame_timeout_s)
        if first is None:
            cap.release()
            raise AcquisitionError(
                f"Camera {constraints.camera_index} opened but delivered no frame "
                f"within {constraints.first_frame_timeout_s:.1f}s"
            )

        stream = CameraStream(cap, first)
        w, h = stream.frame_size
        logger.info("Camera %d ready at %dx%d", constraints.camera_index, w, h)
        return stream


def _wait_first_frame(cap, timeout_s: float) -> Optional[object]:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        ok, frame = cap.read()
        if ok and frame is not None:
            return frame
        time.sleep(0.05)
    return None
