from __future__ import annotations

import logging
import os
import ssl
import subprocess
import urllib.request


logger = logging.getLogger(__name__)

FACE_DETECTOR_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/face_detector/blaze_face_short_range/float16/latest/"
    "blaze_face_short_range.tflite"
)


def _remove_partial(path: str) -> None:
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError:
        pass


def _download_urllib(url: str, model_path: str, timeout_s: int) -> None:
    # python.org builds on macOS often lack root certificates; certifi fixes that when installed.
    try:
        import certifi  # type: ignore

        ctx = ssl.create_default_context(cafile=certifi.where())
    except ImportError:
        ctx = ssl.create_default_context()

    with urllib.request.urlopen(url, context=ctx, timeout=timeout_s) as r, open(model_path, "wb") as f:
        f.write(r.read())


def _download_curl(url: str, model_path: str, timeout_s: int):
    proc = subprocess.run(
        ["curl", "-L", "--max-time", str(timeout_s), "-o", model_path, url],
        check=False,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    ok = proc.returncode == 0 and os.path.exists(model_path) and os.path.getsize(model_path) > 0
    return ok, proc.stderr.strip()


def ensure_face_detector_model(model_path: str, *, url: str = FACE_DETECTOR_MODEL_URL, timeout_s: int = 30) -> str:
    """
    Ensure the BlazeFace `.tflite` model exists at `model_path`.

    Downloads it from the MediaPipe model bucket when missing, first with
    urllib and then with curl. Raises RuntimeError if both fail.
    """

    if os.path.exists(model_path):
        return model_path

    os.makedirs(os.path.dirname(model_path) or ".", exist_ok=True)
    logger.info("Downloading face detector model to %s", model_path)

    try:
        _download_urllib(url, model_path, timeout_s)
        return model_path
    except Exception as e:
        _remove_partial(model_path)
        first_error = e

    curl_err = ""
    try:
        ok, curl_err = _download_curl(url, model_path, timeout_s)
        if ok:
            return model_path
    except OSError as e:
        curl_err = str(e)
    _remove_partial(model_path)

    raise RuntimeError(
        "Missing MediaPipe face detector model and auto-download failed.\n\n"
        f"Expected model at: {model_path}\n"
        f"URL: {url}\n\n"
        "Download it manually:\n"
        f'  mkdir -p "{os.path.dirname(model_path) or "."}"\n'
        f'  curl -L -o "{model_path}" "{url}"\n\n'
        f"urllib error: {first_error}\n"
        f"curl stderr: {curl_err}"
    ) from first_error
