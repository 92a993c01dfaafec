from __future__ import annotations

import time
from typing import Tuple


def clamp_int(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def box_center(bbox_px: Tuple[int, int, int, int]) -> Tuple[float, float]:
    x0, y0, x1, y1 = bbox_px
    return ((x0 + x1) / 2.0, (y0 + y1) / 2.0)


def now_ms() -> float:
    """Monotonic clock in milliseconds, the time base of the game loop."""
    return time.monotonic() * 1000.0
