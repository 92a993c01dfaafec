from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .types import PointF


@dataclass(frozen=True)
class FieldFit:
    """Aspect-fill transform from a source image into the field."""

    scale: float
    offset_x: float
    offset_y: float
    src_w: int
    src_h: int

    @property
    def scaled_size(self) -> Tuple[float, float]:
        return (self.src_w * self.scale, self.src_h * self.scale)


def compute_fit(src_w: int, src_h: int, field_w: int, field_h: int) -> Optional[FieldFit]:
    """
    Scale that fills the field without letterboxing, plus centering offsets.

    Returns None when the source size is not known yet.
    """
    if not src_w or not src_h or src_w <= 0 or src_h <= 0:
        return None
    s = max(field_w / src_w, field_h / src_h)
    ox = (field_w - src_w * s) / 2
    oy = (field_h - src_h * s) / 2
    return FieldFit(scale=s, offset_x=ox, offset_y=oy, src_w=int(src_w), src_h=int(src_h))


def map_point(raw: Tuple[float, float], fit: Optional[FieldFit], field_w: int, previous: PointF) -> PointF:
    """
    Map a source-pixel point into field coordinates.

    The camera is front-facing and shown as a mirror, so x is flipped.
    """
    if fit is None:
        return previous
    rx, ry = raw
    fx = field_w - (rx * fit.scale + fit.offset_x)
    fy = ry * fit.scale + fit.offset_y
    return (fx, fy)


class CoordinateMapper:
    def __init__(self, field_w: int, field_h: int) -> None:
        self.field_w = field_w
        self.field_h = field_h
        self._fit: Optional[FieldFit] = None

    @property
    def fit(self) -> Optional[FieldFit]:
        return self._fit

    def update_source_size(self, src_w: int, src_h: int) -> Optional[FieldFit]:
        fit = self._fit
        if fit is not None and fit.src_w == src_w and fit.src_h == src_h:
            return fit
        self._fit = compute_fit(src_w, src_h, self.field_w, self.field_h)
        return self._fit

    def reset(self) -> None:
        self._fit = None

    def map(self, raw: Tuple[float, float], previous: PointF) -> PointF:
        return map_point(raw, self._fit, self.field_w, previous)
