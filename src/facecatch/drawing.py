from __future__ import annotations

from typing import Optional, Tuple

import cv2
import numpy as np


Color = Tuple[int, int, int]  # BGR


class Canvas:
    """Fixed-size BGR drawing surface with the few primitives the game needs."""

    def __init__(self, width: int, height: int, fill: Color = (46, 26, 26)) -> None:
        self.width = width
        self.height = height
        self.fill = fill
        self.image = np.zeros((height, width, 3), dtype=np.uint8)
        self.clear()

    def clear(self, color: Optional[Color] = None) -> None:
        self.image[:] = color if color is not None else self.fill

    def blit(self, img) -> None:
        """Copy an image of exactly the canvas size."""
        self.image[:] = img

    def darken(self, alpha: float) -> None:
        self.image[:] = (self.image.astype(np.float32) * (1.0 - alpha)).astype(np.uint8)

    def rect_alpha(self, rect: Tuple[int, int, int, int], color: Color, alpha: float) -> None:
        x0, y0, x1, y1 = rect
        x0, y0 = max(0, x0), max(0, y0)
        x1, y1 = min(self.width, x1), min(self.height, y1)
        if x1 <= x0 or y1 <= y0:
            return
        roi = self.image[y0:y1, x0:x1]
        overlay = np.empty_like(roi)
        overlay[:] = color
        self.image[y0:y1, x0:x1] = cv2.addWeighted(overlay, alpha, roi, 1.0 - alpha, 0)

    def circle(self, center, radius: float, color: Color, thickness: int = -1, alpha: float = 1.0) -> None:
        c = (int(round(center[0])), int(round(center[1])))
        r = max(1, int(round(radius)))
        if alpha >= 1.0:
            cv2.circle(self.image, c, r, color, thickness, lineType=cv2.LINE_AA)
            return
        pad = r + max(thickness, 1) + 1
        x0, y0 = max(0, c[0] - pad), max(0, c[1] - pad)
        x1, y1 = min(self.width, c[0] + pad + 1), min(self.height, c[1] + pad + 1)
        if x1 <= x0 or y1 <= y0:
            return
        roi = self.image[y0:y1, x0:x1]
        overlay = roi.copy()
        cv2.circle(overlay, (c[0] - x0, c[1] - y0), r, color, thickness, lineType=cv2.LINE_AA)
        self.image[y0:y1, x0:x1] = cv2.addWeighted(overlay, alpha, roi, 1.0 - alpha, 0)

    def text(
        self,
        text: str,
        org,
        color: Color = (255, 255, 255),
        scale: float = 0.6,
        thickness: int = 2,
        align: str = "left",
    ) -> None:
        font = cv2.FONT_HERSHEY_SIMPLEX
        (tw, th), _ = cv2.getTextSize(text, font, scale, thickness)
        x, y = int(org[0]), int(org[1])
        if align == "center":
            x -= tw // 2
            y += th // 2
        elif align == "right":
            x -= tw
        # Dark outline keeps labels readable over the camera image.
        cv2.putText(self.image, text, (x, y), font, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
        cv2.putText(self.image, text, (x, y), font, scale, color, thickness, cv2.LINE_AA)
