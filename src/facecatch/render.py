from __future__ import annotations

from typing import List, Optional

import cv2

from .drawing import Canvas
from .mapping import FieldFit
from .types import Entity, PointF


GOOD_FILL = (255, 255, 255)
BAD_FILL = (0, 0, 180)
CATCHER_RING = (255, 255, 255)
ACCENT = (157, 107, 255)
GOLD = (0, 215, 255)


def fill_field(frame, fit: FieldFit, field_w: int, field_h: int):
    """Scale `frame` to cover the field, mirror it and crop the centered window."""
    sw, sh = fit.scaled_size
    sw_i, sh_i = max(field_w, int(round(sw))), max(field_h, int(round(sh)))
    scaled = cv2.resize(frame, (sw_i, sh_i))
    mirrored = cv2.flip(scaled, 1)
    x0 = (sw_i - field_w) // 2
    y0 = (sh_i - field_h) // 2
    return mirrored[y0 : y0 + field_h, x0 : x0 + field_w]


class SceneRenderer:
    """Draws the play field onto a Canvas, one frame per render tick."""

    def __init__(self, canvas: Canvas) -> None:
        self.canvas = canvas

    @property
    def image(self):
        return self.canvas.image

    def background(self, frame, fit: Optional[FieldFit]) -> None:
        c = self.canvas
        if frame is None or fit is None:
            c.clear()
            return
        c.blit(fill_field(frame, fit, c.width, c.height))
        c.darken(0.15)

    def entities(self, entities: List[Entity]) -> None:
        for em in entities:
            fill = BAD_FILL if em.bad else GOOD_FILL
            self.canvas.circle((em.x, em.y), em.radius, fill, alpha=0.55)
            self.canvas.text(em.symbol, (em.x, em.y), color=(255, 255, 255), scale=0.45, thickness=1, align="center")

    def catcher(self, pos: PointF, radius: float) -> None:
        self.canvas.circle(pos, radius, CATCHER_RING, thickness=3, alpha=0.6)
        self.canvas.circle(pos, 6, ACCENT)

    def hud(self, score: int, lives: int, status: str) -> None:
        c = self.canvas
        c.rect_alpha((0, 0, c.width, 52), (0, 0, 0), 0.55)
        c.text(f"Score: {score}", (14, 34), scale=0.8)
        hearts_x = c.width - 16
        for _ in range(max(0, lives)):
            c.circle((hearts_x, 26), 9, (60, 60, 230))
            hearts_x -= 26
        c.text(status, (12, c.height - 10), color=(170, 170, 170), scale=0.4, thickness=1)

    # ----------------------------
    # Screens outside of play
    # ----------------------------

    def title_screen(self, status: str) -> None:
        c = self.canvas
        c.clear()
        c.text("FACE CATCH", (c.width // 2, c.height // 2 - 70), color=ACCENT, scale=1.4, thickness=3, align="center")
        c.text("Catch falling food with your mouth.", (c.width // 2, c.height // 2 - 10), align="center")
        c.text("Avoid bomb / skull / virus ...", (c.width // 2, c.height // 2 + 22), color=ACCENT, align="center")
        c.text("SPACE: start   Q: quit", (c.width // 2, c.height // 2 + 80), color=GOLD, align="center")
        if status:
            c.text(status, (12, c.height - 10), color=(170, 170, 170), scale=0.4, thickness=1)

    def loading_screen(self, status: str) -> None:
        c = self.canvas
        c.clear()
        c.text("Loading...", (c.width // 2, c.height // 2 - 20), scale=1.1, thickness=2, align="center")
        c.text(status, (c.width // 2, c.height // 2 + 30), color=(170, 170, 170), scale=0.5, thickness=1, align="center")

    def error_screen(self, status: str) -> None:
        c = self.canvas
        c.clear()
        c.text("Something went wrong", (c.width // 2, c.height // 2 - 40), color=ACCENT, scale=1.0, align="center")
        c.text(status, (c.width // 2, c.height // 2 + 10), scale=0.45, thickness=1, align="center")
        c.text("ENTER: back to title", (c.width // 2, c.height // 2 + 60), color=GOLD, align="center")

    def game_over_overlay(self, final_score: int) -> None:
        c = self.canvas
        c.rect_alpha((0, 0, c.width, c.height), (0, 0, 0), 0.82)
        c.text("GAME OVER", (c.width // 2, c.height // 2 - 40), scale=1.4, thickness=3, align="center")
        c.text(f"Score: {final_score}", (c.width // 2, c.height // 2 + 20), color=GOLD, scale=1.0, align="center")
        c.text("SPACE: play again   Q: quit", (c.width // 2, c.height // 2 + 70), align="center")
