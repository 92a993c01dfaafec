from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


GOOD_SYMBOLS: Tuple[str, ...] = (
    "pizza",
    "burger",
    "sushi",
    "donut",
    "apple",
    "berry",
    "taco",
    "ramen",
    "cupcake",
    "icecream",
    "cherry",
    "croissant",
    "grapes",
    "melon",
    "falafel",
    "burrito",
)
BAD_SYMBOLS: Tuple[str, ...] = ("bomb", "skull", "nausea", "virus", "poop")

REFERENCE_POINTS = ("mouth", "bbox_center")


@dataclass(frozen=True)
class DifficultyConfig:
    """Score-driven difficulty ramp. Intervals are in milliseconds, speeds in px/tick."""

    base_interval_ms: float = 1400.0
    interval_decay_ms: float = 8.0
    min_interval_ms: float = 500.0
    base_speed: float = 2.0
    speed_growth: float = 0.025
    speed_jitter: float = 1.2


@dataclass(frozen=True)
class CaptureConstraints:
    """Best-effort camera request; the driver may negotiate another resolution."""

    camera_index: int = 0
    width: int = 640
    height: int = 360
    first_frame_timeout_s: float = 3.0


@dataclass(frozen=True)
class GameConfig:
    field_w: int = 640
    field_h: int = 360
    catch_radius: float = 65.0
    entity_radius: float = 28.0
    max_lives: int = 3
    p_bad: float = 0.22
    spawn_margin: float = 40.0
    spawn_y: float = -40.0
    exit_margin: float = 50.0
    poll_interval_ms: float = 100.0
    loading_timeout_ms: float = 10000.0
    reference: str = "mouth"
    good_symbols: Tuple[str, ...] = GOOD_SYMBOLS
    bad_symbols: Tuple[str, ...] = BAD_SYMBOLS
    difficulty: DifficultyConfig = field(default_factory=DifficultyConfig)
    capture: CaptureConstraints = field(default_factory=CaptureConstraints)

    def __post_init__(self) -> None:
        if self.field_w <= 0 or self.field_h <= 0:
            raise ValueError(f"Field size must be positive, got {self.field_w}x{self.field_h}")
        if self.reference not in REFERENCE_POINTS:
            raise ValueError(f"Unknown reference point '{self.reference}'. Available: {list(REFERENCE_POINTS)}")
        if not 0.0 <= self.p_bad <= 1.0:
            raise ValueError(f"p_bad must be within [0, 1], got {self.p_bad}")
        if self.max_lives < 1:
            raise ValueError(f"max_lives must be at least 1, got {self.max_lives}")

    @property
    def field_center(self) -> Tuple[float, float]:
        return (self.field_w / 2, self.field_h / 2)
