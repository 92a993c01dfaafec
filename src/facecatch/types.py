from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


Point2 = Tuple[int, int]
PointF = Tuple[float, float]
Box2 = Tuple[int, int, int, int]  # (x_min, y_min, x_max, y_max)


class EntityKind(enum.Enum):
    GOOD = "good"
    BAD = "bad"


class Phase(enum.Enum):
    TITLE = "title"
    LOADING = "loading"
    PLAY = "play"
    GAME_OVER = "game_over"
    ERROR = "error"


class GameEvent(enum.Enum):
    CAUGHT_GOOD = "caught_good"
    CAUGHT_BAD = "caught_bad"
    GAME_OVER = "game_over"
    PHASE_CHANGED = "phase_changed"


@dataclass(frozen=True)
class FaceCandidate:
    """A single detected face in source-image pixel coordinates."""

    score: Optional[float]
    bbox_px: Box2
    center_px: Point2
    keypoints_px: Dict[str, Point2]  # right_eye/left_eye/nose_tip/mouth/right_ear/left_ear


@dataclass
class Entity:
    """A falling symbol. ``radius`` is only used for drawing."""

    x: float
    y: float
    speed: float
    kind: EntityKind
    symbol: str
    radius: float = 28.0

    @property
    def bad(self) -> bool:
        return self.kind is EntityKind.BAD


@dataclass
class World:
    """Mutable game state for one round of play."""

    catcher: PointF
    entities: List[Entity] = field(default_factory=list)
    score: int = 0
    lives: int = 3
    last_spawn_ms: float = 0.0


@dataclass(frozen=True)
class TickResult:
    caught_good: int = 0
    caught_bad: int = 0
    missed: int = 0
    game_over: bool = False
