from .config import GameConfig
from .session import GameSession
from .types import Entity, EntityKind, FaceCandidate, GameEvent, Phase

__all__ = ["GameConfig", "GameSession", "Entity", "EntityKind", "FaceCandidate", "GameEvent", "Phase"]
