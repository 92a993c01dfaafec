from __future__ import annotations

import random
from typing import Optional

from .config import GameConfig
from .difficulty import fall_speed, spawn_interval_ms
from .types import Entity, EntityKind, World


class SpawnScheduler:
    """Decides once per tick whether a new entity enters the field."""

    def __init__(self, config: GameConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.rng = rng if rng is not None else random.Random()

    def maybe_spawn(self, world: World, now_ms: float) -> Optional[Entity]:
        interval = spawn_interval_ms(world.score, self.config.difficulty)
        if now_ms - world.last_spawn_ms <= interval:
            return None

        entity = self._make_entity(world.score)
        world.entities.append(entity)
        world.last_spawn_ms = now_ms
        return entity

    def _make_entity(self, score: int) -> Entity:
        cfg = self.config
        rng = self.rng

        bad = rng.random() < cfg.p_bad
        kind = EntityKind.BAD if bad else EntityKind.GOOD
        symbol = rng.choice(cfg.bad_symbols if bad else cfg.good_symbols)
        x = cfg.spawn_margin + rng.random() * (cfg.field_w - 2 * cfg.spawn_margin)
        return Entity(
            x=x,
            y=cfg.spawn_y,
            speed=fall_speed(score, rng, cfg.difficulty),
            kind=kind,
            symbol=symbol,
            radius=cfg.entity_radius,
        )
