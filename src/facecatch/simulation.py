from __future__ import annotations

from typing import List

from .config import GameConfig
from .types import Entity, PointF, TickResult, World


def is_caught(entity: Entity, catcher: PointF, radius: float) -> bool:
    # Strict: a point exactly on the boundary is not caught.
    dx = entity.x - catcher[0]
    dy = entity.y - catcher[1]
    return dx * dx + dy * dy < radius * radius


def advance(world: World, config: GameConfig) -> TickResult:
    """
    Move every live entity one tick and resolve catches and misses.

    Entities are rebuilt into a survivors list instead of being removed in
    place. When the last life is lost the tick stops right there; entities
    not yet visited keep their old position.
    """
    catcher = world.catcher
    exit_y = config.field_h + config.exit_margin

    survivors: List[Entity] = []
    good = bad = missed = 0

    entities = world.entities
    for i, em in enumerate(entities):
        em.y += em.speed

        if is_caught(em, catcher, config.catch_radius):
            if em.bad:
                bad += 1
                world.lives = max(0, world.lives - 1)
                if world.lives == 0:
                    survivors.extend(entities[i + 1 :])
                    world.entities = survivors
                    return TickResult(caught_good=good, caught_bad=bad, missed=missed, game_over=True)
            else:
                good += 1
                world.score += 1
            continue

        if em.y > exit_y:
            missed += 1
            continue

        survivors.append(em)

    world.entities = survivors
    return TickResult(caught_good=good, caught_bad=bad, missed=missed, game_over=False)
