from __future__ import annotations

import random

from .config import DifficultyConfig


DEFAULT_DIFFICULTY = DifficultyConfig()


def spawn_interval_ms(score: int, cfg: DifficultyConfig = DEFAULT_DIFFICULTY) -> float:
    """Time between spawns; shrinks linearly with score down to the floor."""
    return max(cfg.min_interval_ms, cfg.base_interval_ms - score * cfg.interval_decay_ms)


def fall_speed(score: int, rng: random.Random, cfg: DifficultyConfig = DEFAULT_DIFFICULTY) -> float:
    """Vertical speed in px/tick: base + score ramp + uniform jitter in [0, speed_jitter)."""
    return cfg.base_speed + score * cfg.speed_growth + rng.random() * cfg.speed_jitter
