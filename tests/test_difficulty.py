import random

import pytest

from facecatch.config import DifficultyConfig
from facecatch.difficulty import fall_speed, spawn_interval_ms

from .conftest import ScriptedRandom


@pytest.mark.parametrize("score,expected", [(0, 1400), (100, 600), (112, 504), (113, 500), (200, 500)])
def test_spawn_interval_values(score, expected):
    assert spawn_interval_ms(score) == pytest.approx(expected)


def test_spawn_interval_never_increases_and_is_floored():
    prev = spawn_interval_ms(0)
    for score in range(1, 400):
        cur = spawn_interval_ms(score)
        assert cur <= prev
        assert cur >= 500
        prev = cur


def test_fall_speed_is_base_plus_ramp_plus_jitter():
    assert fall_speed(0, ScriptedRandom([0.0])) == pytest.approx(2.0)
    assert fall_speed(40, ScriptedRandom([0.5])) == pytest.approx(2.0 + 1.0 + 0.6)


def test_fall_speed_bounds_depend_on_score_only():
    rng = random.Random(7)
    for score in (0, 10, 100):
        for _ in range(200):
            v = fall_speed(score, rng)
            assert 2.0 + 0.025 * score <= v < 2.0 + 0.025 * score + 1.2


def test_custom_difficulty_config():
    cfg = DifficultyConfig(base_interval_ms=1000, interval_decay_ms=10, min_interval_ms=300)
    assert spawn_interval_ms(50, cfg) == pytest.approx(500)
    assert spawn_interval_ms(90, cfg) == pytest.approx(300)
