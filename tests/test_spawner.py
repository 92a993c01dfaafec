import random

import pytest

from facecatch.config import BAD_SYMBOLS, GOOD_SYMBOLS, GameConfig
from facecatch.spawner import SpawnScheduler
from facecatch.types import EntityKind, World

from .conftest import ScriptedRandom


def make_world(score=0, last_spawn_ms=0.0):
    return World(catcher=(320.0, 180.0), score=score, last_spawn_ms=last_spawn_ms)


def test_no_spawn_until_interval_strictly_exceeded(config):
    spawner = SpawnScheduler(config, random.Random(0))
    world = make_world(last_spawn_ms=1000.0)

    assert spawner.maybe_spawn(world, 1000.0 + 1400.0) is None
    assert world.entities == []

    em = spawner.maybe_spawn(world, 1000.0 + 1401.0)
    assert em is not None
    assert world.entities == [em]
    assert world.last_spawn_ms == 2401.0


def test_interval_shrinks_with_score(config):
    spawner = SpawnScheduler(config, random.Random(0))
    world = make_world(score=100, last_spawn_ms=0.0)
    assert spawner.maybe_spawn(world, 600.0) is None
    assert spawner.maybe_spawn(world, 601.0) is not None


def test_at_most_one_spawn_per_call(config):
    spawner = SpawnScheduler(config, random.Random(0))
    world = make_world(last_spawn_ms=0.0)
    spawner.maybe_spawn(world, 1_000_000.0)
    spawner.maybe_spawn(world, 1_000_000.0)
    assert len(world.entities) == 1


def test_bad_draw_below_probability(config):
    # kind draw, x draw, speed jitter draw
    spawner = SpawnScheduler(config, ScriptedRandom([0.1, 0.5, 0.3]))
    world = make_world()
    em = spawner.maybe_spawn(world, 5000.0)
    assert em.kind is EntityKind.BAD
    assert em.symbol == BAD_SYMBOLS[0]
    assert em.x == pytest.approx(320.0)
    assert em.y == pytest.approx(-40.0)
    assert em.speed == pytest.approx(2.0 + 0.36)


def test_good_draw_at_or_above_probability(config):
    spawner = SpawnScheduler(config, ScriptedRandom([0.22, 0.0, 0.0]))
    em = spawner.maybe_spawn(make_world(score=40), 5000.0)
    assert em.kind is EntityKind.GOOD
    assert em.symbol == GOOD_SYMBOLS[0]
    assert em.x == pytest.approx(40.0)
    assert em.speed == pytest.approx(3.0)


def test_spawned_entities_stay_within_margins():
    cfg = GameConfig()
    spawner = SpawnScheduler(cfg, random.Random(99))
    world = make_world()
    kinds = set()
    for i in range(500):
        em = spawner.maybe_spawn(world, (i + 1) * 2000.0)
        assert cfg.spawn_margin <= em.x <= cfg.field_w - cfg.spawn_margin
        assert em.y < 0
        assert em.symbol in (BAD_SYMBOLS if em.bad else GOOD_SYMBOLS)
        kinds.add(em.kind)
    assert kinds == {EntityKind.GOOD, EntityKind.BAD}
