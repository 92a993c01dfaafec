import math

from facecatch.simulation import advance, is_caught
from facecatch.types import Entity, EntityKind, World


CATCHER = (320.0, 180.0)


def good(x, y, speed=0.0):
    return Entity(x=x, y=y, speed=speed, kind=EntityKind.GOOD, symbol="pizza")


def bad(x, y, speed=0.0):
    return Entity(x=x, y=y, speed=speed, kind=EntityKind.BAD, symbol="bomb")


def test_collision_boundary_is_excluded():
    r = 65.0
    assert not is_caught(good(320 + 65, 180), CATCHER, r)
    assert not is_caught(good(320, 180 - 65), CATCHER, r)
    assert is_caught(good(320 + math.sqrt(65 * 65 - 1), 180), CATCHER, r)
    assert is_caught(good(320, 180), CATCHER, r)


def test_entity_radius_does_not_widen_collision():
    em = good(320 + 70, 180)
    em.radius = 500
    assert not is_caught(em, CATCHER, 65.0)


def test_y_strictly_increases_each_tick(config):
    world = World(catcher=(0.0, 0.0), entities=[good(600, -40, speed=2.5), bad(100, -40, speed=3.1)])
    before = [e.y for e in world.entities]
    for _ in range(20):
        advance(world, config)
        after = [e.y for e in world.entities]
        assert all(b < a for b, a in zip(before, after))
        before = after


def test_falling_entity_is_caught_on_first_tick_inside_radius(config):
    world = World(catcher=CATCHER, entities=[good(320, -40, speed=10)])
    caught_at = None
    for tick in range(1, 23):
        result = advance(world, config)
        if result.caught_good and caught_at is None:
            caught_at = tick
    # y = -40 + 10 * tick enters the 65px radius at y = 120 (tick 16).
    assert caught_at == 16
    assert world.score == 1
    assert world.lives == 3
    assert world.entities == []


def test_bad_catch_costs_one_life(config):
    world = World(catcher=CATCHER, lives=3, entities=[bad(320, 170, speed=10)])
    result = advance(world, config)
    assert result.caught_bad == 1
    assert not result.game_over
    assert world.lives == 2
    assert world.score == 0
    assert world.entities == []


def test_good_catch_never_changes_lives(config):
    world = World(catcher=CATCHER, lives=1, entities=[good(320, 180), good(330, 180)])
    advance(world, config)
    assert world.lives == 1
    assert world.score == 2


def test_missed_entities_have_no_effect(config):
    world = World(
        catcher=CATCHER,
        score=5,
        lives=2,
        entities=[good(50, 405, speed=10), bad(600, 409, speed=2), good(320, 300, speed=1)],
    )
    result = advance(world, config)
    assert result.missed == 2
    assert world.score == 5
    assert world.lives == 2
    assert [e.y for e in world.entities] == [301]


def test_last_life_ends_tick_immediately(config):
    untouched = good(320, 175, speed=5)
    world = World(catcher=CATCHER, score=9, lives=1, entities=[bad(320, 175, speed=5), untouched])
    result = advance(world, config)
    assert result.game_over
    assert world.lives == 0
    # The good entity after the bomb is neither moved nor scored.
    assert world.score == 9
    assert untouched.y == 175
    assert world.entities == [untouched]


def test_lives_never_go_negative(config):
    world = World(catcher=CATCHER, lives=0, entities=[bad(320, 180)])
    result = advance(world, config)
    assert world.lives == 0
    assert result.game_over


def test_several_removals_in_one_tick(config):
    keep_a = good(100, 0, speed=1)
    keep_b = bad(500, 0, speed=1)
    world = World(
        catcher=CATCHER,
        lives=3,
        entities=[good(320, 180), keep_a, good(10, 500), bad(330, 185), keep_b, good(315, 178)],
    )
    result = advance(world, config)
    assert (result.caught_good, result.caught_bad, result.missed) == (2, 1, 1)
    assert world.entities == [keep_a, keep_b]
    assert world.score == 2
    assert world.lives == 2
