import random

import pytest

from block_dodger.modes import Mode, get_profile
from block_dodger.scenes.dodge import DodgeWorld, RunState, roll_capacity
from factories import hazard


def test_fresh_run_starts_at_base_values(make_world) -> None:
    world = make_world(Mode.NORMAL)
    run = world.run

    assert run.score == 0
    assert run.speed_multiplier == 1.0
    assert run.player_speed == 24.0
    assert run.next_speed_increase_score == 10
    assert run.next_capacity_increase_score == 20
    assert 1 <= run.current_capacity <= 5
    assert run.is_terminal is False


def test_asian_run_rerolls_capacity_every_threshold(make_world) -> None:
    world = make_world(Mode.ASIAN)

    assert world.run.next_capacity_increase_score == 10
    assert 2 <= world.run.current_capacity <= 8


def test_escapes_to_threshold_speed_up_the_run(make_world, tick) -> None:
    world = make_world(Mode.NORMAL)
    for i in range(10):
        world.obstacles.append(hazard(x=50 + i * 20, y=601))

    tick(world)
    assert world.run.score == 10
    assert world.obstacles == []

    tick(world)
    run = world.run
    assert run.speed_multiplier == pytest.approx(1.05)
    assert run.player_speed == pytest.approx(26.4)
    assert run.next_speed_increase_score == 20


def test_speed_steps_once_per_tick(make_world, tick) -> None:
    world = make_world(Mode.NORMAL)
    world.run.score = 35

    tick(world)
    assert world.run.next_speed_increase_score == 20
    assert world.run.speed_multiplier == pytest.approx(1.05)

    tick(world)
    tick(world)
    assert world.run.next_speed_increase_score == 40
    assert world.run.speed_multiplier == pytest.approx(1.05**3)

    tick(world)
    assert world.run.next_speed_increase_score == 40


def test_normal_capacity_grows_every_two_thresholds() -> None:
    profile = get_profile(Mode.NORMAL)
    seen = {roll_capacity(profile, random.Random(seed), score=40) for seed in range(300)}

    # 40 // 20 * 1 -> upper bound 5 + 2
    assert min(seen) == 1
    assert max(seen) == 7


def test_asian_capacity_grows_every_threshold() -> None:
    profile = get_profile(Mode.ASIAN)
    seen = {roll_capacity(profile, random.Random(seed), score=30) for seed in range(500)}

    # 30 // 10 * 2 -> upper bound 8 + 6
    assert min(seen) == 2
    assert max(seen) == 14


def test_capacity_threshold_advances_by_family_interval(make_world, tick) -> None:
    normal = make_world(Mode.NORMAL)
    normal.run.score = 20
    tick(normal)
    assert normal.run.next_capacity_increase_score == 40
    assert 1 <= normal.run.current_capacity <= 6

    asian = make_world(Mode.ASIAN)
    asian.run.score = 10
    tick(asian)
    assert asian.run.next_capacity_increase_score == 20
    assert 2 <= asian.run.current_capacity <= 10


def test_below_threshold_nothing_changes(make_world, tick) -> None:
    world = make_world(Mode.NORMAL)
    world.run.score = 9
    capacity = world.run.current_capacity

    tick(world)

    assert world.run.speed_multiplier == 1.0
    assert world.run.current_capacity == capacity
    assert world.run.next_speed_increase_score == 10


def test_score_is_latched_once_terminal() -> None:
    run = RunState.start(get_profile(Mode.NORMAL), random.Random(3))

    assert run.add_score(10) is True
    assert run.mark_terminal() is True
    assert run.mark_terminal() is False
    assert run.add_score(10) is False
    assert run.score == 10


def test_reset_world_rolls_capacity_in_base_range() -> None:
    profile = get_profile(Mode.NORMAL)
    for seed in range(50):
        world = DodgeWorld.create(profile, (800, 600), random.Random(seed))
        assert profile.min_concurrent_obstacles <= world.run.current_capacity
        assert world.run.current_capacity <= profile.max_concurrent_obstacles
