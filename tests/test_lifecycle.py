import random

import pytest

from block_dodger.lifecycle import DodgeGame, GamePhase, RunResult
from block_dodger.modes import Mode
from block_dodger.scenes.dodge import DodgeIntent
from block_dodger.timers import TimerScheduler
from factories import hazard

FRAME = 16.67


@pytest.fixture
def scheduler() -> TimerScheduler:
    return TimerScheduler()


@pytest.fixture
def results() -> list:
    return []


@pytest.fixture
def game(scheduler, results) -> DodgeGame:
    return DodgeGame(
        viewport=(800, 600),
        scheduler=scheduler,
        rng=random.Random(42),
        on_run_ended=results.append,
        player_name="Ana",
    )


def hit_player(game: DodgeGame):
    player = game.world.player
    game.world.obstacles.append(hazard(player.x, player.y))
    game.on_tick(FRAME)


def test_game_starts_idle_without_a_run(game) -> None:
    assert game.phase is GamePhase.IDLE
    assert game.world is None

    game.on_tick(FRAME)
    game.on_spawn_timer()

    assert game.world is None


def test_selecting_a_mode_starts_a_run_with_its_timer(game, scheduler) -> None:
    world = game.select_mode(Mode.NORMAL)

    assert game.phase is GamePhase.RUNNING
    assert world.run.score == 0
    assert [t.name for t in scheduler.timers] == ["obstacle_spawn"]


def test_shooting_mode_adds_the_projectile_timer(game, scheduler) -> None:
    game.select_mode("shooting")

    names = sorted(t.name for t in scheduler.timers)
    assert names == ["obstacle_spawn", "projectile_spawn"]

    scheduler.advance(500)
    assert len(game.world.projectiles) == 1
    assert game.world.projectiles[0].x == game.world.player.x


def test_unknown_mode_is_rejected(game) -> None:
    with pytest.raises(ValueError):
        game.select_mode("zen")
    assert game.phase is GamePhase.IDLE


def test_cannot_select_mode_during_a_run(game) -> None:
    game.select_mode(Mode.NORMAL)

    with pytest.raises(RuntimeError):
        game.select_mode(Mode.ASIAN)


def test_spawn_timer_creates_obstacles_up_to_capacity(game, scheduler) -> None:
    world = game.select_mode(Mode.NORMAL)
    world.run.current_capacity = 2

    scheduler.advance(500)
    assert len(world.obstacles) == 1

    scheduler.advance(500 * 5)
    assert len(world.obstacles) == 2


def test_hazard_hit_ends_the_run_and_reports_once(game, scheduler, results) -> None:
    game.select_mode(Mode.NORMAL)
    game.world.run.score = 12

    hit_player(game)
    game.on_tick(FRAME)

    assert game.phase is GamePhase.GAME_OVER
    assert results == [RunResult(mode=Mode.NORMAL, player_name="Ana", score=12)]
    assert game.last_result == results[0]
    assert scheduler.timers == []


def test_game_over_is_latched(game, scheduler) -> None:
    world = game.select_mode(Mode.NORMAL)
    hit_player(game)
    world.obstacles = [hazard(100, 601)]

    game.on_tick(FRAME)
    game.on_spawn_timer()
    scheduler.advance(5000)

    assert world.run.score == 0
    assert len(world.obstacles) == 1
    assert game.phase is GamePhase.GAME_OVER


def test_failing_result_hook_does_not_break_the_game(scheduler) -> None:
    def explode(result):
        raise ConnectionError("leaderboard down")

    game = DodgeGame(scheduler=scheduler, rng=random.Random(1), on_run_ended=explode)
    game.select_mode(Mode.ASIAN)
    hit_player(game)

    assert game.phase is GamePhase.GAME_OVER


def test_restart_resets_the_run(game, scheduler) -> None:
    world = game.select_mode(Mode.NORMAL)
    world.run.current_capacity = 7
    world.run.score = 30
    world.run.speed_multiplier = 1.2
    for _ in range(3):
        game.on_spawn_timer()
    assert len(world.obstacles) == 3

    game.restart()

    assert game.phase is GamePhase.IDLE
    assert scheduler.timers == []
    fresh = game.world
    assert fresh is not world
    assert fresh.obstacles == []
    assert fresh.projectiles == []
    assert fresh.run.score == 0
    assert fresh.run.speed_multiplier == 1.0
    assert fresh.run.player_speed == 24.0
    assert 1 <= fresh.run.current_capacity <= 5


def test_restart_after_game_over_allows_a_new_run(game, scheduler) -> None:
    game.select_mode(Mode.SHOOTING)
    game.world.obstacles.append(hazard(100, 601))
    game.on_tick(FRAME)
    assert game.phase is GamePhase.GAME_OVER

    game.restart()
    game.restart()

    world = game.select_mode(Mode.ASIAN)
    assert game.phase is GamePhase.RUNNING
    assert world.profile.mode is Mode.ASIAN
    assert [t.name for t in scheduler.timers] == ["obstacle_spawn"]


def test_timers_from_a_finished_run_do_not_fire(game, scheduler) -> None:
    game.select_mode(Mode.SHOOTING)
    timers = list(scheduler.timers)

    game.restart()

    assert all(not t.active for t in timers)
    assert game.world.projectiles == []


def test_run_properties_hold_over_a_long_session(scheduler, results) -> None:
    game = DodgeGame(scheduler=scheduler, rng=random.Random(7), on_run_ended=results.append)
    world = game.select_mode(Mode.ASIAN)
    rng = random.Random(11)

    last_score = 0
    last_speed_threshold = world.run.next_speed_increase_score
    last_capacity_threshold = world.run.next_capacity_increase_score

    for _ in range(5000):
        live_before = len(world.live_obstacles)
        scheduler.advance(FRAME)
        live_after = len(world.live_obstacles)
        assert live_after <= max(world.run.current_capacity, live_before)
        assert live_after - live_before <= 1

        game.on_tick(FRAME, DodgeIntent(target_x=rng.uniform(0, 800)))

        run = world.run
        assert run.score >= last_score
        assert run.next_speed_increase_score >= last_speed_threshold
        assert run.next_capacity_increase_score >= last_capacity_threshold
        last_score = run.score
        last_speed_threshold = run.next_speed_increase_score
        last_capacity_threshold = run.next_capacity_increase_score

        if game.phase is GamePhase.GAME_OVER:
            break

    if game.phase is GamePhase.GAME_OVER:
        assert results[-1].score == world.run.score
