import asyncio

import pygame
import pytest

from block_dodger.app import PygameTimerScheduler, claim_player_name
from block_dodger.leaderboard import InMemoryLeaderboard, LeaderboardService
from block_dodger.profile_store import ProfileStore


@pytest.fixture
def set_timer_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(
        pygame.time, "set_timer", lambda event, millis: calls.append((event, millis))
    )
    return calls


def test_pygame_timer_starts_and_cancels_once(set_timer_calls) -> None:
    scheduler = PygameTimerScheduler()
    timer = scheduler.every("obstacle_spawn", 500, lambda: None)

    timer.cancel()
    timer.cancel()

    assert timer.active is False
    assert set_timer_calls == [(timer.event_type, 500), (timer.event_type, 0)]


def test_dispatch_runs_only_active_timers(set_timer_calls) -> None:
    calls = []
    scheduler = PygameTimerScheduler()
    timer = scheduler.every("obstacle_spawn", 500, lambda: calls.append(1))
    event = pygame.event.Event(timer.event_type)

    assert scheduler.dispatch(event) is True
    timer.cancel()
    assert scheduler.dispatch(event) is True
    assert calls == [1]


def test_dispatch_ignores_other_events(set_timer_calls) -> None:
    scheduler = PygameTimerScheduler()
    scheduler.every("obstacle_spawn", 500, lambda: None)

    assert scheduler.dispatch(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_a)) is False


def test_every_with_the_same_name_replaces_the_timer(set_timer_calls) -> None:
    calls = []
    scheduler = PygameTimerScheduler()
    old = scheduler.every("obstacle_spawn", 500, lambda: calls.append("old"))
    new = scheduler.every("obstacle_spawn", 300, lambda: calls.append("new"))

    assert new.event_type == old.event_type
    assert old.active is False
    assert set_timer_calls[-2:] == [(old.event_type, 0), (new.event_type, 300)]

    scheduler.dispatch(pygame.event.Event(new.event_type))
    assert calls == ["new"]


def test_cancel_all_stops_every_timer(set_timer_calls) -> None:
    scheduler = PygameTimerScheduler()
    spawn = scheduler.every("obstacle_spawn", 500, lambda: None)
    shots = scheduler.every("projectile_spawn", 500, lambda: None)

    scheduler.cancel_all()
    scheduler.cancel_all()

    assert spawn.active is False
    assert shots.active is False
    assert set_timer_calls.count((spawn.event_type, 0)) == 1
    assert set_timer_calls.count((shots.event_type, 0)) == 1


def test_new_name_is_claimed_and_stored() -> None:
    backend = InMemoryLeaderboard()
    profile = ProfileStore()

    name = asyncio.run(claim_player_name(LeaderboardService(backend), profile, "bo"))

    assert name == "bo"
    assert profile.player_name == "bo"
    assert backend.names == {"bo"}


def test_taken_name_keeps_the_stored_one() -> None:
    backend = InMemoryLeaderboard()
    backend.register_name("bo")
    profile = ProfileStore()
    profile.player_name = "ana"

    name = asyncio.run(claim_player_name(LeaderboardService(backend), profile, "bo"))

    assert name == "ana"
    assert profile.player_name == "ana"


def test_own_name_is_not_claimed_twice() -> None:
    backend = InMemoryLeaderboard()
    backend.register_name("ana")
    profile = ProfileStore()
    profile.player_name = "ana"

    name = asyncio.run(claim_player_name(LeaderboardService(backend), profile, "ana"))

    assert name == "ana"


@pytest.mark.parametrize("wanted", [None, "", "   "])
def test_blank_name_means_no_name(wanted) -> None:
    backend = InMemoryLeaderboard()
    profile = ProfileStore()

    name = asyncio.run(claim_player_name(LeaderboardService(backend), profile, wanted))

    assert name == "Guest"
    assert profile.has_player_name is False
    assert backend.names == set()


def test_padded_name_is_claimed_and_stored_the_same() -> None:
    backend = InMemoryLeaderboard()
    profile = ProfileStore()

    name = asyncio.run(claim_player_name(LeaderboardService(backend), profile, " Ana "))

    assert name == "Ana"
    assert profile.player_name == "Ana"
    assert backend.names == {"Ana"}
