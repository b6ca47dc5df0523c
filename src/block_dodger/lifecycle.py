"""
Run lifecycle: Idle -> Running -> GameOver -> Idle.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from block_dodger.constants import (
    DEFAULT_PLAYER_NAME,
    PROJECTILE_INTERVAL_MS,
    WINDOW_SIZE,
)
from block_dodger.modes import Mode, ModeProfile, get_profile
from block_dodger.scenes.dodge import (
    DodgeIntent,
    DodgeTickContext,
    DodgeWorld,
    ObstacleSpawner,
    ProjectileSpawner,
    SystemPipeline,
    default_systems,
)
from block_dodger.timers import TimerScheduler
from block_dodger.utils import logger


class GamePhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class RunResult:
    """
    Emitted once when a run ends.
    """

    mode: Mode
    player_name: str
    score: int


RunEndedCallback = Callable[[RunResult], None]


class DodgeGame:
    """
    Owns the current run, its timers and the system pipeline.

    The host calls ``on_tick`` once per frame and pumps the scheduler it
    passed in; the two periodic timers call ``on_spawn_timer`` and
    ``on_projectile_timer``.
    """

    def __init__(
        self,
        viewport: tuple[float, float] = WINDOW_SIZE,
        scheduler=None,
        rng: random.Random | None = None,
        on_run_ended: RunEndedCallback | None = None,
        player_name: str = DEFAULT_PLAYER_NAME,
    ):  # pylint: disable=too-many-arguments
        """
        :param viewport: Screen size (width, height)
        :type viewport: tuple[float, float]

        :param scheduler: Anything with ``every(name, interval_ms, callback)``
            returning a cancellable timer. Defaults to a ``TimerScheduler``.

        :param rng: Random source for capacities and spawns
        :type rng: random.Random | None

        :param on_run_ended: Called with the result when a run ends
        :type on_run_ended: Callable[[RunResult], None] | None

        :param player_name: Name reported with the run result
        :type player_name: str
        """
        self.viewport = viewport
        self.scheduler = scheduler if scheduler is not None else TimerScheduler()
        self.rng = rng or random.Random()
        self.on_run_ended = on_run_ended
        self.player_name = player_name

        self.pipeline = SystemPipeline(default_systems())
        self.obstacle_spawner = ObstacleSpawner()
        self.projectile_spawner = ProjectileSpawner()

        self.world: DodgeWorld | None = None
        self.last_result: RunResult | None = None
        self._phase = GamePhase.IDLE
        self._last_profile: ModeProfile | None = None
        self._spawn_timer = None
        self._projectile_timer = None

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase is GamePhase.RUNNING

    def select_mode(self, mode: Mode | str) -> DodgeWorld:
        """
        Start a run in the given mode.

        :raises ValueError: If the mode is unknown.
        :raises RuntimeError: If a run is in progress or not yet restarted.
        """
        if self._phase is not GamePhase.IDLE:
            raise RuntimeError(f"Cannot select a mode while {self._phase.value}")

        profile = get_profile(mode)
        self._last_profile = profile
        self.world = DodgeWorld.create(profile, self.viewport, self.rng)
        self.last_result = None
        self._phase = GamePhase.RUNNING

        self._spawn_timer = self.scheduler.every(
            "obstacle_spawn", profile.spawn_interval_ms, self.on_spawn_timer
        )
        if profile.has_projectiles:
            self._projectile_timer = self.scheduler.every(
                "projectile_spawn", PROJECTILE_INTERVAL_MS, self.on_projectile_timer
            )

        logger.info(
            f"Run started: mode={profile.mode.value} "
            f"capacity={self.world.run.current_capacity}"
        )
        return self.world

    def on_tick(self, elapsed_ms: float, intent: DodgeIntent | None = None):
        """Advance the running simulation by one frame."""
        if not self.is_running or self.world is None:
            return

        ctx = DodgeTickContext(
            world=self.world,
            elapsed_ms=elapsed_ms,
            intent=intent or DodgeIntent(),
        )
        self.pipeline.step(ctx)

        if self.world.run.is_terminal:
            self._game_over()

    def on_spawn_timer(self):
        if not self.is_running or self.world is None:
            return
        self.obstacle_spawner.spawn(self.world)

    def on_projectile_timer(self):
        if not self.is_running or self.world is None:
            return
        self.projectile_spawner.spawn(self.world)

    def restart(self):
        """
        Drop the current run and return to Idle with a freshly reset state.
        """
        self._cancel_timers()

        if self._last_profile is not None:
            self.world = DodgeWorld.create(self._last_profile, self.viewport, self.rng)
        else:
            self.world = None

        previous = self._phase
        self._phase = GamePhase.IDLE
        if previous is not GamePhase.IDLE:
            logger.info("Back to mode selection")

    def _game_over(self):
        if self._phase is GamePhase.GAME_OVER:
            return

        self._phase = GamePhase.GAME_OVER
        self._cancel_timers()

        run = self.world.run
        self.last_result = RunResult(
            mode=run.profile.mode,
            player_name=self.player_name,
            score=run.score,
        )
        logger.info(
            f"Game over: {self.player_name} scored {run.score} "
            f"({run.profile.mode.value})"
        )

        if self.on_run_ended is None:
            return
        try:
            self.on_run_ended(self.last_result)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f"Failed to report run result: {e}")

    def _cancel_timers(self):
        for timer in (self._spawn_timer, self._projectile_timer):
            if timer is not None:
                timer.cancel()
        self._spawn_timer = None
        self._projectile_timer = None
