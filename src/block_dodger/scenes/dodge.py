"""
Dodge scene: run state, world and the per-tick systems.

Nothing in here touches the display, the clock or input devices; the app
turns those into a ``DodgeIntent`` and an elapsed time and hands them over.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

from block_dodger.constants import (
    BASE_PLAYER_SPEED,
    BONUS_CHANCE,
    BONUS_REWARD,
    ESCAPE_REWARD,
    FRAME_MS,
    OBSTACLE_SPAWN_MARGIN,
    OBSTACLE_SPAWN_Y,
    PLAYER_BOTTOM_OFFSET,
    PLAYER_SPEED_GROWTH,
    PROJECTILE_HIT_REWARD,
    PROJECTILE_SPEED,
)
from block_dodger.entities import Obstacle, ObstacleKind, PlayerAvatar, Projectile
from block_dodger.modes import ModeProfile
from block_dodger.utils import clamp, logger


def roll_capacity(profile: ModeProfile, rng: random.Random, score: int = 0) -> int:
    """
    Roll a capacity in [min, max + growth], growth depending on score.

    The upper bound grows by ``capacity_growth_step`` for every
    ``capacity_interval`` points scored.
    """
    growth = (score // profile.capacity_interval) * profile.capacity_growth_step
    return rng.randint(
        profile.min_concurrent_obstacles,
        profile.max_concurrent_obstacles + growth,
    )


@dataclass
class RunState:
    """
    Scalar state of one run.
    """

    profile: ModeProfile
    score: int = 0
    speed_multiplier: float = 1.0
    player_speed: float = BASE_PLAYER_SPEED
    next_speed_increase_score: int = 0
    next_capacity_increase_score: int = 0
    current_capacity: int = 0
    is_terminal: bool = False

    @classmethod
    def start(cls, profile: ModeProfile, rng: random.Random) -> RunState:
        return cls(
            profile=profile,
            next_speed_increase_score=profile.score_threshold,
            next_capacity_increase_score=profile.capacity_interval,
            current_capacity=roll_capacity(profile, rng),
        )

    def add_score(self, points: int) -> bool:
        """Add points unless the run is over. Returns whether score changed."""
        if self.is_terminal or points <= 0:
            return False
        self.score += points
        return True

    def mark_terminal(self) -> bool:
        """Latch the terminal flag. Returns True only on the first call."""
        if self.is_terminal:
            return False
        self.is_terminal = True
        return True


@dataclass
class DodgeWorld:
    """
    Everything one run owns: state, player and live entities.
    """

    viewport: tuple[float, float]
    run: RunState
    player: PlayerAvatar
    obstacles: list[Obstacle] = field(default_factory=list)
    projectiles: list[Projectile] = field(default_factory=list)
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def create(
        cls,
        profile: ModeProfile,
        viewport: tuple[float, float],
        rng: random.Random | None = None,
    ) -> DodgeWorld:
        rng = rng or random.Random()
        vw, vh = viewport
        return cls(
            viewport=viewport,
            run=RunState.start(profile, rng),
            player=PlayerAvatar(x=vw / 2, y=vh - PLAYER_BOTTOM_OFFSET),
            rng=rng,
        )

    @property
    def profile(self) -> ModeProfile:
        return self.run.profile

    @property
    def live_obstacles(self) -> list[Obstacle]:
        return [o for o in self.obstacles if o.alive]

    @property
    def live_projectiles(self) -> list[Projectile]:
        return [p for p in self.projectiles if p.alive]


@dataclass
class DodgeIntent:
    """
    Player input for one tick.

    ``move_left``/``move_right`` are keyboard impulses in [0, 1];
    ``target_x`` is a pointer position to track, or None.
    """

    move_left: float = 0.0
    move_right: float = 0.0
    target_x: float | None = None


@dataclass
class DodgeTickContext:
    """
    Dodge Tick Context
    """

    world: DodgeWorld
    elapsed_ms: float
    intent: DodgeIntent = field(default_factory=DodgeIntent)

    @property
    def dt(self) -> float:
        return self.elapsed_ms / FRAME_MS


@dataclass
class ProgressionSystem:
    """
    Escalate difficulty when score crosses the next thresholds.

    Steps at most once per tick for speed and once for capacity; score grows
    by at most 10 per tick, less than one threshold.
    """

    name: str = "dodge_progression"
    order: int = 10

    def step(self, ctx: DodgeTickContext):
        run = ctx.world.run
        profile = run.profile

        if run.score >= run.next_speed_increase_score:
            run.speed_multiplier *= profile.speed_growth_factor
            run.player_speed *= PLAYER_SPEED_GROWTH
            run.next_speed_increase_score += profile.score_threshold
            logger.debug(
                f"Speed up at score {run.score}: "
                f"x{run.speed_multiplier:.3f}, player {run.player_speed:.2f}"
            )

        if run.score >= run.next_capacity_increase_score:
            run.current_capacity = roll_capacity(profile, ctx.world.rng, run.score)
            run.next_capacity_increase_score += profile.capacity_interval
            logger.debug(
                f"Capacity re-rolled at score {run.score}: {run.current_capacity}"
            )


@dataclass
class PlayerMoveSystem:
    """
    Move the player from intent, then clamp into the screen.
    """

    name: str = "dodge_player_move"
    order: int = 20

    def step(self, ctx: DodgeTickContext):
        world = ctx.world
        player = world.player
        intent = ctx.intent
        step = world.run.player_speed * ctx.dt

        # left wins when both are held
        if intent.move_left:
            player.x -= intent.move_left * step
        elif intent.move_right:
            player.x += intent.move_right * step

        if intent.target_x is not None:
            diff = intent.target_x - player.x
            if abs(diff) > step:
                player.x += math.copysign(step, diff)
            else:
                player.x = intent.target_x

        lo, hi = player.bounds(world.viewport[0])
        player.x = clamp(player.x, lo, hi)


@dataclass
class ObstacleMoveSystem:
    """Moves obstacles down with the current speed multiplier."""

    name: str = "dodge_obstacle_move"
    order: int = 30

    def step(self, ctx: DodgeTickContext):
        multiplier = ctx.world.run.speed_multiplier
        for o in ctx.world.obstacles:
            if not o.alive:
                continue
            o.y += o.effective_speed(multiplier) * ctx.dt


@dataclass
class ProjectileMoveSystem:
    """Moves projectiles up and kills those past the top edge."""

    name: str = "dodge_projectile_move"
    order: int = 32

    def step(self, ctx: DodgeTickContext):
        for p in ctx.world.projectiles:
            if not p.alive:
                continue
            p.y -= p.speed * ctx.dt
            if p.y < 0:
                p.kill()


@dataclass
class ProjectileHazardCollisionSystem:
    """Projectile hitting a hazard destroys both and scores a point."""

    name: str = "dodge_projectile_hazard_collision"
    order: int = 42

    def step(self, ctx: DodgeTickContext):
        world = ctx.world
        if not world.projectiles or not world.obstacles:
            return

        for p in world.projectiles:
            if not p.alive:
                continue

            for o in world.obstacles:
                if not o.alive or not o.is_hazard:
                    continue

                if p.collider.colliderect(o.collider):
                    p.kill()
                    o.kill()
                    world.run.add_score(PROJECTILE_HIT_REWARD)
                    break


@dataclass
class PlayerObstacleCollisionSystem:
    """
    Bonus contact scores and removes the bonus; hazard contact ends the run.
    """

    name: str = "dodge_player_obstacle_collision"
    order: int = 45

    def step(self, ctx: DodgeTickContext):
        world = ctx.world
        run = world.run
        player_collider = world.player.collider

        for o in world.obstacles:
            if run.is_terminal:
                return
            if not o.alive:
                continue
            if not player_collider.colliderect(o.collider):
                continue

            if o.is_bonus:
                run.add_score(BONUS_REWARD)
                o.kill()
            elif run.mark_terminal():
                logger.info(f"Hit a hazard at score {run.score}")


@dataclass
class ObstacleEscapeSystem:
    """
    Obstacles falling past the bottom edge are removed.

    An escaping hazard scores a point, or ends the run when the mode
    requires every hazard to be shot down.
    """

    name: str = "dodge_obstacle_escape"
    order: int = 47

    def step(self, ctx: DodgeTickContext):
        world = ctx.world
        run = world.run
        _, vh = world.viewport

        for o in world.obstacles:
            if not o.alive or o.y <= vh:
                continue

            o.kill()
            if not o.is_hazard or run.is_terminal:
                continue

            if run.profile.escape_is_failure:
                if run.mark_terminal():
                    logger.info(f"A hazard got through at score {run.score}")
            else:
                run.add_score(ESCAPE_REWARD)


@dataclass
class CullSystem:
    """Drops destroyed entities from the world."""

    name: str = "dodge_cull"
    order: int = 50

    def step(self, ctx: DodgeTickContext):
        world = ctx.world
        world.obstacles = world.live_obstacles
        world.projectiles = world.live_projectiles


class SystemPipeline:
    """
    Runs systems in ascending ``order``.
    """

    def __init__(self, systems=None):
        self.systems = []
        for system in systems or ():
            self.add(system)

    def add(self, system):
        self.systems.append(system)
        self.systems.sort(key=lambda s: s.order)

    def step(self, ctx: DodgeTickContext):
        for system in self.systems:
            system.step(ctx)


def default_systems() -> list:
    return [
        ProgressionSystem(),
        PlayerMoveSystem(),
        ObstacleMoveSystem(),
        ProjectileMoveSystem(),
        ProjectileHazardCollisionSystem(),
        PlayerObstacleCollisionSystem(),
        ObstacleEscapeSystem(),
        CullSystem(),
    ]


@dataclass
class ObstacleSpawner:
    """
    Creates at most one obstacle per spawn tick, gated by capacity.
    """

    bonus_chance: float = BONUS_CHANCE
    margin: float = OBSTACLE_SPAWN_MARGIN

    def spawn(self, world: DodgeWorld) -> Obstacle | None:
        run = world.run
        if run.is_terminal:
            return None

        live = len(world.live_obstacles)
        if live >= run.current_capacity:
            return None

        rng = world.rng
        profile = run.profile
        vw, _ = world.viewport

        kind = (
            ObstacleKind.BONUS
            if rng.random() < self.bonus_chance
            else ObstacleKind.HAZARD
        )
        x = rng.randint(int(self.margin), int(vw - self.margin))
        base_speed = rng.randint(profile.obstacle_speed_min, profile.obstacle_speed_max)

        obstacle = Obstacle(x=x, y=OBSTACLE_SPAWN_Y, base_speed=base_speed, kind=kind)
        world.obstacles.append(obstacle)
        logger.debug(
            f"Spawned {kind.value} at x={x} speed={base_speed} "
            f"({live + 1}/{run.current_capacity})"
        )
        return obstacle


@dataclass
class ProjectileSpawner:
    """
    Fires one projectile from the player's current position.
    """

    speed: float = PROJECTILE_SPEED

    def spawn(self, world: DodgeWorld) -> Projectile | None:
        if world.run.is_terminal or not world.profile.has_projectiles:
            return None

        player = world.player
        projectile = Projectile(x=player.x, y=player.top, speed=self.speed)
        world.projectiles.append(projectile)
        return projectile
