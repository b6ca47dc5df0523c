"""
Block Dodger entities
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import pygame

from block_dodger.constants import (
    OBSTACLE_SIZE,
    PLAYER_SIZE,
    PROJECTILE_SIZE,
    PROJECTILE_SPEED,
)


def centered_rect(x: float, y: float, size: tuple[float, float]) -> pygame.Rect:
    """Build a collision rect of the given size centred on (x, y)."""
    w, h = size
    rect = pygame.Rect(0, 0, int(w), int(h))
    rect.center = (round(x), round(y))
    return rect


class ObstacleKind(str, Enum):
    HAZARD = "hazard"
    BONUS = "bonus"


@dataclass
class Obstacle:
    """
    Falling obstacle entity.

    ``base_speed`` is rolled once at spawn; the effective speed is
    ``base_speed * speed_multiplier`` with the multiplier of the current tick.
    """

    x: float
    y: float
    base_speed: int
    kind: ObstacleKind = ObstacleKind.HAZARD
    size: tuple[float, float] = OBSTACLE_SIZE
    alive: bool = True
    spawn_x: float = field(init=False)

    def __post_init__(self):
        self.spawn_x = self.x

    @property
    def is_hazard(self) -> bool:
        return self.kind is ObstacleKind.HAZARD

    @property
    def is_bonus(self) -> bool:
        return self.kind is ObstacleKind.BONUS

    @property
    def collider(self) -> pygame.Rect:
        return centered_rect(self.x, self.y, self.size)

    def effective_speed(self, speed_multiplier: float) -> float:
        return self.base_speed * speed_multiplier

    def kill(self):
        """Mark the obstacle destroyed. Safe to call more than once."""
        self.alive = False


@dataclass
class Projectile:
    """
    Projectile entity (shooting mode), travels upwards.
    """

    x: float
    y: float
    speed: float = PROJECTILE_SPEED
    size: tuple[float, float] = PROJECTILE_SIZE
    alive: bool = True

    @property
    def collider(self) -> pygame.Rect:
        return centered_rect(self.x, self.y, self.size)

    def kill(self):
        self.alive = False


@dataclass
class PlayerAvatar:
    """
    Player entity. Only ``x`` moves; ``y`` is fixed for the whole run.
    """

    x: float
    y: float
    size: tuple[float, float] = PLAYER_SIZE

    @property
    def half_width(self) -> float:
        return self.size[0] / 2

    @property
    def top(self) -> float:
        return self.y - self.size[1] / 2

    @property
    def collider(self) -> pygame.Rect:
        return centered_rect(self.x, self.y, self.size)

    def bounds(self, screen_width: float) -> tuple[float, float]:
        """Return the inclusive [min_x, max_x] range for the centre."""
        return self.half_width, screen_width - self.half_width
