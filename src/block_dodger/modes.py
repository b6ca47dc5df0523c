"""
Mode profiles: the static tuning table for each game mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Mode(str, Enum):
    NORMAL = "normal"
    ASIAN = "asian"
    SHOOTING = "shooting"


class CapacityFamily(str, Enum):
    """
    Shape of the capacity escalation formula.

    NORMAL re-rolls capacity every ``2 * score_threshold`` points and grows
    the upper bound once per that interval; ASIAN does both every
    ``score_threshold`` points.
    """

    NORMAL = "normal"
    ASIAN = "asian"


@dataclass(frozen=True)
class ModeProfile:
    """
    Immutable tuning for one mode.
    """

    mode: Mode
    min_concurrent_obstacles: int
    max_concurrent_obstacles: int
    obstacle_speed_min: int
    obstacle_speed_max: int
    spawn_interval_ms: int
    speed_growth_factor: float
    capacity_growth_step: int
    score_threshold: int
    capacity_family: CapacityFamily = CapacityFamily.NORMAL
    escape_is_failure: bool = False  # hazards must be shot down, not dodged
    has_projectiles: bool = False

    def __post_init__(self):
        if self.min_concurrent_obstacles > self.max_concurrent_obstacles:
            raise ValueError(
                f"{self.mode.value}: min obstacles "
                f"({self.min_concurrent_obstacles}) > max obstacles "
                f"({self.max_concurrent_obstacles})"
            )
        if self.min_concurrent_obstacles < 0:
            raise ValueError(f"{self.mode.value}: negative obstacle count")
        if self.obstacle_speed_min <= 0 or self.obstacle_speed_max <= 0:
            raise ValueError(f"{self.mode.value}: speeds must be positive")
        if self.obstacle_speed_min > self.obstacle_speed_max:
            raise ValueError(f"{self.mode.value}: speed range is inverted")
        if self.spawn_interval_ms <= 0:
            raise ValueError(f"{self.mode.value}: spawn interval must be positive")
        if self.speed_growth_factor <= 0 or self.score_threshold <= 0:
            raise ValueError(
                f"{self.mode.value}: growth factor and threshold must be positive"
            )

    @property
    def capacity_interval(self) -> int:
        """Score distance between capacity re-rolls (and growth divisor)."""
        if self.capacity_family is CapacityFamily.ASIAN:
            return self.score_threshold
        return self.score_threshold * 2


MODE_PROFILES: dict[Mode, ModeProfile] = {
    Mode.NORMAL: ModeProfile(
        mode=Mode.NORMAL,
        min_concurrent_obstacles=1,
        max_concurrent_obstacles=5,
        obstacle_speed_min=5,
        obstacle_speed_max=10,
        spawn_interval_ms=500,
        speed_growth_factor=1.05,
        capacity_growth_step=1,
        score_threshold=10,
    ),
    Mode.ASIAN: ModeProfile(
        mode=Mode.ASIAN,
        min_concurrent_obstacles=2,
        max_concurrent_obstacles=8,
        obstacle_speed_min=8,
        obstacle_speed_max=13,
        spawn_interval_ms=300,
        speed_growth_factor=1.10,
        capacity_growth_step=2,
        score_threshold=10,
        capacity_family=CapacityFamily.ASIAN,
    ),
    Mode.SHOOTING: ModeProfile(
        mode=Mode.SHOOTING,
        min_concurrent_obstacles=1,
        max_concurrent_obstacles=4,
        obstacle_speed_min=4,
        obstacle_speed_max=8,
        spawn_interval_ms=600,
        speed_growth_factor=1.05,
        capacity_growth_step=1,
        score_threshold=10,
        escape_is_failure=True,
        has_projectiles=True,
    ),
}


def get_profile(mode: Mode | str) -> ModeProfile:
    """
    Look up the profile for a mode.

    :param mode: Mode or its string value ("normal", "asian", "shooting")
    :type mode: Mode | str

    :raises ValueError: If the mode is not one of the known modes.
    """
    return MODE_PROFILES[Mode(mode)]
