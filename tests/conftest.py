from __future__ import annotations

import os
import random

import pytest

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

from block_dodger.modes import Mode, get_profile  # noqa: E402
from block_dodger.scenes.dodge import (  # noqa: E402
    DodgeIntent,
    DodgeTickContext,
    DodgeWorld,
    SystemPipeline,
    default_systems,
)

VIEWPORT = (800, 600)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def make_world(rng):
    def _make(mode=Mode.NORMAL, capacity=None) -> DodgeWorld:
        world = DodgeWorld.create(get_profile(mode), VIEWPORT, rng)
        if capacity is not None:
            world.run.current_capacity = capacity
        return world

    return _make


@pytest.fixture
def tick():
    pipeline = SystemPipeline(default_systems())

    def _tick(world: DodgeWorld, elapsed_ms: float = 0.0, intent: DodgeIntent | None = None):
        pipeline.step(
            DodgeTickContext(world=world, elapsed_ms=elapsed_ms, intent=intent or DodgeIntent())
        )

    return _tick
