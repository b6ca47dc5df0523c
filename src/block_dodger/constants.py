"""
Constants for the game.
"""

from __future__ import annotations

FPS = 60
WINDOW_SIZE = (800, 600)

# Motion is tuned per 60 Hz frame; elapsed time is normalized to it.
FRAME_MS = 16.67

# Player
PLAYER_SIZE = (40, 40)
PLAYER_BOTTOM_OFFSET = 80  # distance from the bottom edge to the player centre
BASE_PLAYER_SPEED = 24.0
PLAYER_SPEED_GROWTH = 1.10

# Obstacles
OBSTACLE_SIZE = (40, 40)
OBSTACLE_SPAWN_MARGIN = 40
OBSTACLE_SPAWN_Y = 0.0
BONUS_CHANCE = 0.10

# Scoring
BONUS_REWARD = 10
ESCAPE_REWARD = 1
PROJECTILE_HIT_REWARD = 1

# Projectiles (shooting mode)
PROJECTILE_SIZE = (6, 14)
PROJECTILE_SPEED = 12.0
PROJECTILE_INTERVAL_MS = 500

LEADERBOARD_LIMIT = 10
DEFAULT_PLAYER_NAME = "Guest"
SKINS = ("1", "2", "3")
