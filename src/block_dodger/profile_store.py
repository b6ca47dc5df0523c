"""
Local player profile: name, skin and personal high scores.
"""

from __future__ import annotations

import json
from pathlib import Path

from block_dodger.constants import DEFAULT_PLAYER_NAME, SKINS
from block_dodger.modes import Mode
from block_dodger.utils import logger

PLAYER_NAME_KEY = "playerName"
PLAYER_SKIN_KEY = "playerSkin"
HIGHSCORE_KEY_PREFIX = "highscore_"

# skin -> (mode that counts or None for the best of any mode; score needed)
SKIN_UNLOCKS = {
    "2": (None, 100),
    "3": (Mode.ASIAN, 120),
}


class ProfileStore:
    """
    Flat key/value store persisted as a JSON file.

    Every write goes straight to disk. With no path the store lives in
    memory only.
    """

    def __init__(self, path: Path | None = None):
        """
        :param path: JSON file backing the store, or None for memory only
        :type path: Path | None
        """
        self.path = Path(path) if path is not None else None
        self._data: dict = self._load()

    def _load(self) -> dict:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable profile {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed profile {self.path}")
            return {}
        return data

    def _save(self):
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

    def get(self, key: str, default=None):
        return self._data.get(key, default)

    def set(self, key: str, value):
        self._data[key] = value
        self._save()

    @property
    def player_name(self) -> str:
        return self.get(PLAYER_NAME_KEY) or DEFAULT_PLAYER_NAME

    @player_name.setter
    def player_name(self, name: str):
        name = name.strip()
        if not name:
            raise ValueError("Player name cannot be empty")
        self.set(PLAYER_NAME_KEY, name)

    @property
    def has_player_name(self) -> bool:
        return bool(self.get(PLAYER_NAME_KEY))

    @property
    def skin(self) -> str:
        skin = self.get(PLAYER_SKIN_KEY, SKINS[0])
        if skin in SKINS and self.is_skin_unlocked(skin):
            return skin
        return SKINS[0]

    @skin.setter
    def skin(self, skin: str):
        if not self.is_skin_unlocked(skin):
            raise ValueError(f"Skin {skin!r} is still locked")
        self.set(PLAYER_SKIN_KEY, skin)

    def is_skin_unlocked(self, skin: str) -> bool:
        """
        Whether the personal bests are good enough to wear skin.

        :raises ValueError: If skin is not one of SKINS.
        """
        if skin not in SKINS:
            raise ValueError(f"Unknown skin {skin!r}, expected one of {SKINS}")
        if skin not in SKIN_UNLOCKS:
            return True
        mode, needed = SKIN_UNLOCKS[skin]
        if mode is None:
            best = max(self.high_score(m) for m in Mode)
        else:
            best = self.high_score(mode)
        return best >= needed

    @property
    def unlocked_skins(self) -> tuple[str, ...]:
        return tuple(s for s in SKINS if self.is_skin_unlocked(s))

    def next_skin(self) -> str:
        """The unlocked skin after the current one, wrapping around."""
        index = SKINS.index(self.skin)
        for step in range(1, len(SKINS) + 1):
            candidate = SKINS[(index + step) % len(SKINS)]
            if self.is_skin_unlocked(candidate):
                return candidate
        return self.skin

    def high_score(self, mode: Mode | str) -> int:
        key = HIGHSCORE_KEY_PREFIX + Mode(mode).value
        try:
            return int(self.get(key, 0))
        except (TypeError, ValueError):
            return 0

    def record_score(self, mode: Mode | str, score: int) -> bool:
        """
        Store score as the personal best for mode if it beats the current one.

        :return: True if it was a new personal best.
        :rtype: bool
        """
        mode = Mode(mode)
        if score <= self.high_score(mode):
            return False
        self.set(HIGHSCORE_KEY_PREFIX + mode.value, int(score))
        logger.info(f"New personal best in {mode.value}: {score}")
        return True
