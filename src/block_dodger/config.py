"""
Game settings, built from a nested dict or from command line arguments.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path

from block_dodger.constants import FPS, LEADERBOARD_LIMIT, WINDOW_SIZE
from block_dodger.utils import find_data_dir

LEADERBOARD_BACKENDS = ("memory", "local", "http")


@dataclass
class GameSettings:  # pylint: disable=too-many-instance-attributes
    """
    Game settings
    """

    width: int = WINDOW_SIZE[0]
    height: int = WINDOW_SIZE[1]
    fps: int = FPS
    title: str = "Block Dodger"
    leaderboard_backend: str = "local"
    leaderboard_url: str | None = None
    leaderboard_limit: int = LEADERBOARD_LIMIT
    data_dir: Path = field(default_factory=lambda: find_data_dir(create=False))
    player_name: str | None = None
    log_level: str = "INFO"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.validate()

    def validate(self):
        """
        :raises ValueError: If any setting is out of range or inconsistent.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid window size {self.width}x{self.height}")
        if self.fps <= 0:
            raise ValueError(f"Invalid fps {self.fps}")
        if self.leaderboard_backend not in LEADERBOARD_BACKENDS:
            raise ValueError(
                f"Unknown leaderboard backend {self.leaderboard_backend!r}, "
                f"expected one of {LEADERBOARD_BACKENDS}"
            )
        if self.leaderboard_backend == "http" and not self.leaderboard_url:
            raise ValueError("The http leaderboard needs a leaderboard url")
        if self.leaderboard_limit <= 0:
            raise ValueError(f"Invalid leaderboard limit {self.leaderboard_limit}")

    @property
    def viewport(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def profile_path(self) -> Path:
        return self.data_dir / "profile.json"

    @property
    def leaderboard_path(self) -> Path:
        return self.data_dir / "leaderboard.json"

    @classmethod
    def from_dict(cls, data: dict) -> GameSettings:
        """
        Build settings from a nested dict::

            {
                "window": {"width": 800, "height": 600, "fps": 60, "title": "..."},
                "leaderboard": {"backend": "http", "url": "...", "limit": 10},
                "storage": {"data_dir": "~/.block_dodger"},
                "player": {"name": "Ana"},
                "logging": {"level": "DEBUG"},
            }

        Missing sections and keys keep their defaults.
        """
        window = data.get("window", {})
        leaderboard = data.get("leaderboard", {})
        storage = data.get("storage", {})
        player = data.get("player", {})
        logging_cfg = data.get("logging", {})

        kwargs = {
            "width": window.get("width"),
            "height": window.get("height"),
            "fps": window.get("fps"),
            "title": window.get("title"),
            "leaderboard_backend": leaderboard.get("backend"),
            "leaderboard_url": leaderboard.get("url"),
            "leaderboard_limit": leaderboard.get("limit"),
            "data_dir": (
                Path(storage["data_dir"]).expanduser()
                if storage.get("data_dir")
                else None
            ),
            "player_name": player.get("name"),
            "log_level": logging_cfg.get("level"),
        }
        return cls(**{k: v for k, v in kwargs.items() if v is not None})

    def to_dict(self) -> dict:
        return {
            "window": {
                "width": self.width,
                "height": self.height,
                "fps": self.fps,
                "title": self.title,
            },
            "leaderboard": {
                "backend": self.leaderboard_backend,
                "url": self.leaderboard_url,
                "limit": self.leaderboard_limit,
            },
            "storage": {"data_dir": str(self.data_dir)},
            "player": {"name": self.player_name},
            "logging": {"level": self.log_level},
        }

    @classmethod
    def from_args(cls, argv: list[str] | None = None) -> GameSettings:
        parser = build_parser()
        args = parser.parse_args(argv)
        return cls.from_dict(
            {
                "window": {"width": args.width, "height": args.height, "fps": args.fps},
                "leaderboard": {
                    "backend": args.leaderboard,
                    "url": args.leaderboard_url,
                    "limit": args.leaderboard_limit,
                },
                "storage": {"data_dir": args.data_dir},
                "player": {"name": args.name},
                "logging": {"level": args.log_level},
            }
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="block-dodger", description="Dodge the falling blocks."
    )
    parser.add_argument("--width", type=int, help="Window width in pixels")
    parser.add_argument("--height", type=int, help="Window height in pixels")
    parser.add_argument("--fps", type=int, help="Frame rate cap")
    parser.add_argument(
        "--leaderboard",
        choices=LEADERBOARD_BACKENDS,
        help="Where scores are stored (default: local)",
    )
    parser.add_argument("--leaderboard-url", help="Base url of the http leaderboard")
    parser.add_argument("--leaderboard-limit", type=int, help="Rows per leaderboard")
    parser.add_argument("--data-dir", help="Directory for the local save files")
    parser.add_argument("--name", help="Player name to play as")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return parser
