"""
Leaderboard: storage backends and the async facade the game talks to.

The game only ever submits a finished run and asks for the top scores of a
mode. Whatever sits behind that (memory, a local file, a web service) may be
slow or down; the facade turns any failure into "nothing" and logs it.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import requests

from block_dodger.constants import LEADERBOARD_LIMIT
from block_dodger.modes import Mode
from block_dodger.utils import logger


@dataclass(frozen=True)
class ScoreRow:
    name: str
    score: int


@dataclass(frozen=True)
class LeaderboardEntry:
    """
    One finished run, as stored by a backend.
    """

    mode: str
    name: str
    score: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> LeaderboardEntry:
        return cls(
            mode=str(data["mode"]),
            name=str(data["name"]),
            score=int(data["score"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


def rank(entries: list[LeaderboardEntry], mode: str, limit: int) -> list[ScoreRow]:
    """Top ``limit`` rows of a mode, best first; ties keep submission order."""
    rows = [e for e in entries if e.mode == mode]
    rows.sort(key=lambda e: e.score, reverse=True)
    return [ScoreRow(e.name, e.score) for e in rows[:limit]]


def format_leaderboard(rows: list[ScoreRow]) -> str:
    """
    Render rows as numbered lines, or "No entries".
    """
    if not rows:
        return "No entries"
    return "\n".join(f"{i}. {r.name} - {r.score}" for i, r in enumerate(rows, 1))


class LeaderboardBackend:
    """
    Leaderboard storage. Methods are blocking and may raise.
    """

    def submit(self, entry: LeaderboardEntry):
        """
        Store a finished run

        :raise NotImplementedError: Subclasses must implement this method
        """
        raise NotImplementedError("Subclasses must implement this method")

    def top_scores(self, mode: str, limit: int) -> list[ScoreRow]:
        """
        Best scores for a mode, descending

        :raise NotImplementedError: Subclasses must implement this method
        """
        raise NotImplementedError("Subclasses must implement this method")

    def is_name_available(self, name: str) -> bool:
        """
        Whether nobody registered this name yet

        :raise NotImplementedError: Subclasses must implement this method
        """
        raise NotImplementedError("Subclasses must implement this method")

    def register_name(self, name: str) -> bool:
        """
        Claim a name. Returns False when it is already taken.

        :raise NotImplementedError: Subclasses must implement this method
        """
        raise NotImplementedError("Subclasses must implement this method")


class InMemoryLeaderboard(LeaderboardBackend):
    """
    Keeps every run in memory. Lost when the process exits.
    """

    def __init__(self):
        self.entries: list[LeaderboardEntry] = []
        self.names: set[str] = set()

    def submit(self, entry: LeaderboardEntry):
        self.entries.append(entry)

    def top_scores(self, mode: str, limit: int) -> list[ScoreRow]:
        return rank(self.entries, mode, limit)

    def is_name_available(self, name: str) -> bool:
        return name not in self.names

    def register_name(self, name: str) -> bool:
        if name in self.names:
            return False
        self.names.add(name)
        return True


class LocalLeaderboard(InMemoryLeaderboard):
    """
    In-memory leaderboard mirrored to a JSON file after every change.
    """

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self):
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            self.entries = [
                LeaderboardEntry.from_dict(e) for e in data.get("entries", [])
            ]
            self.names = set(data.get("names", []))
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable leaderboard {self.path}: {e}")
            self.entries = []
            self.names = set()

    def _save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "entries": [e.to_dict() for e in self.entries],
            "names": sorted(self.names),
        }
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def submit(self, entry: LeaderboardEntry):
        super().submit(entry)
        self._save()

    def register_name(self, name: str) -> bool:
        registered = super().register_name(name)
        if registered:
            self._save()
        return registered


class HttpLeaderboard(LeaderboardBackend):
    """
    Client for the leaderboard web functions.

    ``POST {base}/submit-score`` with ``{"mode", "name", "score"}`` and
    ``GET {base}/get-leaderboard?mode=...`` returning ``{"leaderboard": [...]}``.
    The service has no notion of registered names.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def submit(self, entry: LeaderboardEntry):
        response = self.session.post(
            f"{self.base_url}/submit-score",
            json={"mode": entry.mode, "name": entry.name, "score": int(entry.score)},
            timeout=self.timeout,
        )
        response.raise_for_status()

    def top_scores(self, mode: str, limit: int) -> list[ScoreRow]:
        response = self.session.get(
            f"{self.base_url}/get-leaderboard",
            params={"mode": mode},
            timeout=self.timeout,
        )
        response.raise_for_status()

        rows = [
            ScoreRow(str(row["name"]), int(row["score"]))
            for row in response.json().get("leaderboard", [])
        ]
        rows.sort(key=lambda r: r.score, reverse=True)
        return rows[:limit]

    def is_name_available(self, name: str) -> bool:
        return True

    def register_name(self, name: str) -> bool:
        return True


def build_leaderboard_backend(settings) -> LeaderboardBackend:
    """
    Create the backend named in the settings.

    :raises ValueError: If the backend name is unknown.
    """
    backend = settings.leaderboard_backend
    if backend == "memory":
        return InMemoryLeaderboard()
    if backend == "local":
        return LocalLeaderboard(settings.leaderboard_path)
    if backend == "http":
        return HttpLeaderboard(settings.leaderboard_url)
    raise ValueError(f"Unknown leaderboard backend {backend!r}")


def _mode_value(mode: Mode | str) -> str:
    return mode.value if isinstance(mode, Mode) else str(mode)


class LeaderboardService:
    """
    Async, failure-proof access to a leaderboard backend.

    Every call is a single attempt run off the event loop thread. Failures
    are logged and turned into an empty or neutral answer.
    """

    def __init__(self, backend: LeaderboardBackend):
        self.backend = backend

    async def submit_run_result(self, mode: Mode | str, player_name: str, score: int):
        entry = LeaderboardEntry(mode=_mode_value(mode), name=player_name, score=score)
        try:
            await asyncio.to_thread(self.backend.submit, entry)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f"Failed to submit score for {player_name}: {e}")
            return
        logger.info(f"Score submitted for {player_name}: {score} ({entry.mode})")

    async def fetch_top_scores(
        self, mode: Mode | str, limit: int = LEADERBOARD_LIMIT
    ) -> list[ScoreRow]:
        try:
            return await asyncio.to_thread(
                self.backend.top_scores, _mode_value(mode), limit
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f"Failed to fetch leaderboard for {_mode_value(mode)}: {e}")
            return []

    async def is_name_available(self, name: str) -> bool:
        try:
            return await asyncio.to_thread(self.backend.is_name_available, name)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f"Failed to check name {name!r}: {e}")
            return True

    async def register_name(self, name: str) -> bool:
        try:
            return await asyncio.to_thread(self.backend.register_name, name)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f"Failed to register name {name!r}: {e}")
            return True


class RunReporter:
    """
    ``on_run_ended`` hook: saves the personal best and submits the run in a
    background task, so game over never waits on disk or network.
    """

    def __init__(self, service: LeaderboardService, profile_store=None):
        self.service = service
        self.profile_store = profile_store
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def __call__(self, result):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if self.profile_store is not None:
                self.profile_store.record_score(result.mode, result.score)
            logger.warning(
                f"No event loop running, score {result.score} for "
                f"{result.player_name} was not submitted"
            )
            return

        task = loop.create_task(self._report(result))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _report(self, result):
        if self.profile_store is not None:
            try:
                await asyncio.to_thread(
                    self.profile_store.record_score, result.mode, result.score
                )
            except OSError as e:
                logger.error(f"Failed to save personal best {result.score}: {e}")

        await self.service.submit_run_result(
            result.mode, result.player_name, result.score
        )

    async def drain(self):
        """Wait for every submission still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
