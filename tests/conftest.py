"""Shared fixtures: an in-memory playground driven through recording sockets."""
from __future__ import annotations

import random
from typing import List, Optional

import pytest

from pairplay.config import Settings
from pairplay.playground import Playground
from pairplay.profiles import PlayerProfile
from pairplay.session import PlayerConnection


class SyncedPlayground(Playground):
    """Waits for queued events after every call so tests can assert on sockets directly."""

    async def connect(self, profile, socket):
        conn = await super().connect(profile, socket)
        await self.flush()
        return conn

    async def handle(self, conn, raw):
        await super().handle(conn, raw)
        await self.flush()

    async def disconnect(self, conn):
        await super().disconnect(conn)
        await self.flush()


class FakeSocket:
    """Records everything the server sends to one client."""

    def __init__(self) -> None:
        self.sent: List[dict] = []
        self.closed_with: Optional[int] = None

    async def send_json(self, data: dict) -> None:
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed_with = code

    def of_type(self, event_type: str) -> List[dict]:
        return [m for m in self.sent if m["type"] == event_type]

    def last(self, event_type: str) -> dict:
        matches = self.of_type(event_type)
        assert matches, f"no {event_type!r} event in {[m['type'] for m in self.sent]}"
        return matches[-1]

    def types(self) -> List[str]:
        return [m["type"] for m in self.sent]


@pytest.fixture
def settings() -> Settings:
    # No timers unless a test opts in.
    return Settings(invite_timeout_seconds=0)


@pytest.fixture
def playground(settings: Settings) -> Playground:
    return SyncedPlayground(settings, rng=random.Random(7))


@pytest.fixture
def join(playground: Playground):
    """Connect a player and move them to ``(x, y)``; returns ``(conn, socket)``."""

    async def _join(player_id: str, x: float, y: float, gender: Optional[str] = None):
        socket = FakeSocket()
        profile = PlayerProfile(player_id=player_id, username=player_id.capitalize(), gender=gender)
        conn: PlayerConnection = await playground.connect(profile, socket)
        await playground.handle(conn, {"type": "move", "x": x, "y": y, "direction": "down", "isMoving": False})
        return conn, socket

    return _join
