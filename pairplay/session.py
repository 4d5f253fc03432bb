"""Session registry: who is online in the playground and where."""
from __future__ import annotations

import random
import uuid
from typing import Dict, Iterator, List, Optional

from .constants import COLOR_PALETTE, SPAWN_MARGIN, WORLD_HEIGHT, WORLD_WIDTH
from .exceptions import TargetNotFound
from .outbox import Connection, Outbox
from .profiles import PlayerProfile
from .schemas import PlayerView


class PlayerConnection:
    """Live state of one connected player. Owned by :class:`SessionRegistry`."""

    def __init__(self, profile: PlayerProfile, socket: Connection, x: float, y: float, color: str):
        self.player_id = profile.player_id
        self.connection_id = uuid.uuid4().hex
        self.username = profile.username
        self.gender = profile.gender
        self.sprite = profile.sprite
        self.color = color
        self.socket = socket
        self.outbox = Outbox(self.player_id, socket)
        self.x = x
        self.y = y
        self.direction = "down"
        self.is_moving = False
        self.current_room_id: Optional[str] = None

    def view(self) -> PlayerView:
        return PlayerView(
            player_id=self.player_id,
            username=self.username,
            color=self.color,
            x=self.x,
            y=self.y,
            direction=self.direction,
            is_moving=self.is_moving,
            gender=self.gender,
            sprite=self.sprite,
        )

    def __repr__(self) -> str:
        return f"<PlayerConnection {self.player_id} ({self.username}) at {self.x:.0f},{self.y:.0f}>"


class SessionRegistry:
    """Maps player ids to their live :class:`PlayerConnection`."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._players: Dict[str, PlayerConnection] = {}
        self._rng = rng or random.Random()

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[PlayerConnection]:
        return iter(list(self._players.values()))

    def spawn_point(self) -> tuple[float, float]:
        x = self._rng.uniform(SPAWN_MARGIN, WORLD_WIDTH - SPAWN_MARGIN)
        y = self._rng.uniform(SPAWN_MARGIN, WORLD_HEIGHT - SPAWN_MARGIN)
        return round(x), round(y)

    def register(self, profile: PlayerProfile, socket: Connection) -> PlayerConnection:
        """Store a new connection with a random spawn point and palette colour.

        The caller must unregister any previous connection of the same player
        first; registering twice is a programming error.
        """
        if profile.player_id in self._players:
            raise ValueError(f"player {profile.player_id} is already registered")
        x, y = self.spawn_point()
        conn = PlayerConnection(profile, socket, x=x, y=y, color=self._rng.choice(COLOR_PALETTE))
        self._players[conn.player_id] = conn
        return conn

    def get(self, player_id: str) -> Optional[PlayerConnection]:
        return self._players.get(player_id)

    def require(self, player_id: str) -> PlayerConnection:
        conn = self._players.get(player_id)
        if conn is None:
            raise TargetNotFound("Player not found")
        return conn

    def update_position(
        self, player_id: str, x: float, y: float, direction: str, is_moving: bool
    ) -> PlayerConnection:
        # Positions are trusted as reported by the client.
        conn = self.require(player_id)
        conn.x = x
        conn.y = y
        conn.direction = direction
        conn.is_moving = is_moving
        return conn

    def unregister(self, player_id: str) -> Optional[PlayerConnection]:
        return self._players.pop(player_id, None)

    def snapshot(self) -> List[PlayerView]:
        return [conn.view() for conn in self._players.values()]

    def clear(self) -> None:
        self._players.clear()


__all__ = ["Connection", "PlayerConnection", "SessionRegistry"]
