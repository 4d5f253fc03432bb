"""Proximity checks between connected players.

``nearby_of`` is a linear scan over every connection. That is fine for a
playground with a few hundred players; beyond that the scan can move to a
grid bucket index without changing the function's contract.
"""
from __future__ import annotations

import math
from typing import List

from .constants import PROXIMITY_RADIUS
from .schemas import NearbyPlayer
from .session import PlayerConnection, SessionRegistry


def distance(a: PlayerConnection, b: PlayerConnection) -> float:
    """Euclidean distance between two players."""
    return math.hypot(a.x - b.x, a.y - b.y)


def within_range(a: PlayerConnection, b: PlayerConnection, radius: float = PROXIMITY_RADIUS) -> bool:
    return distance(a, b) <= radius


def nearby_of(
    registry: SessionRegistry, player_id: str, radius: float = PROXIMITY_RADIUS
) -> List[NearbyPlayer]:
    """Return the other connected players within *radius* of *player_id*, closest first.

    Room membership does not hide anyone here; clients filter their current
    chat partner out of the list themselves.

    Raises
    ------
    TargetNotFound
        If *player_id* is not connected.
    """
    me = registry.require(player_id)
    nearby: List[NearbyPlayer] = []
    for other in registry:
        if other.player_id == me.player_id:
            continue
        dist = distance(me, other)
        if dist <= radius:
            nearby.append(
                NearbyPlayer(
                    player_id=other.player_id,
                    username=other.username,
                    color=other.color,
                    distance=round(dist, 2),
                )
            )
    nearby.sort(key=lambda p: p.distance)
    return nearby


__all__ = ["distance", "within_range", "nearby_of"]
