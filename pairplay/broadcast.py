"""Fan-out of playground events over the session registry."""
from __future__ import annotations

from typing import Iterable, Optional

from .schemas import WireModel
from .session import PlayerConnection, SessionRegistry


class WorldBroadcaster:
    """Stateless publisher; subscribers are whoever is registered right now.

    Delivery only queues the event on the connection's outbox, so it is safe
    to call while holding the playground lock.
    """

    def __init__(self, registry: SessionRegistry):
        self._registry = registry

    def deliver(self, conn: PlayerConnection, event: WireModel) -> None:
        conn.outbox.put(event.to_wire())

    def send_to(self, player_id: str, event: WireModel) -> None:
        conn = self._registry.get(player_id)
        if conn is not None:
            self.deliver(conn, event)

    def send_many(self, player_ids: Iterable[str], event: WireModel) -> None:
        for player_id in player_ids:
            self.send_to(player_id, event)

    def publish(self, event: WireModel, exclude: Optional[str] = None) -> None:
        """Queue *event* for every registered player except *exclude*."""
        payload = event.to_wire()
        for conn in self._registry:
            if conn.player_id != exclude:
                conn.outbox.put(payload)


__all__ = ["WorldBroadcaster"]
