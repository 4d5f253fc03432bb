"""Pending chat invites between pairs of players.

Invites are keyed by the ordered pair ``(from_id, to_id)``; an invite in the
other direction is a separate entry. Each entry can carry an expiry timer.
"""
from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

InviteKey = Tuple[str, str]


def _now_ms() -> int:
    return int(time.time() * 1000)


class PendingInvite(BaseModel):
    from_id: str
    to_id: str
    from_username: str
    from_color: str
    timestamp: int = Field(default_factory=_now_ms)

    @property
    def key(self) -> InviteKey:
        return (self.from_id, self.to_id)

    def involves(self, player_id: str) -> bool:
        return player_id in (self.from_id, self.to_id)


ExpiryCallback = Callable[[PendingInvite], Awaitable[None]]


class InviteBook:
    """At most one pending invite per ordered pair."""

    def __init__(self) -> None:
        self._pending: Dict[InviteKey, PendingInvite] = {}
        self._timers: Dict[InviteKey, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def add(
        self,
        invite: PendingInvite,
        timeout: Optional[float] = None,
        on_expire: Optional[ExpiryCallback] = None,
    ) -> PendingInvite:
        """Store *invite*, replacing (and un-timing) any entry for the same pair."""
        self._cancel_timer(invite.key)
        self._pending[invite.key] = invite
        if timeout and on_expire is not None:
            self._timers[invite.key] = asyncio.create_task(
                self._expire_after(invite, timeout, on_expire)
            )
        return invite

    def get(self, from_id: str, to_id: str) -> Optional[PendingInvite]:
        return self._pending.get((from_id, to_id))

    def pop(self, from_id: str, to_id: str) -> Optional[PendingInvite]:
        self._cancel_timer((from_id, to_id))
        return self._pending.pop((from_id, to_id), None)

    def involving(self, player_id: str) -> List[PendingInvite]:
        return [inv for inv in self._pending.values() if inv.involves(player_id)]

    def discard_involving(self, player_id: str) -> List[PendingInvite]:
        """Drop every invite sent by or to *player_id* and return them."""
        dropped = self.involving(player_id)
        for inv in dropped:
            self.pop(inv.from_id, inv.to_id)
        return dropped

    def cancel_all(self) -> None:
        for key in list(self._timers):
            self._cancel_timer(key)
        self._pending.clear()

    # -------------------- Expiry -------------------- #

    def _cancel_timer(self, key: InviteKey) -> None:
        task = self._timers.pop(key, None)
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def _expire_after(self, invite: PendingInvite, delay: float, on_expire: ExpiryCallback) -> None:
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            return
        if self._timers.get(invite.key) is asyncio.current_task():
            del self._timers[invite.key]
        await on_expire(invite)


__all__ = ["InviteKey", "PendingInvite", "InviteBook"]
