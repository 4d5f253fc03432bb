"""Per-connection send queues.

State transitions only enqueue; a writer task per connection does the
socket I/O, so a slow client delays nobody but itself. Events reach each
socket in the order they were queued.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol, Tuple

from .logging_config import get_logger

logger = get_logger(__name__)

_Item = Tuple[Optional[dict], Optional[int], bool]  # payload, close code, stop


class Connection(Protocol):
    """What the playground needs from a transport connection (a Starlette ``WebSocket`` fits)."""

    async def send_json(self, data: dict) -> None:
        ...

    async def close(self, code: int = 1000) -> None:
        ...


class Outbox:
    def __init__(self, player_id: str, socket: Connection):
        self.player_id = player_id
        self.socket = socket
        self.closed = False
        self.broken = False
        self._queue: "asyncio.Queue[_Item]" = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None

    def put(self, payload: dict) -> None:
        if not self.closed:
            self._enqueue((payload, None, False))

    def close(self, code: Optional[int] = None) -> None:
        """Flush what is queued, optionally close the socket with *code*, then stop."""
        if self.closed:
            return
        self.closed = True
        if self._task is None and code is None:
            return
        self._enqueue((None, code, True))

    async def join(self) -> None:
        """Wait until everything queued so far has been written (or dropped)."""
        await self._queue.join()

    def cancel(self) -> None:
        self.closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def _enqueue(self, item: _Item) -> None:
        self._queue.put_nowait(item)
        if self._task is None:
            self._task = asyncio.create_task(self._pump())

    async def _pump(self) -> None:
        while True:
            payload, close_code, stop = await self._queue.get()
            try:
                if payload is not None and not self.broken:
                    await self.socket.send_json(payload)
                if close_code is not None and not self.broken:
                    await self.socket.close(code=close_code)
            except Exception as exc:
                # The receive loop of that connection runs the disconnect cascade.
                self.broken = True
                logger.warning("Dropping events for unreachable player", player_id=self.player_id, error=str(exc))
            finally:
                self._queue.task_done()
            if stop:
                return


__all__ = ["Connection", "Outbox"]
