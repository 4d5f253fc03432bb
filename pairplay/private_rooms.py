"""Ephemeral two-person chat rooms."""
from __future__ import annotations

import itertools
import time
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

from .constants import MAX_MESSAGE_LENGTH, ROOM_HISTORY_LIMIT
from .exceptions import AlreadyEngaged, Unauthorized
from .schemas import ChatMessage
from .session import PlayerConnection, SessionRegistry


def _now_ms() -> int:
    return int(time.time() * 1000)


def clean_message(text: str) -> str:
    """Trim surrounding whitespace and cut to ``MAX_MESSAGE_LENGTH`` characters."""
    return text.strip()[:MAX_MESSAGE_LENGTH]


class PrivateRoom:
    """A chat between exactly two players, with a bounded message history."""

    def __init__(self, room_id: str, member_a: str, member_b: str):
        if member_a == member_b:
            raise ValueError("a private room needs two distinct members")
        self.room_id = room_id
        self.members: Tuple[str, str] = (member_a, member_b)
        self.messages: Deque[ChatMessage] = deque(maxlen=ROOM_HISTORY_LIMIT)
        self.created_at = _now_ms()

    def has_member(self, player_id: str) -> bool:
        return player_id in self.members

    def partner_of(self, player_id: str) -> str:
        a, b = self.members
        if player_id == a:
            return b
        if player_id == b:
            return a
        raise Unauthorized("You are not in this chat")

    def history(self) -> List[ChatMessage]:
        return list(self.messages)


class RoomManager:
    """Creates, relays into and tears down :class:`PrivateRoom` instances.

    Player membership is mirrored on ``PlayerConnection.current_room_id``;
    both sides are always updated together.
    """

    def __init__(self, registry: SessionRegistry):
        self._registry = registry
        self._rooms: Dict[str, PrivateRoom] = {}
        self._sequence = itertools.count(1)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def get(self, room_id: str) -> Optional[PrivateRoom]:
        return self._rooms.get(room_id)

    def rooms(self) -> List[PrivateRoom]:
        return list(self._rooms.values())

    def _new_room_id(self, a: str, b: str) -> str:
        return f"private_{a}_{b}_{_now_ms()}_{next(self._sequence)}"

    def create_room(self, a: PlayerConnection, b: PlayerConnection) -> PrivateRoom:
        if a.current_room_id or b.current_room_id:
            raise AlreadyEngaged("Already chatting")
        room = PrivateRoom(self._new_room_id(a.player_id, b.player_id), a.player_id, b.player_id)
        self._rooms[room.room_id] = room
        a.current_room_id = room.room_id
        b.current_room_id = room.room_id
        return room

    def member_room(self, player_id: str, room_id: str) -> PrivateRoom:
        """Return *room_id* if *player_id* belongs to it, else raise ``Unauthorized``."""
        room = self._rooms.get(room_id)
        if room is None or not room.has_member(player_id):
            raise Unauthorized("You are not in this chat")
        return room

    def post_message(self, sender: PlayerConnection, room_id: str, text: str) -> Optional[ChatMessage]:
        """Append *text* to the room history; ``None`` if nothing is left after trimming."""
        room = self.member_room(sender.player_id, room_id)
        body = clean_message(text)
        if not body:
            return None
        message = ChatMessage(
            from_id=sender.player_id,
            from_username=sender.username,
            from_color=sender.color,
            message=body,
            timestamp=_now_ms(),
        )
        room.messages.append(message)
        return message

    def close_room(self, room_id: str) -> Optional[PrivateRoom]:
        """Delete the room and clear both members' ``current_room_id``."""
        room = self._rooms.pop(room_id, None)
        if room is None:
            return None
        for member_id in room.members:
            conn = self._registry.get(member_id)
            if conn is not None and conn.current_room_id == room_id:
                conn.current_room_id = None
        return room

    def clear(self) -> None:
        for room_id in list(self._rooms):
            self.close_room(room_id)


__all__ = ["clean_message", "PrivateRoom", "RoomManager"]
