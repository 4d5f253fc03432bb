"""Tests for the private room manager."""
from __future__ import annotations

import pytest

from pairplay.constants import MAX_MESSAGE_LENGTH, ROOM_HISTORY_LIMIT
from pairplay.exceptions import AlreadyEngaged, Unauthorized
from pairplay.private_rooms import PrivateRoom, RoomManager, clean_message
from pairplay.profiles import PlayerProfile
from pairplay.session import SessionRegistry

from .conftest import FakeSocket


@pytest.fixture
def registry() -> SessionRegistry:
    registry = SessionRegistry()
    for pid in ("a", "b", "c"):
        registry.register(PlayerProfile(player_id=pid, username=pid.upper()), FakeSocket())
    return registry


@pytest.fixture
def manager(registry: SessionRegistry) -> RoomManager:
    return RoomManager(registry)


def test_create_room_links_both_members(registry, manager):
    a, b = registry.get("a"), registry.get("b")

    room = manager.create_room(a, b)

    assert room.members == ("a", "b")
    assert a.current_room_id == b.current_room_id == room.room_id
    assert room.room_id in manager


def test_room_ids_are_unique_across_rapid_cycles(registry, manager):
    a, b = registry.get("a"), registry.get("b")
    seen = set()
    for _ in range(20):
        room = manager.create_room(a, b)
        seen.add(room.room_id)
        manager.close_room(room.room_id)

    assert len(seen) == 20


def test_room_requires_two_distinct_members():
    with pytest.raises(ValueError):
        PrivateRoom("r", "a", "a")


def test_player_cannot_be_in_two_rooms(registry, manager):
    manager.create_room(registry.get("a"), registry.get("b"))

    with pytest.raises(AlreadyEngaged):
        manager.create_room(registry.get("c"), registry.get("a"))

    assert registry.get("c").current_room_id is None
    assert len(manager) == 1


def test_post_message_truncates_to_limit(registry, manager):
    room = manager.create_room(registry.get("a"), registry.get("b"))

    message = manager.post_message(registry.get("a"), room.room_id, "x" * 300)

    assert len(message.message) == MAX_MESSAGE_LENGTH
    assert room.history()[-1] is message


def test_post_message_trims_and_drops_blank(registry, manager):
    room = manager.create_room(registry.get("a"), registry.get("b"))

    assert manager.post_message(registry.get("a"), room.room_id, "   \n ") is None
    assert manager.post_message(registry.get("b"), room.room_id, "  hey  ").message == "hey"
    assert [m.message for m in room.history()] == ["hey"]


def test_non_member_cannot_post(registry, manager):
    room = manager.create_room(registry.get("a"), registry.get("b"))

    with pytest.raises(Unauthorized):
        manager.post_message(registry.get("c"), room.room_id, "let me in")
    with pytest.raises(Unauthorized):
        manager.post_message(registry.get("a"), "no-such-room", "hello")

    assert room.history() == []


def test_history_keeps_latest_messages_only(registry, manager):
    room = manager.create_room(registry.get("a"), registry.get("b"))
    for i in range(ROOM_HISTORY_LIMIT + 5):
        manager.post_message(registry.get("a"), room.room_id, f"m{i}")

    history = room.history()
    assert len(history) == ROOM_HISTORY_LIMIT
    assert history[0].message == "m5"
    assert history[-1].message == f"m{ROOM_HISTORY_LIMIT + 4}"


def test_messages_keep_order_and_sender(registry, manager):
    room = manager.create_room(registry.get("a"), registry.get("b"))
    for sender, text in (("a", "hi"), ("b", "how are you"), ("a", "bye")):
        manager.post_message(registry.get(sender), room.room_id, text)

    assert [(m.from_id, m.message) for m in room.history()[-3:]] == [
        ("a", "hi"),
        ("b", "how are you"),
        ("a", "bye"),
    ]


def test_close_room_clears_membership(registry, manager):
    a, b = registry.get("a"), registry.get("b")
    room = manager.create_room(a, b)

    closed = manager.close_room(room.room_id)

    assert closed is room
    assert a.current_room_id is None and b.current_room_id is None
    assert manager.get(room.room_id) is None
    assert manager.close_room(room.room_id) is None


def test_partner_of(registry, manager):
    room = manager.create_room(registry.get("a"), registry.get("b"))

    assert room.partner_of("a") == "b"
    assert room.partner_of("b") == "a"
    with pytest.raises(Unauthorized):
        room.partner_of("c")


def test_clean_message():
    assert clean_message("  hello world ") == "hello world"
    assert clean_message("y" * 201) == "y" * 200
