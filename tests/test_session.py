"""Tests for the session registry."""
from __future__ import annotations

import random

import pytest

from pairplay.constants import COLOR_PALETTE, SPAWN_MARGIN, WORLD_HEIGHT, WORLD_WIDTH
from pairplay.exceptions import TargetNotFound
from pairplay.profiles import PlayerProfile
from pairplay.session import SessionRegistry

from .conftest import FakeSocket


def _profile(player_id: str, gender=None) -> PlayerProfile:
    return PlayerProfile(player_id=player_id, username=player_id.upper(), gender=gender)


def test_register_assigns_spawn_inside_world_and_palette_colour():
    registry = SessionRegistry(rng=random.Random(1))

    for i in range(50):
        conn = registry.register(_profile(f"p{i}"), FakeSocket())
        assert SPAWN_MARGIN <= conn.x <= WORLD_WIDTH - SPAWN_MARGIN
        assert SPAWN_MARGIN <= conn.y <= WORLD_HEIGHT - SPAWN_MARGIN
        assert conn.color in COLOR_PALETTE
        assert conn.current_room_id is None

    assert len(registry) == 50


def test_register_twice_is_rejected():
    registry = SessionRegistry()
    registry.register(_profile("a"), FakeSocket())

    with pytest.raises(ValueError):
        registry.register(_profile("a"), FakeSocket())


def test_each_connection_gets_its_own_connection_id():
    registry = SessionRegistry()
    first = registry.register(_profile("a"), FakeSocket())
    registry.unregister("a")
    second = registry.register(_profile("a"), FakeSocket())

    assert first.connection_id != second.connection_id


def test_update_position_overwrites_kinematics():
    registry = SessionRegistry()
    registry.register(_profile("a"), FakeSocket())

    conn = registry.update_position("a", 12.5, -40, "left", True)

    assert (conn.x, conn.y, conn.direction, conn.is_moving) == (12.5, -40, "left", True)


def test_update_position_of_unknown_player_raises():
    registry = SessionRegistry()

    with pytest.raises(TargetNotFound):
        registry.update_position("ghost", 0, 0, "down", False)


def test_snapshot_lists_public_state_of_everyone():
    registry = SessionRegistry()
    registry.register(_profile("a", gender="Female"), FakeSocket())
    registry.register(_profile("b"), FakeSocket())

    snapshot = {view.player_id: view for view in registry.snapshot()}

    assert set(snapshot) == {"a", "b"}
    assert snapshot["a"].sprite == "girl"
    assert snapshot["b"].sprite == "boy"
    assert "playerId" in snapshot["a"].to_wire()


def test_unregister_removes_player():
    registry = SessionRegistry()
    registry.register(_profile("a"), FakeSocket())

    removed = registry.unregister("a")

    assert removed is not None and removed.player_id == "a"
    assert "a" not in registry
    assert registry.unregister("a") is None
