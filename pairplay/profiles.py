"""Account/profile lookup consumed by the playground on connect."""
from __future__ import annotations

from typing import Dict, Optional, Protocol

from pydantic import BaseModel

from .auth_utils import find_user
from .schemas import Gender


def sprite_for(gender: Optional[str]) -> str:
    return "girl" if gender == "Female" else "boy"


class PlayerProfile(BaseModel):
    player_id: str
    username: str
    gender: Optional[Gender] = None

    @property
    def sprite(self) -> str:
        return sprite_for(self.gender)


class ProfileLookup(Protocol):
    async def fetch(self, player_id: str) -> Optional[PlayerProfile]:
        ...


class TortoiseProfileLookup:
    """Reads profiles from the ``users`` table."""

    async def fetch(self, player_id: str) -> Optional[PlayerProfile]:
        user = await find_user(player_id)
        if user is None:
            return None
        gender = user.gender if user.gender in ("Male", "Female") else None
        return PlayerProfile(player_id=str(user.id), username=user.username, gender=gender)


class InMemoryProfileLookup:
    """Fixed set of profiles, for tests and local tooling."""

    def __init__(self, profiles: Optional[Dict[str, PlayerProfile]] = None):
        self.profiles: Dict[str, PlayerProfile] = dict(profiles or {})

    def add(self, profile: PlayerProfile) -> None:
        self.profiles[profile.player_id] = profile

    async def fetch(self, player_id: str) -> Optional[PlayerProfile]:
        return self.profiles.get(player_id)


__all__ = [
    "sprite_for",
    "PlayerProfile",
    "ProfileLookup",
    "TortoiseProfileLookup",
    "InMemoryProfileLookup",
]
