"""Pydantic data schemas used across the backend service.

This module centralises every wire payload: the REST request/response
bodies and one model per playground event in each direction. Python
attributes are snake_case; the JSON on the wire is camelCase.
"""
from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

Direction = Literal["up", "down", "left", "right"]
Gender = Literal["Male", "Female"]


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


# -----------------------------
# Runtime
# -----------------------------

class PlayerView(WireModel):
    """Public state of a connected player, as every other client sees it."""

    player_id: str
    username: str
    color: str
    x: float
    y: float
    direction: Direction = "down"
    is_moving: bool = False
    gender: Optional[Gender] = None
    sprite: str = "boy"


class NearbyPlayer(WireModel):
    player_id: str
    username: str
    color: str
    distance: float


class ChatMessage(WireModel):
    from_id: str
    from_username: str
    from_color: str
    message: str
    timestamp: int  # epoch milliseconds


# -----------------------------
# Client -> server events
# -----------------------------

class MoveEvent(WireModel):
    type: Literal["move"]
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    direction: Direction = "down"
    is_moving: bool = False


class ChatInviteEvent(WireModel):
    type: Literal["chat-invite"]
    target_id: str


class ChatInviteAcceptEvent(WireModel):
    type: Literal["chat-invite-accept"]
    from_id: str


class ChatInviteDeclineEvent(WireModel):
    type: Literal["chat-invite-decline"]
    from_id: str


class PrivateMessageEvent(WireModel):
    type: Literal["private-message"]
    room_id: str
    message: str


class LeaveChatEvent(WireModel):
    type: Literal["leave-chat"]
    room_id: str


ClientEvent = Annotated[
    Union[
        MoveEvent,
        ChatInviteEvent,
        ChatInviteAcceptEvent,
        ChatInviteDeclineEvent,
        PrivateMessageEvent,
        LeaveChatEvent,
    ],
    Field(discriminator="type"),
]

client_event_adapter: TypeAdapter[ClientEvent] = TypeAdapter(ClientEvent)


# -----------------------------
# Server -> client events
# -----------------------------

class InitEvent(WireModel):
    type: Literal["init"] = "init"
    self_id: str
    players: List[PlayerView]


class PlayerJoinedEvent(WireModel):
    type: Literal["player-joined"] = "player-joined"
    player: PlayerView
    message: str


class PlayerMovedEvent(WireModel):
    type: Literal["player-moved"] = "player-moved"
    player_id: str
    x: float
    y: float
    direction: Direction
    is_moving: bool


class PlayerLeftEvent(WireModel):
    type: Literal["player-left"] = "player-left"
    player_id: str
    username: str
    message: str


class NearbyPlayersEvent(WireModel):
    type: Literal["nearby-players"] = "nearby-players"
    nearby: List[NearbyPlayer]


class ChatInviteReceivedEvent(WireModel):
    type: Literal["chat-invite-received"] = "chat-invite-received"
    from_id: str
    from_username: str
    from_color: str


class ChatInviteSentEvent(WireModel):
    type: Literal["chat-invite-sent"] = "chat-invite-sent"
    to_id: str
    to_username: str


class ChatInviteDeclinedEvent(WireModel):
    type: Literal["chat-invite-declined"] = "chat-invite-declined"
    by_id: str
    by_username: str
    expired: bool = False


class ChatInviteExpiredEvent(WireModel):
    type: Literal["chat-invite-expired"] = "chat-invite-expired"
    from_id: str
    from_username: str


class ChatRoomJoinedEvent(WireModel):
    type: Literal["chat-room-joined"] = "chat-room-joined"
    room_id: str
    partner_id: str
    partner_username: str
    partner_color: str


class PrivateMessageReceivedEvent(WireModel):
    type: Literal["private-message-received"] = "private-message-received"
    room_id: str
    from_id: str
    from_username: str
    from_color: str
    message: str
    timestamp: int


class ChatRoomClosedEvent(WireModel):
    type: Literal["chat-room-closed"] = "chat-room-closed"
    room_id: str
    reason: str


class ErrorEvent(WireModel):
    type: Literal["error"] = "error"
    message: str


class KickedEvent(WireModel):
    type: Literal["kicked"] = "kicked"
    reason: str


# -----------------------------
# REST request / response models
# -----------------------------

class RegisterRequest(WireModel):
    username: str
    password: str
    display_name: Optional[str] = Field(default=None, max_length=100)
    gender: Optional[Gender] = None


class LoginRequest(WireModel):
    username: str
    password: str


class AuthResponse(WireModel):
    token: str
    user_id: str
    username: str
    space_id: Optional[str] = None


class ProfileResponse(WireModel):
    user_id: str
    username: str
    display_name: str
    gender: Optional[Gender] = None
    partner_id: Optional[str] = None


class UpdateGenderRequest(WireModel):
    gender: Optional[Gender] = None


class MessageResponse(WireModel):
    success: bool = True
    message: str


class PartnerInviteRequest(WireModel):
    target_id: str


class PartnerInviteView(WireModel):
    from_id: str
    from_name: str
    # milliseconds since the epoch
    timestamp: int


class NotificationsResponse(WireModel):
    pending_invite: Optional[PartnerInviteView] = None


class RespondInviteRequest(WireModel):
    accept: bool


class SpaceData(WireModel):
    notes: List[Any]
    images: List[Any]
    dates: List[Any]
    pet: Dict[str, Any]
    sunflower: Dict[str, Any]


class SpaceResponse(WireModel):
    data: SpaceData
    username: str
    gender: Optional[Gender] = None
    partner_name: Optional[str] = None
    partner_gender: Optional[Gender] = None
    my_id: str


class SaveSpaceRequest(WireModel):
    # one of SPACE_FIELDS; checked by the route so an unknown section is a 400
    type: str
    payload: Any = None


class PlaygroundStatus(WireModel):
    players: int
    rooms: int
    pending_invites: int


__all__ = [
    # runtime
    "Direction",
    "Gender",
    "WireModel",
    "PlayerView",
    "NearbyPlayer",
    "ChatMessage",
    # client events
    "MoveEvent",
    "ChatInviteEvent",
    "ChatInviteAcceptEvent",
    "ChatInviteDeclineEvent",
    "PrivateMessageEvent",
    "LeaveChatEvent",
    "ClientEvent",
    "client_event_adapter",
    # server events
    "InitEvent",
    "PlayerJoinedEvent",
    "PlayerMovedEvent",
    "PlayerLeftEvent",
    "NearbyPlayersEvent",
    "ChatInviteReceivedEvent",
    "ChatInviteSentEvent",
    "ChatInviteDeclinedEvent",
    "ChatInviteExpiredEvent",
    "ChatRoomJoinedEvent",
    "PrivateMessageReceivedEvent",
    "ChatRoomClosedEvent",
    "ErrorEvent",
    "KickedEvent",
    # REST
    "RegisterRequest",
    "LoginRequest",
    "AuthResponse",
    "ProfileResponse",
    "UpdateGenderRequest",
    "MessageResponse",
    "PartnerInviteRequest",
    "PartnerInviteView",
    "NotificationsResponse",
    "RespondInviteRequest",
    "SpaceData",
    "SpaceResponse",
    "SaveSpaceRequest",
    "PlaygroundStatus",
]
