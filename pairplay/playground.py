"""The playground coordinator.

:class:`Playground` owns every piece of realtime state (sessions, pending
invites, private rooms) and applies one client event at a time under a
single lock, so each event is an atomic state transition. The messages a
transition emits are queued on each recipient's outbox and written after
the lock is released. Nothing here is persisted; a restart starts empty.
"""
from __future__ import annotations

import asyncio
import random
from typing import Any, List, Optional, Set, Union

from pydantic import ValidationError

from .broadcast import WorldBroadcaster
from .config import Settings
from .constants import (
    PROXIMITY_RADIUS,
    REASON_PARTNER_DISCONNECTED,
    REASON_PARTNER_LEFT,
    REASON_SELF_LEFT,
)
from .exceptions import AlreadyEngaged, OutOfRange, PlaygroundError, TargetNotFound, Unauthorized
from .invites import InviteBook, PendingInvite
from .logging_config import get_logger
from .outbox import Connection, Outbox
from .private_rooms import PrivateRoom, RoomManager
from .profiles import PlayerProfile
from .proximity import nearby_of, within_range
from .schemas import (
    ChatInviteAcceptEvent,
    ChatInviteDeclinedEvent,
    ChatInviteDeclineEvent,
    ChatInviteEvent,
    ChatInviteExpiredEvent,
    ChatInviteReceivedEvent,
    ChatInviteSentEvent,
    ChatRoomClosedEvent,
    ChatRoomJoinedEvent,
    ErrorEvent,
    InitEvent,
    KickedEvent,
    LeaveChatEvent,
    MoveEvent,
    NearbyPlayer,
    NearbyPlayersEvent,
    PlaygroundStatus,
    PlayerJoinedEvent,
    PlayerLeftEvent,
    PlayerMovedEvent,
    PlayerView,
    PrivateMessageEvent,
    PrivateMessageReceivedEvent,
    client_event_adapter,
)
from .session import PlayerConnection, SessionRegistry

logger = get_logger(__name__)

# Close code sent to a socket replaced by a newer login of the same player.
CLOSE_REPLACED = 4003

# How long shutdown waits for queued events before cancelling the writers.
SHUTDOWN_FLUSH_SECONDS = 2.0


class Playground:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        radius: float = PROXIMITY_RADIUS,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or Settings()
        self.radius = radius
        self.registry = SessionRegistry(rng=rng)
        self.invites = InviteBook()
        self.rooms = RoomManager(self.registry)
        self.broadcaster = WorldBroadcaster(self.registry)
        self._lock = asyncio.Lock()
        self._outboxes: Set[Outbox] = set()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def snapshot(self) -> List[PlayerView]:
        return self.registry.snapshot()

    def nearby_of(self, player_id: str) -> List[NearbyPlayer]:
        return nearby_of(self.registry, player_id, self.radius)

    def status(self) -> PlaygroundStatus:
        return PlaygroundStatus(
            players=len(self.registry),
            rooms=len(self.rooms),
            pending_invites=len(self.invites),
        )

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self, profile: PlayerProfile, socket: Connection) -> PlayerConnection:
        """Register *profile* on *socket*, replacing any older connection of the same player."""
        async with self._lock:
            previous = self.registry.get(profile.player_id)
            if previous is not None:
                self.broadcaster.deliver(previous, KickedEvent(reason="Logged in elsewhere"))
                self._drop(previous, close_code=CLOSE_REPLACED)

            conn = self.registry.register(profile, socket)
            self._outboxes.add(conn.outbox)
            logger.info(
                "Player connected",
                player_id=conn.player_id,
                username=conn.username,
                x=conn.x,
                y=conn.y,
                online=len(self.registry),
            )
            self.broadcaster.deliver(conn, InitEvent(self_id=conn.player_id, players=self.snapshot()))
            self.broadcaster.publish(
                PlayerJoinedEvent(player=conn.view(), message=f"{conn.username} joined the playground"),
                exclude=conn.player_id,
            )
            self._push_nearby(conn)
            return conn

    async def disconnect(self, conn: PlayerConnection) -> None:
        """Unwind everything *conn* held. No-op if it was already replaced or removed."""
        async with self._lock:
            if self.registry.get(conn.player_id) is not conn:
                return
            self._drop(conn)

    def _drop(self, conn: PlayerConnection, close_code: Optional[int] = None) -> None:
        if conn.current_room_id:
            self._close_room(conn.current_room_id, conn.player_id, REASON_PARTNER_DISCONNECTED)
        voided = self.invites.discard_involving(conn.player_id)
        if voided:
            logger.info("Invites voided by disconnect", player_id=conn.player_id, count=len(voided))
        self.registry.unregister(conn.player_id)
        conn.outbox.close(close_code)
        logger.info("Player disconnected", player_id=conn.player_id, online=len(self.registry))
        self.broadcaster.publish(
            PlayerLeftEvent(
                player_id=conn.player_id,
                username=conn.username,
                message=f"{conn.username} left the playground",
            )
        )

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------

    async def handle(self, conn: PlayerConnection, raw: Union[str, bytes, dict]) -> None:
        """Parse and apply one client frame from *conn*. Errors go back to *conn* only."""
        async with self._lock:
            if self.registry.get(conn.player_id) is not conn:
                return
            player_id = conn.player_id
            try:
                self._dispatch(player_id, self._parse(raw))
            except PlaygroundError as exc:
                logger.info(
                    "Request rejected",
                    player_id=player_id,
                    error=type(exc).__name__,
                    reason=exc.message,
                )
                self.broadcaster.send_to(player_id, ErrorEvent(message=exc.message))

    @staticmethod
    def _parse(raw: Union[str, bytes, dict]) -> Any:
        try:
            if isinstance(raw, (str, bytes)):
                return client_event_adapter.validate_json(raw)
            return client_event_adapter.validate_python(raw)
        except ValidationError as exc:
            raise Unauthorized("Invalid request") from exc

    def _dispatch(self, player_id: str, event: Any) -> None:
        if isinstance(event, MoveEvent):
            self._move(player_id, event)
        elif isinstance(event, ChatInviteEvent):
            self._invite(player_id, event.target_id)
        elif isinstance(event, ChatInviteAcceptEvent):
            self._accept(player_id, event.from_id)
        elif isinstance(event, ChatInviteDeclineEvent):
            self._decline(player_id, event.from_id)
        elif isinstance(event, PrivateMessageEvent):
            self._private_message(player_id, event.room_id, event.message)
        elif isinstance(event, LeaveChatEvent):
            self._leave_chat(player_id, event.room_id)

    # ------------------------------------------------------------------
    # Movement & proximity
    # ------------------------------------------------------------------

    def _move(self, player_id: str, event: MoveEvent) -> None:
        conn = self.registry.update_position(player_id, event.x, event.y, event.direction, event.is_moving)
        self.broadcaster.publish(
            PlayerMovedEvent(
                player_id=conn.player_id,
                x=conn.x,
                y=conn.y,
                direction=event.direction,
                is_moving=conn.is_moving,
            ),
            exclude=conn.player_id,
        )
        self._push_nearby(conn)

    def _push_nearby(self, conn: PlayerConnection) -> None:
        self.broadcaster.deliver(conn, NearbyPlayersEvent(nearby=self.nearby_of(conn.player_id)))

    # ------------------------------------------------------------------
    # Invites
    # ------------------------------------------------------------------

    def _invite(self, player_id: str, target_id: str) -> None:
        sender = self.registry.require(player_id)
        if target_id == player_id:
            raise TargetNotFound("You cannot invite yourself")
        target = self.registry.get(target_id)
        if target is None:
            raise TargetNotFound("Player not found")
        if sender.current_room_id or target.current_room_id:
            raise AlreadyEngaged("Already chatting")
        if not within_range(sender, target, self.radius):
            raise OutOfRange("Player is too far away")

        if self.settings.collapse_mutual_invites and self.invites.get(target_id, player_id):
            logger.info("Mutual invite collapsed", player_id=player_id, target_id=target_id)
            self._open_room(inviter=target, invitee=sender)
            return

        invite = PendingInvite(
            from_id=sender.player_id,
            to_id=target.player_id,
            from_username=sender.username,
            from_color=sender.color,
        )
        timeout = self.settings.invite_timeout_seconds if self.settings.invite_expiry_enabled else None
        self.invites.add(invite, timeout=timeout, on_expire=self._expire_invite)
        logger.info("Chat invite sent", player_id=player_id, target_id=target_id)
        self.broadcaster.deliver(
            target,
            ChatInviteReceivedEvent(
                from_id=sender.player_id,
                from_username=sender.username,
                from_color=sender.color,
            ),
        )
        self.broadcaster.deliver(sender, ChatInviteSentEvent(to_id=target.player_id, to_username=target.username))

    def _accept(self, player_id: str, from_id: str) -> None:
        # Distance is not re-checked: an invite stays acceptable after either side walks away.
        invitee = self.registry.require(player_id)
        if self.invites.get(from_id, player_id) is None:
            raise TargetNotFound("Invite no longer available")
        inviter = self.registry.get(from_id)
        if inviter is None:
            self.invites.pop(from_id, player_id)
            raise TargetNotFound("Player not found")
        if inviter.current_room_id or invitee.current_room_id:
            self.invites.pop(from_id, player_id)
            raise AlreadyEngaged("Already chatting")
        self._open_room(inviter=inviter, invitee=invitee)

    def _decline(self, player_id: str, from_id: str) -> None:
        invite = self.invites.pop(from_id, player_id)
        if invite is None:
            return
        decliner = self.registry.require(player_id)
        logger.info("Chat invite declined", player_id=player_id, from_id=from_id)
        self.broadcaster.send_to(
            from_id, ChatInviteDeclinedEvent(by_id=decliner.player_id, by_username=decliner.username)
        )

    async def _expire_invite(self, invite: PendingInvite) -> None:
        async with self._lock:
            if self.invites.get(invite.from_id, invite.to_id) is not invite:
                return
            self.invites.pop(invite.from_id, invite.to_id)
            logger.info("Chat invite expired", player_id=invite.from_id, target_id=invite.to_id)
            invitee = self.registry.get(invite.to_id)
            if invitee is not None:
                self.broadcaster.send_to(
                    invite.from_id,
                    ChatInviteDeclinedEvent(by_id=invitee.player_id, by_username=invitee.username, expired=True),
                )
                self.broadcaster.deliver(
                    invitee, ChatInviteExpiredEvent(from_id=invite.from_id, from_username=invite.from_username)
                )

    # ------------------------------------------------------------------
    # Private rooms
    # ------------------------------------------------------------------

    def _open_room(self, inviter: PlayerConnection, invitee: PlayerConnection) -> PrivateRoom:
        self.invites.pop(inviter.player_id, invitee.player_id)
        self.invites.pop(invitee.player_id, inviter.player_id)
        room = self.rooms.create_room(inviter, invitee)
        logger.info("Private room created", room_id=room.room_id, members=list(room.members))
        for me, partner in ((inviter, invitee), (invitee, inviter)):
            self.broadcaster.deliver(
                me,
                ChatRoomJoinedEvent(
                    room_id=room.room_id,
                    partner_id=partner.player_id,
                    partner_username=partner.username,
                    partner_color=partner.color,
                ),
            )
        return room

    def _private_message(self, player_id: str, room_id: str, text: str) -> None:
        sender = self.registry.require(player_id)
        message = self.rooms.post_message(sender, room_id, text)
        if message is None:
            return
        room = self.rooms.member_room(player_id, room_id)
        self.broadcaster.send_many(
            room.members,
            PrivateMessageReceivedEvent(room_id=room_id, **message.model_dump()),
        )

    def _leave_chat(self, player_id: str, room_id: str) -> None:
        self.rooms.member_room(player_id, room_id)
        self._close_room(room_id, player_id, REASON_PARTNER_LEFT)
        self.broadcaster.send_to(player_id, ChatRoomClosedEvent(room_id=room_id, reason=REASON_SELF_LEFT))

    def _close_room(self, room_id: str, leaver_id: str, reason: str) -> None:
        room = self.rooms.close_room(room_id)
        if room is None:
            return
        partner_id = room.partner_of(leaver_id)
        logger.info("Private room closed", room_id=room_id, player_id=leaver_id, reason=reason)
        self.broadcaster.send_to(partner_id, ChatRoomClosedEvent(room_id=room_id, reason=reason))

    # ------------------------------------------------------------------
    # Delivery & shutdown
    # ------------------------------------------------------------------

    async def flush(self) -> None:
        """Wait until every queued event has been written or dropped."""
        for outbox in list(self._outboxes):
            await outbox.join()
            if outbox.closed:
                self._outboxes.discard(outbox)

    async def shutdown(self) -> None:
        async with self._lock:
            self.invites.cancel_all()
            self.rooms.clear()
            for conn in self.registry:
                conn.outbox.close()
            self.registry.clear()
        try:
            await asyncio.wait_for(self.flush(), timeout=SHUTDOWN_FLUSH_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("Shutdown dropped unsent events", outboxes=len(self._outboxes))
        for outbox in self._outboxes:
            outbox.cancel()
        self._outboxes.clear()


__all__ = ["Playground", "CLOSE_REPLACED"]
