from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from tortoise.transactions import in_transaction

from ..auth_utils import find_user, get_current_user
from ..logging_config import get_logger
from ..models import User
from ..schemas import (
    MessageResponse,
    NotificationsResponse,
    PartnerInviteRequest,
    PartnerInviteView,
    RespondInviteRequest,
)
from .spaces import current_space, ensure_personal_space

router = APIRouter(prefix="/api", tags=["partners"])

logger = get_logger(__name__)

INVITE_FIELDS = ["pending_invite_from", "pending_invite_name", "pending_invite_at"]


async def _clear_invite(user: User) -> None:
    user.pending_invite_from = None
    user.pending_invite_name = None
    user.pending_invite_at = None
    await user.save(update_fields=INVITE_FIELDS)


async def _return_home(user: User) -> None:
    space = await ensure_personal_space(user)
    user.partner_id = None
    user.space_id = space.id
    await user.save(update_fields=["partner_id", "space_id"])


@router.post("/invite", response_model=MessageResponse)
async def send_invite(req: PartnerInviteRequest, current_user: User = Depends(get_current_user)):
    target = await find_user(req.target_id)
    if target is None:
        raise HTTPException(status_code=404, detail="User or Partner ID not found")
    if target.id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot invite yourself")
    if current_user.partner_id:
        raise HTTPException(status_code=400, detail="You already have a partner")
    if target.partner_id:
        raise HTTPException(status_code=400, detail="User already has a partner")

    # Conditional update so two concurrent invites cannot both land.
    stored = await User.filter(id=target.id, pending_invite_from__isnull=True, partner_id__isnull=True).update(
        pending_invite_from=current_user.id,
        pending_invite_name=current_user.username,
        pending_invite_at=datetime.now(timezone.utc),
    )
    if not stored:
        raise HTTPException(status_code=400, detail="User already has a pending invitation")
    logger.info("Partner invite sent", player_id=str(current_user.id), target_id=str(target.id))
    return MessageResponse(message=f"Invitation sent to {target.username}")


@router.get("/notifications", response_model=NotificationsResponse)
async def notifications(current_user: User = Depends(get_current_user)):
    if not current_user.pending_invite_from:
        return NotificationsResponse()
    sent_at = current_user.pending_invite_at
    return NotificationsResponse(
        pending_invite=PartnerInviteView(
            from_id=str(current_user.pending_invite_from),
            from_name=current_user.pending_invite_name or "",
            timestamp=int(sent_at.timestamp() * 1000) if sent_at else 0,
        )
    )


@router.post("/invite/respond", response_model=MessageResponse)
async def respond_to_invite(req: RespondInviteRequest, current_user: User = Depends(get_current_user)):
    sender_id = current_user.pending_invite_from
    if not sender_id:
        raise HTTPException(status_code=400, detail="No pending invitation found")
    await _clear_invite(current_user)

    if not req.accept:
        logger.info("Partner invite declined", player_id=str(current_user.id), from_id=str(sender_id))
        return MessageResponse(message="Invitation declined")

    sender = await User.filter(id=sender_id).first()
    if sender is None:
        raise HTTPException(status_code=400, detail="Sender no longer exists")
    if current_user.partner_id:
        raise HTTPException(status_code=400, detail="You already have a partner")

    async with in_transaction():
        linked = await User.filter(id=sender.id, partner_id__isnull=True).update(partner_id=current_user.id)
        if not linked:
            raise HTTPException(status_code=400, detail="Sender already has a partner")
        # The acceptor moves into the sender's space; their own stays untouched.
        shared = await current_space(sender)
        current_user.partner_id = sender.id
        current_user.space_id = shared.id
        await current_user.save(update_fields=["partner_id", "space_id"])

    logger.info(
        "Partners linked",
        player_id=str(current_user.id),
        partner_id=str(sender.id),
        space_id=str(current_user.space_id),
    )
    return MessageResponse(message="Invitation accepted. You are now connected")


@router.post("/disconnect", response_model=MessageResponse)
async def disconnect_partner(current_user: User = Depends(get_current_user)):
    partner_id = current_user.partner_id
    if not partner_id:
        raise HTTPException(status_code=400, detail="You don't have a partner to disconnect from")

    async with in_transaction():
        await _return_home(current_user)
        partner = await User.filter(id=partner_id).first()
        if partner is not None and partner.partner_id == current_user.id:
            await _return_home(partner)

    logger.info("Partners unlinked", player_id=str(current_user.id), partner_id=str(partner_id))
    return MessageResponse(message="You have disconnected from your partner")
