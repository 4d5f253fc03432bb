from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..auth_utils import get_current_user
from ..constants import SPACE_FIELDS
from ..logging_config import get_logger
from ..models import Space, User
from ..schemas import MessageResponse, SaveSpaceRequest, SpaceData, SpaceResponse

router = APIRouter(prefix="/api", tags=["spaces"])

logger = get_logger(__name__)

LIST_SECTIONS = ("notes", "images", "dates")


async def ensure_personal_space(user: User) -> Space:
    """Return the space *user* owns, creating it if it is missing."""
    space = await Space.filter(owner_id=user.id).first()
    if space is None:
        space = await Space.create(owner_id=user.id)
        logger.info("Personal space created", player_id=str(user.id), space_id=str(space.id))
    return space


async def current_space(user: User) -> Space:
    """Return the space *user* reads and writes right now.

    A missing or dangling ``space_id`` falls back to the personal space and
    is repaired on the account.
    """
    space = None
    if user.space_id:
        space = await Space.filter(id=user.space_id).first()
    if space is None:
        space = await ensure_personal_space(user)
        user.space_id = space.id
        await user.save(update_fields=["space_id"])
    return space


@router.get("/data", response_model=SpaceResponse)
async def get_space(current_user: User = Depends(get_current_user)):
    space = await current_space(current_user)
    partner = None
    if current_user.partner_id:
        partner = await User.filter(id=current_user.partner_id).first()
    return SpaceResponse(
        data=SpaceData(
            notes=space.notes,
            images=space.images,
            dates=space.dates,
            pet=space.pet,
            sunflower=space.sunflower,
        ),
        username=current_user.username,
        gender=current_user.gender,
        partner_name=partner.username if partner else None,
        partner_gender=partner.gender if partner else None,
        my_id=str(current_user.id),
    )


@router.post("/data", response_model=MessageResponse)
async def save_space(req: SaveSpaceRequest, current_user: User = Depends(get_current_user)):
    if req.type not in SPACE_FIELDS:
        raise HTTPException(status_code=400, detail="Invalid data type")
    expected = list if req.type in LIST_SECTIONS else dict
    if not isinstance(req.payload, expected):
        raise HTTPException(status_code=400, detail=f"{req.type} must be a JSON {expected.__name__}")

    space = await current_space(current_user)
    setattr(space, req.type, req.payload)
    await space.save()
    logger.info("Space section saved", player_id=str(current_user.id), space_id=str(space.id), section=req.type)
    return MessageResponse(message="Saved")
