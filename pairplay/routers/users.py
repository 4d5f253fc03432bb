from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from tortoise.transactions import in_transaction

from ..auth_utils import create_access_token, get_current_user, hash_password, verify_password
from ..logging_config import get_logger
from ..models import Space, User
from ..schemas import (
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    UpdateGenderRequest,
)

router = APIRouter(prefix="/api", tags=["users"])

logger = get_logger(__name__)

MIN_CREDENTIAL_LENGTH = 3


def _profile(user: User) -> ProfileResponse:
    return ProfileResponse(
        user_id=str(user.id),
        username=user.username,
        display_name=user.display_name,
        gender=user.gender,
        partner_id=str(user.partner_id) if user.partner_id else None,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(req: RegisterRequest, request: Request):
    username = req.username.strip()
    if len(username) < MIN_CREDENTIAL_LENGTH or len(req.password) < MIN_CREDENTIAL_LENGTH:
        raise HTTPException(status_code=400, detail="Username and password must be at least 3 characters")
    if await User.filter(username=username).first():
        raise HTTPException(status_code=400, detail="Username already taken")
    async with in_transaction():
        user = await User.create(
            username=username,
            password_hash=hash_password(req.password),
            display_name=req.display_name or username,
            gender=req.gender,
        )
        space = await Space.create(owner_id=user.id)
        user.space_id = space.id
        await user.save(update_fields=["space_id"])
    logger.info("User registered", player_id=str(user.id), username=username)
    token = create_access_token(str(user.id), request.app.state.settings)
    return AuthResponse(token=token, user_id=str(user.id), username=user.username, space_id=str(space.id))


@router.post("/login", response_model=AuthResponse)
async def login(req: LoginRequest, request: Request):
    user = await User.filter(username=req.username.strip()).first()
    if not user or not verify_password(req.password, user.password_hash):
        logger.info("Login failed", username=req.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token(str(user.id), request.app.state.settings)
    space_id = str(user.space_id) if user.space_id else None
    return AuthResponse(token=token, user_id=str(user.id), username=user.username, space_id=space_id)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    return _profile(current_user)


@router.post("/profile/gender", response_model=ProfileResponse)
async def update_gender(req: UpdateGenderRequest, current_user: User = Depends(get_current_user)):
    current_user.gender = req.gender
    await current_user.save(update_fields=["gender"])
    return _profile(current_user)
