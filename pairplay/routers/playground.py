from __future__ import annotations

import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from ..auth_utils import get_current_user
from ..exceptions import TargetNotFound
from ..models import User
from ..playground import Playground
from ..schemas import NearbyPlayer, PlaygroundStatus, PlayerView

router = APIRouter(prefix="/api", tags=["playground"])


def get_playground(request: Request) -> Playground:
    return request.app.state.playground


@router.get("/playground/players", response_model=List[PlayerView])
async def list_players(
    playground: Playground = Depends(get_playground),
    current_user: User = Depends(get_current_user),
):
    return playground.snapshot()


@router.get("/playground/nearby", response_model=List[NearbyPlayer])
async def list_nearby(
    playground: Playground = Depends(get_playground),
    current_user: User = Depends(get_current_user),
):
    try:
        return playground.nearby_of(str(current_user.id))
    except TargetNotFound:
        raise HTTPException(status_code=404, detail="You are not in the playground")


@router.get("/playground/status", response_model=PlaygroundStatus)
async def playground_status(playground: Playground = Depends(get_playground)):
    return playground.status()


@router.get("/ping")
async def ping():
    return {"success": True, "timestamp": int(time.time() * 1000)}
