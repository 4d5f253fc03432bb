from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, WebSocket

from ..auth_utils import decode_access_token
from ..exceptions import AuthRejected
from ..logging_config import get_logger
from ..playground import Playground

router = APIRouter(prefix="", tags=["ws"])

logger = get_logger(__name__)

CLOSE_NO_TOKEN = 4000
CLOSE_BAD_TOKEN = 4001
CLOSE_NO_ACCOUNT = 4004


@router.websocket("/ws/playground")
async def playground_ws(ws: WebSocket, token: Optional[str] = Query(default=None)):
    await ws.accept()
    if not token:
        await ws.close(code=CLOSE_NO_TOKEN)
        return
    try:
        player_id = decode_access_token(token, ws.app.state.settings)
    except AuthRejected as exc:
        logger.info("Playground connection rejected", reason=exc.message)
        await ws.close(code=CLOSE_BAD_TOKEN)
        return

    profile = await ws.app.state.profiles.fetch(player_id)
    if profile is None:
        logger.info("Playground connection without account", player_id=player_id)
        await ws.close(code=CLOSE_NO_ACCOUNT)
        return

    playground: Playground = ws.app.state.playground
    conn = await playground.connect(profile, ws)
    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            # Binary frames go through the same parser as text; bad ones get an error event.
            data = message.get("text")
            if data is None:
                data = message.get("bytes") or b""
            await playground.handle(conn, data)
    except Exception:
        logger.exception("Playground websocket error", player_id=player_id)
    finally:
        await playground.disconnect(conn)
