# hub/transport/ws.py
from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from hub.domain.identity import resolve_player_id
from hub.settings import get_settings
from hub.transport.dispatcher import dispatch_message
from hub.transport.protocols import OutHello
from hub.transport.ws_manager import HubSession

logger = logging.getLogger(__name__)

router = APIRouter()

ROLES = ("master", "screen", "player")


async def _check_origin_or_close(websocket: WebSocket) -> bool:
    settings = get_settings()
    allowed = {o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()}

    origin = websocket.headers.get("origin")
    if origin is None or origin in allowed or "*" in allowed:
        return True
    await websocket.close(code=1008)
    return False


@router.websocket("/ws/{role}")
async def ws_role(websocket: WebSocket, role: str):
    if role not in ROLES:
        await websocket.close(code=1008)
        return
    if not await _check_origin_or_close(websocket):
        return

    await websocket.accept()

    state = websocket.app.state
    registry = state.registry
    session = HubSession(
        role=role,
        player_id=resolve_player_id(websocket.query_params.get("player_id")),
        store=state.store,
        ws=websocket,
        missing_params=state.missing_store_params,
    )
    await registry.add(session)
    await session.send(
        OutHello(
            role=role,
            player_id=session.player_id,
            store_available=session.coordinator.available,
            missing=state.missing_store_params,
        ).model_dump()
    )

    # land in the requested room right away, like a page reload would
    session.coordinator.connect(websocket.query_params.get("room") or state.settings.DEFAULT_ROOM_ID)

    try:
        while True:
            raw = await websocket.receive_json()
            for e in await dispatch_message(session=session, raw=raw):
                await websocket.send_json(e)
    except WebSocketDisconnect:
        logger.info("session %s (%s) disconnected", session.sid, role)
    finally:
        session.close()
        await registry.remove(session)
