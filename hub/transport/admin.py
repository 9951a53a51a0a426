from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/sessions")
async def list_sessions(request: Request):
    """
    Connected sessions per room and role (debug/admin).
    """
    state = request.app.state
    return {
        "store_available": state.store is not None,
        "sessions": await state.registry.summary(),
    }
