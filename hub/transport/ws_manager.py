# hub/transport/ws_manager.py
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, Iterable, List

from fastapi import WebSocket

from hub.domain.views import Role, project_answers, project_room
from hub.store.models import AnswerBatch, RoomState
from hub.sync.coordinator import SyncCoordinator
from hub.transport.protocols import OutAnswers, OutRoomState

logger = logging.getLogger(__name__)


class HubSession:
    """
    One connected client: its own sync engine plus the socket it renders to.
    Rendering = sending the role's projection of the latest state.
    """

    def __init__(
        self,
        *,
        role: Role,
        player_id: str,
        store: Any,
        ws: WebSocket,
        missing_params: Iterable[str] = (),
    ) -> None:
        self.sid = uuid.uuid4().hex[:10]
        self.role = role
        self.player_id = player_id
        self.ws = ws
        self.coordinator = SyncCoordinator(store, self, missing_params=missing_params)

    @property
    def room_id(self):
        return self.coordinator.room_id

    async def room_state(self, room_id: str, state: RoomState) -> None:
        await self.send(OutRoomState(room_id=room_id, room=project_room(self.role, state)).model_dump())

    async def answers(self, room_id: str, batch: AnswerBatch) -> None:
        view = project_answers(self.role, batch)
        if view is None:
            return
        await self.send(OutAnswers(room_id=room_id, **view).model_dump())

    async def send(self, event: dict) -> None:
        try:
            await self.ws.send_json(event)
        except Exception:
            # dead socket; ws.py cleans up on disconnect
            logger.debug("send to session %s failed", self.sid)

    def close(self) -> None:
        self.coordinator.disconnect()


class SessionRegistry:
    """
    In-memory registry of connected sessions.
    Transport-only: no store access, no domain rules.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, HubSession] = {}
        self._lock = asyncio.Lock()

    async def add(self, session: HubSession) -> None:
        async with self._lock:
            self._sessions[session.sid] = session

    async def remove(self, session: HubSession) -> None:
        async with self._lock:
            self._sessions.pop(session.sid, None)

    async def sessions(self) -> List[HubSession]:
        async with self._lock:
            return list(self._sessions.values())

    async def summary(self) -> List[dict]:
        """Connected sessions grouped by room and role."""
        counts: Dict[tuple, int] = {}
        for s in await self.sessions():
            key = (s.room_id or "", s.role)
            counts[key] = counts.get(key, 0) + 1
        return [
            {"room_id": room_id, "role": role, "sessions": n}
            for (room_id, role), n in sorted(counts.items())
        ]

    async def close_all(self, code: int = 1001) -> None:
        for s in await self.sessions():
            s.close()
            try:
                await s.ws.close(code=code)
            except Exception:
                pass
        async with self._lock:
            self._sessions.clear()

    async def size(self) -> int:
        async with self._lock:
            return len(self._sessions)
