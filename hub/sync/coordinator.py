# hub/sync/coordinator.py
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Protocol

from hub.domain import commands
from hub.domain.identity import normalize_room_id
from hub.store.models import AnswerBatch, RoomState
from hub.sync.room_watcher import RoomSubscriptionManager
from hub.sync.round_watcher import RoundSubscriptionManager

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    async def room_state(self, room_id: str, state: RoomState) -> None: ...

    async def answers(self, room_id: str, batch: AnswerBatch) -> None: ...


class SyncCoordinator:
    """
    One per client. Wires room -> round, caches the latest of both and hands
    them to the renderer. connect() may be called again at any time: it is a
    full migration to the new room.
    """

    def __init__(self, store: Any, renderer: Optional[Renderer] = None, *, missing_params: Iterable[str] = ()):
        self.store = store
        self.renderer = renderer
        self.missing_params = list(missing_params)

        self.rounds = RoundSubscriptionManager(store)
        self.rooms = RoomSubscriptionManager(store, self.rounds)
        self.rooms.add_listener(self._on_room_state)
        self.rounds.add_listener(self._on_answers)

        self.room_id: Optional[str] = None
        self.room: Optional[RoomState] = None
        self.answers: Optional[AnswerBatch] = None

    @property
    def available(self) -> bool:
        return self.store is not None

    def connect(self, room_id: str) -> Optional[str]:
        """Returns the normalized room id, or None when it was blank."""
        rid = normalize_room_id(room_id)
        if rid is None:
            return None
        self.room_id = rid
        self.room = None
        self.answers = None
        if not self.available:
            logger.debug("connect %s ignored: store unavailable", rid)
            return rid
        self.rooms.watch_room(rid)
        return rid

    def disconnect(self) -> None:
        self.rooms.stop()

    async def _on_room_state(self, state: RoomState) -> None:
        self.room = state
        if self.renderer is not None:
            await self.renderer.room_state(self.room_id, state)

    async def _on_answers(self, batch: AnswerBatch) -> None:
        self.answers = batch
        if self.renderer is not None:
            await self.renderer.answers(self.room_id, batch)

    # ----------------------------
    # Write operations on the connected room
    # ----------------------------
    async def save_fields(self, **fields: str) -> bool:
        if self.room_id is None:
            return False
        return await commands.save_fields(self.store, self.room_id, **fields)

    async def toggle_answers(self) -> bool:
        if self.room_id is None:
            return False
        return await commands.toggle_answers(self.store, self.room_id, self.room)

    async def advance_round(self) -> bool:
        if self.room_id is None:
            return False
        return await commands.advance_round(self.store, self.room_id, self.room)

    async def submit_answer(self, *, player_id: str, player_name: str, text: str) -> bool:
        if self.room_id is None:
            return False
        return await commands.submit_answer(
            self.store,
            self.room_id,
            self.room,
            player_id=player_id,
            player_name=player_name,
            text=text,
        )
