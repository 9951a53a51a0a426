# hub/sync/room_watcher.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional

from hub.domain.commands import initialize_room
from hub.store.models import RoomState
from hub.store.redis_keys import room_path
from hub.sync.round_watcher import RoundSubscriptionManager
from hub.sync.subscription import RESUBSCRIBE_DELAY, Subscription, SubscriptionSlot, call_listener

logger = logging.getLogger(__name__)

RoomListener = Callable[[RoomState], Any]


class RoomSubscriptionManager:
    """
    Keeps exactly one room-document subscription.
    - materializes an empty room with defaults (fire-and-forget merge)
    - normalizes every snapshot into a RoomState
    - forwards round ids to the round manager before observers run
    """

    def __init__(self, store: Any, rounds: RoundSubscriptionManager):
        self.store = store
        self.rounds = rounds
        self.room_id: Optional[str] = None
        self.state: Optional[RoomState] = None
        self._slot = SubscriptionSlot("room")
        self._listeners: List[RoomListener] = []
        self.resubscribe_delay = RESUBSCRIBE_DELAY
        self._pending_writes: set[asyncio.Task] = set()
        self._retries: set[asyncio.Task] = set()

    @property
    def subscription(self) -> Optional[Subscription]:
        return self._slot.current

    def add_listener(self, listener: RoomListener) -> None:
        self._listeners.append(listener)

    def watch_room(self, room_id: str) -> None:
        if self.store is None:
            return

        # old room fully torn down before the new one is opened
        self._slot.release()
        self.rounds.reset(room_id)
        self.room_id = room_id
        self.state = None

        path = room_path(room_id)
        self._slot.acquire(
            lambda: Subscription(
                self.store.watch_document(path),
                self._on_snapshot,
                name=f"room:{room_id}",
                on_failure=self._on_failure,
            )
        )
        logger.info("watching room %s", room_id)

    async def _on_snapshot(self, handle: Subscription, doc: Optional[dict]) -> None:
        if not self._slot.owns(handle):
            return

        if doc is None:
            state = RoomState.initial()
            self._initialize(self.room_id)
        else:
            state = RoomState.from_document(doc)

        self.state = state
        self.rounds.watch_round(state.round_id)

        for listener in list(self._listeners):
            await call_listener(listener, state)
            if not self._slot.owns(handle):
                return

    def _initialize(self, room_id: str) -> None:
        # do not wait for the echo: defaults are already the current state
        task = asyncio.create_task(initialize_room(self.store, room_id))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    def _on_failure(self, handle: Subscription) -> None:
        if not self._slot.discard(handle):
            return
        task = asyncio.create_task(self._resubscribe(self.room_id))
        self._retries.add(task)
        task.add_done_callback(self._retries.discard)

    async def _resubscribe(self, room_id: Optional[str]) -> None:
        await asyncio.sleep(self.resubscribe_delay)
        if room_id is None or self.room_id != room_id or self._slot.current is not None:
            return
        logger.info("room %s: reopening after stream failure", room_id)
        self.watch_room(room_id)

    def stop(self) -> None:
        self._slot.release()
        for task in list(self._retries):
            task.cancel()
        self.rounds.stop()
        self.room_id = None
        self.state = None
