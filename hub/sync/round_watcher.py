# hub/sync/round_watcher.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional

from hub.store.doc_store import Query
from hub.store.models import ANSWER_LIMIT, Answer, AnswerBatch, Document
from hub.store.redis_keys import answers_path
from hub.sync.subscription import RESUBSCRIBE_DELAY, Subscription, SubscriptionSlot, call_listener

logger = logging.getLogger(__name__)

AnswersListener = Callable[[AnswerBatch], Any]


def round_query(room_id: str, round_id: int) -> Query:
    return Query(
        collection=answers_path(room_id),
        where=(("roundId", round_id),),
        order_by="createdAt",
        descending=True,
        limit=ANSWER_LIMIT,
    )


class RoundSubscriptionManager:
    """
    Keeps exactly one answer subscription: the one for the room's live round.
    Called on every room emission; only a different round id resubscribes.
    """

    def __init__(self, store: Any):
        self.store = store
        self.room_id: Optional[str] = None
        # None never equals a real round, so the first round always subscribes
        self.watched_round: Optional[int] = None
        self.resubscribe_delay = RESUBSCRIBE_DELAY
        self._slot = SubscriptionSlot("answers")
        self._listeners: List[AnswersListener] = []
        self._retries: set[asyncio.Task] = set()

    @property
    def subscription(self) -> Optional[Subscription]:
        return self._slot.current

    def add_listener(self, listener: AnswersListener) -> None:
        self._listeners.append(listener)

    def reset(self, room_id: Optional[str]) -> None:
        """Drop the current round's subscription and forget which round it was."""
        self._slot.release()
        for task in list(self._retries):
            task.cancel()
        self.watched_round = None
        self.room_id = room_id

    def watch_round(self, round_id: int) -> None:
        if self.store is None or self.room_id is None:
            return
        if round_id == self.watched_round:
            return

        logger.debug("room %s: round %s -> %s", self.room_id, self.watched_round, round_id)
        self.watched_round = round_id
        query = round_query(self.room_id, round_id)
        self._slot.acquire(
            lambda: Subscription(
                self.store.watch_query(query),
                self._on_snapshot,
                name=f"answers:{self.room_id}:{round_id}",
                on_failure=self._on_failure,
            )
        )

    async def _on_snapshot(self, handle: Subscription, docs: List[Document]) -> None:
        if not self._slot.owns(handle):
            return
        answers = [Answer.from_document(d) for d in docs]
        batch = AnswerBatch(round_id=self.watched_round, count=len(answers), answers=answers)
        for listener in list(self._listeners):
            await call_listener(listener, batch)
            if not self._slot.owns(handle):
                return

    def _on_failure(self, handle: Subscription) -> None:
        if not self._slot.discard(handle):
            return
        # the guard must not keep treating the dead round as watched
        round_id, self.watched_round = self.watched_round, None
        task = asyncio.create_task(self._resubscribe(self.room_id, round_id))
        self._retries.add(task)
        task.add_done_callback(self._retries.discard)

    async def _resubscribe(self, room_id: Optional[str], round_id: Optional[int]) -> None:
        await asyncio.sleep(self.resubscribe_delay)
        # a room switch or a newer round already took over
        if self.room_id != room_id or self._slot.current is not None or round_id is None:
            return
        logger.info("room %s: reopening answers for round %s", room_id, round_id)
        self.watch_round(round_id)

    def stop(self) -> None:
        self.reset(None)
