# hub/domain/commands.py
from __future__ import annotations

import logging
from typing import Any, Optional

from hub.domain.errors import EmptySubmission, TransientWriteFailure
from hub.store.doc_store import SERVER_TIMESTAMP
from hub.store.models import ROOM_DEFAULTS, RoomState
from hub.store.redis_keys import answers_path, room_path

logger = logging.getLogger(__name__)

# Write operations. Each one issues a single merge/append and never reads
# the result back: the room and round subscriptions reflect the effect.
# All return False when nothing was written (store missing or write failed).


async def _merge(store: Any, room_id: str, fields: dict[str, Any]) -> bool:
    if store is None:
        return False
    try:
        await store.merge_write(room_path(room_id), {**fields, "updatedAt": SERVER_TIMESTAMP})
    except TransientWriteFailure as e:
        logger.warning("room %s: write dropped (%s)", room_id, e)
        return False
    return True


async def initialize_room(store: Any, room_id: str) -> bool:
    # idempotent: racing initializers merge identical values
    ok = await _merge(store, room_id, dict(ROOM_DEFAULTS))
    if ok:
        logger.info("room %s initialized", room_id)
    return ok


async def save_fields(
    store: Any,
    room_id: str,
    *,
    stage: str = "",
    question: str = "",
    hint: str = "",
    screen_message: str = "",
) -> bool:
    return await _merge(
        store,
        room_id,
        {
            "stage": (stage or "").strip(),
            "question": (question or "").strip(),
            "hint": (hint or "").strip(),
            "screenMessage": (screen_message or "").strip(),
        },
    )


async def toggle_answers(store: Any, room_id: str, current: Optional[RoomState]) -> bool:
    allow = current.allow_answers if current is not None else False
    return await _merge(store, room_id, {"allowAnswers": not allow})


async def advance_round(store: Any, room_id: str, current: Optional[RoomState]) -> bool:
    round_id = current.round_id if current is not None else 0
    return await _merge(store, room_id, {"roundId": round_id + 1, "allowAnswers": True})


async def submit_answer(
    store: Any,
    room_id: str,
    current: Optional[RoomState],
    *,
    player_id: str,
    player_name: str,
    text: str,
) -> bool:
    """
    Append one answer to the room's collection, bound to the round observed now.
    If the master advances the round while this is in flight the answer still
    lands in the old round; that race is accepted.
    """
    if store is None:
        return False
    body = (text or "").strip()
    if not body:
        raise EmptySubmission()

    fields = {
        "playerId": player_id,
        "playerName": (player_name or "").strip(),
        "text": body,
        "roundId": current.round_id if current is not None else 1,
        "createdAt": SERVER_TIMESTAMP,
    }
    try:
        await store.append_document(answers_path(room_id), fields)
    except TransientWriteFailure as e:
        logger.warning("room %s: answer dropped (%s)", room_id, e)
        return False
    return True
