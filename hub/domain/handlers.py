# hub/domain/handlers.py
from __future__ import annotations

import logging
from typing import Any, List

from hub.domain.errors import EmptySubmission
from hub.domain.validation import accepts_answers, is_master, is_player
from hub.transport.protocols import (
    InConnect,
    InNextRound,
    InSaveFields,
    InSubmitAnswer,
    InToggleAnswers,
    OutError,
    OutgoingEvent,
    OutStatus,
)

logger = logging.getLogger(__name__)

# Replies to the sender only. Everyone (sender included) learns about the
# effect through their room/round subscriptions.
Result = List[OutgoingEvent]


async def handle_connect(*, session: Any, msg: InConnect) -> Result:
    room_id = session.coordinator.connect(msg.room_id)
    if room_id is None:
        return [OutError(code="BAD_ROOM", message="Room id is empty or contains '/'")]
    logger.info("session %s (%s) -> room %s", session.sid, session.role, room_id)
    return []


async def handle_save_fields(*, session: Any, msg: InSaveFields) -> Result:
    if not is_master(session):
        return [OutError(code="NOT_MASTER", message="Only the master can edit the room")]
    await session.coordinator.save_fields(
        stage=msg.stage,
        question=msg.question,
        hint=msg.hint,
        screen_message=msg.screen_message,
    )
    return []


async def handle_toggle_answers(*, session: Any, msg: InToggleAnswers) -> Result:
    if not is_master(session):
        return [OutError(code="NOT_MASTER", message="Only the master can open or close answers")]
    await session.coordinator.toggle_answers()
    return []


async def handle_next_round(*, session: Any, msg: InNextRound) -> Result:
    if not is_master(session):
        return [OutError(code="NOT_MASTER", message="Only the master can advance rounds")]
    await session.coordinator.advance_round()
    return []


async def handle_submit_answer(*, session: Any, msg: InSubmitAnswer) -> Result:
    if not is_player(session):
        return [OutError(code="NOT_PLAYER", message="Only players can answer")]
    if session.coordinator.available and not accepts_answers(session):
        return [OutError(code="ANSWERS_CLOSED", message="Answers are not being accepted")]

    try:
        sent = await session.coordinator.submit_answer(
            player_id=session.player_id,
            player_name=msg.player_name,
            text=msg.text,
        )
    except EmptySubmission as e:
        return [OutError(code=e.code, message=str(e))]

    if not sent:
        return []
    return [OutStatus(code="ANSWER_SENT", message="Answer sent")]
