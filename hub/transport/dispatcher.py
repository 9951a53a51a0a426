# hub/transport/dispatcher.py
from __future__ import annotations

from typing import Any, Dict, List

from pydantic import ValidationError

from hub.domain.handlers import (
    handle_connect,
    handle_next_round,
    handle_save_fields,
    handle_submit_answer,
    handle_toggle_answers,
)
from hub.transport.protocols import (
    InConnect,
    InNextRound,
    InSaveFields,
    InSubmitAnswer,
    InToggleAnswers,
    OutError,
    OutgoingEvent,
    parse_incoming,
)

DispatchResult = List[Dict[str, Any]]
# to_sender events as JSON dicts; room-wide effects travel through the store


async def dispatch_message(*, session: Any, raw: Any) -> DispatchResult:
    """
    Transport layer calls this.
    - Parses + validates raw JSON
    - Routes to the correct domain handler
    - Returns the events for the sender as JSON dicts
    """
    try:
        msg = parse_incoming(raw)
    except (ValidationError, ValueError) as e:
        err = OutError(code="BAD_MESSAGE", message=str(e)).model_dump()
        return [err]

    if isinstance(msg, InConnect):
        return _dump(await handle_connect(session=session, msg=msg))

    # ---- Master ----
    if isinstance(msg, InSaveFields):
        return _dump(await handle_save_fields(session=session, msg=msg))

    if isinstance(msg, InToggleAnswers):
        return _dump(await handle_toggle_answers(session=session, msg=msg))

    if isinstance(msg, InNextRound):
        return _dump(await handle_next_round(session=session, msg=msg))

    # ---- Player ----
    if isinstance(msg, InSubmitAnswer):
        return _dump(await handle_submit_answer(session=session, msg=msg))

    err = OutError(code="NOT_IMPLEMENTED", message=f"Handler not implemented for type={msg.type}").model_dump()
    return [err]


def _dump(events: List[OutgoingEvent]) -> List[Dict[str, Any]]:
    """
    Convert pydantic events -> JSON dicts.
    """
    return [e.model_dump() for e in events]
