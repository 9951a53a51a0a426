# hub/domain/views.py
from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from hub.store.models import AnswerBatch, RoomState

Role = Literal["master", "screen", "player"]

PLAYER_NAME_PLACEHOLDER = "Player"


def project_room(role: Role, state: RoomState) -> Dict[str, Any]:
    """What each role gets to see of the room. Players never see stage or screenMessage."""
    view: Dict[str, Any] = {
        "question": state.question,
        "hint": state.hint,
        "allow_answers": state.allow_answers,
        "round_id": state.round_id,
    }
    if role in ("master", "screen"):
        view["stage"] = state.stage
        view["screen_message"] = state.screen_message
    return view


def project_answers(role: Role, batch: AnswerBatch) -> Optional[Dict[str, Any]]:
    """Master sees the list, the screen only the count, players nothing."""
    if role == "player":
        return None
    view: Dict[str, Any] = {"round_id": batch.round_id, "count": batch.count}
    if role == "master":
        view["answers"] = [
            {
                "id": a.id,
                "player_id": a.player_id,
                "player_name": a.player_name or PLAYER_NAME_PLACEHOLDER,
                "text": a.text,
                "created_at": a.created_at,
            }
            for a in batch.answers
        ]
    return view
