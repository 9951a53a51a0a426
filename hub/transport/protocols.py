# hub/transport/protocols.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


# =========================
# Shared enums / literals
# =========================

Role = Literal["master", "screen", "player"]


# =========================
# Incoming (Client -> Server)
# =========================

class InBase(BaseModel):
    type: str


# ---- Lifecycle ----

class InConnect(InBase):
    type: Literal["connect"] = "connect"
    room_id: str = Field(max_length=64)


# ---- Master ----

class InSaveFields(InBase):
    type: Literal["save_fields"] = "save_fields"
    stage: str = Field(default="", max_length=40)
    question: str = Field(default="", max_length=2000)
    hint: str = Field(default="", max_length=2000)
    screen_message: str = Field(default="", max_length=2000)


class InToggleAnswers(InBase):
    type: Literal["toggle_answers"] = "toggle_answers"


class InNextRound(InBase):
    type: Literal["next_round"] = "next_round"


# ---- Player ----

class InSubmitAnswer(InBase):
    # blank text is a domain error (EMPTY_ANSWER), not a schema error
    type: Literal["submit_answer"] = "submit_answer"
    text: str = Field(default="", max_length=200)
    player_name: str = Field(default="", max_length=24)


IncomingMessage = Union[
    InConnect,
    InSaveFields,
    InToggleAnswers,
    InNextRound,
    InSubmitAnswer,
]


# =========================
# Outgoing (Server -> Client)
# =========================

class OutBase(BaseModel):
    type: str


class OutError(OutBase):
    type: Literal["error"] = "error"
    code: str
    message: str


class OutStatus(OutBase):
    type: Literal["status"] = "status"
    code: str
    message: str


class OutHello(OutBase):
    type: Literal["hello"] = "hello"
    role: Role
    player_id: str
    store_available: bool
    missing: List[str] = Field(default_factory=list)


class OutRoomState(OutBase):
    type: Literal["room_state"] = "room_state"
    room_id: str
    room: Dict[str, Any]


class OutAnswers(OutBase):
    type: Literal["answers"] = "answers"
    room_id: str
    round_id: int
    count: int
    answers: Optional[List[Dict[str, Any]]] = None


OutgoingEvent = Union[
    OutError,
    OutStatus,
    OutHello,
    OutRoomState,
    OutAnswers,
]


# =========================
# Parser helpers
# =========================

_INCOMING_BY_TYPE = {
    "connect": InConnect,
    "save_fields": InSaveFields,
    "toggle_answers": InToggleAnswers,
    "next_round": InNextRound,
    "submit_answer": InSubmitAnswer,
}


def parse_incoming(payload: Dict[str, Any]) -> IncomingMessage:
    """
    Convert raw dict -> validated message model.
    Raises ValidationError for bad fields, ValueError for a bad envelope.
    """
    if not isinstance(payload, dict):
        raise ValueError("Message must be a JSON object")

    t = payload.get("type")
    if not isinstance(t, str):
        raise ValueError("Missing/invalid type")

    cls = _INCOMING_BY_TYPE.get(t)
    if cls is None:
        raise ValueError(f"Unknown message type: {t}")

    return cls.model_validate(payload)
