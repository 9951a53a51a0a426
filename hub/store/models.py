# hub/store/models.py
from __future__ import annotations

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Written into a room document the first time anyone observes it empty
ROOM_DEFAULTS: dict[str, Any] = {
    "stage": "1",
    "question": "",
    "hint": "",
    "screenMessage": "",
    "allowAnswers": True,
    "roundId": 1,
}

ANSWER_LIMIT = 50


def _text(v: Any) -> str:
    if v is None:
        return ""
    return v if isinstance(v, str) else str(v)


class RoomState(BaseModel):
    """
    Shared control state of one room, fully populated.
    Every consumer sees defaults applied here, never raw store fields.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    stage: str = ""
    question: str = ""
    hint: str = ""
    screen_message: str = Field(default="", alias="screenMessage")
    allow_answers: bool = Field(default=False, alias="allowAnswers")
    round_id: int = Field(default=1, alias="roundId")

    @field_validator("stage", "question", "hint", "screen_message", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("allow_answers", mode="before")
    @classmethod
    def _coerce_allow(cls, v: Any) -> bool:
        return v if isinstance(v, bool) else False

    @field_validator("round_id", mode="before")
    @classmethod
    def _coerce_round(cls, v: Any) -> int:
        # bool is an int subclass; never accept it as a round
        if isinstance(v, bool):
            return 1
        try:
            n = int(v)
        except (TypeError, ValueError):
            return 1
        return n if n >= 1 else 1

    @classmethod
    def from_document(cls, data: Optional[dict]) -> "RoomState":
        return cls.model_validate(data or {})

    @classmethod
    def initial(cls) -> "RoomState":
        return cls.model_validate(ROOM_DEFAULTS)


class Document(BaseModel):
    """A stored document and its id inside a collection."""
    id: str
    data: dict[str, Any] = Field(default_factory=dict)


class Answer(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = ""
    player_id: str = Field(default="", alias="playerId")
    player_name: str = Field(default="", alias="playerName")
    text: str = ""
    round_id: int = Field(default=0, alias="roundId")
    created_at: Optional[int] = Field(default=None, alias="createdAt")  # store clock, ms

    @field_validator("player_id", "player_name", "text", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return _text(v)

    @classmethod
    def from_document(cls, doc: Document) -> "Answer":
        return cls.model_validate({**doc.data, "id": doc.id})


class AnswerBatch(BaseModel):
    """One delivery of the live round's answers, most recent first."""
    round_id: int
    count: int = 0
    answers: List[Answer] = Field(default_factory=list)
