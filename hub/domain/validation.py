# hub/domain/validation.py
from __future__ import annotations

from typing import Any

from hub.domain.views import Role


def has_role(session: Any, role: Role) -> bool:
    """Check if the connection was opened for the given role."""
    return session is not None and getattr(session, "role", None) == role


def is_master(session: Any) -> bool:
    return has_role(session, "master")


def is_player(session: Any) -> bool:
    return has_role(session, "player")


def accepts_answers(session: Any) -> bool:
    """The room currently observed by this session is open for answers."""
    room = session.coordinator.room
    return room is not None and room.allow_answers
