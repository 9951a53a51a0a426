# hub/domain/identity.py
from __future__ import annotations

import uuid
from typing import Optional


def new_player_id() -> str:
    return str(uuid.uuid4())


def resolve_player_id(stored: Optional[str]) -> str:
    """Reuse the id the device already keeps; mint one only when it has none."""
    if stored and stored.strip():
        return stored.strip()
    return new_player_id()


def normalize_room_id(raw: Optional[str]) -> Optional[str]:
    """
    Room ids are free text chosen by people; blank means no room.
    A '/' would make the room a path segment of something else, so it is refused too.
    """
    if raw is None:
        return None
    rid = raw.strip()
    if not rid or "/" in rid:
        return None
    return rid
