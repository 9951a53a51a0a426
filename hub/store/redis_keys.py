# hub/store/redis_keys.py
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote


def _segment(room_id: str) -> str:
    # one path segment whatever the text: '/', ':' and '%' come out escaped
    return quote(room_id, safe="")


def room_path(room_id: str) -> str:
    return f"rooms/{_segment(room_id)}"  # document


def answers_path(room_id: str) -> str:
    return f"rooms/{_segment(room_id)}/answers"  # collection


def child_path(collection: str, doc_id: str) -> str:
    return f"{collection}/{doc_id}"


@dataclass(frozen=True)
class SK:
    """
    Store Key builder: maps document/collection paths onto Redis keys.
    Everything lives under one namespace so several hubs can share a Redis.
    """
    namespace: str

    # ---- Documents ----
    def doc(self, path: str) -> str:
        return f"{self.namespace}:doc:{path}"  # HASH field -> JSON

    # ---- Collections ----
    def index(self, collection: str) -> str:
        return f"{self.namespace}:idx:{collection}"  # ZSET doc_id -> created ms

    def field_index(self, collection: str, field: str, token: str) -> str:
        # ZSET of the documents whose field encodes to token, same scores as index()
        return f"{self.namespace}:idx:{collection}:{field}={token}"

    # ---- Push ----
    def channel(self, path: str) -> str:
        return f"{self.namespace}:chan:{path}"  # PUBSUB, one message per write
