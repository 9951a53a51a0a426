# hub/store/doc_store.py
from __future__ import annotations

import json
import logging
import uuid
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any, AsyncIterator, Iterable, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from hub.domain.errors import TransientWriteFailure
from hub.store.models import Document
from hub.store.redis_keys import SK, child_path

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


# Placeholder value replaced by the store's own clock (ms) at write time
SERVER_TIMESTAMP: Any = _ServerTimestamp()

# Fields that get their own creation-ordered index in every collection
INDEXED_FIELDS = ("roundId",)
ORDER_FIELD = "createdAt"


@dataclass(frozen=True)
class Query:
    """
    Equality filters + single-field ordering + limit over one collection.
    Documents lacking the order field are left out of the result.
    """
    collection: str
    where: tuple[tuple[str, Any], ...] = ()
    order_by: str = "createdAt"
    descending: bool = True
    limit: Optional[int] = None


def _same(a: Any, b: Any) -> bool:
    # keep True from matching 1
    return a == b and isinstance(a, bool) == isinstance(b, bool)


def apply_query(query: Query, docs: Iterable[Document]) -> list[Document]:
    matched = [
        d for d in docs
        if all(_same(d.data.get(field), value) for field, value in query.where)
        and isinstance(d.data.get(query.order_by), (int, float))
    ]
    # stable sort: ties keep index order
    matched.sort(key=lambda d: d.data[query.order_by], reverse=query.descending)
    if query.limit is not None:
        matched = matched[: query.limit]
    return matched


def resolve_timestamps(fields: dict[str, Any], now_ms: int) -> dict[str, Any]:
    return {k: (now_ms if v is SERVER_TIMESTAMP else v) for k, v in fields.items()}


def _dec(x):
    """Decode redis bytes -> str; pass through str/None."""
    if isinstance(x, bytes):
        return x.decode("utf-8")
    return x


def _token(value: Any) -> str:
    # JSON keeps true and 1 apart
    return json.dumps(value)


def encode_fields(fields: dict[str, Any]) -> dict[str, str]:
    return {k: json.dumps(v, ensure_ascii=False) for k, v in fields.items()}


def decode_fields(raw: dict) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in raw.items():
        vs = _dec(v)
        try:
            out[_dec(k)] = json.loads(vs)
        except (TypeError, ValueError):
            out[_dec(k)] = vs
    return out


class RedisDocStore:
    """
    Document store over Redis.
    - document: HASH of JSON-encoded fields (HSET = last-write-wins merge)
    - collection: one HASH per document + ZSET index by creation time,
      plus one ZSET per value of each INDEXED_FIELDS field so an equality
      query reads only its page
    - push: every write publishes on the path's channel; watchers re-read
    """

    def __init__(self, r: Redis, namespace: str):
        self.r = r
        self.keys = SK(namespace)

    async def server_time_ms(self) -> int:
        sec, usec = await self.r.time()
        return int(sec) * 1000 + int(usec) // 1000

    # ----------------------------
    # Reads
    # ----------------------------
    async def get_document(self, path: str) -> Optional[dict[str, Any]]:
        data = await self.r.hgetall(self.keys.doc(path))
        if not data:
            return None
        return decode_fields(data)

    async def run_query(self, query: Query) -> list[Document]:
        ids = [_dec(x) for x in await self._candidate_ids(query)]
        if not ids:
            return []
        pipe = self.r.pipeline(transaction=False)
        for doc_id in ids:
            pipe.hgetall(self.keys.doc(child_path(query.collection, doc_id)))
        rows = await pipe.execute()
        docs = [Document(id=doc_id, data=decode_fields(row)) for doc_id, row in zip(ids, rows) if row]
        return apply_query(query, docs)

    async def _candidate_ids(self, query: Query) -> list:
        if query.limit is not None and query.limit <= 0:
            return []
        if len(query.where) == 1 and query.where[0][0] in INDEXED_FIELDS and query.order_by == ORDER_FIELD:
            # served from the field's own index: only the requested page is read
            field, value = query.where[0]
            key = self.keys.field_index(query.collection, field, _token(value))
            stop = -1 if query.limit is None else query.limit - 1
            if query.descending:
                return await self.r.zrevrange(key, 0, stop)
            return await self.r.zrange(key, 0, stop)
        return await self.r.zrevrange(self.keys.index(query.collection), 0, -1)

    # ----------------------------
    # Writes
    # ----------------------------
    async def merge_write(self, path: str, fields: dict[str, Any]) -> None:
        try:
            now_ms = await self.server_time_ms()
            pipe = self.r.pipeline(transaction=True)
            pipe.hset(self.keys.doc(path), mapping=encode_fields(resolve_timestamps(fields, now_ms)))
            pipe.publish(self.keys.channel(path), "merge")
            await pipe.execute()
        except RedisError as e:
            raise TransientWriteFailure(f"merge into {path} failed: {e}") from e

    async def append_document(self, collection: str, fields: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        try:
            now_ms = await self.server_time_ms()
            data = resolve_timestamps(fields, now_ms)
            created = data.get(ORDER_FIELD)
            ordered = isinstance(created, (int, float)) and not isinstance(created, bool)
            score = created if ordered else now_ms
            pipe = self.r.pipeline(transaction=True)
            pipe.hset(self.keys.doc(child_path(collection, doc_id)), mapping=encode_fields(data))
            pipe.zadd(self.keys.index(collection), {doc_id: score})
            if ordered:
                for field in INDEXED_FIELDS:
                    if field in data:
                        pipe.zadd(self.keys.field_index(collection, field, _token(data[field])), {doc_id: score})
            pipe.publish(self.keys.channel(collection), doc_id)
            await pipe.execute()
        except RedisError as e:
            raise TransientWriteFailure(f"append to {collection} failed: {e}") from e
        return doc_id

    # ----------------------------
    # Push
    # ----------------------------
    async def watch_document(self, path: str) -> AsyncIterator[Optional[dict[str, Any]]]:
        """Current document (None when absent), then again after every write."""
        async with aclosing(self._changes(self.keys.channel(path))) as changes:
            async for _ in changes:
                yield await self.get_document(path)

    async def watch_query(self, query: Query) -> AsyncIterator[list[Document]]:
        """Current result set, then recomputed after every write to the collection."""
        async with aclosing(self._changes(self.keys.channel(query.collection))) as changes:
            async for _ in changes:
                yield await self.run_query(query)

    async def _changes(self, channel: str) -> AsyncIterator[None]:
        # subscribe before the first read so no write falls in between
        pubsub = self.r.pubsub()
        await pubsub.subscribe(channel)
        logger.debug("subscribed %s", channel)
        try:
            yield None
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                yield None
        finally:
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()
            logger.debug("unsubscribed %s", channel)
