import asyncio

from hub.domain.errors import TransientWriteFailure
from hub.store.doc_store import Query, apply_query, resolve_timestamps
from hub.store.models import Document


async def settle(rounds: int = 50):
    """Let every ready task run until the loop goes quiet."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class _StreamLost:
    def __init__(self, exc):
        self.exc = exc


class Feed:
    """One open watch on the fake store. Tests may push() arbitrary snapshots."""

    def __init__(self, kind, key, query=None):
        self.kind = kind
        self.key = key
        self.query = query
        self.queue = asyncio.Queue()
        self.closed = False

    def push(self, value):
        self.queue.put_nowait(value)

    def fail(self, exc=None):
        """Break the stream as a dropped store connection would."""
        self.queue.put_nowait(_StreamLost(exc or ConnectionError("stream lost")))


class FakeStore:
    def __init__(self):
        self.docs = {}
        self.collections = {}
        self.writes = []
        self.feeds = []
        self.clock = 1000
        self.fail_writes = False

    def _now(self):
        self.clock += 1
        return self.clock

    # ---- writes ----
    async def merge_write(self, path, fields):
        if self.fail_writes:
            raise TransientWriteFailure("store down")
        self.writes.append(("merge", path, dict(fields)))
        self.docs.setdefault(path, {}).update(resolve_timestamps(fields, self._now()))
        self._notify(path)

    async def append_document(self, collection, fields):
        if self.fail_writes:
            raise TransientWriteFailure("store down")
        self.writes.append(("append", collection, dict(fields)))
        docs = self.collections.setdefault(collection, [])
        doc = Document(id=f"d{len(docs)}", data=resolve_timestamps(fields, self._now()))
        docs.append(doc)
        self._notify(collection)
        return doc.id

    # ---- reads ----
    def _snapshot(self, feed):
        if feed.kind == "doc":
            data = self.docs.get(feed.key)
            return dict(data) if data is not None else None
        return apply_query(feed.query, list(self.collections.get(feed.key, [])))

    def _notify(self, key):
        for f in self.feeds:
            if f.key == key and not f.closed:
                f.push(self._snapshot(f))

    async def _watch(self, feed):
        self.feeds.append(feed)
        try:
            yield self._snapshot(feed)
            while True:
                item = await feed.queue.get()
                if isinstance(item, _StreamLost):
                    raise item.exc
                yield item
        finally:
            feed.closed = True

    def watch_document(self, path):
        return self._watch(Feed("doc", path))

    def watch_query(self, query: Query):
        return self._watch(Feed("query", query.collection, query))

    # ---- test helpers ----
    def feeds_for(self, key):
        return [f for f in self.feeds if f.key == key]

    def open_feeds(self, kind):
        return [f for f in self.feeds if f.kind == kind and not f.closed]

    def merges(self, path):
        return [fields for op, p, fields in self.writes if op == "merge" and p == path]


class RecordingRenderer:
    def __init__(self):
        self.rooms = []
        self.batches = []

    async def room_state(self, room_id, state):
        self.rooms.append((room_id, state))

    async def answers(self, room_id, batch):
        self.batches.append((room_id, batch))
