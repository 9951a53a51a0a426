from hub.store.doc_store import (
    SERVER_TIMESTAMP,
    Query,
    apply_query,
    decode_fields,
    encode_fields,
    resolve_timestamps,
)
from hub.store.models import Document
from hub.store.redis_keys import SK, answers_path, child_path, room_path


def _doc(i, **data):
    return Document(id=f"d{i}", data=data)


def test_query_filters_orders_and_limits():
    docs = [_doc(i, roundId=1 if i % 2 else 2, createdAt=i) for i in range(10)]
    q = Query(collection="c", where=(("roundId", 1),), order_by="createdAt", descending=True, limit=3)
    assert [d.id for d in apply_query(q, docs)] == ["d9", "d7", "d5"]


def test_query_skips_docs_without_order_field():
    docs = [_doc(0, roundId=1, createdAt=5), _doc(1, roundId=1), _doc(2, roundId=1, createdAt=None)]
    q = Query(collection="c", where=(("roundId", 1),))
    assert [d.id for d in apply_query(q, docs)] == ["d0"]


def test_query_does_not_match_bool_against_int():
    docs = [_doc(0, roundId=True, createdAt=1), _doc(1, roundId=1, createdAt=2)]
    q = Query(collection="c", where=(("roundId", 1),))
    assert [d.id for d in apply_query(q, docs)] == ["d1"]


def test_query_ties_keep_index_order():
    docs = [_doc(0, createdAt=7), _doc(1, createdAt=7)]
    assert [d.id for d in apply_query(Query(collection="c"), docs)] == ["d0", "d1"]


def test_server_timestamp_resolved_from_store_clock():
    fields = resolve_timestamps({"a": 1, "updatedAt": SERVER_TIMESTAMP}, 1234)
    assert fields == {"a": 1, "updatedAt": 1234}


def test_fields_encode_as_json_and_decode_from_bytes():
    encoded = encode_fields({"stage": "1", "allowAnswers": True, "roundId": 2})
    assert encoded == {"stage": '"1"', "allowAnswers": "true", "roundId": "2"}
    raw = {k.encode(): v.encode() for k, v in encoded.items()}
    raw[b"legacy"] = b"not json"
    assert decode_fields(raw) == {"stage": "1", "allowAnswers": True, "roundId": 2, "legacy": "not json"}


def test_key_layout():
    sk = SK("nz")
    assert room_path("demo") == "rooms/demo"
    assert answers_path("demo") == "rooms/demo/answers"
    assert sk.doc(room_path("demo")) == "nz:doc:rooms/demo"
    assert sk.index(answers_path("demo")) == "nz:idx:rooms/demo/answers"
    assert sk.doc(child_path(answers_path("demo"), "x1")) == "nz:doc:rooms/demo/answers/x1"
    assert sk.channel(answers_path("demo")) == "nz:chan:rooms/demo/answers"


def test_room_ids_stay_one_path_segment():
    sk = SK("nz")
    assert room_path("a/answers") == "rooms/a%2Fanswers"
    assert room_path("x:y") == "rooms/x%3Ay"
    assert room_path("50%") == "rooms/50%25"
    assert room_path("a/answers") != answers_path("a")
    assert answers_path("a/b") == "rooms/a%2Fb/answers"
    assert sk.field_index(answers_path("demo"), "roundId", "3") == "nz:idx:rooms/demo/answers:roundId=3"
