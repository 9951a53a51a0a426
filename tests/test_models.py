from hub.store.models import Answer, Document, RoomState


def test_missing_document_normalizes_to_defaults():
    state = RoomState.from_document(None)
    assert state.stage == ""
    assert state.question == ""
    assert state.hint == ""
    assert state.screen_message == ""
    assert state.allow_answers is False
    assert state.round_id == 1


def test_initial_room_values():
    state = RoomState.initial()
    assert state.stage == "1"
    assert state.allow_answers is True
    assert state.round_id == 1


def test_round_id_must_be_positive_int():
    assert RoomState.from_document({"roundId": 0}).round_id == 1
    assert RoomState.from_document({"roundId": -4}).round_id == 1
    assert RoomState.from_document({"roundId": "3"}).round_id == 3
    assert RoomState.from_document({"roundId": True}).round_id == 1
    assert RoomState.from_document({"roundId": "x"}).round_id == 1


def test_partial_document_keeps_present_fields():
    state = RoomState.from_document({"question": "Who?", "allowAnswers": True, "updatedAt": 17, "stage": None})
    assert state.question == "Who?"
    assert state.allow_answers is True
    assert state.stage == ""


def test_non_bool_allow_answers_is_closed():
    assert RoomState.from_document({"allowAnswers": "yes"}).allow_answers is False


def test_answer_from_document():
    a = Answer.from_document(
        Document(id="d1", data={"playerId": "p", "playerName": "Ann", "text": "x", "roundId": 2, "createdAt": 99})
    )
    assert a.id == "d1"
    assert a.player_name == "Ann"
    assert a.round_id == 2
    assert a.created_at == 99
