from fastapi.testclient import TestClient

from hub.main import create_app


def _degraded_app(monkeypatch):
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("STORE_NAMESPACE", raising=False)
    return create_app()


def test_health_reports_missing_store(monkeypatch):
    app = _degraded_app(monkeypatch)
    with TestClient(app) as client:
        resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["store"] == "unavailable"
    assert body["missing"] == ["REDIS_URL", "STORE_NAMESPACE"]


def test_ws_hello_and_inert_commands(monkeypatch):
    app = _degraded_app(monkeypatch)
    with TestClient(app) as client:
        with client.websocket_connect("/ws/player?player_id=device-7&room=demo") as ws:
            hello = ws.receive_json()
            assert hello["type"] == "hello"
            assert hello["player_id"] == "device-7"
            assert hello["store_available"] is False
            assert hello["missing"] == ["REDIS_URL", "STORE_NAMESPACE"]

            ws.send_json({"type": "bogus"})
            err = ws.receive_json()
            assert err["code"] == "BAD_MESSAGE"

        resp = client.get("/admin/sessions")
        assert resp.json()["store_available"] is False


def test_ws_mints_player_id(monkeypatch):
    app = _degraded_app(monkeypatch)
    with TestClient(app) as client:
        with client.websocket_connect("/ws/screen") as ws:
            hello = ws.receive_json()
            assert hello["role"] == "screen"
            assert len(hello["player_id"]) == 36
