"""
Integration tests for the preview WebSocket endpoint.

Tests /ws/preview: initial snapshot, publish round trip, ping, errors.
"""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from backend.main import app
from backend.services.preview_channel import preview_channel
from engine.codegen.types import PreviewMessage


@pytest.fixture
def client():
    """Return a synchronous TestClient for WS testing."""
    with TestClient(app) as c:
        yield c


class TestPreviewSocket:
    def test_accepts_connection(self, client):
        with client.websocket_connect("/ws/preview"):
            pass

    def test_ping(self, client):
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text(json.dumps({"type": "ping"}))
            assert json.loads(ws.receive_text()) == {"type": "pong"}

    def test_latest_sent_on_connect(self, client):
        preview_channel.publish(PreviewMessage(code="return (<i>old</i>);"))
        with client.websocket_connect("/ws/preview") as ws:
            event = json.loads(ws.receive_text())
            assert event["type"] == "preview"
            assert event["code"] == "return (<i>old</i>);"
            assert "<!doctype html>" in event["html"]

    def test_publish_round_trip(self, client):
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text(
                json.dumps(
                    {
                        "type": "publish",
                        "code": "return (<div>Hello</div>);",
                        "filePath": "app/components/Hello.tsx",
                        "loading": True,
                    }
                )
            )
            event = json.loads(ws.receive_text())
            assert event["type"] == "preview"
            assert event["filePath"] == "app/components/Hello.tsx"
            assert event["loading"] is True
            assert '<body class="thinking">' in event["html"]

    def test_publish_reaches_other_panes(self, client):
        with client.websocket_connect("/ws/preview") as viewer, client.websocket_connect("/ws/preview") as editor:
            editor.send_text(json.dumps({"type": "publish", "code": "<p>shared</p>"}))
            assert json.loads(editor.receive_text())["code"] == "<p>shared</p>"
            assert json.loads(viewer.receive_text())["code"] == "<p>shared</p>"

    def test_http_publish_reaches_socket(self, client):
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text(json.dumps({"type": "ping"}))
            assert json.loads(ws.receive_text())["type"] == "pong"
            res = client.post("/api/preview", json={"code": "<p>from http</p>"})
            assert res.status_code == 202
            assert json.loads(ws.receive_text())["code"] == "<p>from http</p>"

    def test_publish_without_code(self, client):
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text(json.dumps({"type": "publish"}))
            assert json.loads(ws.receive_text()) == {"type": "error", "error": "Missing code"}

    def test_non_string_code(self, client):
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text(json.dumps({"type": "publish", "code": 42}))
            assert json.loads(ws.receive_text()) == {"type": "error", "error": "code must be a string"}

    def test_loading_only_keeps_previous_code(self, client):
        preview_channel.publish(PreviewMessage(code="<p>kept</p>", file_path="app/components/Kept.tsx"))
        with client.websocket_connect("/ws/preview") as ws:
            assert json.loads(ws.receive_text())["loading"] is False
            ws.send_text(json.dumps({"type": "publish", "loading": True}))
            event = json.loads(ws.receive_text())
            assert event["code"] == "<p>kept</p>"
            assert event["filePath"] == "app/components/Kept.tsx"
            assert event["loading"] is True

    def test_loading_only_without_previous_code(self, client):
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text(json.dumps({"type": "publish", "loading": True}))
            event = json.loads(ws.receive_text())
            assert event["code"] == ""
            assert event["loading"] is True

    def test_string_false_loading_is_off(self, client):
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text(json.dumps({"type": "publish", "code": "<p />", "loading": "false"}))
            event = json.loads(ws.receive_text())
            assert event["loading"] is False
            assert '<body class="thinking">' not in event["html"]

    def test_matches_http_loading_only(self, client):
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text(json.dumps({"type": "publish", "code": "<p>v1</p>"}))
            ws.receive_text()
            res = client.post("/api/preview", json={"loading": True})
            assert res.status_code == 202
            via_http = json.loads(ws.receive_text())
            ws.send_text(json.dumps({"type": "publish", "loading": True}))
            via_socket = json.loads(ws.receive_text())
            assert via_socket == via_http

    def test_invalid_json(self, client):
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text("not json")
            assert json.loads(ws.receive_text()) == {"type": "error", "error": "Invalid JSON"}

    def test_unknown_type(self, client):
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text(json.dumps({"type": "subscribe"}))
            event = json.loads(ws.receive_text())
            assert event["type"] == "error"
            assert "subscribe" in event["error"]

    def test_disconnect_unsubscribes(self, client):
        before = preview_channel.subscriber_count
        with client.websocket_connect("/ws/preview") as ws:
            ws.send_text(json.dumps({"type": "ping"}))
            ws.receive_text()
            assert preview_channel.subscriber_count == before + 1
        # one more round trip lets the server finish closing the socket
        client.get("/health")
        assert preview_channel.subscriber_count == before
