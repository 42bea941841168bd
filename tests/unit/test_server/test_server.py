"""Tests for the FastAPI application: WebSocket route, health and static files."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from fastapi.websockets import WebSocketDisconnect

from deskremote.backends.base import BackendError, BackendSet
from deskremote.config.settings import ServerConfig, Settings
from deskremote.dispatch import Dispatcher
from deskremote.protocol.responses import ACK_TEXT
from deskremote.server import create_app
from deskremote.session import CLOSE_INTERNAL_ERROR


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(server=ServerConfig(static_dir=str(tmp_path / "public")))


@pytest.fixture
def stub_factory(backends: BackendSet) -> MagicMock:
    factory = MagicMock()
    factory.start = AsyncMock()
    factory.stop = AsyncMock()
    factory.create.return_value = backends
    factory.relay = None
    factory.compositor = None
    return factory


@pytest.fixture
def client(settings: Settings, stub_factory: MagicMock, dispatcher: Dispatcher):
    app = create_app(settings, factory=stub_factory, dispatcher=dispatcher)
    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# WebSocket
# ---------------------------------------------------------------------------


class TestRemoteEndpoint:
    def test_click_acknowledged(self, client: TestClient, mock_input: AsyncMock) -> None:
        with client.websocket_connect("/remote") as ws:
            ws.send_text('"LeftClick"')
            assert ws.receive_text() == ACK_TEXT
        mock_input.click.assert_awaited_once()

    def test_session_survives_bad_message(self, client: TestClient) -> None:
        with client.websocket_connect("/remote") as ws:
            ws.send_text('"LeftClick"')
            assert ws.receive_text() == ACK_TEXT
            ws.send_text("definitely not json")
            assert ws.receive_text().startswith("Error: decode_error:")
            ws.send_text('{"Key": {"value": "Escape"}}')
            assert ws.receive_text() == ACK_TEXT

    def test_capabilities_then_ack(self, client: TestClient) -> None:
        with client.websocket_connect("/remote") as ws:
            ws.send_text('"GetCapabilities"')
            caps = json.loads(ws.receive_text())
            assert caps == {"Capabilities": {"apps": ["Firefox", "Steam", "Firefox"]}}
            assert ws.receive_text() == ACK_TEXT

    def test_unknown_open_target(self, client: TestClient, mock_launcher: AsyncMock) -> None:
        with client.websocket_connect("/remote") as ws:
            ws.send_text('{"Open": {"value": "unknown-app"}}')
            assert ws.receive_text().startswith("Error: unrecognized_target:")
        mock_launcher.launch.assert_not_called()

    def test_binary_frame_answered_with_error(self, client: TestClient) -> None:
        with client.websocket_connect("/remote") as ws:
            ws.send_bytes(b'"LeftClick"')
            assert ws.receive_text().startswith("Error: unsupported_frame:")
            ws.send_text('"RightClick"')
            assert ws.receive_text() == ACK_TEXT

    def test_each_connection_gets_own_backends(
        self, client: TestClient, stub_factory: MagicMock, mock_input: AsyncMock
    ) -> None:
        for _ in range(2):
            with client.websocket_connect("/remote") as ws:
                ws.send_text('"MiddleClick"')
                assert ws.receive_text() == ACK_TEXT
        assert stub_factory.create.call_count == 2
        assert mock_input.open.await_count == 2

    def test_acquisition_failure_closes_connection(
        self, client: TestClient, mock_input: AsyncMock
    ) -> None:
        mock_input.open.side_effect = BackendError("no uinput access", backend="mock")
        with client.websocket_connect("/remote") as ws:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_text()
        assert exc_info.value.code == CLOSE_INTERNAL_ERROR


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


class TestHealth:
    def test_health(self, client: TestClient, stub_factory: MagicMock) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["endpoint"] == "/remote"
        assert data["relay_running"] is False
        assert data["compositor"] is False
        assert data["open_targets"] == ["audio", "firefox", "steam"]
        stub_factory.start.assert_awaited_once()

    def test_lifespan_stops_factory(
        self, settings: Settings, stub_factory: MagicMock, dispatcher: Dispatcher
    ) -> None:
        app = create_app(settings, factory=stub_factory, dispatcher=dispatcher)
        with TestClient(app):
            pass
        stub_factory.stop.assert_awaited_once()


class TestStaticFiles:
    def test_serves_client_ui(
        self, tmp_path: Path, stub_factory: MagicMock, dispatcher: Dispatcher
    ) -> None:
        public = tmp_path / "public"
        public.mkdir()
        (public / "index.html").write_text("<h1>remote</h1>")
        settings = Settings(server=ServerConfig(static_dir=str(public)))
        app = create_app(settings, factory=stub_factory, dispatcher=dispatcher)

        with TestClient(app) as c:
            response = c.get("/static/index.html")

        assert response.status_code == 200
        assert "remote" in response.text

    def test_missing_directory_not_mounted(self, client: TestClient) -> None:
        assert client.get("/static/index.html").status_code == 404
