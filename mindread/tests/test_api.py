"""
Tests for API layer.

Tests:
- API service methods
- HTTP endpoints and error codes
- Session lifecycle via API
- WebSocket updates and disconnects
"""

import pytest

from ..api.schemas import (
    CreateSessionRequest,
    ErrorResponse,
    ErrorCode,
    SessionPhase,
)
from ..engine_core.cards import answers_for


class TestAPIService:
    """Tests for APIService."""

    def test_create_session(self, service):
        """New sessions start idle."""
        response = service.create_session(CreateSessionRequest())

        assert response.session_id
        assert response.phase == SessionPhase.IDLE
        assert response.total_questions == 6
        assert response.max_number == 63
        assert response.card is None

    def test_create_session_auto_start(self, service):
        """auto_start skips the start screen."""
        response = service.create_session(CreateSessionRequest(auto_start=True))

        assert response.phase == SessionPhase.ASKING
        assert response.card[:2] == [1, 3]

    def test_full_round(self, service, scheduler):
        """Answers go in, the number comes out after the delay."""
        session_id = service.create_session().session_id
        service.start(session_id)

        for yes in answers_for(27):
            response = service.answer(session_id, yes)

        assert response.phase == SessionPhase.THINKING
        assert response.result is None

        scheduler.advance(2.0)
        response = service.get_session(session_id)

        assert response.phase == SessionPhase.REVEALED
        assert response.result == 27
        assert response.progress == 1.0

    def test_answer_while_idle(self, service):
        """Rejected transition returns an error object."""
        session_id = service.create_session().session_id

        response = service.answer(session_id, True)

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.INVALID_TRANSITION
        assert response.details == {"phase": "idle"}

    def test_unknown_session(self, service):
        response = service.get_session("nonexistent-id")

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_custom_restart_phases(self, service):
        """Per-session restart policy is applied."""
        response = service.create_session(
            CreateSessionRequest(restart_phases=[SessionPhase.REVEALED], auto_start=True)
        )

        assert response.can_restart is False
        assert isinstance(service.restart(response.session_id), ErrorResponse)

    def test_end_session(self, service):
        session_id = service.create_session().session_id

        assert service.end_session(session_id)
        assert session_id not in service.list_sessions()

    def test_get_cards(self, service):
        cards = service.get_cards()

        assert cards.count == 6
        assert all(len(card) == 32 for card in cards.cards)


class TestHTTP:
    """Tests for the FastAPI endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_cards(self, client):
        response = client.get("/api/v1/cards")

        data = response.json()
        assert response.status_code == 200
        assert data["count"] == 6
        assert data["cards"][5][0] == 32

    def test_create_without_body(self, client):
        response = client.post("/api/v1/sessions")

        assert response.status_code == 200
        assert response.json()["phase"] == "idle"

    def test_round_over_http(self, client, scheduler):
        """start, six answers, wait, get: the number is revealed."""
        session_id = client.post("/api/v1/sessions", json={}).json()["session_id"]

        response = client.post(f"/api/v1/sessions/{session_id}/start")
        assert response.json()["phase"] == "asking"

        for yes in answers_for(5):
            response = client.post(f"/api/v1/sessions/{session_id}/answer", json={"yes": yes})
            assert response.status_code == 200
        assert response.json()["phase"] == "thinking"

        scheduler.advance(2.0)
        data = client.get(f"/api/v1/sessions/{session_id}").json()

        assert data["phase"] == "revealed"
        assert data["result"] == 5

    def test_answer_outside_asking_is_409(self, client):
        session_id = client.post("/api/v1/sessions").json()["session_id"]

        response = client.post(f"/api/v1/sessions/{session_id}/answer", json={"yes": True})

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_TRANSITION"

        data = client.get(f"/api/v1/sessions/{session_id}").json()
        assert data["question_index"] == 0

    def test_answer_requires_body(self, client):
        session_id = client.post("/api/v1/sessions", json={"auto_start": True}).json()["session_id"]

        response = client.post(f"/api/v1/sessions/{session_id}/answer", json={})

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_unknown_session_is_404(self, client):
        response = client.get("/api/v1/sessions/nope")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_restart_mid_thinking(self, client, scheduler):
        """Restart before the reveal stays idle past the old deadline."""
        session_id = client.post("/api/v1/sessions", json={"auto_start": True}).json()["session_id"]
        for yes in answers_for(63):
            client.post(f"/api/v1/sessions/{session_id}/answer", json={"yes": yes})

        response = client.post(f"/api/v1/sessions/{session_id}/restart")
        scheduler.advance(5.0)

        assert response.json()["phase"] == "idle"
        assert client.get(f"/api/v1/sessions/{session_id}").json()["phase"] == "idle"

    def test_list_and_delete(self, client):
        session_id = client.post("/api/v1/sessions").json()["session_id"]

        listing = client.get("/api/v1/sessions").json()
        assert session_id in listing["sessions"]

        response = client.delete(f"/api/v1/sessions/{session_id}")
        assert response.json()["success"] is True
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404

    def test_invalid_thinking_delay(self, client):
        response = client.post("/api/v1/sessions", json={"thinking_delay": -1})

        assert response.status_code == 422


class TestWebSocket:
    """Tests for WebSocket updates."""

    def test_initial_snapshot_and_update(self, client):
        session_id = client.post("/api/v1/sessions").json()["session_id"]

        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as ws:
            message = ws.receive_json()
            assert message["type"] == "state_update"
            assert message["payload"]["phase"] == "idle"

            client.post(f"/api/v1/sessions/{session_id}/start")

            message = ws.receive_json()
            assert message["payload"]["phase"] == "asking"

    def test_ping(self, client):
        session_id = client.post("/api/v1/sessions").json()["session_id"]

        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as ws:
            ws.receive_json()
            ws.send_text('{"type": "ping"}')

            assert ws.receive_json() == {"type": "pong"}

    def test_unknown_session_rejected(self, client):
        from starlette.websockets import WebSocketDisconnect

        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/api/v1/sessions/nope/ws") as ws:
                ws.receive_json()

    def test_delete_closes_socket(self, client):
        from starlette.websockets import WebSocketDisconnect

        session_id = client.post("/api/v1/sessions").json()["session_id"]

        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as ws:
            ws.receive_json()
            client.delete(f"/api/v1/sessions/{session_id}")

            with pytest.raises(WebSocketDisconnect):
                ws.receive_json()

    def test_cleanup_closes_socket(self, client, manager):
        """Stale-session cleanup disconnects clients like a delete does."""
        from starlette.websockets import WebSocketDisconnect

        session_id = client.post("/api/v1/sessions").json()["session_id"]
        manager.get_session(session_id).created_at -= 7200

        with client.websocket_connect(f"/api/v1/sessions/{session_id}/ws") as ws:
            ws.receive_json()
            removed = client.portal.call(manager.cleanup_stale_sessions, 3600)

            assert removed == 1
            with pytest.raises(WebSocketDisconnect):
                ws.receive_json()
