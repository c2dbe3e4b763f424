"""
Tests for the chat HTTP adapter.

The orchestrator is built with Orchestrator.create_default over a fake
inference function, so the LLM adapters (planner, tool selector,
classifiers) run end-to-end without network access.
"""

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from concierge.graph import Orchestrator
from concierge.graph.chat_api import router, set_orchestrator


# ============================================================================
# Test Fixtures
# ============================================================================


def _fake_infer(prompt):
    """Route canned answers by prompt type."""
    if prompt.startswith("You are a project manager AI"):
        return json.dumps([{"step": 1, "agentName": "support", "subTaskQuery": "Greet the user"}])
    if prompt.startswith("You are a customer support specialist"):
        return (
            "```json\n"
            + json.dumps(
                {
                    "toolToCall": "clarify_and_respond",
                    "parameters": {"response_type": "greeting", "message": "Hello! How can I help you today?"},
                }
            )
            + "\n```"
        )
    return "NO"


@pytest.fixture
def client():
    set_orchestrator(Orchestrator.create_default(infer=_fake_infer))
    app = FastAPI()
    app.include_router(router)
    yield TestClient(app)
    set_orchestrator(None)


# ============================================================================
# Tests
# ============================================================================


class TestChatEndpoints:
    def test_message_round_trip(self, client):
        response = client.post("/api/chat/message", json={"session_id": "web-1", "message": "hello"})

        assert response.status_code == 200
        body = response.json()
        assert body["session_id"] == "web-1"
        assert body["reply"] == "Hello! How can I help you today?"
        assert body["terminal_event"] is None

    def test_session_summary_after_turn(self, client):
        client.post("/api/chat/message", json={"session_id": "web-2", "message": "hello"})

        response = client.get("/api/chat/session/web-2")

        assert response.status_code == 200
        body = response.json()
        assert body["session_id"] == "web-2"
        assert body["active_flow"] == "none"
        assert body["is_awaiting_user_response"] is False

    def test_unknown_session_is_404(self, client):
        assert client.get("/api/chat/session/nobody").status_code == 404

    def test_empty_session_id_rejected(self, client):
        response = client.post("/api/chat/message", json={"session_id": "", "message": "hello"})
        assert response.status_code == 422

    def test_health(self, client):
        assert client.get("/api/chat/health").json()["status"] == "healthy"
