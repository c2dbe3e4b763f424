"""
FastAPI endpoints for the conversation orchestrator.

Thin HTTP adapter: validates the request and forwards it to
``Orchestrator.handle_message``.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from concierge.graph.orchestrator import Orchestrator


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])

_orchestrator: Optional[Orchestrator] = None


def get_orchestrator() -> Orchestrator:
    """Process-wide orchestrator, built on first use."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = Orchestrator.create_default()
    return _orchestrator


def set_orchestrator(orchestrator: Optional[Orchestrator]) -> None:
    """Replace the process-wide orchestrator (used by tests and alternate wiring)."""
    global _orchestrator
    _orchestrator = orchestrator


# ============================================================================
# Request/Response Models
# ============================================================================


class ChatRequest(BaseModel):
    """One user message."""

    session_id: str = Field(min_length=1, description="Conversation session identifier")
    message: str = Field(description="The user's message")
    history: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Recent turns as {'sender'|'role': ..., 'text'|'content': ...}",
    )
    restaurant_id: Optional[int] = Field(default=None, description="Venue identifier")


class ChatResponse(BaseModel):
    """Reply for one user message."""

    session_id: str = Field(description="Conversation session identifier")
    reply: str = Field(description="Consolidated reply text")
    terminal_event: Optional[Dict[str, Any]] = Field(
        default=None, description="Business event that ended the turn, if any"
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/message", response_model=ChatResponse)
def send_message(request: ChatRequest):
    """
    Handle one user message.

    Runs planning, agent execution and consolidation for the session and
    returns the single reply for this turn.
    """
    _log = f"[session={request.session_id}] [graph=turn] [api=message] "
    logger.info(f"{_log}Request received | history={len(request.history)}")

    try:
        response = get_orchestrator().handle_message(
            request.session_id,
            request.message,
            history=request.history,
            restaurant_id=request.restaurant_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ChatResponse(
        session_id=request.session_id,
        reply=response.reply,
        terminal_event=(
            response.terminal_event.model_dump() if response.terminal_event else None
        ),
    )


@router.get("/session/{session_id}")
def get_session(session_id: str):
    """Get a compact summary of a session's committed state."""
    state = get_orchestrator().get_session(session_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return {"session_id": session_id, **state.summary()}


@router.get("/health")
def health():
    """Health check for the chat endpoints."""
    return {"status": "healthy", "agent": "orchestrator"}
