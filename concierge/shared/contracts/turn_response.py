"""
Turn-level response contract returned by ``Orchestrator.handle_message``.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class TerminalEvent(BaseModel):
    """A business event that ended the turn early (e.g. a created reservation)."""

    type: str = Field(description="Event type, e.g. 'reservation_created'")
    payload: Dict[str, Any] = Field(default_factory=dict)


class TurnResponse(BaseModel):
    """Reply for one user message."""

    reply: str
    terminal_event: Optional[TerminalEvent] = None
