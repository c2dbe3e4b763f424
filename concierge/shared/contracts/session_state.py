"""
Conversation session state contract.

One SessionState exists per session identifier. It is owned by the
orchestrator: loaded as a working copy at the start of a turn and
committed back to the store only when the whole turn succeeds.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FlowType(str, Enum):
    """Multi-turn protocols tracked across messages."""

    NONE = "none"
    BOOKING = "booking"


class InterruptedFlow(BaseModel):
    """Snapshot of a booking flow abandoned mid-way, kept for resumption."""

    flow_state: Dict[str, Any] = Field(
        default_factory=dict, description="flow_state at the moment of interruption"
    )
    interrupted_at: str = Field(description="ISO-8601 UTC timestamp of the interruption")


class Delegation(BaseModel):
    """One (agent, task) pair executed during the current turn."""

    agent: str
    task: str


class SessionState(BaseModel):
    """Per-conversation state record."""

    session_id: str = Field(description="Caller-supplied session identifier")

    # Multi-turn flow tracking
    active_flow: FlowType = Field(default=FlowType.NONE)
    flow_state: Dict[str, Any] = Field(
        default_factory=dict,
        description="Values accumulated across the active flow (date, time, partySize, ...)",
    )
    is_awaiting_user_response: bool = Field(
        default=False,
        description="True iff the previous turn ended by asking the user to choose or answer",
    )
    next_agent: Optional[str] = Field(
        default=None, description="Agent that receives the next message while awaiting"
    )
    interrupted_flow: Optional[InterruptedFlow] = Field(default=None)

    # Turn-scoped scratchpad
    global_context: Dict[str, Any] = Field(default_factory=dict)
    delegation_chain: List[Delegation] = Field(default_factory=list)

    # Store bookkeeping (clock readings from the store's injected clock)
    created_at: float = 0.0
    last_active: float = 0.0

    def clear_awaiting(self) -> None:
        """Drop the awaiting-response marker and its target agent."""
        self.is_awaiting_user_response = False
        self.next_agent = None

    def reset_flow(self) -> None:
        """Return to the idle state: no flow, no pending question."""
        self.clear_awaiting()
        self.active_flow = FlowType.NONE
        self.flow_state = {}

    def summary(self) -> Dict[str, Any]:
        """Compact view used in logs and the session endpoint."""
        return {
            "active_flow": self.active_flow.value,
            "is_awaiting_user_response": self.is_awaiting_user_response,
            "next_agent": self.next_agent,
            "flow_keys": sorted(self.flow_state.keys()),
            "has_interrupted_flow": self.interrupted_flow is not None,
            "delegations": len(self.delegation_chain),
        }
