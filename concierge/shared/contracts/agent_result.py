"""
Capability agent output contract.

Agents are silent data collectors: they return the raw structured
result of the single tool they executed, plus optional follow-up work
(a hand-off queued onto the same turn) and an optional proposed
session mutation (context data) that the orchestrator applies.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from concierge.shared.contracts.session_state import FlowType


class Handoff(BaseModel):
    """A follow-up step an agent pushes onto the turn's work queue."""

    agent_name: str = Field(description="Agent that should handle the residual request")
    query: str = Field(description="The part of the original message left unanswered")


class ContextData(BaseModel):
    """Proposed SessionState mutation emitted by an agent."""

    is_awaiting_user_response: bool = False
    next_agent: Optional[str] = None
    active_flow: Optional[FlowType] = None
    flow_state: Dict[str, Any] = Field(
        default_factory=dict, description="Delta merged into SessionState.flow_state"
    )
    reset_flow: bool = Field(
        default=False, description="Clear the active flow (e.g. after a completed booking)"
    )
    replace_flow_state: bool = Field(
        default=False, description="Start flow_state afresh instead of merging the delta"
    )


class AgentResult(BaseModel):
    """Tagged result of one agent step."""

    status: Literal["success", "failure"]
    agent_name: str
    tool_name: str = Field(description="Tool that was actually executed")
    tool_result: Dict[str, Any] = Field(default_factory=dict)
    is_task_complete: bool = True
    handoff: Optional[Handoff] = None
    context_data: Optional[ContextData] = None
    error: Optional[str] = None

    @property
    def handoff_suggestion(self) -> Optional[str]:
        return self.handoff.agent_name if self.handoff else None

    @property
    def unanswered_query(self) -> Optional[str]:
        return self.handoff.query if self.handoff else None

    @classmethod
    def success(
        cls,
        agent_name: str,
        tool_name: str,
        tool_result: Dict[str, Any],
        **kwargs: Any,
    ) -> "AgentResult":
        return cls(
            status="success",
            agent_name=agent_name,
            tool_name=tool_name,
            tool_result=tool_result,
            **kwargs,
        )

    @classmethod
    def failure(cls, agent_name: str, tool_name: str, error: str) -> "AgentResult":
        return cls(
            status="failure",
            agent_name=agent_name,
            tool_name=tool_name,
            tool_result={"success": False, "error": error},
            is_task_complete=True,
            error=error,
        )


class StepOutcome(BaseModel):
    """A tool result tagged with its producing agent and originating sub-task."""

    agent_name: str
    task: str
    tool_name: str
    tool_result: Dict[str, Any] = Field(default_factory=dict)
