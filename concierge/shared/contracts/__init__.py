"""Contracts shared between the orchestrator, agents and narrator."""

from concierge.shared.contracts.session_state import (
    Delegation,
    FlowType,
    InterruptedFlow,
    SessionState,
)
from concierge.shared.contracts.execution_plan import ExecutionPlan, PlanStep
from concierge.shared.contracts.agent_result import (
    AgentResult,
    ContextData,
    Handoff,
    StepOutcome,
)
from concierge.shared.contracts.turn_response import TerminalEvent, TurnResponse

__all__ = [
    "Delegation",
    "FlowType",
    "InterruptedFlow",
    "SessionState",
    "ExecutionPlan",
    "PlanStep",
    "AgentResult",
    "ContextData",
    "Handoff",
    "StepOutcome",
    "TerminalEvent",
    "TurnResponse",
]
