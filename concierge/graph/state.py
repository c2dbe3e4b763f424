"""
Turn state schema.

Defines the state that flows through the turn graph for one user
message: the working copy of the session, the work queue of
(agent, sub-task) steps, and the results collected so far.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, TypedDict
import operator

from concierge.shared.contracts.agent_result import StepOutcome
from concierge.shared.contracts.execution_plan import PlanStep
from concierge.shared.contracts.session_state import SessionState
from concierge.shared.contracts.turn_response import TerminalEvent


class TurnMode(str, Enum):
    """How the turn's plan was chosen."""

    RESUME_DETECTED = "resume_detected"
    CONTINUATION = "continuation"
    INTERRUPTED = "interrupted"
    FRESH_PLAN = "fresh_plan"


class TurnState(TypedDict):
    """
    State schema for the turn graph.

    ``session`` is the turn's private working copy; it is committed to
    the session store only after the graph finishes without error.
    """

    # Request
    session_id: str
    message: str
    history: List[Dict[str, Any]]
    restaurant_id: int

    # Working copy of the session
    session: SessionState

    # Planning and execution
    mode: Optional[TurnMode]
    queue: List[PlanStep]
    executed: List[str]
    outcomes: Annotated[List[StepOutcome], operator.add]

    # Result
    terminal_event: Optional[TerminalEvent]
    reply: Optional[str]

    # Tracking
    messages: Annotated[List[dict], operator.add]
