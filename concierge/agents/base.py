"""
Capability agent base class.

Every agent runs the same cycle:

    Think  -> ask the ToolSelector which tool to call
    Guard  -> force clarify_and_respond if the tool is outside the allow-list
    Act    -> validate parameters, execute against the collaborators
    Scope  -> hand off clauses that belong to another capability
    Signal -> propose a session mutation when the user must answer next

Agents never raise past ``process``; every failure becomes a failure
AgentResult.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from concierge.agents.scope import find_residual
from concierge.agents.selector import ToolDecision, ToolSelectionRequest, ToolSelector
from concierge.services.interfaces import Collaborators
from concierge.shared.contracts.agent_result import AgentResult, ContextData, Handoff
from concierge.tools.executors import TOOL_EXECUTORS
from concierge.tools.registry import CLARIFY_TOOL, TOOL_DEFINITIONS, validate


logger = logging.getLogger(__name__)


@dataclass
class AgentContext:
    """Turn-level context handed to an agent alongside its task."""

    original_message: str
    global_context: Dict[str, Any] = field(default_factory=dict)
    session_id: str = "unknown"

    @property
    def booking_context(self) -> Optional[Dict[str, Any]]:
        return self.global_context.get("bookingContext")


class CapabilityAgent:
    """
    Base class for the six capability agents.

    Subclasses set the class attributes and override ``prepare_parameters``
    and ``awaiting_signal`` where their domain needs it.
    """

    name: str = ""
    role: str = ""
    description: str = ""
    instructions: str = ""
    allowed_tools: Tuple[str, ...] = (CLARIFY_TOOL,)
    scope: Optional[str] = None
    handoff_targets: Tuple[str, ...] = ()
    disallowed_tool_message: str = "Let me help you with that."
    fallback_message: str = "Could you please tell me a bit more about what you're looking for?"

    def __init__(self, services: Collaborators, selector: ToolSelector):
        self.services = services
        self.selector = selector
        self.tools = [TOOL_DEFINITIONS[t] for t in self.allowed_tools]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, tools={list(self.allowed_tools)})"

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def process(
        self,
        task: str,
        history: Optional[Sequence[Dict[str, Any]]],
        restaurant_id: int,
        context: AgentContext,
    ) -> AgentResult:
        """
        Run Think -> Act for one plan step.

        Args:
            task: Sub-task assigned to this agent
            history: Conversation history
            restaurant_id: Venue the request is about
            context: Original message and the turn's global context

        Returns:
            AgentResult carrying the executed tool's raw result
        """
        _log = f"[session={context.session_id}] [agent={self.name}] "
        logger.info(f"{_log}Processing task | task={task!r}")

        booking_context = context.booking_context
        decision = self.think(task, history, context)
        decision = self.guard(decision, _log)
        params = self.prepare_parameters(decision, booking_context, restaurant_id)
        tool_name = decision.tool_to_call

        validation = validate(tool_name, params)
        if not validation.ok:
            error = f"Invalid parameters: {'; '.join(validation.messages)}"
            logger.warning(f"{_log}Validation failed | tool={tool_name}, errors={validation.messages}")
            result = AgentResult.failure(self.name, tool_name, error)
            result.tool_result["message"] = self.fallback_message
            result.context_data = self.awaiting_signal(
                decision, params, result.tool_result, booking_context, restaurant_id, context
            )
            return result

        try:
            tool_result = TOOL_EXECUTORS[tool_name](params, restaurant_id, self.services)
        except Exception as e:
            logger.exception(f"{_log}Tool execution failed | tool={tool_name}: {e}")
            result = AgentResult.failure(self.name, tool_name, str(e))
            result.context_data = self.awaiting_signal(
                decision, params, result.tool_result, booking_context, restaurant_id, context
            )
            return result

        context_data = self.awaiting_signal(
            decision, params, tool_result, booking_context, restaurant_id, context
        )

        if not tool_result.get("success"):
            error = tool_result.get("error") or "Task failed"
            logger.warning(f"{_log}Tool reported failure | tool={tool_name}, error={error}")
            result = AgentResult.failure(self.name, tool_name, error)
            result.context_data = context_data
            return result

        handoff = self.analyze_completion(task, context)
        awaiting = bool(context_data and context_data.is_awaiting_user_response)

        logger.info(
            f"{_log}Task finished | tool={tool_name}, "
            f"handoff={handoff.agent_name if handoff else None}, awaiting={awaiting}"
        )
        return AgentResult.success(
            self.name,
            tool_name,
            tool_result,
            is_task_complete=handoff is None and not awaiting,
            handoff=handoff,
            context_data=context_data,
        )

    # ------------------------------------------------------------------
    # Cycle steps
    # ------------------------------------------------------------------

    def clarify(self, message: str) -> ToolDecision:
        return ToolDecision(
            tool_to_call=CLARIFY_TOOL,
            parameters={"response_type": "clarification", "message": message},
        )

    def think(
        self,
        task: str,
        history: Optional[Sequence[Dict[str, Any]]],
        context: AgentContext,
    ) -> ToolDecision:
        request = ToolSelectionRequest(
            agent_name=self.name,
            role=self.role,
            instructions=self.instructions,
            original_message=context.original_message,
            task=task,
            tools=self.tools,
            global_context={
                k: v for k, v in context.global_context.items() if k != "bookingContext"
            },
            history=list(history or []),
            booking_context=self.booking_context_for_prompt(context.booking_context),
        )
        try:
            return self.selector.select(request)
        except Exception as e:
            logger.warning(
                f"[session={context.session_id}] [agent={self.name}] "
                f"Tool selection failed, using fallback clarification: {e}"
            )
            return self.clarify(self.fallback_message)

    def guard(self, decision: ToolDecision, _log: str = "") -> ToolDecision:
        if decision.tool_to_call in self.allowed_tools:
            return decision
        logger.warning(
            f"{_log}Disallowed tool requested | tool={decision.tool_to_call}, "
            f"allowed={list(self.allowed_tools)}"
        )
        return self.clarify(self.disallowed_tool_message)

    def booking_context_for_prompt(
        self, booking_context: Optional[Dict[str, Any]]
    ) -> Optional[Dict[str, Any]]:
        """Booking context shown to the selector (only the reservation agent sees it)."""
        return None

    def prepare_parameters(
        self,
        decision: ToolDecision,
        booking_context: Optional[Dict[str, Any]],
        restaurant_id: int,
    ) -> Dict[str, Any]:
        return dict(decision.parameters)

    def analyze_completion(self, task: str, context: AgentContext) -> Optional[Handoff]:
        if not self.handoff_targets:
            return None
        claimed = [name for name in context.global_context if name != "bookingContext"]
        residual = find_residual(
            context.original_message,
            task,
            own_scope=self.scope,
            targets=self.handoff_targets,
            claimed=claimed,
        )
        if residual is None:
            return None
        target, query = residual
        return Handoff(agent_name=target, query=query)

    def awaiting_signal(
        self,
        decision: ToolDecision,
        params: Dict[str, Any],
        tool_result: Dict[str, Any],
        booking_context: Optional[Dict[str, Any]],
        restaurant_id: int,
        context: AgentContext,
    ) -> Optional[ContextData]:
        return None


def booking_flow_state(tool_result: Dict[str, Any], restaurant_id: int) -> Dict[str, Any]:
    """Flow values persisted after a successful availability check."""
    return {
        "date": tool_result.get("date"),
        "time": tool_result.get("time"),
        "partySize": tool_result.get("partySize"),
        "availableTableTypes": list(tool_result.get("availableTableTypes") or []),
        "restaurantId": restaurant_id,
    }


def table_type_names(booking_context: Optional[Dict[str, Any]]) -> List[str]:
    types = (booking_context or {}).get("availableTableTypes") or []
    return [str(t.get("tableType")) for t in types if isinstance(t, dict) and t.get("tableType")]
