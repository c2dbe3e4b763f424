"""
Table availability agent.

Checks free tables for a date, time and party size. When tables are
available it opens the booking flow and hands the user's next message
to the reservation agent together with the slot details.
"""

from typing import Any, Dict, Optional

from concierge.agents.base import AgentContext, CapabilityAgent, booking_flow_state
from concierge.agents.selector import ToolDecision
from concierge.prompts.templates import AVAILABILITY_INSTRUCTIONS
from concierge.shared.contracts.agent_result import ContextData
from concierge.shared.contracts.session_state import FlowType


class AvailabilityAgent(CapabilityAgent):
    name = "availability"
    role = "table availability specialist"
    description = "Handles table availability, booking dates/times, capacity questions, table types"
    instructions = AVAILABILITY_INSTRUCTIONS
    allowed_tools = ("check_availability", "clarify_and_respond")
    scope = "availability"
    handoff_targets = ("menu",)
    disallowed_tool_message = "I specialize in table availability. Let me help you with that first."
    fallback_message = "I need a bit more information to check availability for you."

    def awaiting_signal(
        self,
        decision: ToolDecision,
        params: Dict[str, Any],
        tool_result: Dict[str, Any],
        booking_context: Optional[Dict[str, Any]],
        restaurant_id: int,
        context: AgentContext,
    ) -> Optional[ContextData]:
        if decision.tool_to_call != "check_availability":
            return None
        if not (tool_result.get("success") and tool_result.get("available")):
            return None
        # The user must now pick a table type and give contact details
        return ContextData(
            is_awaiting_user_response=True,
            next_agent="reservation",
            active_flow=FlowType.BOOKING,
            flow_state=booking_flow_state(tool_result, restaurant_id),
            replace_flow_state=True,
        )
