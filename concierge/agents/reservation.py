"""
Reservation agent.

Owns the booking flow once availability has been shown: collects the
table choice and contact details across turns, re-checks availability
when the user changes the slot, and finally creates the reservation.

Booking context arrives in ``global_context["bookingContext"]``; the
agent merges it into tool parameters so the selector never has to
repeat values the user already gave.
"""

import logging
import re
from typing import Any, Dict, Optional

from concierge.agents.base import (
    AgentContext,
    CapabilityAgent,
    booking_flow_state,
    table_type_names,
)
from concierge.agents.selector import ToolDecision
from concierge.prompts.templates import RESERVATION_INSTRUCTIONS
from concierge.shared.contracts.agent_result import ContextData
from concierge.shared.contracts.session_state import FlowType


logger = logging.getLogger(__name__)

# Booking values the selector may ask to persist between turns
BOOKING_UPDATE_KEYS = (
    "selectedTableType",
    "name",
    "email",
    "phone",
    "specialRequests",
    "date",
    "time",
    "partySize",
)

# create_reservation parameter -> booking context key
_RESERVATION_FIELDS = {
    "name": "name",
    "email": "email",
    "phone": "phone",
    "date": "date",
    "time": "time",
    "partySize": "partySize",
    "tableType": "selectedTableType",
    "specialRequests": "specialRequests",
}


def detect_table_selection(message: str, booking_context: Optional[Dict[str, Any]]) -> Optional[str]:
    """Return the offered table type named in ``message``, if exactly one is."""
    text = (message or "").lower()
    named = [
        t for t in table_type_names(booking_context)
        if re.search(r"\b" + re.escape(t.lower()) + r"\b", text)
    ]
    return named[0] if len(named) == 1 else None


class ReservationAgent(CapabilityAgent):
    name = "reservation"
    role = "reservation creation specialist"
    description = "Handles final reservation creation when all details are collected"
    instructions = RESERVATION_INSTRUCTIONS
    allowed_tools = ("create_reservation", "clarify_and_respond", "check_availability")
    disallowed_tool_message = (
        "I handle final reservation bookings. "
        "Do you have all the details ready to confirm your reservation?"
    )
    fallback_message = (
        "To complete your reservation I need your table choice, name, email and phone number."
    )

    def booking_context_for_prompt(
        self, booking_context: Optional[Dict[str, Any]]
    ) -> Optional[Dict[str, Any]]:
        return dict(booking_context) if booking_context is not None else None

    def _known_values(
        self, decision: ToolDecision, booking_context: Optional[Dict[str, Any]]
    ) -> Dict[str, Any]:
        known = dict(booking_context or {})
        known.update(
            {k: v for k, v in decision.booking_updates.items() if k in BOOKING_UPDATE_KEYS and v is not None}
        )
        return known

    def prepare_parameters(
        self,
        decision: ToolDecision,
        booking_context: Optional[Dict[str, Any]],
        restaurant_id: int,
    ) -> Dict[str, Any]:
        params = dict(decision.parameters)
        known = self._known_values(decision, booking_context)

        if decision.tool_to_call == "create_reservation":
            for param, key in _RESERVATION_FIELDS.items():
                if params.get(param) is None and known.get(key) is not None:
                    params[param] = known[key]
        elif decision.tool_to_call == "check_availability":
            for key in ("date", "time", "partySize"):
                if params.get(key) is None and known.get(key) is not None:
                    params[key] = known[key]
        return params

    def awaiting_signal(
        self,
        decision: ToolDecision,
        params: Dict[str, Any],
        tool_result: Dict[str, Any],
        booking_context: Optional[Dict[str, Any]],
        restaurant_id: int,
        context: AgentContext,
    ) -> Optional[ContextData]:
        tool = decision.tool_to_call

        if tool == "create_reservation" and tool_result.get("success"):
            return ContextData(reset_flow=True)

        if tool == "check_availability" and tool_result.get("success"):
            # Slot changed: replace the offered table types, keep contact details
            flow_state = booking_flow_state(tool_result, restaurant_id)
            if not tool_result.get("available"):
                flow_state["availableTableTypes"] = []
            flow_state["selectedTableType"] = None
            return ContextData(
                is_awaiting_user_response=True,
                next_agent=self.name,
                active_flow=FlowType.BOOKING,
                flow_state=flow_state,
            )

        if booking_context is None:
            return None

        # Still inside the booking flow: keep it open and persist what we learned
        updates = {
            k: v for k, v in decision.booking_updates.items()
            if k in BOOKING_UPDATE_KEYS and v is not None
        }
        selected = detect_table_selection(context.original_message, booking_context)
        if selected and "selectedTableType" not in updates:
            updates["selectedTableType"] = selected
        if updates:
            logger.info(
                f"[session={context.session_id}] [agent={self.name}] "
                f"Booking details collected | keys={sorted(updates)}"
            )
        return ContextData(
            is_awaiting_user_response=True,
            next_agent=self.name,
            active_flow=FlowType.BOOKING,
            flow_state=updates,
        )
