"""
Restaurant information agent.
"""

from concierge.agents.base import CapabilityAgent
from concierge.prompts.templates import INFO_INSTRUCTIONS


class InfoAgent(CapabilityAgent):
    """Answers questions about opening hours, location, contact details and atmosphere."""

    name = "info"
    role = "restaurant information specialist"
    description = "Handles restaurant information, hours, location, contact details, general atmosphere"
    instructions = INFO_INSTRUCTIONS
    allowed_tools = ("get_restaurant_info", "clarify_and_respond")
    scope = "info"
    handoff_targets = ("availability", "menu", "celebration")
    disallowed_tool_message = "I can help with information about the restaurant, like our hours and location."
    fallback_message = "What would you like to know about the restaurant: our hours, address or something else?"
