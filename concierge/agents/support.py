"""
Support and contact agent.

Handles complaints, greetings and anything outside the restaurant's
scope. It can only talk: its sole tool is clarify_and_respond.
"""

from concierge.agents.base import CapabilityAgent
from concierge.prompts.templates import SUPPORT_INSTRUCTIONS


class SupportAgent(CapabilityAgent):
    name = "support"
    role = "customer support specialist"
    description = "Handles greetings, complaints, support issues, or requests outside restaurant scope"
    instructions = SUPPORT_INSTRUCTIONS
    allowed_tools = ("clarify_and_respond",)
    disallowed_tool_message = (
        "I can help you with table availability, reservations, our menu, "
        "restaurant information and celebrations. What would you like to do?"
    )
    fallback_message = disallowed_tool_message
