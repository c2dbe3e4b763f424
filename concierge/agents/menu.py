"""
Menu and pricing agent.
"""

from concierge.agents.base import CapabilityAgent
from concierge.prompts.templates import MENU_INSTRUCTIONS


class MenuAgent(CapabilityAgent):
    """Answers questions about dishes, drinks, dietary options and prices."""

    name = "menu"
    role = "menu specialist"
    description = "Handles menu items, food questions, dietary requirements, pricing queries"
    instructions = MENU_INSTRUCTIONS
    allowed_tools = ("get_menu_items", "clarify_and_respond")
    scope = "menu"
    handoff_targets = ("availability",)
    disallowed_tool_message = "I specialize in our menu. Let me help you with your food and drink questions first."
    fallback_message = "Which dish or dietary requirement would you like me to look up on our menu?"
