"""
Celebration packages agent.
"""

from concierge.agents.base import CapabilityAgent
from concierge.prompts.templates import CELEBRATION_INSTRUCTIONS


class CelebrationAgent(CapabilityAgent):
    """Finds packages for birthdays, anniversaries, proposals and other occasions."""

    name = "celebration"
    role = "celebration and special occasion specialist"
    description = "Handles special occasions, celebrations, birthday packages, anniversary setups"
    instructions = CELEBRATION_INSTRUCTIONS
    allowed_tools = ("get_celebration_packages", "clarify_and_respond")
    scope = "celebration"
    handoff_targets = ("availability",)
    disallowed_tool_message = "I take care of celebrations and special occasions. Let me help you plan that first."
    fallback_message = "What are you celebrating? I can suggest a package for birthdays, anniversaries and more."
