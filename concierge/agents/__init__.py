"""
Capability agents.

Six agents, each restricted to a subset of the tool registry:
- availability: table availability checks
- menu: dishes, dietary options, prices
- info: hours, address, contact details
- celebration: special occasion packages
- reservation: booking flow and reservation creation
- support: greetings, complaints, out-of-scope requests
"""

from concierge.agents.availability import AvailabilityAgent
from concierge.agents.base import AgentContext, CapabilityAgent
from concierge.agents.celebration import CelebrationAgent
from concierge.agents.info import InfoAgent
from concierge.agents.menu import MenuAgent
from concierge.agents.registry import AGENT_CLASSES, AgentRegistry
from concierge.agents.reservation import ReservationAgent
from concierge.agents.selector import (
    LLMToolSelector,
    ToolDecision,
    ToolSelectionRequest,
    ToolSelector,
)
from concierge.agents.support import SupportAgent

__all__ = [
    "AGENT_CLASSES",
    "AgentContext",
    "AgentRegistry",
    "AvailabilityAgent",
    "CapabilityAgent",
    "CelebrationAgent",
    "InfoAgent",
    "LLMToolSelector",
    "MenuAgent",
    "ReservationAgent",
    "SupportAgent",
    "ToolDecision",
    "ToolSelectionRequest",
    "ToolSelector",
]
