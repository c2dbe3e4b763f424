"""
Agent registry.

Builds the six capability agents over a shared collaborator bundle
and tool selector, and exposes name lookup plus the one-line catalog
the planner shows to the inference capability.
"""

from typing import Dict, Iterator, List, Optional, Tuple, Type

from concierge.agents.availability import AvailabilityAgent
from concierge.agents.base import CapabilityAgent
from concierge.agents.celebration import CelebrationAgent
from concierge.agents.info import InfoAgent
from concierge.agents.menu import MenuAgent
from concierge.agents.reservation import ReservationAgent
from concierge.agents.selector import LLMToolSelector, ToolSelector
from concierge.agents.support import SupportAgent
from concierge.services.interfaces import Collaborators


AGENT_CLASSES: Tuple[Type[CapabilityAgent], ...] = (
    AvailabilityAgent,
    MenuAgent,
    CelebrationAgent,
    InfoAgent,
    ReservationAgent,
    SupportAgent,
)

SUPPORT_AGENT = SupportAgent.name
RESERVATION_AGENT = ReservationAgent.name


class AgentRegistry:
    """Name -> agent lookup over a fixed set of capability agents."""

    def __init__(self, agents: List[CapabilityAgent]):
        self._agents: Dict[str, CapabilityAgent] = {}
        for agent in agents:
            if agent.name in self._agents:
                raise ValueError(f"Duplicate agent name: {agent.name}")
            self._agents[agent.name] = agent

    @classmethod
    def create_default(
        cls,
        services: Collaborators,
        selector: Optional[ToolSelector] = None,
    ) -> "AgentRegistry":
        """
        Build the standard six agents.

        Args:
            services: Collaborator bundle used by the tool executors
            selector: Tool selector for the Think step (defaults to the LLM adapter)
        """
        selector = selector or LLMToolSelector()
        return cls([agent_cls(services, selector) for agent_cls in AGENT_CLASSES])

    def get(self, name: str) -> Optional[CapabilityAgent]:
        return self._agents.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._agents

    def __iter__(self) -> Iterator[CapabilityAgent]:
        return iter(self._agents.values())

    @property
    def names(self) -> List[str]:
        return list(self._agents.keys())

    def catalog(self) -> List[Tuple[str, str]]:
        return [(agent.name, agent.description) for agent in self._agents.values()]
