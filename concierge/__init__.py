"""
Concierge package: multi-agent reservation assistant for a restaurant.

This package contains:
- shared/: Common infrastructure (config, LLM client, logging, contracts, errors)
- tools/: Tool registry, parameter validation and tool executors
- services/: Collaborator interfaces and the in-memory sample venue
- agents/: The six capability agents and their registry
- planner/: Message -> execution plan decomposition
- classifiers/: Interruption and resume detection for the booking flow
- narrator/: Consolidation of a turn's results into one reply
- graph/: Turn graph, session store and the orchestrator entry point
"""

from concierge.graph.orchestrator import Orchestrator
from concierge.graph.build import create_turn_graph

__all__ = ["Orchestrator", "create_turn_graph"]
