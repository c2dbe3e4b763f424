"""
Conversation turn graph.

Routes each user message (resume, continuation, interruption or fresh
plan), runs the capability agents over a per-turn work queue and
consolidates their results into a single reply:
    route_turn -> execute_step* -> finalize_terminal | consolidate
"""

from concierge.graph.build import TurnNodes, create_turn_graph
from concierge.graph.orchestrator import Orchestrator
from concierge.graph.session_store import SessionStore

__all__ = ["Orchestrator", "SessionStore", "TurnNodes", "create_turn_graph"]
