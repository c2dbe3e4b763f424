"""
Runtime configuration for the dispatch core.

Centralizes all tunables (model, timeouts, history windows, session
lifetime, queue limits) so behavior can be adjusted without touching
the graph wiring.
"""

from dataclasses import dataclass, fields
from typing import Any


@dataclass
class OrchestratorConfig:
    """
    Configuration for the orchestrator and its inference adapters.

    Attributes:
        model: Chat model used by every inference adapter
        llm_timeout: Per-request timeout for inference calls (seconds)
        max_retries: Attempts per inference call (tenacity)
        history_window: Recent turns shown to planner, agents and classifiers
        narrator_history_window: Recent turns shown to the consolidator
        conversation_context_limit: Max history turns accepted per message
        session_ttl_seconds: Idle time after which a session is evicted
        max_active_sessions: Upper bound on sessions kept in memory
        max_steps_per_turn: Upper bound on queued steps executed in one turn
        recursion_limit: LangGraph recursion limit for one turn
        default_restaurant_id: Venue used when the caller omits one
    """

    # LLM configuration
    model: str = "gpt-4.1-mini"
    llm_timeout: int = 30  # seconds

    # Retry configuration (used by tenacity in llm/client.py)
    max_retries: int = 3
    retry_min_wait: int = 2  # seconds
    retry_max_wait: int = 10  # seconds

    # Prompt context
    history_window: int = 3
    narrator_history_window: int = 4
    conversation_context_limit: int = 10

    # Session store
    session_ttl_seconds: int = 30 * 60
    max_active_sessions: int = 1000

    # Turn execution limits
    max_steps_per_turn: int = 8
    recursion_limit: int = 50

    default_restaurant_id: int = 1


# Default configuration instance
DEFAULT_CONFIG = OrchestratorConfig()


def get_config(**overrides: Any) -> OrchestratorConfig:
    """
    Create a configuration with optional overrides.

    Args:
        **overrides: Field values replacing the defaults. ``None`` values
            are ignored so callers can pass optional settings through.

    Returns:
        OrchestratorConfig with specified overrides applied

    Raises:
        ValueError: If an override names an unknown field
    """
    known = {f.name for f in fields(OrchestratorConfig)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown config fields: {sorted(unknown)}")

    values = {
        name: getattr(DEFAULT_CONFIG, name)
        for name in known
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return OrchestratorConfig(**values)
