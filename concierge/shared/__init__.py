"""
Shared infrastructure for all agents.

Modules:
- config: Runtime tunables
- errors: Error taxonomy
- llm: OpenAI client with retry logic
- logging: Structured JSON logging
- contracts: Session, plan, agent result and turn response models
- parsing: JSON extraction from model output
"""

from concierge.shared.llm.client import get_cached_client, call_llm
from concierge.shared.logging.config import setup_logging, log_state_transition

__all__ = [
    "get_cached_client",
    "call_llm",
    "setup_logging",
    "log_state_transition",
]
