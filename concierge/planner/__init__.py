"""
Planner for decomposing a user message into agent steps.
"""

from concierge.planner.planner import (
    LLMPlanner,
    Planner,
    keyword_fallback_plan,
    parse_plan,
)

__all__ = ["LLMPlanner", "Planner", "keyword_fallback_plan", "parse_plan"]
