"""Prompt templates and builders for the inference adapters."""

from concierge.prompts.builders import (
    build_consolidation_prompt,
    build_interruption_prompt,
    build_planner_prompt,
    build_resume_prompt,
    build_tool_selection_prompt,
    format_history,
    summarize_global_context,
)

__all__ = [
    "build_consolidation_prompt",
    "build_interruption_prompt",
    "build_planner_prompt",
    "build_resume_prompt",
    "build_tool_selection_prompt",
    "format_history",
    "summarize_global_context",
]
