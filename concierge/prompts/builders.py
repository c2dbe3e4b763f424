"""
Prompt builders.

These functions turn orchestrator and agent state into the prompt
strings handed to the inference capability.
"""

import json
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from concierge.prompts.templates import (
    BOOKING_CONTEXT_TEMPLATE,
    BOOKING_UPDATES_HINT,
    CONSOLIDATION_TEMPLATE,
    INTERRUPTION_TEMPLATE,
    PLANNER_TEMPLATE,
    RESUME_TEMPLATE,
    TOOL_SELECTION_TEMPLATE,
)
from concierge.tools.registry import ToolDefinition


NO_CONTEXT_SUMMARY = "No other agents have processed this request yet."


def format_history(history: Optional[Sequence[Dict[str, Any]]], limit: int) -> str:
    """
    Render the last ``limit`` history entries as ``sender: text`` lines.

    Accepts both ``{sender, text}`` and ``{role, content}`` shaped entries.

    Returns:
        Formatted history, or "None" when empty
    """
    if not history or limit <= 0:
        return "None"
    lines = []
    for entry in list(history)[-limit:]:
        sender = entry.get("sender") or entry.get("role") or "user"
        text = entry.get("text") or entry.get("content") or ""
        lines.append(f"{sender}: {text}")
    return "\n".join(lines) if lines else "None"


def summarize_global_context(global_context: Optional[Dict[str, Any]]) -> str:
    """
    Summarize what other agents already found this turn.

    Args:
        global_context: Mapping of agent name to its raw tool result

    Returns:
        One line per agent, or a fixed sentence when nothing ran yet
    """
    if not global_context:
        return NO_CONTEXT_SUMMARY

    summaries = []
    for agent, result in global_context.items():
        if agent == "bookingContext" or not isinstance(result, dict):
            continue
        if result.get("success"):
            if "available" in result:
                status = "tables available" if result["available"] else "no availability"
                summaries.append(f"{agent}: Checked availability - {status}")
            elif result.get("items"):
                summaries.append(f"{agent}: Found {len(result['items'])} menu items")
            elif result.get("packages"):
                summaries.append(f"{agent}: Found {len(result['packages'])} celebration packages")
            elif result.get("restaurant"):
                summaries.append(f"{agent}: Retrieved restaurant information")
            else:
                summaries.append(f"{agent}: Completed successfully")
        else:
            summaries.append(f"{agent}: {result.get('error') or 'Task failed'}")

    return "\n".join(summaries) if summaries else NO_CONTEXT_SUMMARY


def _date_context(today: Optional[date] = None) -> Tuple[str, str]:
    today = today or date.today()
    return today.isoformat(), (today + timedelta(days=1)).isoformat()


def build_tool_selection_prompt(
    role: str,
    instructions: str,
    original_message: str,
    task: str,
    tools: Iterable[ToolDefinition],
    global_context: Optional[Dict[str, Any]],
    history: Optional[Sequence[Dict[str, Any]]],
    history_limit: int,
    booking_context: Optional[Dict[str, Any]] = None,
    today: Optional[date] = None,
) -> str:
    """
    Build the Think-step prompt for a capability agent.

    Args:
        role: Short description of the agent's specialty
        instructions: Agent-specific decision rules
        original_message: The user's full message this turn
        task: The sub-task assigned to this agent
        tools: Tool definitions the agent may call
        global_context: Results produced earlier in the turn
        history: Conversation history
        history_limit: Number of recent history entries to include
        booking_context: Accumulated booking flow values, if any
        today: Date used for relative-date hints (defaults to today)

    Returns:
        Complete prompt string
    """
    today_str, tomorrow_str = _date_context(today)
    schemas = json.dumps([t.to_prompt_schema() for t in tools], indent=2)

    booking_text = ""
    if booking_context:
        booking_text = BOOKING_CONTEXT_TEMPLATE.format(
            booking_context=json.dumps(booking_context, indent=2, default=str)
        )

    return TOOL_SELECTION_TEMPLATE.format(
        role=role,
        booking_context=booking_text,
        context_summary=summarize_global_context(global_context),
        original_message=original_message,
        task=task,
        tool_schemas=schemas,
        history=format_history(history, history_limit),
        today=today_str,
        tomorrow=tomorrow_str,
        instructions=instructions,
        booking_updates_hint=BOOKING_UPDATES_HINT if booking_context is not None else "",
    )


def build_planner_prompt(
    message: str,
    agent_catalog: Sequence[Tuple[str, str]],
    history: Optional[Sequence[Dict[str, Any]]],
    history_limit: int,
) -> str:
    """
    Build the decomposition prompt.

    Args:
        message: The user's message
        agent_catalog: ``(name, one-line description)`` for every agent
        history: Conversation history
        history_limit: Number of recent history entries to include

    Returns:
        Complete prompt string
    """
    catalog = "\n".join(f"- {name}: {description}" for name, description in agent_catalog)
    return PLANNER_TEMPLATE.format(
        agent_catalog=catalog,
        history=format_history(history, history_limit),
        message=message,
    )


def build_interruption_prompt(message: str) -> str:
    return INTERRUPTION_TEMPLATE.format(message=message)


def build_resume_prompt(message: str) -> str:
    return RESUME_TEMPLATE.format(message=message)


def build_consolidation_prompt(
    message: str,
    digest: List[str],
    history: Optional[Sequence[Dict[str, Any]]],
    history_limit: int,
    restaurant_name: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    """
    Build the narrator prompt from a factual digest of the turn's results.

    Args:
        message: The user's original message, verbatim
        digest: One factual line per collected result
        history: Conversation history
        history_limit: Number of recent history entries to include
        restaurant_name: Venue name used in the persona line
        today: Date used for the date context (defaults to today)

    Returns:
        Complete prompt string
    """
    today_str, tomorrow_str = _date_context(today)
    numbered = "\n".join(f"{i}. {line}" for i, line in enumerate(digest, start=1))
    return CONSOLIDATION_TEMPLATE.format(
        restaurant_clause=f" for {restaurant_name}" if restaurant_name else "",
        today=today_str,
        tomorrow=tomorrow_str,
        history=format_history(history, history_limit),
        message=message,
        digest=numbered,
    )
