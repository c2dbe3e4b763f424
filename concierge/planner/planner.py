"""
Planner (request decomposition).

Turns a user message plus recent history into an ordered execution
plan. The LLM planner asks the inference capability for a JSON array
of steps; any malformed, empty or unknown-agent output falls back to a
deterministic keyword plan, so planning always yields at least one step.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from pydantic import ValidationError

from concierge.agents.registry import AgentRegistry, SUPPORT_AGENT
from concierge.prompts.builders import build_planner_prompt
from concierge.shared.config import DEFAULT_CONFIG
from concierge.shared.contracts.execution_plan import ExecutionPlan, PlanStep
from concierge.shared.errors import PlanningError
from concierge.shared.llm.client import infer as default_infer
from concierge.shared.parsing import ParseError, parse_json_response


logger = logging.getLogger(__name__)


# Checked in order; the first group with a substring match wins
FALLBACK_KEYWORDS = (
    ("menu", ("menu", "food", "dish", "eat")),
    ("info", ("hour", "time", "open", "close")),
    ("availability", ("available", "availability", "book", "reserve", "table")),
    ("celebration", ("celebration", "birthday", "anniversary", "special")),
)


class Planner(Protocol):
    def plan(self, message: str, history: Optional[Sequence[Dict[str, Any]]]) -> ExecutionPlan:
        ...


def keyword_fallback_plan(message: str, known_agents: Optional[Sequence[str]] = None) -> ExecutionPlan:
    """
    Deterministic single-step plan from message substrings.

    Total: always returns one step, defaulting to the support agent.

    Args:
        message: The user's message
        known_agents: Registered agent names; groups naming other agents are skipped

    Returns:
        One-step ExecutionPlan carrying the raw message as its sub-task
    """
    text = (message or "").lower()
    task = (message or "").strip() or "General assistance request"
    for agent_name, keywords in FALLBACK_KEYWORDS:
        if known_agents is not None and agent_name not in known_agents:
            continue
        if any(k in text for k in keywords):
            return ExecutionPlan.single(agent_name, task)
    return ExecutionPlan.single(SUPPORT_AGENT, task)


def parse_plan(raw_response: str, known_agents: Sequence[str]) -> ExecutionPlan:
    """
    Parse and validate a planner response.

    Raises:
        PlanningError: If the output is not a non-empty list of complete
            steps that all reference registered agents
    """
    try:
        data = parse_json_response(raw_response)
    except ParseError as e:
        raise PlanningError(str(e))

    if isinstance(data, dict):
        # Tolerate {"steps": [...]} / {"plan": [...]} wrappers
        data = data.get("steps", data.get("plan"))
    if not isinstance(data, list) or not data:
        raise PlanningError("Planner output is not a non-empty JSON array")

    try:
        steps: List[PlanStep] = [PlanStep.model_validate(item) for item in data]
        plan = ExecutionPlan(steps=steps)
    except (ValidationError, TypeError) as e:
        raise PlanningError(f"Malformed plan step: {e}")

    unknown = [s.agent_name for s in plan.steps if s.agent_name not in known_agents]
    if unknown:
        raise PlanningError(f"Plan references unknown agents: {unknown}")
    return plan


class LLMPlanner:
    """Planner backed by the inference capability with a keyword fallback."""

    def __init__(
        self,
        registry: AgentRegistry,
        infer: Optional[Callable[[str], str]] = None,
        history_limit: int = DEFAULT_CONFIG.history_window,
    ):
        self._registry = registry
        self._infer = infer or default_infer
        self._history_limit = history_limit

    def plan(self, message: str, history: Optional[Sequence[Dict[str, Any]]] = None) -> ExecutionPlan:
        """
        Decompose a message into an ordered plan.

        Args:
            message: The user's message
            history: Conversation history

        Returns:
            A non-empty ExecutionPlan whose steps all name registered agents
        """
        known = self._registry.names
        try:
            prompt = build_planner_prompt(
                message, self._registry.catalog(), history, self._history_limit
            )
            plan = parse_plan(self._infer(prompt), known)
            logger.info(
                f"[planner] Plan created | steps={len(plan.steps)}, agents={plan.agent_names}"
            )
            return plan
        except PlanningError as e:
            logger.warning(f"[planner] Invalid plan, using keyword fallback: {e}")
        except Exception as e:
            logger.exception(f"[planner] Planning call failed, using keyword fallback: {e}")

        plan = keyword_fallback_plan(message, known)
        logger.info(f"[planner] Fallback plan | agent={plan.steps[0].agent_name}")
        return plan
