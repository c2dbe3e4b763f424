"""
Tool selection (the agents' Think step).

``ToolSelector`` is the narrow interface agents depend on; the
``LLMToolSelector`` adapter renders the selection prompt, calls the
inference capability and parses the structured decision.
"""

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from concierge.prompts.builders import build_tool_selection_prompt
from concierge.shared.config import DEFAULT_CONFIG
from concierge.shared.llm.client import infer as default_infer
from concierge.shared.parsing import ParseError, parse_json_response
from concierge.tools.registry import ToolDefinition


logger = logging.getLogger(__name__)


class ToolDecision(BaseModel):
    """Structured decision produced by the Think step."""

    model_config = ConfigDict(populate_by_name=True)

    tool_to_call: str = Field(validation_alias=AliasChoices("tool_to_call", "toolToCall"))
    parameters: Dict[str, Any] = Field(default_factory=dict)
    booking_updates: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("booking_updates", "bookingUpdates"),
        description="Booking-flow values the user supplied this turn",
    )


class ToolSelectionRequest(BaseModel):
    """Everything an agent knows when choosing its tool."""

    agent_name: str
    role: str
    instructions: str
    original_message: str
    task: str
    tools: List[ToolDefinition]
    global_context: Dict[str, Any] = Field(default_factory=dict)
    history: List[Dict[str, Any]] = Field(default_factory=list)
    booking_context: Optional[Dict[str, Any]] = None


class ToolSelector(Protocol):
    def select(self, request: ToolSelectionRequest) -> ToolDecision:
        """Return the tool to call and its parameters.

        May raise; agents treat any exception as a planning failure.
        """
        ...


class LLMToolSelector:
    """Tool selector backed by the inference capability."""

    def __init__(
        self,
        infer: Optional[Callable[[str], str]] = None,
        history_limit: int = DEFAULT_CONFIG.history_window,
        today: Optional[Callable[[], date]] = None,
    ):
        self._infer = infer or default_infer
        self._history_limit = history_limit
        self._today = today or date.today

    def select(self, request: ToolSelectionRequest) -> ToolDecision:
        prompt = build_tool_selection_prompt(
            role=request.role,
            instructions=request.instructions,
            original_message=request.original_message,
            task=request.task,
            tools=request.tools,
            global_context=request.global_context,
            history=request.history,
            history_limit=self._history_limit,
            booking_context=request.booking_context,
            today=self._today(),
        )
        raw = self._infer(prompt)
        data = parse_json_response(raw)
        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object, got {type(data).__name__}")
        try:
            return ToolDecision.model_validate(data)
        except ValidationError as e:
            raise ParseError(f"Malformed tool decision: {e}")
