"""
Tool registry, parameter validation and tool executors.
"""

from concierge.tools.registry import (
    CLARIFY_TOOL,
    TOOL_DEFINITIONS,
    ParameterSpec,
    ToolDefinition,
    ValidationErrorCode,
    ValidationIssue,
    ValidationResult,
    get_available_tools,
    get_tool_definition,
    validate,
)
from concierge.tools.executors import TOOL_EXECUTORS

__all__ = [
    "CLARIFY_TOOL",
    "TOOL_DEFINITIONS",
    "TOOL_EXECUTORS",
    "ParameterSpec",
    "ToolDefinition",
    "ValidationErrorCode",
    "ValidationIssue",
    "ValidationResult",
    "get_available_tools",
    "get_tool_definition",
    "validate",
]
