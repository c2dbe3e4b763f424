"""
Tool registry and parameter validation.

Static catalog of the operations capability agents may invoke. Each
tool declares a parameter schema (types, required-ness, enumerations,
numeric bounds); ``validate`` checks an argument map against it and
reports every violation at once.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


ParameterType = Literal["string", "integer", "boolean", "array"]

CLARIFY_TOOL = "clarify_and_respond"


class ParameterSpec(BaseModel):
    """Schema of a single tool parameter."""

    model_config = ConfigDict(frozen=True)

    type: ParameterType
    description: str = ""
    required: bool = False
    enum: Optional[Tuple[str, ...]] = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    item_enum: Optional[Tuple[str, ...]] = None


class ToolDefinition(BaseModel):
    """Immutable definition of a named operation."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: Dict[str, ParameterSpec] = Field(default_factory=dict)

    @property
    def required_parameters(self) -> List[str]:
        return [name for name, spec in self.parameters.items() if spec.required]

    def to_prompt_schema(self) -> Dict[str, Any]:
        """JSON-serializable schema shown to the tool-selection prompt."""
        properties = {}
        for name, spec in self.parameters.items():
            prop: Dict[str, Any] = {"type": spec.type}
            if spec.description:
                prop["description"] = spec.description
            if spec.enum:
                prop["enum"] = list(spec.enum)
            if spec.item_enum:
                prop["items"] = {"type": "string", "enum": list(spec.item_enum)}
            if spec.minimum is not None:
                prop["minimum"] = spec.minimum
            if spec.maximum is not None:
                prop["maximum"] = spec.maximum
            properties[name] = prop
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": self.required_parameters,
            },
        }


# ============================================================================
# Tool catalog
# ============================================================================

_DEFINITIONS = [
    ToolDefinition(
        name="check_availability",
        description=(
            "Check table availability for a specific date, time and party size. "
            "Use this when users ask about booking or availability."
        ),
        parameters={
            "date": ParameterSpec(type="string", required=True, description="Date in YYYY-MM-DD format"),
            "time": ParameterSpec(type="string", required=True, description="Time in HH:MM 24-hour format"),
            "partySize": ParameterSpec(
                type="integer", required=True, minimum=1, maximum=20, description="Number of people"
            ),
        },
    ),
    ToolDefinition(
        name="get_menu_items",
        description=(
            "Search the menu with optional dietary filters. Use this for questions about "
            "dishes, ingredients, dietary requirements or prices."
        ),
        parameters={
            "query": ParameterSpec(type="string", required=True, description="Free-text dish or ingredient search"),
            "is_gluten_free": ParameterSpec(type="boolean"),
            "is_vegan": ParameterSpec(type="boolean"),
            "is_vegetarian": ParameterSpec(type="boolean"),
            "category": ParameterSpec(
                type="string",
                enum=("Main", "Appetizer", "Dessert", "Drink", "Seafood", "Salad", "Wine"),
            ),
        },
    ),
    ToolDefinition(
        name="get_restaurant_info",
        description="Get restaurant information such as opening hours, address or description.",
        parameters={
            "topic": ParameterSpec(
                type="string",
                required=True,
                enum=("hours", "address", "description", "general"),
            ),
        },
    ),
    ToolDefinition(
        name="create_reservation",
        description=(
            "Create a reservation. Use ONLY when name, email, phone, date, time, "
            "party size and table type are all known."
        ),
        parameters={
            "name": ParameterSpec(type="string", required=True, description="Customer's full name"),
            "email": ParameterSpec(type="string", required=True, description="Customer's email"),
            "phone": ParameterSpec(type="string", required=True, description="Customer's phone number"),
            "date": ParameterSpec(type="string", required=True, description="Date in YYYY-MM-DD format"),
            "time": ParameterSpec(type="string", required=True, description="Time in HH:MM 24-hour format"),
            "partySize": ParameterSpec(type="integer", required=True, minimum=1, maximum=20),
            "tableType": ParameterSpec(type="string", required=True, description="Chosen table type"),
            "specialRequests": ParameterSpec(type="string"),
        },
    ),
    ToolDefinition(
        name="get_celebration_packages",
        description=(
            "Retrieve celebration packages and special occasion services. Use this for "
            "birthdays, anniversaries, proposals or romantic celebrations."
        ),
        parameters={
            "occasion_tags": ParameterSpec(
                type="array",
                item_enum=("birthday", "anniversary", "romantic", "proposal", "celebration", "special_occasion"),
                description="Tags for the type of celebration",
            ),
            "budget_range": ParameterSpec(
                type="string", enum=("budget", "standard", "premium", "luxury")
            ),
        },
    ),
    ToolDefinition(
        name=CLARIFY_TOOL,
        description=(
            "Ask the user a clarifying question or reply to out-of-scope, greeting "
            "or general requests."
        ),
        parameters={
            "response_type": ParameterSpec(
                type="string", enum=("clarification", "out_of_scope", "general_info", "greeting")
            ),
            "message": ParameterSpec(type="string", required=True, description="Message shown to the user"),
        },
    ),
]

TOOL_DEFINITIONS: Mapping[str, ToolDefinition] = MappingProxyType(
    {definition.name: definition for definition in _DEFINITIONS}
)


def get_tool_definition(tool_name: str) -> Optional[ToolDefinition]:
    return TOOL_DEFINITIONS.get(tool_name)


def get_available_tools() -> List[str]:
    return list(TOOL_DEFINITIONS.keys())


# ============================================================================
# Validation
# ============================================================================


class ValidationErrorCode(str, Enum):
    UNKNOWN_TOOL = "UnknownTool"
    MISSING_REQUIRED_PARAMETER = "MissingRequiredParameter"
    UNKNOWN_PARAMETER = "UnknownParameter"
    TYPE_MISMATCH = "TypeMismatch"
    ENUM_VIOLATION = "EnumViolation"
    RANGE_VIOLATION = "RangeViolation"


class ValidationIssue(BaseModel):
    code: ValidationErrorCode
    parameter: Optional[str] = None
    message: str


class ValidationResult(BaseModel):
    """Outcome of ``validate``; ``ok`` is True iff there are no issues."""

    errors: List[ValidationIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.errors]

    @property
    def codes(self) -> List[ValidationErrorCode]:
        return [e.code for e in self.errors]


def _type_matches(value: Any, expected: ParameterType) -> bool:
    if expected == "string":
        return isinstance(value, str)
    if expected == "integer":
        # bool is an int subclass but never a valid integer argument
        return isinstance(value, int) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "array":
        return isinstance(value, (list, tuple))
    return False


def validate(tool_name: str, args: Mapping[str, Any]) -> ValidationResult:
    """
    Validate an argument map against a tool's parameter schema.

    All violations are collected rather than stopping at the first one.

    Args:
        tool_name: Registered tool name
        args: Parameters proposed for the call

    Returns:
        ValidationResult listing every violation (empty when valid)
    """
    definition = TOOL_DEFINITIONS.get(tool_name)
    if definition is None:
        return ValidationResult(
            errors=[
                ValidationIssue(
                    code=ValidationErrorCode.UNKNOWN_TOOL,
                    message=f"Unknown tool: {tool_name}",
                )
            ]
        )

    args = args or {}
    issues: List[ValidationIssue] = []

    for name in definition.required_parameters:
        if name not in args or args[name] is None:
            issues.append(
                ValidationIssue(
                    code=ValidationErrorCode.MISSING_REQUIRED_PARAMETER,
                    parameter=name,
                    message=f"Missing required parameter: {name}",
                )
            )

    for name, value in args.items():
        spec = definition.parameters.get(name)
        if spec is None:
            issues.append(
                ValidationIssue(
                    code=ValidationErrorCode.UNKNOWN_PARAMETER,
                    parameter=name,
                    message=f"Unknown parameter: {name}",
                )
            )
            continue
        if value is None:
            continue

        if not _type_matches(value, spec.type):
            issues.append(
                ValidationIssue(
                    code=ValidationErrorCode.TYPE_MISMATCH,
                    parameter=name,
                    message=f"Parameter {name} must be a{'n' if spec.type in ('integer', 'array') else ''} {spec.type}",
                )
            )
            continue

        if spec.enum is not None and value not in spec.enum:
            issues.append(
                ValidationIssue(
                    code=ValidationErrorCode.ENUM_VIOLATION,
                    parameter=name,
                    message=f"Parameter {name} must be one of: {', '.join(spec.enum)}",
                )
            )

        if spec.item_enum is not None:
            invalid = [item for item in value if item not in spec.item_enum]
            if invalid:
                issues.append(
                    ValidationIssue(
                        code=ValidationErrorCode.ENUM_VIOLATION,
                        parameter=name,
                        message=(
                            f"Parameter {name} items must be one of: {', '.join(spec.item_enum)} "
                            f"(got {', '.join(map(str, invalid))})"
                        ),
                    )
                )

        if spec.type == "integer":
            if spec.minimum is not None and value < spec.minimum:
                issues.append(
                    ValidationIssue(
                        code=ValidationErrorCode.RANGE_VIOLATION,
                        parameter=name,
                        message=f"Parameter {name} must be at least {spec.minimum}",
                    )
                )
            if spec.maximum is not None and value > spec.maximum:
                issues.append(
                    ValidationIssue(
                        code=ValidationErrorCode.RANGE_VIOLATION,
                        parameter=name,
                        message=f"Parameter {name} must be at most {spec.maximum}",
                    )
                )

    return ValidationResult(errors=issues)
