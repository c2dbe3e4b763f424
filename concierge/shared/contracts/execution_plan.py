"""
Execution plan contract.

The planner turns a user message into an ordered list of steps, each
naming one capability agent and the focused sub-task it should handle.
"""

from typing import List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class PlanStep(BaseModel):
    """A single (agent, sub-task) step of a plan."""

    model_config = ConfigDict(populate_by_name=True)

    ordinal: int = Field(
        ge=1,
        validation_alias=AliasChoices("ordinal", "step"),
        description="1-based execution position",
    )
    agent_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("agent_name", "agentName", "agent_to_use"),
        description="Registered agent that handles this step",
    )
    sub_task_query: str = Field(
        min_length=1,
        validation_alias=AliasChoices("sub_task_query", "subTaskQuery"),
        description="The part of the user's request this agent should answer",
    )


class ExecutionPlan(BaseModel):
    """Ordered, non-empty sequence of plan steps."""

    steps: List[PlanStep] = Field(min_length=1)

    @field_validator("steps")
    @classmethod
    def _sort_by_ordinal(cls, steps: List[PlanStep]) -> List[PlanStep]:
        # Stable: repeated agents keep the planner's relative order
        return sorted(steps, key=lambda s: s.ordinal)

    @property
    def agent_names(self) -> List[str]:
        return [s.agent_name for s in self.steps]

    @classmethod
    def single(cls, agent_name: str, sub_task_query: str) -> "ExecutionPlan":
        """Build a one-step plan."""
        return cls(
            steps=[PlanStep(ordinal=1, agent_name=agent_name, sub_task_query=sub_task_query)]
        )
