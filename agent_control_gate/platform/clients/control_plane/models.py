"""Wire models for the control-plane API.

Request bodies are serialized in snake_case; responses are accepted in
either snake_case or camelCase.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EvaluationStage = Literal["pre", "post"]


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self, *, exclude_none: bool = True) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=exclude_none)


class ToolStep(WireModel):
    """A tool the agent can invoke, as registered with the control plane.

    Attributes:
        type: Step type, always "tool"
        name: Tool name, unique within an agent's inventory
        description: Optional human-readable description
        input_schema: Optional JSON schema of the tool parameters
        metadata: Optional extra attributes (currently only ``label``)
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["tool"] = "tool"
    name: str = Field(min_length=1)
    description: str | None = None
    input_schema: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None


class AgentDescriptor(WireModel):
    agent_id: str
    agent_name: str
    agent_version: str | None = None
    agent_metadata: dict[str, Any] = Field(default_factory=dict)


class InitAgentRequest(WireModel):
    """Registration push: agent identity plus its full tool inventory."""

    agent: AgentDescriptor
    steps: list[ToolStep] = Field(default_factory=list)


class InitAgentResponse(WireModel):
    model_config = ConfigDict(extra="allow")

    created: bool = False
    controls: list[Any] = Field(default_factory=list)


class StepContext(WireModel):
    openclaw_agent_id: str
    session_key: str | None = None


class EvaluationStep(WireModel):
    type: Literal["tool"] = "tool"
    name: str
    input: Any = None
    context: StepContext


class EvaluationRequest(WireModel):
    """Pre-execution evaluation of a single tool call."""

    agent_uuid: str
    stage: EvaluationStage = "pre"
    step: EvaluationStep


class ControlMatch(WireModel):
    """A control that matched (or errored) during evaluation."""

    action: str | None = None
    control_name: str | None = None
    control_id: int | str | None = None

    @field_validator("action", "control_name", mode="before")
    @classmethod
    def _strings_only(cls, v):
        return v if isinstance(v, str) else None


class EvaluationResponse(WireModel):
    """Policy decision for an evaluated tool call.

    Attributes:
        is_safe: Whether the call may proceed
        confidence: Optional confidence reported by the control plane
        reason: Optional free-text reason
        matches: Controls that matched the call
        errors: Controls that failed to evaluate
    """

    is_safe: bool
    confidence: float | None = None
    reason: str | None = None
    matches: list[ControlMatch] = Field(default_factory=list)
    errors: list[ControlMatch] = Field(default_factory=list)

    @field_validator("matches", "errors", mode="before")
    @classmethod
    def _null_to_empty(cls, v):
        return [] if v is None else v

    @field_validator("reason", mode="before")
    @classmethod
    def _reason_string_only(cls, v):
        return v if isinstance(v, str) else None
