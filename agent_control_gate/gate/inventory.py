"""Tool inventory canonicalization and fingerprinting."""

import hashlib
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from agent_control_gate.platform.clients.control_plane.models import ToolStep
from agent_control_gate.platform.observability import get_logger

logger = get_logger(__name__)


def _as_string(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def build_tool_steps(tools: Iterable[Any]) -> list[ToolStep]:
    """Convert raw tool descriptors into deduplicated tool steps.

    Descriptors without a usable name, or whose fields cannot be encoded as
    JSON, are dropped one by one. A later descriptor with the same name
    replaces the earlier one entirely but keeps its position.

    Args:
        tools: Raw descriptors as mappings with ``name`` and optional
            ``label``, ``description`` and ``parameters`` keys

    Returns:
        Tool steps in first-seen order of their names
    """
    deduped: dict[str, ToolStep] = {}
    for tool in tools or ():
        if not isinstance(tool, Mapping):
            continue
        name = _as_string(tool.get("name"))
        if name is None:
            continue

        label = _as_string(tool.get("label"))
        parameters = tool.get("parameters")
        try:
            step = ToolStep(
                name=name,
                description=_as_string(tool.get("description")) or label,
                input_schema=dict(parameters) if isinstance(parameters, Mapping) else None,
                metadata={"label": label} if label else None,
            )
            # Must survive fingerprinting and the registration body
            _canonical_json(step.to_wire())
        except (ValidationError, PydanticSerializationError, TypeError, ValueError) as e:
            logger.warning("agent-control: dropping malformed tool descriptor", tool=name, error=str(e))
            continue
        deduped[name] = step
    return list(deduped.values())


def _canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def fingerprint_steps(steps: Iterable[ToolStep]) -> str:
    """SHA-256 over the canonical JSON form of the ordered steps."""
    canonical = _canonical_json([step.to_wire() for step in steps])
    return hashlib.sha256(canonical.encode()).hexdigest()


@dataclass(frozen=True)
class ToolInventory:
    """Immutable snapshot of an agent's tools and their fingerprint."""

    steps: tuple[ToolStep, ...]
    fingerprint: str

    @classmethod
    def from_steps(cls, steps: Iterable[ToolStep]) -> "ToolInventory":
        steps = tuple(steps)
        return cls(steps=steps, fingerprint=fingerprint_steps(steps))

    @classmethod
    def from_descriptors(cls, tools: Iterable[Any]) -> "ToolInventory":
        return cls.from_steps(build_tool_steps(tools))

    @classmethod
    def empty(cls) -> "ToolInventory":
        return cls.from_steps(())

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def names(self) -> list[str]:
        return [step.name for step in self.steps]
