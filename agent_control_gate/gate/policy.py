"""Pre-execution policy gate.

Turns a control-plane evaluation into an allow/block verdict. Control-plane
failures never reach the host: they allow the call (fail-open, the default)
or block it with a fixed reason (fail-closed). Error details only go to logs.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from agent_control_gate.gate.sync import AgentRecord, SyncCoordinator
from agent_control_gate.platform.clients.control_plane.client import ControlPlaneClient
from agent_control_gate.platform.clients.control_plane.models import (
    ControlMatch,
    EvaluationRequest,
    EvaluationResponse,
    EvaluationStep,
    StepContext,
)
from agent_control_gate.platform.observability import VERDICTS, get_logger

logger = get_logger(__name__)

BLOCK_REASON_PREFIX = "[agent-control]"
DEFAULT_BLOCK_REASON = f"{BLOCK_REASON_PREFIX} blocked by policy evaluation"
REGISTRATION_FAILED_REASON = (
    f"{BLOCK_REASON_PREFIX} blocked: guardrail service unavailable (registration failed)"
)
EVALUATION_FAILED_REASON = (
    f"{BLOCK_REASON_PREFIX} blocked: guardrail service unavailable (evaluation failed)"
)

DENY_ACTION = "deny"


@dataclass(frozen=True)
class Verdict:
    """Outcome of gating a tool call.

    Attributes:
        blocked: True when the tool call must not run
        reason: Human-readable block reason, None when allowed
    """

    blocked: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "Verdict":
        return cls(blocked=False)

    @classmethod
    def block(cls, reason: str) -> "Verdict":
        return cls(blocked=True, reason=reason)

    def to_hook_result(self) -> dict[str, Any] | None:
        """Render in the host's ``before_tool_call`` return contract."""
        if not self.blocked:
            return None
        return {"block": True, "blockReason": self.reason}


def collect_deny_control_names(entries: Iterable[ControlMatch]) -> list[str]:
    """Names of deny controls, trimmed and deduplicated in first-seen order."""
    names: dict[str, None] = {}
    for entry in entries:
        if entry.action != DENY_ACTION or entry.control_name is None:
            continue
        name = entry.control_name.strip()
        if name:
            names.setdefault(name, None)
    return list(names)


def build_block_reason(response: EvaluationResponse) -> str:
    deny_controls = collect_deny_control_names([*response.matches, *response.errors])
    if deny_controls:
        return f"{BLOCK_REASON_PREFIX} blocked by deny control(s): {', '.join(deny_controls)}"
    if response.reason and response.reason.strip():
        return f"{BLOCK_REASON_PREFIX} {response.reason.strip()}"
    return DEFAULT_BLOCK_REASON


class PolicyGate:
    """Syncs an agent's inventory, then asks the control plane about one tool call."""

    def __init__(
        self,
        client: ControlPlaneClient,
        coordinator: SyncCoordinator,
        *,
        fail_closed: bool = False,
    ):
        self._client = client
        self._coordinator = coordinator
        self._fail_closed = fail_closed

    @property
    def fail_closed(self) -> bool:
        return self._fail_closed

    async def check(
        self,
        record: AgentRecord,
        tool_name: str,
        params: Any,
        *,
        session_key: str | None = None,
    ) -> Verdict:
        """Gate a pending tool call for the given agent.

        Args:
            record: Agent the call belongs to
            tool_name: Name of the tool about to run
            params: Raw tool arguments, forwarded as the step input
            session_key: Optional host session key

        Returns:
            Verdict to hand back to the host runtime
        """
        try:
            await self._coordinator.ensure_synced(record)
        except Exception:
            logger.warning(
                "agent-control: unable to sync agent before tool evaluation",
                agent=record.source_agent_id,
                tool=tool_name,
                exc_info=True,
            )
            return self._unavailable(REGISTRATION_FAILED_REASON)

        request = EvaluationRequest(
            agent_uuid=record.agent_uuid,
            stage="pre",
            step=EvaluationStep(
                name=tool_name,
                input=params,
                context=StepContext(
                    openclaw_agent_id=record.source_agent_id,
                    session_key=session_key,
                ),
            ),
        )
        try:
            evaluation = await self._client.evaluate(request)
        except Exception:
            logger.warning(
                "agent-control: evaluation failed",
                agent=record.source_agent_id,
                tool=tool_name,
                exc_info=True,
            )
            return self._unavailable(EVALUATION_FAILED_REASON)

        if evaluation.is_safe:
            VERDICTS.labels(outcome="allow").inc()
            logger.info("agent-control: tool call allowed", agent=record.source_agent_id, tool=tool_name)
            return Verdict.allow()

        reason = build_block_reason(evaluation)
        VERDICTS.labels(outcome="deny").inc()
        logger.info(
            "agent-control: tool call blocked",
            agent=record.source_agent_id,
            tool=tool_name,
            reason=reason,
        )
        return Verdict.block(reason)

    def _unavailable(self, reason: str) -> Verdict:
        if self._fail_closed:
            VERDICTS.labels(outcome="fail_closed").inc()
            return Verdict.block(reason)
        VERDICTS.labels(outcome="fail_open").inc()
        return Verdict.allow()
