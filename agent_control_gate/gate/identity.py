"""Agent identity resolution.

Maps a host-supplied logical agent name onto the canonical identifier and
display name registered with the control plane. Without a configured
identifier, every logical agent gets its own deterministic UUID derived from
a SHA-256 digest, stable across process restarts.
"""

import hashlib
import re
from dataclasses import dataclass

from agent_control_gate.platform.observability import get_logger

logger = get_logger(__name__)

AGENT_UUID_NAMESPACE = "openclaw:agent-control"
DEFAULT_SOURCE_AGENT_ID = "default"
MAX_AGENT_NAME_LENGTH = 255

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_agent_uuid(value: str) -> bool:
    """Check for the 8-4-4-4-12 UUID form with version 1-5 and RFC 4122 variant."""
    return bool(_UUID_RE.match(value))


def derive_agent_uuid(source_agent_id: str, namespace: str = AGENT_UUID_NAMESPACE) -> str:
    """Derive a version-5-shaped UUID from ``"<namespace>:<source_agent_id>"``."""
    digest = hashlib.sha256(f"{namespace}:{source_agent_id}".encode()).hexdigest()
    hex_chars = list(digest[:32])
    hex_chars[12] = "5"
    hex_chars[16] = format((int(hex_chars[16], 16) & 0x3) | 0x8, "x")
    h = "".join(hex_chars)
    return f"{h[0:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:32]}"


def resolve_source_agent_id(agent_id: object) -> str:
    """Normalize the host's agent id, falling back to ``"default"``."""
    if isinstance(agent_id, str) and agent_id.strip():
        return agent_id.strip()
    return DEFAULT_SOURCE_AGENT_ID


@dataclass(frozen=True)
class AgentIdentity:
    """Identity of one logical agent as seen by the control plane.

    Attributes:
        source_agent_id: Logical agent name supplied by the host
        agent_uuid: Canonical identifier registered with the control plane
        agent_name: Display name, at most 255 characters
    """

    source_agent_id: str
    agent_uuid: str
    agent_name: str


class IdentityResolver:
    """Resolves logical agent names into control-plane identities.

    A valid configured identifier is shared by every logical agent, which then
    all register as one entity under the bare base name. An invalid one is
    reported once and never used.
    """

    def __init__(self, base_agent_name: str, configured_agent_id: str | None = None):
        self._base_agent_name = base_agent_name
        self._configured_agent_id: str | None = None
        if configured_agent_id:
            if is_agent_uuid(configured_agent_id):
                self._configured_agent_id = configured_agent_id
            else:
                logger.warning(
                    "agent-control: configured agentId is not a UUID, deriving identifiers instead",
                    agent_id=configured_agent_id,
                )

    @property
    def configured_agent_id(self) -> str | None:
        return self._configured_agent_id

    def resolve(self, source_agent_id: str) -> AgentIdentity:
        if self._configured_agent_id is not None:
            return AgentIdentity(
                source_agent_id=source_agent_id,
                agent_uuid=self._configured_agent_id,
                agent_name=self._base_agent_name[:MAX_AGENT_NAME_LENGTH],
            )
        return AgentIdentity(
            source_agent_id=source_agent_id,
            agent_uuid=derive_agent_uuid(source_agent_id),
            agent_name=f"{self._base_agent_name}:{source_agent_id}"[:MAX_AGENT_NAME_LENGTH],
        )
