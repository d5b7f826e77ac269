"""Configuration for the control-plane client."""

from dataclasses import dataclass

from agent_control_gate.platform.constants import USER_AGENT

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ControlPlaneClientConfig:
    """Configuration for a control-plane client instance.

    Attributes:
        base_url: Base URL of the control plane (e.g. http://localhost:8000).
        api_key: Optional API key for authentication.
        api_key_header: Header name for the API key (default: X-API-Key).
        timeout_seconds: Timeout applied to every request (default: 10s).
        user_agent: User-Agent header sent with every request.
        register_max_attempts: Attempts for the idempotent registration call (default: 3).
        register_retry_delay_seconds: Fixed wait between registration attempts (default: 0.5s).
    """

    base_url: str
    api_key: str | None = None
    api_key_header: str = "X-API-Key"
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = USER_AGENT
    register_max_attempts: int = 3
    register_retry_delay_seconds: float = 0.5

    def __repr__(self) -> str:
        """Obfuscate the API key in string representation."""
        api_key_repr = "<obfuscated>" if self.api_key else "None"
        return (
            f"ControlPlaneClientConfig(base_url={self.base_url!r}, "
            f"api_key={api_key_repr}, "
            f"timeout_seconds={self.timeout_seconds})"
        )
