"""Observability infrastructure module.

This module provides monitoring for the gate:
- Structured logging with session keys
- Prometheus metrics
"""

from agent_control_gate.platform.observability.logging import (
    configure_logging,
    get_logger,
    session_key_ctx,
)
from agent_control_gate.platform.observability.metrics import (
    BUCKETS,
    CONTROL_PLANE_REQUEST_SECONDS,
    SYNC_PUSHES,
    VERDICTS,
)

__all__ = [
    "BUCKETS",
    "CONTROL_PLANE_REQUEST_SECONDS",
    "SYNC_PUSHES",
    "VERDICTS",
    "configure_logging",
    "get_logger",
    "session_key_ctx",
]
