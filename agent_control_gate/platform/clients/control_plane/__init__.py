"""Control-plane client package.

Thin httpx wrapper for agent registration and tool-call evaluation.
"""

from agent_control_gate.platform.clients.control_plane.client import ControlPlaneClient
from agent_control_gate.platform.clients.control_plane.config import ControlPlaneClientConfig
from agent_control_gate.platform.clients.control_plane.exceptions import (
    ControlPlaneAuthenticationError,
    ControlPlaneConnectionError,
    ControlPlaneError,
    ControlPlaneHTTPError,
    ControlPlaneProtocolError,
    ControlPlaneTimeoutError,
)
from agent_control_gate.platform.clients.control_plane.models import (
    AgentDescriptor,
    ControlMatch,
    EvaluationRequest,
    EvaluationResponse,
    EvaluationStep,
    InitAgentRequest,
    InitAgentResponse,
    StepContext,
    ToolStep,
)

__all__ = [
    "AgentDescriptor",
    "ControlMatch",
    "ControlPlaneAuthenticationError",
    "ControlPlaneClient",
    "ControlPlaneClientConfig",
    "ControlPlaneConnectionError",
    "ControlPlaneError",
    "ControlPlaneHTTPError",
    "ControlPlaneProtocolError",
    "ControlPlaneTimeoutError",
    "EvaluationRequest",
    "EvaluationResponse",
    "EvaluationStep",
    "InitAgentRequest",
    "InitAgentResponse",
    "StepContext",
    "ToolStep",
]
