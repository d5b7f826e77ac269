"""Custom exception hierarchy for the control-plane client.

This module defines a structured exception hierarchy for handling errors
that can occur when registering agents or evaluating tool calls.
"""


class ControlPlaneError(Exception):
    """Base exception for all control-plane client errors."""


class ControlPlaneConnectionError(ControlPlaneError):
    """Raised when a connection to the control plane fails."""

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(f"Connection failed{f' to {url}' if url else ''}: {message}")


class ControlPlaneTimeoutError(ControlPlaneError):
    """Raised when a control-plane request times out."""

    def __init__(self, message: str, timeout_seconds: float | None = None):
        self.timeout_seconds = timeout_seconds
        timeout_info = f" after {timeout_seconds}s" if timeout_seconds else ""
        super().__init__(f"Request timed out{timeout_info}: {message}")


class ControlPlaneHTTPError(ControlPlaneError):
    """Raised when the control plane answers with a non-success status."""

    def __init__(self, message: str, status_code: int):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}")


class ControlPlaneAuthenticationError(ControlPlaneHTTPError):
    """Raised when the control plane rejects the API key."""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(f"Authentication failed: {message}", status_code=status_code)


class ControlPlaneProtocolError(ControlPlaneError):
    """Raised when a response body cannot be decoded or validated."""
