"""Control-plane HTTP client.

Provides the two calls the gate makes to the control plane: registering an
agent with its tool inventory, and evaluating a pending tool call.

Usage:
    async with ControlPlaneClient(ControlPlaneClientConfig(base_url="http://localhost:8000")) as client:
        await client.init_agent(request)
        decision = await client.evaluate(evaluation_request)
"""

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from agent_control_gate.platform.clients.control_plane.config import ControlPlaneClientConfig
from agent_control_gate.platform.clients.control_plane.exceptions import (
    ControlPlaneAuthenticationError,
    ControlPlaneConnectionError,
    ControlPlaneHTTPError,
    ControlPlaneProtocolError,
    ControlPlaneTimeoutError,
)
from agent_control_gate.platform.clients.control_plane.models import (
    EvaluationRequest,
    EvaluationResponse,
    InitAgentRequest,
    InitAgentResponse,
)
from agent_control_gate.platform.observability.metrics import RequestLabels, ctx_histogram_timer

INIT_AGENT_PATH = "/api/v1/agents/initAgent"
EVALUATION_PATH = "/api/v1/evaluation"

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class ControlPlaneClient:
    """Async client for the agent control plane.

    Registration is idempotent and retried on connection failures;
    evaluation sits on the tool-call path and is never retried.
    """

    def __init__(
        self,
        config: ControlPlaneClientConfig,
        httpx_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            config: Client configuration.
            httpx_client: Optional pre-configured HTTP client (not closed by this client).
        """
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        self._httpx_client = httpx_client
        self._owns_httpx_client = httpx_client is None

    @property
    def config(self) -> ControlPlaneClientConfig:
        return self._config

    def _headers(self) -> dict[str, str]:
        headers = {"user-agent": self._config.user_agent}
        if self._config.api_key:
            headers[self._config.api_key_header] = self._config.api_key
        return headers

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._httpx_client is None:
            self._httpx_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_seconds),
            )
            self._owns_httpx_client = True
        return self._httpx_client

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_httpx_client and self._httpx_client is not None:
            await self._httpx_client.aclose()
        self._httpx_client = None

    async def __aenter__(self) -> "ControlPlaneClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def init_agent(self, request: InitAgentRequest) -> InitAgentResponse:
        """Register an agent and its tool steps with the control plane.

        Retries connection failures up to ``register_max_attempts`` times.

        Raises:
            ControlPlaneError: If registration fails after retries
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, self._config.register_max_attempts)),
            wait=wait_fixed(self._config.register_retry_delay_seconds),
            retry=retry_if_exception_type(ControlPlaneConnectionError),
            reraise=True,
        ):
            with attempt:
                return await self._post(
                    INIT_AGENT_PATH,
                    request.to_wire(),
                    InitAgentResponse,
                    operation="init_agent",
                )
        raise AssertionError("unreachable")  # pragma: no cover

    async def evaluate(self, request: EvaluationRequest) -> EvaluationResponse:
        """Evaluate a pending tool call.

        Raises:
            ControlPlaneError: If the request fails or the response is invalid
        """
        return await self._post(
            EVALUATION_PATH,
            request.to_wire(exclude_none=False),
            EvaluationResponse,
            operation="evaluate",
        )

    async def _post(
        self,
        path: str,
        payload: dict[str, Any],
        response_model: type[ResponseT],
        *,
        operation: str,
    ) -> ResponseT:
        url = f"{self._base_url}{path}"
        client = self._get_http_client()
        try:
            with ctx_histogram_timer(RequestLabels(operation=operation)):
                response = await client.post(
                    url,
                    json=payload,
                    headers=self._headers(),
                    # Borrowed clients carry their own default timeout
                    timeout=self._config.timeout_seconds,
                )
        except httpx.TimeoutException as e:
            raise ControlPlaneTimeoutError(
                message=str(e) or type(e).__name__,
                timeout_seconds=self._config.timeout_seconds,
            ) from e
        except httpx.TransportError as e:
            raise ControlPlaneConnectionError(message=str(e) or type(e).__name__, url=url) from e

        if response.status_code in (401, 403):
            raise ControlPlaneAuthenticationError(response.text, status_code=response.status_code)
        if response.is_error:
            raise ControlPlaneHTTPError(response.text or response.reason_phrase, response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise ControlPlaneProtocolError(f"{operation} returned a non-JSON body") from e
        try:
            return response_model.model_validate(body)
        except ValidationError as e:
            raise ControlPlaneProtocolError(f"{operation} returned an invalid body: {e}") from e
