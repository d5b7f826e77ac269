"""Prometheus metrics for gate verdicts and control-plane traffic.

This module provides counters for tool-call verdicts and registration
pushes, plus a latency histogram for control-plane requests.
"""

from typing import NamedTuple

import prometheus_client


class RequestLabels(NamedTuple):
    operation: str


BUCKETS = (
    # these are log spaced with 1 sig-fig rounding so there are 3 per decade
    # 3 div/decade = 1,   2.15,   4.64,   10
    0.0002,  # 200 μs
    0.0005,
    0.001,  # 1 ms
    0.002,
    0.005,
    0.01,
    0.02,
    0.05,
    0.1,
    0.2,
    0.5,
    1,
    2,
    5,
    10,
    20,
    float("inf"),
)

VERDICTS = prometheus_client.Counter(
    "agent_control_gate_verdicts_total",
    "Tool call verdicts returned to the host runtime",
    ["outcome"],
)

SYNC_PUSHES = prometheus_client.Counter(
    "agent_control_gate_sync_pushes_total",
    "Agent registration pushes sent to the control plane",
    ["outcome"],
)

CONTROL_PLANE_REQUEST_SECONDS = prometheus_client.Histogram(
    "agent_control_gate_control_plane_request_seconds",
    "Control-plane request duration (seconds)",
    RequestLabels._fields,
    buckets=BUCKETS,
)


def ctx_histogram_timer(labels: RequestLabels):
    """
    Context manager timing a control-plane request
    Usage:
        ```
        with ctx_histogram_timer(RequestLabels(operation="evaluate")):
            await client.post(...)
        ```
    """
    return CONTROL_PLANE_REQUEST_SECONDS.labels(*labels).time()
