"""
Request metrics - Prometheus histogram for EVA API round trips.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

from prometheus_client import REGISTRY, CollectorRegistry, Histogram

log = logging.getLogger("evateam_mcp.core.metrics")

REQUEST_DURATION_BUCKETS = (0.01, 0.05, 0.1, 0.5, 1, 2, 5, 10)


@runtime_checkable
class RequestMetrics(Protocol):
    def record_request_duration(
        self, status: int, method: str, host: str, call_site: str, seconds: float
    ) -> None: ...


class PrometheusMetrics:
    """Prometheus metrics for EVA client requests."""

    def __init__(self, namespace: str = "eva_client"):
        # Unregistered until register() is called
        self.request_duration = Histogram(
            "request_duration_seconds",
            "Duration of EVA Team API requests in seconds",
            ["status", "method", "host", "function"],
            namespace=namespace,
            buckets=REQUEST_DURATION_BUCKETS,
            registry=None,
        )

    def register(self, registry: Optional[CollectorRegistry] = None) -> None:
        """Register with a registry; registering twice is not an error."""
        registry = registry or REGISTRY
        try:
            registry.register(self.request_duration)
        except ValueError as exc:
            # prometheus_client raises ValueError for duplicated timeseries
            log.debug("request_duration already registered: %s", exc)

    def unregister(self, registry: Optional[CollectorRegistry] = None) -> bool:
        registry = registry or REGISTRY
        try:
            registry.unregister(self.request_duration)
        except KeyError:
            return False
        return True

    def record_request_duration(
        self, status: int, method: str, host: str, call_site: str, seconds: float
    ) -> None:
        self.request_duration.labels(
            status=str(status), method=method, host=host, function=call_site
        ).observe(seconds)


__all__ = ["RequestMetrics", "PrometheusMetrics", "REQUEST_DURATION_BUCKETS"]
