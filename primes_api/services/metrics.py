"""Prometheus metrics for the primes service.

Two collaborators are exposed:

    cache_metrics = CacheMetrics(registry, selection)
    cache_metrics.record("get", "hit")

    service_metrics = ServiceMetrics(registry)
    service_metrics.record_request("/api/primes/getPrime")

Both register on an explicit CollectorRegistry owned by the app, so several
app instances (tests) never collide on the process-wide default registry.
"""

import logging

from prometheus_client import CollectorRegistry, Counter, Histogram

from .cache_selection import BackendSelection

logger = logging.getLogger(__name__)


class CacheMetrics:
    """Counts cache operations by backend, operation (get/put) and outcome (hit/miss/error/success)."""

    def __init__(self, registry: CollectorRegistry, selection: BackendSelection):
        self.backend_name = selection.effective_backend.value.lower()
        self._operations = Counter(
            "prime_cache_operations",
            "Prime cache operations by backend/outcome",
            ["backend", "operation", "outcome"],
            registry=registry,
        )
        logger.info("CacheMetrics initialized for backend: %s", self.backend_name)

    def record(self, operation: str, outcome: str) -> None:
        try:
            self._operations.labels(backend=self.backend_name, operation=operation, outcome=outcome).inc()
        except Exception as ex:
            logger.warning("Failed to record cache metric %s/%s: %s", operation, outcome, ex)


class ServiceMetrics:
    """Request, error and latency metrics per endpoint."""

    def __init__(self, registry: CollectorRegistry):
        self._requests = Counter(
            "requests",
            "Total number of requests",
            ["endpoint"],
            registry=registry,
        )
        self._errors = Counter(
            "errors",
            "Total number of failed requests",
            ["endpoint", "error_type"],
            registry=registry,
        )
        self._response_time = Histogram(
            "response_time_ms",
            "Response time for requests",
            ["endpoint"],
            buckets=(1, 5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000),
            registry=registry,
        )

    def record_request(self, endpoint: str) -> None:
        self._requests.labels(endpoint=endpoint).inc()

    def record_error(self, endpoint: str, error_type: str) -> None:
        self._errors.labels(endpoint=endpoint, error_type=error_type).inc()

    def record_response_time(self, endpoint: str, duration_ms: float) -> None:
        self._response_time.labels(endpoint=endpoint).observe(duration_ms)
