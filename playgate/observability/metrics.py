"""
Metrics Collection with Prometheus.

Exposes request and verification outcome metrics for monitoring.
"""

from enum import Enum

from prometheus_client import Counter, Gauge, Histogram, Info

from playgate.config import get_settings


class MetricLabels(str, Enum):
    """Standard metric label names."""

    ENDPOINT = "endpoint"
    METHOD = "method"
    STATUS_CODE = "status_code"
    OPERATION = "operation"
    OUTCOME = "outcome"
    KIND = "kind"
    ERROR_TYPE = "error_type"


class PlaygateMetrics:
    """
    Centralized metrics for the verification service.

    Covers:
    - HTTP requests (rate, duration, in progress)
    - Identity verifications by outcome
    - Purchase verifications by kind and outcome
    - Best-effort side calls that failed
    """

    def __init__(self) -> None:
        """Initialize all Prometheus metrics."""
        settings = get_settings()

        self.service_info = Info("playgate_service", "Service information")
        self.service_info.info(
            {
                "version": settings.api_version,
                "service_name": settings.service_name,
            }
        )

        # ====================================================================
        # HTTP Metrics
        # ====================================================================
        self.http_requests_total = Counter(
            "playgate_http_requests_total",
            "Total HTTP requests",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD, MetricLabels.STATUS_CODE],
        )

        self.http_request_duration_seconds = Histogram(
            "playgate_http_request_duration_seconds",
            "HTTP request duration in seconds",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )

        self.http_requests_in_progress = Gauge(
            "playgate_http_requests_in_progress",
            "Number of HTTP requests currently being processed",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
        )

        # ====================================================================
        # Verification Metrics
        # ====================================================================
        self.identity_verifications_total = Counter(
            "playgate_identity_verifications_total",
            "Identity token verifications by outcome",
            [MetricLabels.OUTCOME],
        )

        self.purchase_verifications_total = Counter(
            "playgate_purchase_verifications_total",
            "Purchase verifications by product kind and outcome",
            [MetricLabels.KIND, MetricLabels.OUTCOME],
        )

        self.best_effort_failures_total = Counter(
            "playgate_best_effort_failures_total",
            "Best-effort side calls that failed and were discarded",
            [MetricLabels.OPERATION],
        )

        # ====================================================================
        # Error Metrics
        # ====================================================================
        self.errors_total = Counter(
            "playgate_errors_total",
            "Total errors by type",
            [MetricLabels.ERROR_TYPE, MetricLabels.OPERATION],
        )

    def record_http_request(
        self, endpoint: str, method: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics."""
        self.http_requests_total.labels(
            endpoint=endpoint, method=method, status_code=str(status_code)
        ).inc()
        self.http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(
            duration
        )

    def record_identity_verification(self, outcome: str) -> None:
        self.identity_verifications_total.labels(outcome=outcome).inc()

    def record_purchase_verification(self, kind: str, outcome: str) -> None:
        self.purchase_verifications_total.labels(kind=kind, outcome=outcome).inc()

    def record_best_effort_failure(self, operation: str) -> None:
        self.best_effort_failures_total.labels(operation=operation).inc()

    def record_error(self, error_type: str, operation: str) -> None:
        """Record error occurrence."""
        self.errors_total.labels(error_type=error_type, operation=operation).inc()


# Global metrics instance
metrics = PlaygateMetrics()
