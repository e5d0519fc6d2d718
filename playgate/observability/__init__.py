"""
Observability module - Logging, Metrics, and Tracing.
"""

from playgate.observability.logging import get_logger, log_context, setup_logging
from playgate.observability.metrics import metrics
from playgate.observability.tracing import setup_tracing, trace_operation

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "metrics",
    "setup_tracing",
    "trace_operation",
]
