"""
Best-effort side calls.

Session-token minting and purchase acknowledgement run after the primary
verification result is already decided. Their failures are logged and
discarded here so they can never change that result.
"""

from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from structlog import get_logger

from playgate.observability.metrics import metrics

logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


async def best_effort(
    operation: str,
    func: Callable[P, Awaitable[T]],
    *args: P.args,
    **kwargs: P.kwargs,
) -> T | None:
    """
    Await func(*args, **kwargs), returning None instead of raising.

    Args:
        operation: Short name used in logs and metrics (e.g. "mint_session_token")
        func: Coroutine function performing the side call

    Returns:
        The call's result, or None if it raised
    """
    try:
        return await func(*args, **kwargs)
    except Exception as exc:
        logger.warning(
            "best_effort_call_failed",
            operation=operation,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        metrics.record_best_effort_failure(operation)
        return None
