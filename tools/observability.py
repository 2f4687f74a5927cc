"""Observability helpers for instrumenting provider calls."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Awaitable, Callable, ParamSpec, TypeVar

from stylist_app.logging_config import ensure_correlation_id, get_logger, log_event

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def instrument_call(
    call_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Wrap a coroutine function to emit structured start, completion and failure logs."""

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            start = time.perf_counter()
            log_event(
                LOGGER,
                logging.INFO,
                "gateway_call_started",
                call=call_name,
                correlation_id=correlation_id,
            )
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "gateway_call_failed",
                    call=call_name,
                    correlation_id=correlation_id,
                    duration_ms=_elapsed_ms(start),
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise
            log_event(
                LOGGER,
                logging.INFO,
                "gateway_call_completed",
                call=call_name,
                correlation_id=correlation_id,
                duration_ms=_elapsed_ms(start),
                produced=result is not None,
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_call"]
