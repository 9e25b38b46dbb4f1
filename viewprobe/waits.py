# viewprobe/waits.py
"""
@file waits.py
@brief Polling wait used by the inspection channel.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, TypeVar

from .exceptions import TimeoutError
from .tracelogger import TRACE_LOGGER

T = TypeVar("T")


def _now() -> float:
    """Monotonic time source for deterministic timeout calculations."""
    return time.monotonic()


def _set_timeout_metadata(
    error: TimeoutError,
    *,
    description: str,
    timeout: float,
    attempt_count: int,
    elapsed: float,
) -> None:
    error.description = description
    error.timeout = timeout
    error.attempt_count = attempt_count
    error.elapsed_time = elapsed


def wait_until(
    predicate: Callable[[], T],
    timeout: float,
    interval: float = 0.05,
    description: str = "condition",
    path: Optional[str] = None,
) -> T:
    """
    Repeatedly runs predicate until it returns a truthy value,
    or until timeout.
    """
    start_time = _now()
    last_exception: Optional[BaseException] = None
    attempt_count = 0

    TRACE_LOGGER.log(
        event="wait_start",
        path=path,
        metadata={"description": description, "timeout_s": timeout, "interval_s": interval},
    )

    while True:
        attempt_count += 1
        elapsed = _now() - start_time

        if elapsed >= timeout:
            break

        try:
            result = predicate()
            if result:
                TRACE_LOGGER.log(
                    event="wait_success",
                    path=path,
                    status="success",
                    metadata={
                        "description": description,
                        "attempts": attempt_count,
                        "elapsed_s": round(_now() - start_time, 3),
                    },
                )
                return result
        except Exception as e:
            last_exception = e

        time_left = timeout - elapsed
        sleep_time = min(interval, time_left) if time_left > 0 else 0
        if sleep_time > 0:
            time.sleep(sleep_time)

    elapsed = _now() - start_time
    TRACE_LOGGER.log(
        event="wait_timeout",
        path=path,
        status="error",
        metadata={
            "description": description,
            "timeout_s": timeout,
            "attempts": attempt_count,
            "elapsed_s": round(elapsed, 3),
        },
    )

    if last_exception:
        error = TimeoutError(
            f"Timed out waiting for {description} after {timeout}s: "
            f"{type(last_exception).__name__}: {last_exception}"
        )
        error.original_exception = last_exception
    else:
        error = TimeoutError(
            f"Timed out waiting for {description} after {timeout}s "
            f"(condition kept returning falsy)"
        )
        error.original_exception = None

    _set_timeout_metadata(
        error,
        description=description,
        timeout=timeout,
        attempt_count=attempt_count,
        elapsed=elapsed,
    )
    raise error
