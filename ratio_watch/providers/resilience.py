"""
Resilience primitives: bounded retry with exponential backoff.

Wraps provider calls so a transient error can be retried a few times before the
chain gives up on that provider and moves to the next one. Each invocation is a
fresh process, so no breaker or cache state survives between runs.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry with exponential backoff."""
    max_retries: int = 1
    base_delay_s: float = 0.5
    max_delay_s: float = 5.0
    backoff_factor: float = 2.0


def resilient_call(
    func: Callable[..., T],
    *args: Any,
    retry_config: Optional[RetryConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """
    Execute a provider call with retry protection.

    Raises the last exception if all retries are exhausted.
    """
    cfg = retry_config or RetryConfig()

    last_err: Optional[Exception] = None
    for attempt in range(1, cfg.max_retries + 1):
        try:
            return func(*args, **kwargs)
        except Exception as exc:
            last_err = exc
            logger.debug(
                "Attempt %d/%d failed: %s: %s", attempt, cfg.max_retries, type(exc).__name__, exc
            )
            if attempt < cfg.max_retries:
                delay = min(
                    cfg.base_delay_s * (cfg.backoff_factor ** (attempt - 1)),
                    cfg.max_delay_s,
                )
                sleep(delay)

    raise last_err  # type: ignore[misc]
