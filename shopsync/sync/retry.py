"""Bounded retry with backoff for single units of sync work."""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from ..config import Config

logger = logging.getLogger(__name__)

T = TypeVar("T")


def exponential_backoff(
    base_delay: float = Config.retry_base_delay,
    multiplier: float = 2.0,
    max_delay: float = Config.retry_max_delay,
    jitter: float = 0.1,
) -> Callable[[int], float]:
    """Build a backoff function ``attempt -> delay in seconds``.

    The delay after attempt ``n`` (1-based) is
    ``base_delay * multiplier ** (n - 1)`` plus up to ``jitter`` of itself,
    capped at ``max_delay``.

    Examples:
        >>> backoff = exponential_backoff(base_delay=1.0, jitter=0.0)
        >>> [backoff(n) for n in (1, 2, 3)]
        [1.0, 2.0, 4.0]
    """

    def backoff(attempt: int) -> float:
        delay = base_delay * multiplier ** (attempt - 1)
        if jitter:
            delay += random.random() * jitter * delay
        return min(delay, max_delay)

    return backoff


@dataclass(frozen=True)
class RetryConfig:
    """How often and how patiently to retry an operation."""

    max_attempts: int
    """Total number of attempts, including the first one"""

    backoff: Callable[[int], float]
    """Delay in seconds to wait after the given (1-based) failed attempt"""


DEFAULT_RETRY_CONFIG = RetryConfig(
    max_attempts=Config.retry_max_attempts,
    backoff=exponential_backoff(),
)

# No waiting between attempts, for tests and previews
NO_DELAY_RETRY_CONFIG = RetryConfig(
    max_attempts=Config.retry_max_attempts,
    backoff=lambda attempt: 0.0,
)


def with_retry(
    operation: Callable[[], T],
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "operation",
) -> T:
    """Run ``operation`` until it succeeds or the attempt budget is spent.

    Every exception is retried; callers that must not retry some error kinds
    have to handle them inside ``operation``. When all attempts fail, the
    last exception propagates unchanged.

    Args:
        operation: Zero-argument callable to run
        config: Attempt budget and backoff
        sleep: Function used to wait between attempts
        description: Name used in log messages

    Returns:
        The operation's result

    Raises:
        ValueError: If ``config.max_attempts`` is less than 1
    """
    if config.max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 1
    while True:
        try:
            return operation()
        except Exception as e:
            if attempt >= config.max_attempts:
                logger.debug(
                    "%s failed after %d attempt(s): %s", description, attempt, e
                )
                raise
            delay = config.backoff(attempt)
            logger.warning(
                "Attempt %d/%d for %s failed: %s. Retrying in %.1fs...",
                attempt,
                config.max_attempts,
                description,
                e,
                delay,
            )
            sleep(delay)
            attempt += 1
