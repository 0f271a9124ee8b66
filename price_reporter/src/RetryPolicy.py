"""RetryPolicy: Bounded retry with a fixed delay between attempts.

Used for price source fetches and block height lookups. The operation may be a
plain callable or a coroutine function.

.. code-block:: python

    >>> policy = RetryPolicy(max_attempts=3, fixed_delay=0)
    >>> await policy.run(source.fetch)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_FIXED_DELAY = 1.0


async def run_with_retry(
    operation: Callable[[], T | Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    fixed_delay: float = DEFAULT_FIXED_DELAY,
    *,
    description: str | None = None,
) -> T:
    """Invoke ``operation`` until it succeeds or attempts run out.

    :param operation: Zero-argument callable, sync or async.
    :param max_attempts: Total number of attempts (default: 10).
    :param fixed_delay: Seconds to wait between attempts (default: 1.0).
    :param description: Name used in log messages.
    :returns: Result of the first successful attempt.
    :raises Exception: The last failure once all attempts are exhausted.
    """
    if max_attempts < 1:
        raise ConfigurationError("max_attempts must be at least 1")
    if fixed_delay < 0:
        raise ConfigurationError("fixed_delay must not be negative")

    name = description or getattr(operation, "__qualname__", repr(operation))
    for attempt in range(1, max_attempts):
        try:
            return await _invoke(operation)
        except Exception as exc:
            logger.debug(f"{name} failed: {exc} (attempt {attempt}/{max_attempts})")
        await asyncio.sleep(fixed_delay)

    # Final attempt: its failure propagates to the caller.
    try:
        return await _invoke(operation)
    except Exception as exc:
        logger.debug(f"{name} failed after {max_attempts} attempts: {exc}")
        raise


async def _invoke(operation: Callable[[], T | Awaitable[T]]) -> T:
    result: Any = operation()
    if inspect.isawaitable(result):
        result = await result
    return result


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration passed explicitly to every retrying component.

    :ivar max_attempts: Total number of attempts.
    :ivar fixed_delay: Seconds to wait between attempts.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    fixed_delay: float = DEFAULT_FIXED_DELAY

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")
        if self.fixed_delay < 0:
            raise ConfigurationError("fixed_delay must not be negative")

    async def run(
        self,
        operation: Callable[[], T | Awaitable[T]],
        *,
        description: str | None = None,
    ) -> T:
        """Run ``operation`` under this policy.

        :param operation: Zero-argument callable, sync or async.
        :param description: Name used in log messages.
        :returns: Result of the first successful attempt.
        """
        return await run_with_retry(
            operation,
            self.max_attempts,
            self.fixed_delay,
            description=description,
        )
