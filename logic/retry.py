"""
Bounded retry with exponential backoff for remote calls.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-19
"""

import asyncio
import random
from typing import Any, Awaitable, Callable, Dict, Optional

from loguru import logger


class RetryPolicy:
    """Attempt count and delay bounds for a retried call.

    Attributes:
        attempts: Total number of attempts (at least 1).
        base_delay: Delay before the second attempt, doubled after each failure.
        max_delay: Upper bound for a single delay.
    """

    def __init__(self, attempts: int = 3, base_delay: float = 0.25, max_delay: float = 2.0):
        self.attempts = max(1, int(attempts))
        self.base_delay = max(0.0, float(base_delay))
        self.max_delay = max(0.0, float(max_delay))

    @classmethod
    def from_config(cls, section: Optional[Dict[str, Any]]) -> "RetryPolicy":
        section = section or {}
        return cls(
            attempts=section.get("attempts", 3),
            base_delay=section.get("base_delay", 0.25),
            max_delay=section.get("max_delay", 2.0),
        )

    def delay_for(self, attempt: int) -> float:
        """Get the sleep before retrying after failed attempt number ``attempt`` (0-based)."""
        delay = min(self.max_delay, self.base_delay * 2 ** attempt)
        if delay == 0:
            return 0.0
        # Jitter keeps concurrent displays from retrying in lockstep
        return delay * (0.5 + random.random() / 2)

    def __repr__(self) -> str:
        return (
            f"RetryPolicy(attempts={self.attempts}, base_delay={self.base_delay}, "
            f"max_delay={self.max_delay})"
        )


NO_RETRY = RetryPolicy(attempts=1, base_delay=0, max_delay=0)


async def retry_async(
        fn: Callable[[], Awaitable[Any]],
        policy: RetryPolicy,
        label: str,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
):
    """Call ``fn`` until it succeeds or the policy runs out of attempts.

    Args:
        fn: Zero-argument coroutine factory.
        policy: Retry policy.
        label: Short description used in log lines.
        sleep: Sleep coroutine, replaceable in tests.

    Returns:
        Whatever ``fn`` returns.

    Raises:
        Exception: The last error once all attempts have failed.
    """
    for attempt in range(policy.attempts):
        try:
            return await fn()
        except Exception as e:
            if attempt == policy.attempts - 1:
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                f"{label} failed (attempt {attempt + 1}/{policy.attempts}): {e}; "
                f"retrying in {delay:.2f}s"
            )
            await sleep(delay)
