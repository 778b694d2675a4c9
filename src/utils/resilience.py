"""
EduGen - Resilience Patterns
Exponential backoff retry for calls to external collaborators (AI rewrite)
"""
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple

from config.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Retry policy for one kind of external call."""
    max_attempts: int = 2
    base_delay: float = 1.0
    max_delay: float = 10.0
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Tuple[type, ...] = (Exception,)
    label: str = "call"  # shown in retry logs

    @classmethod
    def from_settings(cls, label: str = "call") -> "RetryConfig":
        settings = get_settings()
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
            exponential_base=settings.retry_exponential_base,
            label=label
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the zero-based `attempt` failed."""
        delay = min(self.base_delay * self.exponential_base ** attempt, self.max_delay)
        if self.jitter:
            # 50%..150% so parallel clients do not retry in lockstep
            delay *= 0.5 + random.random()
        return delay


async def retry_with_backoff(
    func: Callable[..., Awaitable[Any]],
    config: Optional[RetryConfig] = None,
    *args,
    **kwargs
) -> Any:
    """
    Await `func(*args, **kwargs)`, retrying retryable failures.

    At least one attempt is always made. Exceptions outside
    `config.retryable_exceptions` propagate immediately.

    Raises:
        Exception: The last failure once every attempt is used
    """
    config = config or RetryConfig.from_settings()
    attempts = max(1, config.max_attempts)

    attempt = 0
    while True:
        try:
            return await func(*args, **kwargs)
        except config.retryable_exceptions as e:
            attempt += 1
            if attempt >= attempts:
                logger.error(f"[Retry:{config.label}] giving up after {attempt} attempts: {e}")
                raise

            delay = config.delay_for(attempt - 1)
            logger.warning(
                f"[Retry:{config.label}] attempt {attempt}/{attempts} failed: {e}. "
                f"Retrying in {delay:.2f}s"
            )
            await asyncio.sleep(delay)
