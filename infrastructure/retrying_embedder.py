# infrastructure/retrying_embedder.py
"""Retry, timeout and pacing policy around any embedding provider"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.enums import ErrorCode
from core.interfaces import IEmbeddingService, IRateLimiter
from core.exceptions import EmbeddingFailure, InvalidConfiguration, ProviderTransient
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)


class RetryingEmbeddingService(IEmbeddingService):
    """
    Wraps a provider with the embedding call contract:

    - every attempt waits for the rate limiter, then runs under a timeout
    - ProviderTransient (and timeouts) are retried with exponential backoff:
      initial_backoff_ms, then doubled, for at most max_retries retries
    - exhausted retries escalate to EmbeddingFailure(RETRIES_EXHAUSTED)
    - EmbeddingFailure from the provider surfaces immediately
    """

    def __init__(
        self,
        inner: IEmbeddingService,
        max_retries: int = 3,
        initial_backoff_ms: int = 1000,
        timeout_seconds: Optional[float] = 30.0,
        rate_limiter: Optional[IRateLimiter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_retries < 0:
            raise InvalidConfiguration(f"max_retries must not be negative, got {max_retries}")
        if initial_backoff_ms < 0:
            raise InvalidConfiguration(
                f"initial_backoff_ms must not be negative, got {initial_backoff_ms}"
            )
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise InvalidConfiguration(f"timeout_seconds must be positive, got {timeout_seconds}")

        self.inner = inner
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff_ms / 1000.0
        self.timeout_seconds = timeout_seconds
        self.rate_limiter = rate_limiter
        self._sleep = sleep

    async def _attempt(self, text: str) -> List[float]:
        if self.rate_limiter is not None:
            await self.rate_limiter.acquire()

        try:
            return await asyncio.wait_for(self.inner.embed(text), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise ProviderTransient(
                f"Embedding call timed out after {self.timeout_seconds}s"
            ) from e

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"Embedding attempt {retry_state.attempt_number}/{self.max_retries + 1} failed: {error}. "
            f"Retrying in {delay:.2f}s"
        )

    async def embed(self, text: str) -> List[float]:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(ProviderTransient),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.initial_backoff, exp_base=2, min=0),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

        try:
            return await retrying(self._attempt, text)
        except ProviderTransient as e:
            raise EmbeddingFailure(
                f"Provider still failing after {self.max_retries + 1} attempts: {e.message}",
                ErrorCode.RETRIES_EXHAUSTED,
            ) from e
        except EmbeddingFailure:
            raise
        except InvalidConfiguration:
            raise
        except Exception as e:
            raise EmbeddingFailure(f"Unexpected embedding error: {e}") from e
