"""Retry loop with exponential backoff around a transport."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..http.protocols import TransportAdapter
from ..http.transport import TRANSPORT_EXCEPTIONS, outcome_from_exception
from ..models.config import ClientConfig
from ..models.outcomes import TransportOutcome, TransportSuccess
from ..models.request import RequestDescriptor
from .classifier import ResponseClassifier

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class RetryState(str, Enum):
    """States of one RetryController run."""

    IDLE = "idle"
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class BackoffPolicy:
    """
    Exponential backoff schedule.

    delay(n) = min(base_delay * factor ** n, max_delay), plus up to
    ``jitter * delay`` of random extra wait. With jitter below 1 and a
    factor of at least 2 each delay is strictly longer than the previous one
    until max_delay is reached.

    With the defaults, four retries wait 0.125 + 0.25 + 0.5 + 1.0 = 1.875s.
    """

    base_delay: float = 0.125
    factor: float = 2.0
    max_delay: float = 30.0
    jitter: float = 0.0

    def __post_init__(self) -> None:
        if self.base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if self.factor < 1:
            raise ValueError("factor must be at least 1")
        if not 0 <= self.jitter < 1:
            raise ValueError("jitter must be in [0, 1)")

    @classmethod
    def from_config(cls, config: ClientConfig) -> BackoffPolicy:
        return cls(
            base_delay=config.retry_base_delay,
            factor=config.retry_backoff_factor,
            max_delay=config.retry_max_delay,
            jitter=config.retry_jitter,
        )

    def delay(self, retry_index: int) -> float:
        """
        Calculate the wait before a retry.

        Args:
            retry_index: 0 for the first retry, 1 for the second, ...

        Returns:
            Delay in seconds
        """
        delay: float = min(self.base_delay * (self.factor**retry_index), self.max_delay)
        if self.jitter:
            delay += random.uniform(0, self.jitter * delay)
        return delay

    def total_delay(self, retries: int) -> float:
        """Minimum cumulative wait for the given number of retries."""
        return sum(min(self.base_delay * (self.factor**n), self.max_delay) for n in range(retries))


@dataclass
class RetryProgress:
    """Mutable bookkeeping for one run; never shared between requests."""

    attempts_made: int
    attempts_remaining: int
    next_delay: float
    state: RetryState = RetryState.IDLE


class RetryController:
    """
    Drives transport attempts until a response arrives or the budget runs out.

    States: idle -> attempting -> {succeeded | retrying -> attempting | failed}.

    Only transport-level failures (connection errors, timeouts) are retried;
    a received response of any status ends the loop at once.

    Example:
        controller = RetryController(transport, BackoffPolicy())
        success = await controller.run(descriptor)
    """

    def __init__(
        self,
        transport: TransportAdapter,
        policy: Optional[BackoffPolicy] = None,
        classifier: Optional[ResponseClassifier] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize the controller.

        Args:
            transport: Transport performing single attempts
            policy: Backoff schedule (defaults to BackoffPolicy())
            classifier: Outcome classifier (defaults to ResponseClassifier())
            sleep: Awaitable sleep, injectable for tests
        """
        self._transport = transport
        self._policy = policy or BackoffPolicy()
        self._classifier = classifier or ResponseClassifier()
        self._sleep = sleep

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    async def _attempt(self, descriptor: RequestDescriptor) -> TransportOutcome:
        try:
            return await self._transport.send(descriptor)
        except TRANSPORT_EXCEPTIONS as e:
            # Transports should return failures, but raising ones are tolerated
            return outcome_from_exception(e)

    async def run(self, descriptor: RequestDescriptor) -> TransportSuccess:
        """
        Run the attempt loop for one request.

        Args:
            descriptor: Normalized request; descriptor.retries is the budget

        Returns:
            TransportSuccess of the first attempt that received a response

        Raises:
            RequestError: With status 504 once all attempts failed
        """
        total_attempts = descriptor.retries + 1
        progress = RetryProgress(
            attempts_made=0,
            attempts_remaining=descriptor.retries,
            next_delay=self._policy.delay(0),
        )

        while True:
            progress.state = RetryState.ATTEMPTING
            progress.attempts_made += 1
            logger.debug(
                f"{descriptor.method} {descriptor.uri} (attempt {progress.attempts_made}/{total_attempts})"
            )
            outcome = await self._attempt(descriptor)

            if not self._classifier.is_retryable(outcome):
                progress.state = RetryState.SUCCEEDED
                return self._classifier.classify(descriptor, outcome)

            if progress.attempts_remaining <= 0:
                progress.state = RetryState.FAILED
                if descriptor.retries:
                    logger.error(
                        f"Request {descriptor.method} {descriptor.uri} failed after "
                        f"{progress.attempts_made} attempts: {self._classifier.describe(outcome)}"
                    )
                return self._classifier.classify(descriptor, outcome)

            progress.state = RetryState.RETRYING
            delay = progress.next_delay
            logger.warning(
                f"Error requesting {descriptor.method} {descriptor.uri}: "
                f"{self._classifier.describe(outcome)}, retrying in {delay:.1f}s "
                f"(attempt {progress.attempts_made}/{total_attempts})"
            )
            await self._sleep(delay)
            progress.attempts_remaining -= 1
            progress.next_delay = self._policy.delay(progress.attempts_made)
