"""Retry, deadline and cancellation helpers for pipeline phases."""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable

from manuscript_press.clients.exceptions import ClientError
from manuscript_press.config import RetryPolicy
from manuscript_press.errors import (
    PhaseTimeoutError,
    PublishCancelledError,
    TransientCollaboratorError,
)

logger = logging.getLogger(__name__)

DEFAULT_RETRY_POLICY = RetryPolicy()


class CancellationToken:
    """Cooperative cancellation flag for one publish call.

    The orchestrator checks the token before each phase and before each
    collaborator attempt; work already in flight is not interrupted.
    """

    def __init__(self):
        self._cancelled = False
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self._cancelled = True
        self.reason = reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise PublishCancelledError(f"Publish call cancelled: {self.reason}")


def calculate_backoff(attempt: int, policy: RetryPolicy = DEFAULT_RETRY_POLICY) -> float:
    """Delay in seconds before retry *attempt* (1-based)."""
    delay = min(policy.backoff_base * (2 ** (attempt - 1)), policy.backoff_cap)
    jitter = random.uniform(policy.jitter_min, policy.jitter_max)
    return delay * jitter


def is_transient(error: BaseException) -> bool:
    """Whether a failed collaborator call is worth retrying.

    Rate limits, connection failures, timeouts and 5xx responses are
    transient; everything else is not. Client errors raised after the
    client spent its own retries are not retried again.
    """
    if isinstance(error, ClientError) and error.exhausted:
        return False
    if isinstance(error, (TransientCollaboratorError, TimeoutError)):
        return True
    return isinstance(error, ClientError) and error.transient


async def call_with_retry(
    func: Callable[..., Awaitable[Any]],
    *args,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    cancel: CancellationToken | None = None,
    description: str = "",
    **kwargs,
) -> Any:
    """Await ``func(*args, **kwargs)``, retrying transient failures.

    Args:
        func: Async callable to invoke
        policy: Retry policy (attempt count and backoff)
        cancel: Token checked before every attempt
        description: Name of the call for log messages

    Returns:
        The result of the first successful attempt

    Raises:
        PublishCancelledError: If the token is cancelled before an attempt
        Exception: The last error, if it is not transient or attempts run out
    """
    name = description or getattr(func, "__qualname__", repr(func))

    for attempt in range(1, policy.attempts + 1):
        if cancel is not None:
            cancel.raise_if_cancelled()
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if not is_transient(e) or attempt == policy.attempts:
                raise
            delay = calculate_backoff(attempt, policy)
            logger.warning(
                f"{name} failed (attempt {attempt}/{policy.attempts}): {e}; "
                f"retrying in {delay:.2f}s"
            )
            await asyncio.sleep(delay)


async def run_with_deadline(aw: Awaitable[Any], timeout: float, phase: str) -> Any:
    """Await *aw*, raising PhaseTimeoutError if it takes longer than *timeout*.

    The awaitable is cancelled on timeout, but work it handed to
    asyncio.to_thread keeps running in its worker thread; its result is
    abandoned, not stopped.
    """
    try:
        return await asyncio.wait_for(aw, timeout)
    except TimeoutError as e:
        raise PhaseTimeoutError(f"Phase {phase} did not finish within {timeout:g}s") from e


async def gather_settled(*aws: Awaitable[Any]) -> list[Any]:
    """Wait for every awaitable to settle, then raise the first failure.

    Unlike a plain gather, no sub-task is left running when one fails, so a
    phase never advances while its work is still in flight.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)
