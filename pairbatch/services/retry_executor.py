"""Retry policy for fallible ledger operations, built on tenacity."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
    wait_random_exponential,
)

from pairbatch.core.errors import TRANSIENT_KINDS, ErrorKind, error_kind, is_retryable
from pairbatch.models.config import BackoffStrategy
from pairbatch.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from pairbatch.models.config import Config
    from pairbatch.utils.cancellation import CancellationToken

T = TypeVar("T")

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryResult(Generic[T]):
    """Value returned by a successful operation and the attempts it took."""

    value: T
    attempts: int


class RetryExecutor:
    """Run an operation, retrying only errors whose kind is on the allow-list.

    Anything else propagates on the attempt that raised it. When the attempt
    budget runs out on a retryable error, the last error propagates.
    """

    def __init__(
        self,
        max_retries: int = 3,
        interval_seconds: float = 2.0,
        transient_kinds: frozenset[ErrorKind] = TRANSIENT_KINDS,
        backoff: BackoffStrategy = BackoffStrategy.FIXED,
        max_interval_seconds: float = 30.0,
    ) -> None:
        if max_retries < 1:
            msg = "max_retries must be at least 1"
            raise ValueError(msg)
        self.max_retries = max_retries
        self.interval_seconds = interval_seconds
        self.transient_kinds = frozenset(transient_kinds)
        self.backoff = backoff
        self.max_interval_seconds = max_interval_seconds

    @classmethod
    def from_config(cls, config: Config) -> RetryExecutor:
        return cls(
            max_retries=config.max_retries,
            interval_seconds=config.retry_interval_seconds,
            transient_kinds=config.transient_kinds,
            backoff=config.backoff_strategy,
            max_interval_seconds=config.max_retry_interval_seconds,
        )

    def is_retryable(self, exc: BaseException) -> bool:
        return is_retryable(exc, self.transient_kinds)

    def execute(
        self,
        operation: Callable[[], T],
        max_retries: int | None = None,
        *,
        token: CancellationToken | None = None,
        name: str = "operation",
    ) -> RetryResult[T]:
        """Run ``operation`` with retries and return its value with the attempt count.

        Args:
            operation: Zero-argument callable performing one attempt.
            max_retries: Attempt budget; defaults to the executor's.
            token: Optional cancellation token. Checked before every attempt
                and interrupts the wait between attempts.
            name: Label used in retry log events.

        Raises:
            The operation's own exception when it is not retryable or the
            attempt budget is exhausted; OperationCancelledError when the
            token fires.
        """
        limit = max_retries if max_retries is not None else self.max_retries
        if limit < 1:
            msg = "max_retries must be at least 1"
            raise ValueError(msg)

        attempts = 0

        def attempt() -> T:
            nonlocal attempts
            if token is not None:
                token.raise_if_cancelled()
            attempts += 1
            return operation()

        retrying = Retrying(
            stop=stop_after_attempt(limit),
            wait=self._wait_strategy(),
            retry=retry_if_exception(self.is_retryable),
            before_sleep=self._log_retry(name, limit),
            sleep=token.sleep if token is not None else time.sleep,
            reraise=True,
        )
        value = retrying(attempt)
        return RetryResult(value=value, attempts=attempts)

    def _wait_strategy(self) -> wait_fixed | wait_random_exponential:
        if self.backoff is BackoffStrategy.EXPONENTIAL:
            return wait_random_exponential(
                multiplier=self.interval_seconds,
                max=self.max_interval_seconds,
            )
        return wait_fixed(self.interval_seconds)

    @staticmethod
    def _log_retry(name: str, limit: int) -> Callable[[RetryCallState], None]:
        def log(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "retrying_operation",
                operation=name,
                attempt=retry_state.attempt_number,
                max_attempts=limit,
                error_kind=error_kind(exc).value if exc else "unknown",
                error=str(exc) if exc else "unknown",
                sleep_seconds=retry_state.next_action.sleep if retry_state.next_action else 0,
            )

        return log
