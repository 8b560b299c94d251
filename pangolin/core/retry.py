"""Fixed-delay retry with an overall timeout.

This is the only place retry policy lives. An operation signals "not yet" by
raising NotReadyError; any other exception is treated as fatal and propagates
unchanged.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .context import ExecutionContext
from .errors import NotReadyError, OperationCancelledError, RetryTimeoutError

T = TypeVar("T")


@dataclass(frozen=True)
class RetryOption:
    """Delay between attempts and overall timeout, both in seconds."""

    delay: float = 1.0
    timeout: float = 60.0

    def __post_init__(self) -> None:
        if self.delay <= 0:
            raise ValueError(f"Retry delay must be positive, got {self.delay}")
        if self.timeout <= 0:
            raise ValueError(f"Retry timeout must be positive, got {self.timeout}")


def retry(
    operation: Callable[[], T],
    option: Optional[RetryOption] = None,
    ctx: Optional[ExecutionContext] = None,
) -> T:
    """Invoke `operation` until it succeeds, fails hard, or time runs out.

    Args:
        operation: Callable returning a result on success or raising
            NotReadyError when the condition is not satisfied yet
        option: Delay and timeout (defaults: 1s / 60s)
        ctx: Optional execution context; cancellation interrupts the wait

    Returns:
        Whatever the first successful call of `operation` returned

    Raises:
        RetryTimeoutError: Timeout elapsed; the last NotReadyError is the cause
        OperationCancelledError: The context was cancelled while waiting
        Exception: Any non-NotReadyError raised by `operation`
    """
    option = option or RetryOption()
    deadline = time.monotonic() + option.timeout
    attempts = 0

    while True:
        attempts += 1
        try:
            return operation()
        except NotReadyError as e:
            last_error = e

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise RetryTimeoutError(
                f"operation timed out after {option.timeout}s",
                timeout=option.timeout,
                details={"attempts": attempts, "last_error": str(last_error)},
            ) from last_error

        # Never sleep past the deadline, so the final attempt lands on time
        pause = min(option.delay, remaining)
        if ctx is not None:
            if ctx.wait(pause):
                raise OperationCancelledError(
                    "Operation cancelled while retrying",
                    details={"attempts": attempts},
                ) from last_error
        else:
            time.sleep(pause)
