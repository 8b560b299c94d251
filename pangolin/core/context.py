"""Execution context threaded through one pipeline run.

The ExecutionContext is the single immutable value handed to every step of a
run. It carries the concurrency budget and the cancellation signal; it holds
no topology or executor state, which steps capture themselves at build time.

Usage:
    ctx = ExecutionContext.create(concurrency=options.concurrency)
    pipeline.execute(ctx)

    # From another thread (e.g. a signal handler)
    ctx.cancel()
"""

import threading
from dataclasses import dataclass, field
from typing import Optional

from .errors import ConfigurationError, OperationCancelledError


@dataclass(frozen=True)
class ExecutionContext:
    """Immutable per-run context: concurrency budget plus cancellation.

    Attributes:
        concurrency: Maximum number of simultaneous per-instance operations
        cancel_event: Set when the run is cancelled from outside
    """

    concurrency: int = 5
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ConfigurationError(
                f"Concurrency must be at least 1, got {self.concurrency}"
            )

    @classmethod
    def create(
        cls, concurrency: int = 5, cancel_event: Optional[threading.Event] = None
    ) -> "ExecutionContext":
        """Create a context, optionally sharing an existing cancel event."""
        return cls(
            concurrency=concurrency,
            cancel_event=cancel_event or threading.Event(),
        )

    def cancel(self) -> None:
        """Request cancellation; in-flight remote calls are left to finish."""
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def check_cancelled(self) -> None:
        """Raise OperationCancelledError if the run was cancelled."""
        if self.cancel_event.is_set():
            raise OperationCancelledError("Operation cancelled")

    def wait(self, seconds: float) -> bool:
        """Sleep up to `seconds`, waking early on cancellation.

        Returns True if the context was cancelled during the wait.
        """
        return self.cancel_event.wait(max(0.0, seconds))
