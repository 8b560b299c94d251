"""Bounded fan-out of independent units of work within one pipeline step."""

import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict, Protocol, Sequence, Tuple

from ..core.context import ExecutionContext
from ..core.errors import OperationCancelledError, ParallelTaskError
from ..core.log import get_log_context, get_logger, log_context

logger = get_logger(__name__)


class WorkUnit(Protocol):
    """One independent operation, e.g. one instance on one host."""

    label: str

    def run(self, ctx: ExecutionContext) -> None:
        """Perform the work, raising on failure."""


def run_parallel(ctx: ExecutionContext, name: str, units: Sequence[WorkUnit]) -> None:
    """Run `units` on at most `ctx.concurrency` threads and wait for all of them.

    After the first failure (or a cancellation) no further unit is started;
    units already running are allowed to finish. Pool threads log with the
    caller's log context. An interrupt while waiting cancels `ctx` and
    re-raises once the running units return.

    Raises:
        BaseException: A non-Exception raised by a unit (SystemExit, ...)
        Exception: The failure itself when exactly one unit failed
        ParallelTaskError: When several units failed, carrying all of them
        OperationCancelledError: When cancellation skipped some units
    """
    if not units:
        return

    stop = threading.Event()
    lock = threading.Lock()
    failures: Dict[str, BaseException] = {}
    skipped = []
    log_fields = get_log_context()

    def worker(unit: WorkUnit) -> None:
        if stop.is_set() or ctx.cancelled:
            with lock:
                skipped.append(unit.label)
            return
        try:
            with log_context(**log_fields):
                unit.run(ctx)
        except Exception as e:  # pylint: disable=broad-except
            logger.debug("%s: %s failed: %s", name, unit.label, e)
            with lock:
                failures[unit.label] = e
            stop.set()
        except BaseException:
            stop.set()
            raise

    workers = min(ctx.concurrency, len(units))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"pangolin-{name}") as pool:
        futures = [pool.submit(worker, unit) for unit in units]
        try:
            wait(futures)
        except BaseException:
            stop.set()
            ctx.cancel()
            pool.shutdown(wait=False, cancel_futures=True)
            raise

    # worker only lets non-Exception errors escape into its future
    for future in futures:
        future.result()

    if failures:
        if skipped:
            logger.warning("%s: skipped %d operation(s) after failure", name, len(skipped))
        if len(failures) == 1:
            raise next(iter(failures.values()))
        first_label, first_error = next(iter(failures.items()))
        raise ParallelTaskError(
            f"{len(failures)} of {len(units)} operations failed, first {first_label}: {first_error}",
            errors=failures,
        ) from first_error

    if skipped:
        raise OperationCancelledError(
            f"{name} cancelled, {len(skipped)} operation(s) not started",
            details={"skipped": list(skipped)},
        )


@dataclass(frozen=True)
class ParallelStep:
    """Pipeline step fanning out a fixed tuple of units."""

    name: str
    units: Tuple[WorkUnit, ...] = ()

    def execute(self, ctx: ExecutionContext) -> None:
        run_parallel(ctx, self.name, self.units)
