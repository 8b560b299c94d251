"""Named pipeline steps, the one-shot Builder and the executable Pipeline."""

import time
from dataclasses import dataclass
from typing import Callable, List, Protocol, Sequence, Tuple

from ..core.context import ExecutionContext
from ..core.errors import StepError, TaskError
from ..core.log import get_logger, log_task_event, log_context
from .parallel import ParallelStep, WorkUnit

logger = get_logger(__name__)


class Step(Protocol):
    """A named unit of pipeline work."""

    name: str

    def execute(self, ctx: ExecutionContext) -> None:
        """Run the step, raising on failure."""


@dataclass(frozen=True)
class FuncStep:
    """Step wrapping a plain callable."""

    name: str
    fn: Callable[[ExecutionContext], None]

    def execute(self, ctx: ExecutionContext) -> None:
        self.fn(ctx)


class Pipeline:
    """Ordered, immutable sequence of steps.

    Steps run strictly one after another. The first failing step stops the
    pipeline and its error is re-raised as StepError tagged with the step name.
    A Pipeline is itself a Step and can be nested.
    """

    def __init__(self, name: str, steps: Sequence[Step]) -> None:
        self.name = name
        self._steps: Tuple[Step, ...] = tuple(steps)

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._steps

    def step_names(self) -> List[str]:
        return [step.name for step in self._steps]

    def execute(self, ctx: ExecutionContext) -> None:
        """Run every step in declared order."""
        log_task_event(logger, "pipeline.start", step=self.name, steps=len(self._steps))
        started = time.time()
        for step in self._steps:
            ctx.check_cancelled()
            step_started = time.time()
            logger.debug("Running step %s", step.name)
            try:
                with log_context(step=step.name):
                    step.execute(ctx)
            except Exception as e:  # pylint: disable=broad-except
                logger.error("Step %s failed: %s", step.name, e)
                raise StepError(step.name, e) from e
            logger.debug(
                "Step %s finished in %.2fs", step.name, time.time() - step_started
            )
        log_task_event(
            logger, "pipeline.done", step=self.name, duration=time.time() - started
        )

    def __repr__(self) -> str:
        return f"Pipeline({self.name!r}, steps={self.step_names()!r})"


class Builder:
    """Accumulates named steps; build() freezes them into a Pipeline.

    Building is a one-shot snapshot: once build() has been called every
    further mutation raises TaskError.
    """

    def __init__(self, name: str = "pipeline") -> None:
        self._name = name
        self._steps: List[Step] = []
        self._built = False

    def _ensure_open(self) -> None:
        if self._built:
            raise TaskError(f"Builder '{self._name}' has already been built")

    def step(self, step: Step) -> "Builder":
        """Append a step object."""
        self._ensure_open()
        self._steps.append(step)
        return self

    def steps(self, steps: Sequence[Step]) -> "Builder":
        """Append several step objects in order."""
        for step in steps:
            self.step(step)
        return self

    def func(self, name: str, fn: Callable[[ExecutionContext], None]) -> "Builder":
        """Append a callable as a named step."""
        return self.step(FuncStep(name, fn))

    def parallel(self, name: str, units: Sequence[WorkUnit]) -> "Builder":
        """Append a step fanning out `units` under the concurrency budget."""
        return self.step(ParallelStep(name, tuple(units)))

    def build(self) -> Pipeline:
        self._ensure_open()
        self._built = True
        return Pipeline(self._name, self._steps)
