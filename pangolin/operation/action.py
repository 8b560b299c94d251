"""Lifecycle operator primitives: start, stop, restart, enable and disable.

Each primitive turns the topology into one pipeline step per component, in
start order (start, enable) or stop order (stop, disable). A component step
fans its instances out under the run's concurrency budget; component steps
themselves run strictly one after another.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from ..core.context import ExecutionContext
from ..core.enums import LifecycleAction, PortState
from ..core.errors import ConfigurationError
from ..core.log import get_logger, log_instance_event
from ..executor.base import Executor
from ..module.service import ServiceManager, service_manager_for
from ..module.wait_for import WaitFor, WaitForConfig
from ..task.builder import Builder, Pipeline
from ..task.parallel import run_parallel
from ..topology.spec import Component, Instance, Topology, filter_components, filter_instances
from .options import Options

logger = get_logger(__name__)


@dataclass(frozen=True)
class InstanceOperation:
    """One lifecycle action on one instance, optionally confirmed by WaitFor."""

    action: LifecycleAction
    instance: Instance
    executor: Executor
    service: ServiceManager
    wait: Optional[WaitForConfig] = None

    @property
    def label(self) -> str:
        return f"{self.action.value} {self.instance}"

    def run(self, ctx: ExecutionContext) -> None:
        inst = self.instance
        log_instance_event(
            logger, f"{self.action.value}.begin", inst.id, component=inst.component
        )
        command = self.service.command(self.action, inst)
        self.executor.execute(ctx, command, self.service.use_sudo)
        if self.wait is not None:
            WaitFor(self.wait).execute(ctx, self.executor)
        log_instance_event(
            logger, f"{self.action.value}.done", inst.id, component=inst.component
        )


@dataclass(frozen=True)
class ComponentPhaseStep:
    """Pipeline step applying one action to every selected instance of a component."""

    name: str
    action: LifecycleAction
    component: str
    operations: Tuple[InstanceOperation, ...] = ()

    def execute(self, ctx: ExecutionContext) -> None:
        logger.info(
            "%s component %s (%d instance(s))",
            self.action.value.capitalize(),
            self.component,
            len(self.operations),
        )
        run_parallel(ctx, self.name, self.operations)


def _wait_config(action: LifecycleAction, inst: Instance, options: Options) -> Optional[WaitForConfig]:
    if action == LifecycleAction.START:
        state = PortState.STARTED
    elif action == LifecycleAction.STOP and options.wait_stopped:
        state = PortState.STOPPED
    else:
        return None
    return WaitForConfig(
        port=inst.port,
        sleep=options.poll_interval,
        state=state,
        timeout=options.wait_timeout,
        os=inst.os,
    )


def _operation(
    action: LifecycleAction,
    inst: Instance,
    options: Options,
    executors: Mapping[str, Executor],
) -> InstanceOperation:
    try:
        executor = executors[inst.host]
    except KeyError as e:
        raise ConfigurationError(f"No executor for host {inst.host}") from e
    return InstanceOperation(
        action=action,
        instance=inst,
        executor=executor,
        service=service_manager_for(inst.os),
        wait=_wait_config(action, inst, options),
    )


def phase_steps(
    action: LifecycleAction,
    components: Sequence[Component],
    options: Options,
    executors: Mapping[str, Executor],
) -> List[ComponentPhaseStep]:
    """One step per component, in the given order, honouring role and node filters.

    Components left without instances after filtering produce no step.
    """
    steps = []
    for comp in filter_components(components, options.roles):
        instances = filter_instances(comp.instances, options.nodes)
        if not instances:
            continue
        operations = tuple(_operation(action, inst, options, executors) for inst in instances)
        steps.append(
            ComponentPhaseStep(
                name=f"{action.value}:{comp.name}",
                action=action,
                component=comp.name,
                operations=operations,
            )
        )
    return steps


def start_steps(topology: Topology, options: Options,
                executors: Mapping[str, Executor]) -> List[ComponentPhaseStep]:
    return phase_steps(
        LifecycleAction.START, topology.components_by_start_order(), options, executors
    )


def stop_steps(topology: Topology, options: Options,
               executors: Mapping[str, Executor]) -> List[ComponentPhaseStep]:
    return phase_steps(
        LifecycleAction.STOP, topology.components_by_stop_order(), options, executors
    )


def restart_steps(topology: Topology, options: Options,
                  executors: Mapping[str, Executor]) -> List[ComponentPhaseStep]:
    """Every stop phase followed by every start phase."""
    return stop_steps(topology, options, executors) + start_steps(topology, options, executors)


def enable_steps(topology: Topology, options: Options,
                 executors: Mapping[str, Executor],
                 enable: bool = True) -> List[ComponentPhaseStep]:
    if enable:
        return phase_steps(
            LifecycleAction.ENABLE, topology.components_by_start_order(), options, executors
        )
    return phase_steps(
        LifecycleAction.DISABLE, topology.components_by_stop_order(), options, executors
    )


def _run(name: str, steps: Sequence[ComponentPhaseStep], ctx: ExecutionContext) -> None:
    pipeline: Pipeline = Builder(name).steps(steps).build()
    pipeline.execute(ctx)


def start(ctx: ExecutionContext, topology: Topology, options: Options,
          executors: Mapping[str, Executor]) -> None:
    """Start the cluster and confirm every started port is listening."""
    _run("start", start_steps(topology, options, executors), ctx)


def stop(ctx: ExecutionContext, topology: Topology, options: Options,
         executors: Mapping[str, Executor]) -> None:
    """Stop the cluster in reverse start order."""
    _run("stop", stop_steps(topology, options, executors), ctx)


def restart(ctx: ExecutionContext, topology: Topology, options: Options,
            executors: Mapping[str, Executor]) -> None:
    """Stop then start the cluster as two phases of one pipeline."""
    _run("restart", restart_steps(topology, options, executors), ctx)


def enable(ctx: ExecutionContext, topology: Topology, options: Options,
           executors: Mapping[str, Executor], is_enable: bool = True) -> None:
    """Enable (or disable) the services of the cluster at boot."""
    _run(
        "enable" if is_enable else "disable",
        enable_steps(topology, options, executors, is_enable),
        ctx,
    )
