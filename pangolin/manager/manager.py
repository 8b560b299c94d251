"""Cluster manager: the entry point that ties metadata, topology and pipelines together."""

import threading
from typing import Callable, Dict, Mapping, Optional, Set

from rich.console import Console
from rich.prompt import Confirm

from ..core.context import ExecutionContext
from ..core.errors import ConfigurationError, UserAbortError
from ..core.log import get_logger, log_event
from ..core.types import PangolinConfig
from ..executor import build_executors
from ..executor.base import Executor
from ..operation import action
from ..operation.cleanup import cleanup_step, get_cleanup_files, sorted_cleanup_files
from ..operation.options import CleanupOptions, Options
from ..task.builder import Builder
from ..topology.loader import check_topology
from ..topology.spec import Topology
from .store import ClusterStore

logger = get_logger(__name__)

ConfirmFn = Callable[[str], bool]
ExecutorFactory = Callable[[Topology, PangolinConfig], Mapping[str, Executor]]


def prompt_confirm(question: str) -> bool:
    """Ask a yes/no question on the terminal; the default answer is no."""
    return Confirm.ask(question, console=Console(stderr=True), default=False)


def _describe_filter(values) -> str:
    return ", ".join(values) if values else "all"


class Manager:
    """Runs lifecycle operations against clusters kept in the local store.

    Every mutating call checks the scale-out lock first, then asks for
    confirmation where the operation is destructive, and only then builds and
    executes its pipeline.
    """

    def __init__(
        self,
        config: PangolinConfig,
        store: Optional[ClusterStore] = None,
        executor_factory: ExecutorFactory = build_executors,
        confirm: ConfirmFn = prompt_confirm,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.config = config
        self.store = store or ClusterStore(config)
        self._executor_factory = executor_factory
        self._confirm_fn = confirm
        self._cancel_event = cancel_event

    def _context(self, options: Options) -> ExecutionContext:
        return ExecutionContext.create(options.concurrency, self._cancel_event)

    def _prepare(self, name: str, strict: bool) -> Topology:
        self.store.check_scale_lock(name)
        topology = self.store.load_topology(name)
        check_topology(topology, strict=strict)
        return topology

    def _confirm(self, question: str, skip: bool) -> None:
        if skip:
            return
        if not self._confirm_fn(question):
            raise UserAbortError("Operation aborted by user")

    def _executors(self, topology: Topology) -> Mapping[str, Executor]:
        return self._executor_factory(topology, self.config)

    def start_cluster(self, name: str, options: Options) -> None:
        topology = self._prepare(name, strict=False)
        executors = self._executors(topology)
        logger.info("Starting cluster %s...", name)
        action.start(self._context(options), topology, options, executors)
        log_event(logger, "event", f"Started cluster {name} successfully", cluster=name)

    def stop_cluster(self, name: str, options: Options) -> None:
        topology = self._prepare(name, strict=False)
        self._confirm(
            f"Will stop the cluster {name} with nodes: {_describe_filter(options.nodes)}, "
            f"roles: {_describe_filter(options.roles)}.\nDo you want to continue?",
            options.skip_confirm,
        )
        executors = self._executors(topology)
        logger.info("Stopping cluster %s...", name)
        action.stop(self._context(options), topology, options, executors)
        log_event(logger, "event", f"Stopped cluster {name} successfully", cluster=name)

    def restart_cluster(self, name: str, options: Options) -> None:
        topology = self._prepare(name, strict=False)
        self._confirm(
            f"Will restart the cluster {name} with nodes: {_describe_filter(options.nodes)}, "
            f"roles: {_describe_filter(options.roles)}.\nCluster will be unavailable.\n"
            "Do you want to continue?",
            options.skip_confirm,
        )
        executors = self._executors(topology)
        logger.info("Restarting cluster %s...", name)
        action.restart(self._context(options), topology, options, executors)
        log_event(logger, "event", f"Restarted cluster {name} successfully", cluster=name)

    def enable_cluster(self, name: str, options: Options, enable: bool = True) -> None:
        verb = "Enabling" if enable else "Disabling"
        topology = self._prepare(name, strict=False)
        executors = self._executors(topology)
        logger.info("%s cluster %s...", verb, name)
        action.enable(self._context(options), topology, options, executors, enable)
        log_event(
            logger, "event",
            f"{'Enabled' if enable else 'Disabled'} cluster {name} successfully",
            cluster=name,
        )

    def clean_cluster(
        self, name: str, options: Options, cleanup: CleanupOptions
    ) -> Dict[str, Set[str]]:
        """Stop the whole cluster, then delete its data, logs and/or TLS files.

        Returns:
            The host -> globs map that was deleted
        """
        if not cleanup.anything_to_clean():
            raise ConfigurationError("At least one of data, log or tls must be cleaned")

        topology = self._prepare(name, strict=True)
        files = get_cleanup_files(topology, cleanup)
        listing = "\n".join(
            f"  {host}: {', '.join(paths)}" for host, paths in sorted_cleanup_files(files)
        ) or "  (nothing)"
        self._confirm(
            f"This operation will stop cluster {name} and clean its files:\n{listing}\n"
            "Do you want to continue?",
            options.skip_confirm,
        )

        executors = self._executors(topology)
        full_stop = options.model_copy(update={"nodes": (), "roles": ()})
        pipeline = (
            Builder("clean")
            .steps(action.stop_steps(topology, full_stop, executors))
            .step(cleanup_step(files, executors))
            .build()
        )
        logger.info("Cleaning cluster %s...", name)
        pipeline.execute(self._context(options))
        log_event(logger, "event", f"Cleaned cluster {name} successfully", cluster=name)
        return files
