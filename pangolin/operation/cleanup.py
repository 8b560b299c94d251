"""Cleanup path calculation and per-host deletion."""

import posixpath
from dataclasses import dataclass
from typing import Dict, List, Mapping, Set, Tuple

from ..core.context import ExecutionContext
from ..core.errors import ConfigurationError, PathError
from ..core.log import get_logger, log_event
from ..executor.base import Executor
from ..task.parallel import ParallelStep
from ..topology.spec import (
    MONITOR_AGENT_COMPONENTS,
    TLS_CERT_KEY_DIR,
    Instance,
    Topology,
    abs_path,
    split_dirs,
)
from .options import CleanupOptions

logger = get_logger(__name__)

CleanupMap = Dict[str, Set[str]]


def _is_retained(inst: Instance, options: CleanupOptions) -> bool:
    if inst.component in options.retain_roles:
        return True
    return inst.id in options.retain_nodes or inst.host in options.retain_nodes


def _instance_paths(inst: Instance, topology: Topology, options: CleanupOptions) -> Set[str]:
    paths: Set[str] = set()
    if options.clean_data:
        paths.update(posixpath.join(d, "*") for d in inst.data_dirs)
    if options.clean_log:
        paths.update(posixpath.join(d, "*.log") for d in inst.log_dirs)
    if options.clean_tls and not topology.tls_enabled:
        paths.add(posixpath.join(abs_path(topology.user, inst.deploy_dir), TLS_CERT_KEY_DIR))
    return paths


def _monitor_paths(topology: Topology, options: CleanupOptions) -> Set[str]:
    monitored = topology.monitored
    if monitored is None:
        return set()
    user = topology.user
    deploy_dir = abs_path(user, monitored.deploy_dir)
    paths: Set[str] = set()
    if options.clean_data:
        for data_dir in split_dirs(monitored.data_dir):
            if not data_dir.startswith("/"):
                data_dir = posixpath.join(deploy_dir, data_dir)
            paths.add(posixpath.join(data_dir, "*"))
    if options.clean_log:
        for log_dir in split_dirs(monitored.log_dir):
            paths.add(posixpath.join(abs_path(user, log_dir), "*.log"))
    if options.clean_tls and not topology.tls_enabled:
        paths.add(posixpath.join(deploy_dir, TLS_CERT_KEY_DIR))
    return paths


def get_cleanup_files(topology: Topology, options: CleanupOptions) -> CleanupMap:
    """Compute the globs to delete, keyed by host.

    Instances in a retained role or node contribute nothing, and monitoring
    agents flagged with ignore_exporter are left alone. Hosts that run no
    monitoring agent, or that are themselves listed as retained nodes, get no
    monitoring paths. Retaining only an instance ID still cleans its host agent.
    The result depends only on the topology and options, never on the order
    in which components are visited.
    """
    result: CleanupMap = {}
    no_agent_hosts: Set[str] = set()

    for component in topology.components_by_stop_order():
        for inst in component.instances:
            if inst.ignore_exporter:
                no_agent_hosts.add(inst.host)
                if inst.component in MONITOR_AGENT_COMPONENTS:
                    continue
            if _is_retained(inst, options):
                continue
            paths = _instance_paths(inst, topology, options)
            if paths:
                result.setdefault(inst.host, set()).update(paths)

    monitor_paths = _monitor_paths(topology, options)
    if monitor_paths:
        for host in topology.hosts():
            if host in no_agent_hosts or host in options.retain_nodes:
                continue
            result.setdefault(host, set()).update(monitor_paths)

    return result


def sorted_cleanup_files(files: CleanupMap) -> List[Tuple[str, List[str]]]:
    """Stable (host, sorted globs) listing for display."""
    return [(host, sorted(files[host])) for host in sorted(files)]


def _check_path(path: str) -> None:
    normalized = "/" + posixpath.normpath(path).lstrip("/")
    if not path.startswith("/") or normalized in ("/", "/*"):
        raise PathError(f"Refusing to delete unsafe path: {path!r}")


@dataclass(frozen=True)
class DeleteHostFiles:
    """Delete a set of globs on one host."""

    host: str
    paths: Tuple[str, ...]
    executor: Executor

    @property
    def label(self) -> str:
        return f"clean {self.host}"

    def command(self) -> str:
        for path in self.paths:
            _check_path(path)
        # Globs must reach the shell unquoted
        return "rm -rf " + " ".join(self.paths)

    def run(self, ctx: ExecutionContext) -> None:
        command = self.command()
        log_event(logger, "event", f"Cleaning {len(self.paths)} path(s) on {self.host}",
                  host=self.host, paths=list(self.paths))
        self.executor.execute(ctx, command, True)


def cleanup_step(files: CleanupMap, executors: Mapping[str, Executor]) -> ParallelStep:
    """A parallel step deleting `files`, one unit per host."""
    units = []
    for host, paths in sorted_cleanup_files(files):
        if not paths:
            continue
        try:
            executor = executors[host]
        except KeyError as e:
            raise ConfigurationError(f"No executor for host {host}") from e
        units.append(DeleteHostFiles(host, tuple(paths), executor))
    return ParallelStep("clean", tuple(units))
