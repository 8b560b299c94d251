"""Command executors and the host -> executor map."""

from typing import Dict

from ..core.types import PangolinConfig
from ..topology.spec import Topology
from .base import Executor, wrap_sudo
from .local import LocalExecutor, run_process
from .ssh import SSHExecutor


def build_executors(topology: Topology, config: PangolinConfig) -> Dict[str, Executor]:
    """Create one executor per unique host of the topology.

    The SSH port of the first instance seen on a host wins; the deploy user
    defaults to the topology's global user.
    """
    executors: Dict[str, Executor] = {}
    command_timeout = config.timeouts.command_timeout
    for inst in topology.iter_instances():
        if inst.host in executors:
            continue
        if config.infrastructure.local_execution:
            executors[inst.host] = LocalExecutor(inst.host, timeout=command_timeout)
        else:
            executors[inst.host] = SSHExecutor(
                host=inst.host,
                port=inst.ssh_port,
                user=config.ssh.user or topology.user,
                identity_file=config.ssh.identity_file,
                connect_timeout=config.ssh.timeout,
                command_timeout=command_timeout,
                strict_host_key_checking=config.ssh.strict_host_key_checking,
            )
    return executors


__all__ = [
    "Executor",
    "LocalExecutor",
    "SSHExecutor",
    "build_executors",
    "run_process",
    "wrap_sudo",
]
