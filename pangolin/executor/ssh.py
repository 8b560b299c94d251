"""Executor that runs commands on remote hosts with the system ssh client."""

from pathlib import Path
from typing import List, Optional, Tuple

from ..core.context import ExecutionContext
from .base import wrap_sudo
from .local import run_process


class SSHExecutor:
    """Runs commands over `ssh` in batch mode.

    Connection and authentication are delegated entirely to the ssh client:
    keys come from `identity_file` or the agent, never from a prompt.
    """

    def __init__(
        self,
        host: str,
        port: int = 22,
        user: Optional[str] = None,
        identity_file: Optional[Path] = None,
        connect_timeout: float = 10.0,
        command_timeout: Optional[float] = None,
        strict_host_key_checking: bool = False,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.identity_file = identity_file
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout
        self.strict_host_key_checking = strict_host_key_checking

    def build_argv(self, command: str) -> List[str]:
        """Build the ssh command line for `command`."""
        argv = [
            "ssh",
            "-p",
            str(self.port),
            "-o",
            "BatchMode=yes",
            "-o",
            f"ConnectTimeout={int(self.connect_timeout)}",
        ]
        if not self.strict_host_key_checking:
            argv += ["-o", "StrictHostKeyChecking=no"]
        if self.identity_file:
            argv += ["-i", str(self.identity_file)]
        target = f"{self.user}@{self.host}" if self.user else self.host
        argv += [target, command]
        return argv

    def execute(
        self, ctx: Optional[ExecutionContext], command: str, sudo: bool = False
    ) -> Tuple[bytes, bytes]:
        if ctx is not None:
            ctx.check_cancelled()
        if sudo:
            command = wrap_sudo(command)
        return run_process(self.build_argv(command), self.host, self.command_timeout)

    def __repr__(self) -> str:
        return f"SSHExecutor(host={self.host!r}, port={self.port})"
