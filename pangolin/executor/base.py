"""Executor contract: run a command on one host."""

import shlex
from typing import Optional, Protocol, Tuple

from ..core.context import ExecutionContext


class Executor(Protocol):
    """Protocol for command executors to enable dependency injection.

    Implementations block for the duration of the call and raise ExecutorError
    for any failure, whether the host was unreachable or the command exited
    non-zero. Callers read outcomes from stdout, never from exit codes.
    """

    host: str

    def execute(
        self, ctx: Optional[ExecutionContext], command: str, sudo: bool = False
    ) -> Tuple[bytes, bytes]:
        """Run `command`, returning (stdout, stderr)."""


def wrap_sudo(command: str) -> str:
    """Wrap a shell command so it runs as the superuser."""
    return f"sudo -H bash -c {shlex.quote(command)}"
