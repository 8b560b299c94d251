"""Executors backed by local processes."""

import subprocess
import time
from typing import List, Optional, Tuple

from ..core.context import ExecutionContext
from ..core.errors import ExecutorError
from ..core.log import get_logger
from .base import wrap_sudo

logger = get_logger(__name__)


def run_process(
    argv: List[str], host: str, timeout: Optional[float] = None
) -> Tuple[bytes, bytes]:
    """Run argv to completion and return (stdout, stderr).

    Raises:
        ExecutorError: On spawn failure, timeout or non-zero exit
    """
    start_time = time.time()
    logger.debug(
        "Executing on %s: %s", host, argv[-1],
        extra={"event_type": "exec", "host": host},
    )
    try:
        result = subprocess.run(
            argv,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise ExecutorError(
            f"Command on {host} timed out after {timeout}s",
            host=host,
            stdout=e.stdout or b"",
            stderr=e.stderr or b"",
            details={"command": argv[-1], "timeout": timeout},
        ) from e
    except OSError as e:
        raise ExecutorError(
            f"Failed to run command on {host}: {e}",
            host=host,
            details={"command": argv[-1]},
        ) from e

    duration = time.time() - start_time
    stdout = result.stdout or b""
    stderr = result.stderr or b""
    if result.returncode != 0:
        logger.debug(
            "Command on %s exited %d after %.2fs: %s",
            host,
            result.returncode,
            duration,
            stderr.decode(errors="replace").strip(),
        )
        raise ExecutorError(
            f"Command on {host} failed with exit code {result.returncode}: "
            f"{stderr.decode(errors='replace').strip()}",
            host=host,
            stdout=stdout,
            stderr=stderr,
            details={"command": argv[-1], "returncode": result.returncode},
        )

    logger.debug("Command on %s finished in %.2fs", host, duration)
    return stdout, stderr


class LocalExecutor:
    """Runs commands through the local shell.

    Used for single-host development clusters and as the building block of the
    SSH executor.
    """

    def __init__(self, host: str = "localhost", timeout: Optional[float] = None) -> None:
        self.host = host
        self._timeout = timeout

    def execute(
        self, ctx: Optional[ExecutionContext], command: str, sudo: bool = False
    ) -> Tuple[bytes, bytes]:
        if ctx is not None:
            ctx.check_cancelled()
        if sudo:
            command = wrap_sudo(command)
        return run_process(["/bin/sh", "-c", command], self.host, self._timeout)

    def __repr__(self) -> str:
        return f"LocalExecutor(host={self.host!r})"
