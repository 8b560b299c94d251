"""Poll a host until a port reaches the desired state."""

from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from ..core.context import ExecutionContext
from ..core.enums import OSType, PortState
from ..core.errors import ConfigurationError, NotReadyError, RetryTimeoutError, WaitTimeoutError
from ..core.log import get_logger
from ..core.retry import RetryOption, retry
from ..executor.base import Executor

logger = get_logger(__name__)


class DetectionStrategy(Protocol):
    """OS-specific way of telling whether a port is open or closed."""

    def command(self, port: int, state: PortState) -> str:
        """Shell command whose stdout reveals the port state."""

    def satisfied(self, stdout: str, port: int, state: PortState) -> bool:
        """Whether `stdout` shows the port in `state`."""


class LinuxDetection:
    """Listening TCP sockets from `ss`."""

    def command(self, port: int, state: PortState) -> str:
        return "ss -ltn"

    def satisfied(self, stdout: str, port: int, state: PortState) -> bool:
        listening = f":{port} " in stdout
        if state == PortState.STARTED:
            return listening
        return not listening


class DarwinDetection:
    """`lsof` for a listening socket, the launchd job table for a stopped service.

    A stopped service either has no row left in `launchctl list` or shows `-`
    in the PID column of every matching row. Rows match on a label ending in
    `-<port>`, so port 400 never matches a `...-4000` job.
    """

    def command(self, port: int, state: PortState) -> str:
        if state == PortState.STARTED:
            return f"lsof -i:{port}"
        # grep exits 1 when nothing matches; that is an answer, not a failure
        return f"launchctl list | grep -E -- '-{port}$' || true"

    def satisfied(self, stdout: str, port: int, state: PortState) -> bool:
        if state == PortState.STARTED:
            return "LISTEN" in stdout
        suffix = f"-{port}"
        rows = [line.split() for line in stdout.splitlines() if line.strip()]
        rows = [row for row in rows if row[-1].endswith(suffix)]
        return all(row[0] == "-" for row in rows)


DETECTION_STRATEGIES: Dict[OSType, DetectionStrategy] = {
    OSType.LINUX: LinuxDetection(),
    OSType.DARWIN: DarwinDetection(),
}


@dataclass(frozen=True)
class WaitForConfig:
    """Configuration of one WaitFor poll loop. Durations are in seconds."""

    port: int
    sleep: float = 1.0
    state: PortState = PortState.STARTED
    timeout: float = 60.0
    os: OSType = OSType.LINUX


class WaitFor:
    """Wait until a port on the executor's host is open or closed.

    Executor errors end the wait immediately and propagate unchanged. Running
    out of time raises WaitTimeoutError; the underlying polling detail is only
    logged at debug level.
    """

    def __init__(
        self,
        config: WaitForConfig,
        strategies: Optional[Dict[OSType, DetectionStrategy]] = None,
    ) -> None:
        self._config = config
        strategies = strategies if strategies is not None else DETECTION_STRATEGIES
        try:
            self._strategy = strategies[config.os]
        except KeyError as e:
            raise ConfigurationError(
                f"No port detection strategy for OS '{config.os.value}'"
            ) from e

    @property
    def config(self) -> WaitForConfig:
        return self._config

    def execute(self, ctx: Optional[ExecutionContext], executor: Executor) -> None:
        """Poll until the port reaches the configured state.

        Raises:
            WaitTimeoutError: Desired state not reached within the timeout
            ExecutorError: The detection command could not be run
            OperationCancelledError: The context was cancelled
        """
        cfg = self._config
        command = self._strategy.command(cfg.port, cfg.state)
        host = getattr(executor, "host", "?")
        fields = {"event_type": "wait", "host": host, "port": cfg.port, "state": cfg.state.value}
        logger.debug("Waiting for port %d on %s to be %s", cfg.port, host, cfg.state.value,
                     extra=fields)

        def probe() -> None:
            stdout, _ = executor.execute(ctx, command, False)
            text = stdout.decode(errors="replace")
            if not self._strategy.satisfied(text, cfg.port, cfg.state):
                raise NotReadyError("still waiting for port state to be satisfied")

        try:
            retry(probe, RetryOption(delay=cfg.sleep, timeout=cfg.timeout), ctx)
        except RetryTimeoutError as e:
            logger.debug("retry error: %s (%s)", e, e.details)
            raise WaitTimeoutError(
                f"timed out waiting for port {cfg.port} to be {cfg.state.value} "
                f"after {cfg.timeout}s",
                port=cfg.port,
                state=cfg.state.value,
                timeout=cfg.timeout,
            ) from None
        logger.debug("Port %d on %s is %s", cfg.port, host, cfg.state.value, extra=fields)
