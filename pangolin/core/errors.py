"""Error hierarchy and exception system for the Pangolin framework."""

from typing import Optional, Dict, Any

from .enums import ErrorKind


class PangolinError(Exception):
    """Base exception for all Pangolin framework errors."""

    kind = ErrorKind.GENERIC

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def cause(self) -> Optional[BaseException]:
        """The wrapped lower-level error, if any."""
        return self.__cause__


# Configuration and Topology Errors
class ConfigurationError(PangolinError):
    """Error in framework or cluster configuration."""

    kind = ErrorKind.CONFIGURATION


class TopologyValidationError(ConfigurationError):
    """Topology failed semantic validation."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, problems: Optional[list] = None,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.problems = list(problems or [])


# Remote Execution Errors
class ExecutorError(PangolinError):
    """Command execution on a host failed (transport or non-zero exit)."""

    kind = ErrorKind.EXECUTION

    def __init__(self, message: str, host: Optional[str] = None,
                 stdout: bytes = b"", stderr: bytes = b"",
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.host = host
        self.stdout = stdout
        self.stderr = stderr


# Retry and Polling Errors
class NotReadyError(PangolinError):
    """Polled condition is not satisfied yet; the operation may be retried."""


class PangolinTimeoutError(PangolinError):
    """Base class for timeouts."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, timeout: float,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.timeout = timeout


class RetryTimeoutError(PangolinTimeoutError):
    """Retried operation did not succeed before its timeout."""


class WaitTimeoutError(PangolinTimeoutError):
    """Port did not reach the desired state in time."""

    def __init__(self, message: str, port: int, state: str, timeout: float,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, timeout, details)
        self.port = port
        self.state = state


# Task Errors
class TaskError(PangolinError):
    """Task construction or execution error."""

    kind = ErrorKind.TASK


class StepError(TaskError):
    """A pipeline step failed."""

    def __init__(self, step_name: str, error: BaseException,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f"{step_name}: {error}", details)
        self.step_name = step_name
        self.error = error

    @property
    def root_error(self) -> BaseException:
        """Innermost error behind nested steps and parallel fan-outs."""
        error: BaseException = self.error
        while True:
            if isinstance(error, StepError):
                error = error.error
            elif isinstance(error, ParallelTaskError) and error.errors:
                error = next(iter(error.errors.values()))
            else:
                return error

    @property
    def root_kind(self) -> ErrorKind:
        """Kind of the innermost framework error wrapped by this step."""
        error = self.root_error
        if isinstance(error, PangolinError):
            return error.kind
        return ErrorKind.GENERIC


class ParallelTaskError(TaskError):
    """Several units of one parallel step failed."""

    def __init__(self, message: str, errors: Optional[Dict[str, BaseException]] = None,
                 details: Optional[Dict[str, Any]] = None) -> None:
        details = dict(details or {})
        details.setdefault("failures", {k: str(v) for k, v in (errors or {}).items()})
        super().__init__(message, details)
        self.errors = dict(errors or {})


class OperationCancelledError(PangolinError):
    """The run was cancelled from outside."""

    kind = ErrorKind.CANCELLED


# Manager Preconditions
class UserAbortError(PangolinError):
    """Operator declined a confirmation prompt."""

    kind = ErrorKind.USER_ABORT


class ClusterLockedError(PangolinError):
    """Operation refused while a scale-out or scale-in is in progress."""

    kind = ErrorKind.LOCKED


# Filesystem and IO Errors
class FilesystemError(PangolinError):
    """Filesystem operation error."""

    kind = ErrorKind.FILESYSTEM


class PathError(FilesystemError):
    """Path resolution or validation error."""


class AtomicWriteError(FilesystemError):
    """Atomic write operation failed."""


# Serialization Errors
class SerializationError(PangolinError):
    """Data could not be encoded."""


class DeserializationError(PangolinError):
    """Data could not be decoded."""
