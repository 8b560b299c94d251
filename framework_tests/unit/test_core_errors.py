"""Tests for error hierarchy and exception handling."""

import pytest

from pangolin.core.enums import ErrorKind
from pangolin.core.errors import (
    PangolinError,
    ConfigurationError,
    TopologyValidationError,
    ExecutorError,
    NotReadyError,
    PangolinTimeoutError,
    RetryTimeoutError,
    WaitTimeoutError,
    TaskError,
    StepError,
    ParallelTaskError,
    OperationCancelledError,
    UserAbortError,
    ClusterLockedError,
    FilesystemError,
    PathError,
    AtomicWriteError,
)


class TestBaseError:
    """Test base PangolinError class."""

    def test_basic_error_creation(self) -> None:
        """Test basic error creation."""
        error = PangolinError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.details == {}
        assert error.kind == ErrorKind.GENERIC

    def test_error_with_details(self) -> None:
        """Test error creation with details."""
        error = PangolinError("Test error", {"key": "value"})
        assert error.details == {"key": "value"}

    def test_cause_is_chained_error(self) -> None:
        """Test that cause exposes the chained exception."""
        original = OSError("disk gone")
        try:
            raise FilesystemError("write failed") from original
        except FilesystemError as e:
            assert e.cause is original


class TestErrorKinds:
    """Every error family carries a distinct kind tag."""

    @pytest.mark.parametrize(
        "error,kind",
        [
            (ConfigurationError("x"), ErrorKind.CONFIGURATION),
            (TopologyValidationError("x"), ErrorKind.VALIDATION),
            (ExecutorError("x"), ErrorKind.EXECUTION),
            (RetryTimeoutError("x", 1.0), ErrorKind.TIMEOUT),
            (WaitTimeoutError("x", 80, "started", 1.0), ErrorKind.TIMEOUT),
            (TaskError("x"), ErrorKind.TASK),
            (OperationCancelledError("x"), ErrorKind.CANCELLED),
            (UserAbortError("x"), ErrorKind.USER_ABORT),
            (ClusterLockedError("x"), ErrorKind.LOCKED),
            (AtomicWriteError("x"), ErrorKind.FILESYSTEM),
        ],
    )
    def test_kind(self, error, kind) -> None:
        assert error.kind == kind

    def test_hierarchy(self) -> None:
        assert issubclass(TopologyValidationError, ConfigurationError)
        assert issubclass(RetryTimeoutError, PangolinTimeoutError)
        assert issubclass(WaitTimeoutError, PangolinTimeoutError)
        assert issubclass(StepError, TaskError)
        assert issubclass(ParallelTaskError, TaskError)
        assert issubclass(PathError, FilesystemError)
        assert issubclass(NotReadyError, PangolinError)


class TestSpecificErrors:
    """Attributes of specific error types."""

    def test_topology_validation_problems(self) -> None:
        error = TopologyValidationError("bad", problems=["a", "b"])
        assert error.problems == ["a", "b"]

    def test_executor_error_output(self) -> None:
        error = ExecutorError("failed", host="h1", stdout=b"out", stderr=b"err")
        assert error.host == "h1"
        assert error.stdout == b"out"
        assert error.stderr == b"err"

    def test_wait_timeout_fields(self) -> None:
        error = WaitTimeoutError("timed out", port=2379, state="started", timeout=5.0)
        assert error.port == 2379
        assert error.state == "started"
        assert error.timeout == 5.0


class TestStepError:
    """StepError tags the failing step and exposes the root cause."""

    def test_message_includes_step_name(self) -> None:
        error = StepError("start:pd", ExecutorError("boom"))
        assert str(error) == "start:pd: boom"
        assert error.step_name == "start:pd"

    def test_root_error_unwraps_nested_steps(self) -> None:
        root = WaitTimeoutError("timed out", 1, "started", 1.0)
        error = StepError("outer", StepError("inner", root))
        assert error.root_error is root
        assert error.root_kind == ErrorKind.TIMEOUT

    def test_root_error_unwraps_parallel_failures(self) -> None:
        first = ExecutorError("first")
        parallel = ParallelTaskError("2 failed", errors={"a": first, "b": ExecutorError("b")})
        error = StepError("start:pd", parallel)
        assert error.root_error is first
        assert error.root_kind == ErrorKind.EXECUTION

    def test_root_kind_of_foreign_error(self) -> None:
        assert StepError("s", RuntimeError("x")).root_kind == ErrorKind.GENERIC

    def test_parallel_failures_in_details(self) -> None:
        error = ParallelTaskError("failed", errors={"a": ExecutorError("boom")})
        assert error.details["failures"] == {"a": "boom"}
