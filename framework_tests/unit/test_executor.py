"""Tests for local and SSH executors."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from pangolin.core.context import ExecutionContext
from pangolin.core.errors import ExecutorError, OperationCancelledError
from pangolin.core.types import InfrastructureConfig, PangolinConfig, SSHConfig
from pangolin.executor import LocalExecutor, SSHExecutor, build_executors, wrap_sudo
from pangolin.executor.local import run_process
from pangolin.topology import parse_topology


def _completed(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(["x"], returncode, stdout=stdout, stderr=stderr)


class TestWrapSudo:
    """Test sudo wrapping."""

    def test_quotes_command(self) -> None:
        assert wrap_sudo("systemctl start 'a b'") == (
            "sudo -H bash -c 'systemctl start '\"'\"'a b'\"'\"''"
        )

    def test_simple_command(self) -> None:
        assert wrap_sudo("ls") == "sudo -H bash -c ls"


class TestRunProcess:
    """Test run_process error mapping."""

    @patch("pangolin.executor.local.subprocess.run")
    def test_success_returns_output(self, mock_run: Mock) -> None:
        mock_run.return_value = _completed(stdout=b"out", stderr=b"err")
        assert run_process(["true"], "h1") == (b"out", b"err")
        kwargs = mock_run.call_args.kwargs
        assert kwargs["stdin"] == subprocess.DEVNULL
        assert kwargs["capture_output"] is True

    @patch("pangolin.executor.local.subprocess.run")
    def test_non_zero_exit_raises(self, mock_run: Mock) -> None:
        mock_run.return_value = _completed(returncode=3, stdout=b"o", stderr=b"bad")
        with pytest.raises(ExecutorError, match="exit code 3") as exc_info:
            run_process(["false"], "h1")
        error = exc_info.value
        assert error.host == "h1"
        assert error.stderr == b"bad"
        assert error.details["returncode"] == 3

    @patch("pangolin.executor.local.subprocess.run")
    def test_timeout_raises(self, mock_run: Mock) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(["sleep"], 1.0)
        with pytest.raises(ExecutorError, match="timed out"):
            run_process(["sleep", "10"], "h1", timeout=1.0)

    @patch("pangolin.executor.local.subprocess.run")
    def test_spawn_failure_raises(self, mock_run: Mock) -> None:
        mock_run.side_effect = FileNotFoundError("ssh")
        with pytest.raises(ExecutorError, match="Failed to run"):
            run_process(["ssh"], "h1")


class TestLocalExecutor:
    """Test LocalExecutor."""

    @patch("pangolin.executor.local.subprocess.run")
    def test_runs_through_shell(self, mock_run: Mock) -> None:
        mock_run.return_value = _completed()
        LocalExecutor("h1").execute(None, "echo hi")
        assert mock_run.call_args.args[0] == ["/bin/sh", "-c", "echo hi"]

    @patch("pangolin.executor.local.subprocess.run")
    def test_sudo(self, mock_run: Mock) -> None:
        mock_run.return_value = _completed()
        LocalExecutor("h1").execute(None, "id", sudo=True)
        assert mock_run.call_args.args[0][-1] == "sudo -H bash -c id"

    @patch("pangolin.executor.local.subprocess.run")
    def test_cancelled_context_runs_nothing(self, mock_run: Mock) -> None:
        ctx = ExecutionContext.create()
        ctx.cancel()
        with pytest.raises(OperationCancelledError):
            LocalExecutor("h1").execute(ctx, "id")
        mock_run.assert_not_called()


class TestSSHExecutor:
    """Test SSHExecutor argv construction."""

    def test_build_argv(self) -> None:
        executor = SSHExecutor("10.0.0.1", port=2222, user="tidb",
                               identity_file=Path("/keys/id"), connect_timeout=5)
        assert executor.build_argv("uptime") == [
            "ssh", "-p", "2222",
            "-o", "BatchMode=yes",
            "-o", "ConnectTimeout=5",
            "-o", "StrictHostKeyChecking=no",
            "-i", "/keys/id",
            "tidb@10.0.0.1", "uptime",
        ]

    def test_strict_host_keys_and_no_user(self) -> None:
        argv = SSHExecutor("h1", strict_host_key_checking=True).build_argv("uptime")
        assert "StrictHostKeyChecking=no" not in argv
        assert argv[-2:] == ["h1", "uptime"]

    @patch("pangolin.executor.local.subprocess.run")
    def test_execute_uses_command_timeout(self, mock_run: Mock) -> None:
        mock_run.return_value = _completed(stdout=b"up")
        executor = SSHExecutor("h1", command_timeout=30)
        assert executor.execute(None, "uptime", sudo=True) == (b"up", b"")
        assert mock_run.call_args.kwargs["timeout"] == 30
        assert mock_run.call_args.args[0][-1] == "sudo -H bash -c uptime"


class TestBuildExecutors:
    """One executor per unique host."""

    def setup_method(self) -> None:
        self.topology = parse_topology(
            {
                "global": {"user": "tidb"},
                "components": [
                    {"name": "pd", "instances": [
                        {"host": "h1", "port": 2379, "ssh_port": 2222},
                        {"host": "h2", "port": 2379},
                    ]},
                    {"name": "tidb", "instances": [{"host": "h1", "port": 4000}]},
                ],
            }
        )

    def test_ssh_executors(self) -> None:
        executors = build_executors(self.topology, PangolinConfig())
        assert sorted(executors) == ["h1", "h2"]
        assert isinstance(executors["h1"], SSHExecutor)
        assert executors["h1"].port == 2222
        assert executors["h1"].user == "tidb"

    def test_ssh_user_override(self) -> None:
        config = PangolinConfig(ssh=SSHConfig(user="ops"))
        assert build_executors(self.topology, config)["h2"].user == "ops"

    def test_local_execution(self) -> None:
        config = PangolinConfig(infrastructure=InfrastructureConfig(local_execution=True))
        executors = build_executors(self.topology, config)
        assert all(isinstance(e, LocalExecutor) for e in executors.values())
