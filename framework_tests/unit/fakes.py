"""Executor doubles shared by the unit tests."""

import threading
from typing import Callable, Dict, List, Optional, Tuple

from pangolin.core.context import ExecutionContext
from pangolin.core.errors import ExecutorError

Responder = Callable[[str, str], Tuple[bytes, bytes]]


class FakeExecutor:
    """Executor double recording every command in a shared, locked journal."""

    def __init__(
        self,
        host: str,
        journal: Optional[List[Tuple[str, str, bool]]] = None,
        lock: Optional[threading.Lock] = None,
        responder: Optional[Responder] = None,
    ) -> None:
        self.host = host
        self.journal = journal if journal is not None else []
        self._lock = lock or threading.Lock()
        self._responder = responder

    def execute(self, ctx: ExecutionContext, command: str, sudo: bool = False) -> Tuple[bytes, bytes]:
        with self._lock:
            self.journal.append((self.host, command, sudo))
        if self._responder is None:
            return b"", b""
        return self._responder(self.host, command)

    @property
    def commands(self) -> List[str]:
        return [command for host, command, _ in self.journal if host == self.host]


class FakeCluster:
    """Host -> FakeExecutor map sharing one journal."""

    def __init__(self, hosts, responder: Optional[Responder] = None) -> None:
        self.journal: List[Tuple[str, str, bool]] = []
        self.lock = threading.Lock()
        self.executors: Dict[str, FakeExecutor] = {
            host: FakeExecutor(host, self.journal, self.lock, responder) for host in hosts
        }

    @property
    def commands(self) -> List[str]:
        return [command for _, command, _ in self.journal]

    def factory(self, topology, config):
        return self.executors


def listening_responder(open_ports) -> Responder:
    """Answer `ss -ltn` as if exactly `open_ports` are listening."""

    def respond(host: str, command: str) -> Tuple[bytes, bytes]:
        if command.startswith("ss -ltn"):
            lines = [f"LISTEN 0 128 0.0.0.0:{p} 0.0.0.0:*" for p in sorted(open_ports)]
            return ("\n".join(lines) + "\n").encode(), b""
        return b"", b""

    return respond


def failing_responder(fail_on: str) -> Responder:
    """Raise ExecutorError for any command containing `fail_on`."""

    def respond(host: str, command: str) -> Tuple[bytes, bytes]:
        if fail_on in command:
            raise ExecutorError(f"command failed on {host}", host=host)
        return b"", b""

    return respond

