"""
Pytest configuration and fixtures for framework unit tests.
Provides small topologies and keeps unit tests away from real processes.
"""

from typing import Any, Dict, Generator
from unittest.mock import patch

import pytest

from pangolin.core.context import ExecutionContext
from pangolin.topology.loader import parse_topology
from pangolin.topology.spec import Topology

TWO_COMPONENT_TOPOLOGY: Dict[str, Any] = {
    "global": {"user": "tidb", "deploy_dir": "/deploy"},
    "components": [
        {"name": "alpha", "instances": [{"host": "10.0.0.1", "port": 2379}]},
        {"name": "beta", "instances": [{"host": "10.0.0.2", "port": 4000}]},
    ],
}


@pytest.fixture
def two_component_topology() -> Topology:
    return parse_topology(TWO_COMPONENT_TOPOLOGY)


@pytest.fixture
def ctx() -> ExecutionContext:
    return ExecutionContext.create(concurrency=4)


@pytest.fixture(autouse=True)
def patch_dangerous_operations() -> Generator[Dict[str, Any], None, None]:
    """Patch process spawning and signalling during unit tests."""
    with (
        patch("subprocess.Popen") as mock_popen,
        patch("os.kill") as mock_kill,
        patch("os.killpg") as mock_killpg,
    ):
        mock_popen.return_value.returncode = 0
        yield {"popen": mock_popen, "kill": mock_kill, "killpg": mock_killpg}
