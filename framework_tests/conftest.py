"""Test configuration and fixtures for framework tests."""

import pytest
import tempfile
import shutil
from pathlib import Path
from unittest.mock import Mock, patch

from pangolin.core.types import PangolinConfig


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="pangolin_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def mock_config(temp_dir):
    """Provide a configuration rooted in a temporary home directory."""
    return PangolinConfig(home_dir=temp_dir / "home", log_level="WARNING")


@pytest.fixture
def isolated_environment(temp_dir):
    """Provide an environment without PANGOLIN_* variables."""
    with patch.dict("os.environ", {}, clear=True):
        yield temp_dir


@pytest.fixture
def mock_logger():
    """Mock logger for testing."""
    with patch("pangolin.core.log.get_logger") as mock_get_logger:
        logger = Mock()
        mock_get_logger.return_value = logger
        yield logger


@pytest.fixture
def reset_global_state():
    """Reset the global configuration. Not autouse - only used when needed."""
    from pangolin.core import config

    config._config_manager._config = None
    yield
    config._config_manager._config = None
