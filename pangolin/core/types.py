"""Core type definitions for the Pangolin framework."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class SSHConfig(BaseModel):
    """Connection settings used by the SSH executor."""

    user: Optional[str] = None
    port: int = 22
    identity_file: Optional[Path] = None
    timeout: float = 10.0  # connect timeout
    strict_host_key_checking: bool = False


class TimeoutConfig(BaseModel):
    """Centralized timeout configuration to eliminate magical constants."""

    # Port confirmation
    wait_timeout: float = 60.0
    poll_interval: float = 1.0

    # Upper bound for a single remote command, None means unbounded
    command_timeout: Optional[float] = None


class InfrastructureConfig(BaseModel):
    """Infrastructure and system-level configuration constants."""

    default_concurrency: int = 5
    local_execution: bool = False


class PangolinConfig(BaseModel):
    """Main framework configuration."""

    home_dir: Path = Field(default_factory=lambda: Path.home() / ".pangolin")
    ssh: SSHConfig = Field(default_factory=SSHConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    infrastructure: InfrastructureConfig = Field(default_factory=InfrastructureConfig)
    audit_retain_days: int = 60
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @model_validator(mode="after")
    def validate_config(self) -> "PangolinConfig":
        """Validate configuration - NO SIDE EFFECTS."""
        from .errors import ConfigurationError

        if self.infrastructure.default_concurrency < 1:  # pylint: disable=no-member
            raise ConfigurationError("Concurrency must be at least 1")
        if self.timeouts.wait_timeout <= 0:  # pylint: disable=no-member
            raise ConfigurationError("Wait timeout must be positive")
        if self.timeouts.poll_interval <= 0:  # pylint: disable=no-member
            raise ConfigurationError("Poll interval must be positive")
        if self.audit_retain_days < 0:
            raise ConfigurationError("Audit retention must not be negative")

        return self

    def clusters_dir(self) -> Path:
        """Directory holding per-cluster metadata."""
        return self.home_dir / "clusters"

    def audit_dir(self) -> Path:
        """Directory holding audit logs."""
        return self.home_dir / "audit"

    def history_dir(self) -> Path:
        """Directory holding command history."""
        return self.home_dir / "history"
