"""
Pangolin: cluster lifecycle orchestration

Starts, stops, restarts, enables, disables and cleans clusters of role-typed
service instances spread over many hosts. A declarative topology is turned
into an ordered, partially parallel pipeline of remote commands, with port
polling to confirm each state change.
"""

__version__ = "1.0.0"

# Core exports
from .core.enums import ErrorKind, LifecycleAction, OSType, PortState
from .core.types import (
    InfrastructureConfig,
    PangolinConfig,
    SSHConfig,
    TimeoutConfig,
)

__all__ = [
    "__version__",
    "ErrorKind",
    "LifecycleAction",
    "OSType",
    "PortState",
    "InfrastructureConfig",
    "PangolinConfig",
    "SSHConfig",
    "TimeoutConfig",
]
