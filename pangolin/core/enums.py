"""Core enumerations for the Pangolin framework.

Separated from types.py to break circular dependencies. This module contains
only enum definitions with no dependencies on other core modules.
"""

from enum import Enum


class OSType(Enum):
    """Operating system of a target host."""

    LINUX = "linux"
    DARWIN = "darwin"


class PortState(Enum):
    """Desired state of a managed port."""

    STARTED = "started"
    STOPPED = "stopped"


class LifecycleAction(Enum):
    """Lifecycle action applied to a service instance."""

    START = "start"
    STOP = "stop"
    ENABLE = "enable"
    DISABLE = "disable"


class ErrorKind(Enum):
    """Tag carried by every framework error."""

    GENERIC = "generic"
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    EXECUTION = "execution"
    TIMEOUT = "timeout"
    USER_ABORT = "user_abort"
    LOCKED = "locked"
    TASK = "task"
    CANCELLED = "cancelled"
    FILESYSTEM = "filesystem"
