"""Operator primitives and cleanup path calculation."""

from .action import (
    ComponentPhaseStep,
    InstanceOperation,
    enable,
    enable_steps,
    restart,
    restart_steps,
    start,
    start_steps,
    stop,
    stop_steps,
)
from .cleanup import (
    DeleteHostFiles,
    cleanup_step,
    get_cleanup_files,
    sorted_cleanup_files,
)
from .options import CleanupOptions, Options

__all__ = [
    "CleanupOptions",
    "ComponentPhaseStep",
    "DeleteHostFiles",
    "InstanceOperation",
    "Options",
    "cleanup_step",
    "enable",
    "enable_steps",
    "get_cleanup_files",
    "restart",
    "restart_steps",
    "sorted_cleanup_files",
    "start",
    "start_steps",
    "stop",
    "stop_steps",
]
