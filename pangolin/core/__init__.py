"""Core framework components."""

from .context import ExecutionContext
from .retry import RetryOption, retry
from .value_objects import ClusterName

__all__ = ["ClusterName", "ExecutionContext", "RetryOption", "retry"]
