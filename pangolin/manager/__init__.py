"""Cluster manager and local metadata store."""

from .manager import Manager, prompt_confirm
from .store import ClusterStore

__all__ = ["ClusterStore", "Manager", "prompt_confirm"]
