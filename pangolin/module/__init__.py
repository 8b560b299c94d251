"""Reusable remote modules: port confirmation and service control."""

from .service import ServiceManager, service_manager_for
from .wait_for import WaitFor, WaitForConfig

__all__ = ["ServiceManager", "WaitFor", "WaitForConfig", "service_manager_for"]
