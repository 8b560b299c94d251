"""Service manager commands per operating system."""

from typing import Dict, Protocol

from ..core.enums import LifecycleAction, OSType
from ..core.errors import ConfigurationError
from ..topology.spec import Instance

LAUNCHD_LABEL_PREFIX = "pangolin"


class ServiceManager(Protocol):
    """Builds the shell command driving an instance's service unit."""

    use_sudo: bool

    def command(self, action: LifecycleAction, instance: Instance) -> str:
        """Command performing `action` on the instance's service."""


class SystemdServiceManager:
    """systemd units named `<component>-<port>.service`."""

    use_sudo = True

    def command(self, action: LifecycleAction, instance: Instance) -> str:
        unit = f"{instance.service_name}.service"
        if action == LifecycleAction.START:
            return f"systemctl daemon-reload && systemctl start {unit}"
        return f"systemctl {action.value} {unit}"


class LaunchdServiceManager:
    """launchd user agents labelled `pangolin.<component>-<port>`."""

    use_sudo = False

    def command(self, action: LifecycleAction, instance: Instance) -> str:
        label = f"{LAUNCHD_LABEL_PREFIX}.{instance.service_name}"
        plist = f"~/Library/LaunchAgents/{label}.plist"
        if action == LifecycleAction.START:
            return f"launchctl load -w {plist}"
        if action == LifecycleAction.STOP:
            return f"launchctl unload -w {plist}"
        return f'launchctl {action.value} "gui/$(id -u)/{label}"'


SERVICE_MANAGERS: Dict[OSType, ServiceManager] = {
    OSType.LINUX: SystemdServiceManager(),
    OSType.DARWIN: LaunchdServiceManager(),
}


def service_manager_for(os_type: OSType) -> ServiceManager:
    """Look up the service manager for an OS."""
    try:
        return SERVICE_MANAGERS[os_type]
    except KeyError as e:
        raise ConfigurationError(
            f"No service manager for OS '{os_type.value}'"
        ) from e
