"""Cluster topology model.

The YAML-facing schema (`TopologySpec` and friends) is validated by pydantic.
`Topology.from_spec()` resolves it into immutable `Component` and `Instance`
values with absolute directories; that resolved form is what every operation
reads.
"""

import posixpath
from collections import Counter
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import OSType

TLS_CERT_KEY_DIR = "tls"
MONITOR_AGENT_COMPONENTS = frozenset({"node_exporter", "blackbox_exporter"})


def abs_path(user: str, path: str) -> str:
    """Resolve a relative path against the deploy user's home directory."""
    if not path or path.startswith("/"):
        return path
    return posixpath.join("/home", user, path)


def split_dirs(value: str) -> List[str]:
    """Split a comma-separated directory list, dropping blanks."""
    return [item.strip() for item in value.split(",") if item.strip()]


class GlobalOptions(BaseModel):
    """Cluster-wide defaults."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user: str = "pangolin"
    ssh_port: int = 22
    deploy_dir: str = "deploy"
    data_dir: str = "data"
    log_dir: str = "log"
    os: OSType = OSType.LINUX
    arch: str = "amd64"
    tls_enabled: bool = False


class MonitoredOptions(BaseModel):
    """Deployment of the per-host monitoring agents."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    deploy_dir: str = "monitor"
    data_dir: str = "data"
    log_dir: str = "monitor/log"
    node_exporter_port: int = 9100
    blackbox_exporter_port: int = 9115


class InstanceSpec(BaseModel):
    """One instance as written in the topology file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str
    port: int
    ssh_port: Optional[int] = None
    os: Optional[OSType] = None
    arch: Optional[str] = None
    deploy_dir: Optional[str] = None
    data_dir: Optional[str] = None
    log_dir: Optional[str] = None
    ignore_exporter: bool = False


class ComponentSpec(BaseModel):
    """A component (role) and its instances, as written in the topology file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    instances: List[InstanceSpec] = Field(default_factory=list)


class TopologySpec(BaseModel):
    """Topology file schema. Component order is start order."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    global_options: GlobalOptions = Field(default_factory=GlobalOptions, alias="global")
    monitored: Optional[MonitoredOptions] = None
    components: List[ComponentSpec] = Field(default_factory=list)


@dataclass(frozen=True)
class Instance:
    """A deployed unit of a component on one host, with resolved directories."""

    component: str
    host: str
    port: int
    ssh_port: int = 22
    os: OSType = OSType.LINUX
    arch: str = "amd64"
    deploy_dir: str = ""
    data_dir: str = ""
    log_dir: str = ""
    ignore_exporter: bool = False

    @property
    def id(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def data_dirs(self) -> List[str]:
        return split_dirs(self.data_dir)

    @property
    def log_dirs(self) -> List[str]:
        return split_dirs(self.log_dir)

    @property
    def service_name(self) -> str:
        """Name of the service unit managing this instance."""
        return f"{self.component}-{self.port}"

    def __str__(self) -> str:
        return f"{self.component}@{self.id}"


@dataclass(frozen=True)
class Component:
    """A role in the cluster owning an ordered tuple of instances."""

    name: str
    instances: Tuple[Instance, ...] = ()


def _resolve_instance(
    component: str, spec: InstanceSpec, options: GlobalOptions
) -> Instance:
    user = options.user
    deploy_dir = abs_path(
        user, spec.deploy_dir or posixpath.join(options.deploy_dir, f"{component}-{spec.port}")
    )

    def under_deploy(value: str) -> str:
        # Relative data/log directories live inside the deploy directory
        return ",".join(
            d if d.startswith("/") else posixpath.join(deploy_dir, d)
            for d in split_dirs(value)
        )

    return Instance(
        component=component,
        host=spec.host,
        port=spec.port,
        ssh_port=spec.ssh_port or options.ssh_port,
        os=spec.os or options.os,
        arch=spec.arch or options.arch,
        deploy_dir=deploy_dir,
        data_dir=under_deploy(spec.data_dir if spec.data_dir is not None else options.data_dir),
        log_dir=under_deploy(spec.log_dir if spec.log_dir is not None else options.log_dir),
        ignore_exporter=spec.ignore_exporter,
    )


@dataclass(frozen=True)
class Topology:
    """Validated, read-only description of a cluster.

    Components are kept in start order; stop order is its exact mirror.
    """

    components: Tuple[Component, ...] = ()
    global_options: GlobalOptions = GlobalOptions()
    monitored: Optional[MonitoredOptions] = None

    @classmethod
    def from_spec(cls, spec: TopologySpec) -> "Topology":
        options = spec.global_options
        components = tuple(
            Component(
                name=c.name,
                instances=tuple(_resolve_instance(c.name, i, options) for i in c.instances),
            )
            for c in spec.components
        )
        return cls(components=components, global_options=options, monitored=spec.monitored)

    @property
    def user(self) -> str:
        return self.global_options.user

    @property
    def tls_enabled(self) -> bool:
        return self.global_options.tls_enabled

    def components_by_start_order(self) -> List[Component]:
        """Components in the order they must be started."""
        return list(self.components)

    def components_by_stop_order(self) -> List[Component]:
        """Components in the order they must be stopped: start order reversed."""
        return list(reversed(self.components_by_start_order()))

    def iter_instances(self) -> Iterator[Instance]:
        for component in self.components:
            yield from component.instances

    def hosts(self) -> List[str]:
        """Unique hosts in first-seen order."""
        return list(dict.fromkeys(inst.host for inst in self.iter_instances()))

    def validate(self) -> List[str]:
        """Return semantic problems; an empty list means the topology is sound."""
        problems: List[str] = []

        names = Counter(c.name for c in self.components)
        for name, count in names.items():
            if count > 1:
                problems.append(f"component '{name}' is declared {count} times")

        seen_ids: Counter = Counter()
        seen_data_dirs: dict = {}
        for inst in self.iter_instances():
            if not inst.host.strip():
                problems.append(f"instance of '{inst.component}' has an empty host")
                continue
            if not 0 < inst.port < 65536:
                problems.append(f"instance {inst} has invalid port {inst.port}")
                continue
            if not 0 < inst.ssh_port < 65536:
                problems.append(f"instance {inst} has invalid ssh port {inst.ssh_port}")
            seen_ids[inst.id] += 1
            for data_dir in inst.data_dirs:
                owner = seen_data_dirs.setdefault((inst.host, data_dir), inst.id)
                if owner != inst.id:
                    problems.append(
                        f"data directory {data_dir} on {inst.host} is shared by "
                        f"{owner} and {inst.id}"
                    )

        for instance_id, count in seen_ids.items():
            if count > 1:
                problems.append(f"instance {instance_id} is declared {count} times")

        return problems


def filter_components(
    components: Sequence[Component], roles: Sequence[str]
) -> List[Component]:
    """Keep components whose name is in `roles`; all of them when `roles` is empty."""
    if not roles:
        return list(components)
    wanted = set(roles)
    return [c for c in components if c.name in wanted]


def filter_instances(
    instances: Sequence[Instance], nodes: Sequence[str]
) -> List[Instance]:
    """Keep instances whose ID or host is in `nodes`; all of them when `nodes` is empty."""
    if not nodes:
        return list(instances)
    wanted = set(nodes)
    return [i for i in instances if i.id in wanted or i.host in wanted]
