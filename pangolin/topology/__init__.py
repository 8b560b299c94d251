"""Cluster topology model, ordering and loading."""

from .spec import (
    Component,
    GlobalOptions,
    Instance,
    MonitoredOptions,
    Topology,
    TopologySpec,
    filter_components,
    filter_instances,
)
from .loader import check_topology, load_topology, parse_topology

__all__ = [
    "Component",
    "GlobalOptions",
    "Instance",
    "MonitoredOptions",
    "Topology",
    "TopologySpec",
    "filter_components",
    "filter_instances",
    "check_topology",
    "load_topology",
    "parse_topology",
]
