"""Local cluster metadata store."""

from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..core.config import load_yaml_file
from ..core.errors import ClusterLockedError, ConfigurationError
from ..core.log import get_logger
from ..core.types import PangolinConfig
from ..core.value_objects import ClusterName
from ..topology.loader import parse_topology
from ..topology.spec import Topology
from ..utils.filesystem import atomic_write

logger = get_logger(__name__)

META_FILE = "meta.yaml"
SCALE_OUT_LOCK = ".scale-out.lock"


class ClusterStore:
    """Keeps each cluster's topology under `<home>/clusters/<name>/`."""

    def __init__(self, config: PangolinConfig) -> None:
        self._root = config.clusters_dir()

    @property
    def root(self) -> Path:
        return self._root

    def cluster_dir(self, name: str) -> Path:
        try:
            cluster = ClusterName(name)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        return self._root / str(cluster)

    def meta_path(self, name: str) -> Path:
        return self.cluster_dir(name) / META_FILE

    def exists(self, name: str) -> bool:
        return self.meta_path(name).is_file()

    def list_clusters(self) -> List[str]:
        if not self._root.is_dir():
            return []
        return sorted(p.name for p in self._root.iterdir() if (p / META_FILE).is_file())

    def load_raw(self, name: str) -> Dict[str, Any]:
        path = self.meta_path(name)
        if not path.is_file():
            raise ConfigurationError(f"Cluster '{name}' not found", details={"path": str(path)})
        return load_yaml_file(path)

    def load_topology(self, name: str) -> Topology:
        """Load and resolve the stored topology of a cluster."""
        topology = parse_topology(self.load_raw(name))
        logger.debug("Loaded cluster %s from %s", name, self.meta_path(name))
        return topology

    def save(self, name: str, data: Dict[str, Any]) -> Path:
        """Store topology data after checking that it parses."""
        parse_topology(data)
        path = self.meta_path(name)
        atomic_write(path, yaml.safe_dump(data, sort_keys=False))
        return path

    def lock_path(self, name: str) -> Path:
        return self.cluster_dir(name) / SCALE_OUT_LOCK

    def check_scale_lock(self, name: str) -> None:
        """Refuse to proceed while a scale-out or scale-in holds the cluster."""
        path = self.lock_path(name)
        if path.exists():
            raise ClusterLockedError(
                f"Cluster '{name}' is being scaled; wait for it to finish or remove {path}",
                details={"lock": str(path)},
            )
