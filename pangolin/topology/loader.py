"""Topology loading and semantic validation."""

from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError

from ..core.config import load_yaml_file
from ..core.errors import ConfigurationError, TopologyValidationError
from ..core.log import get_logger
from .spec import Topology, TopologySpec

logger = get_logger(__name__)


def parse_topology(data: Dict[str, Any]) -> Topology:
    """Build a resolved Topology from a topology mapping.

    Raises:
        ConfigurationError: If the mapping does not match the schema
    """
    try:
        spec = TopologySpec.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid topology: {e}") from e
    return Topology.from_spec(spec)


def load_topology(path: Path) -> Topology:
    """Load and resolve a topology YAML file."""
    logger.debug("Loading topology from %s", path)
    return parse_topology(load_yaml_file(Path(path)))


def check_topology(topology: Topology, strict: bool = True) -> List[str]:
    """Run semantic validation.

    Args:
        topology: Topology to check
        strict: Raise on problems instead of returning them

    Returns:
        The list of problems found (always empty when strict)

    Raises:
        TopologyValidationError: In strict mode, if any problem was found
    """
    problems = topology.validate()
    if problems and strict:
        raise TopologyValidationError(
            f"Topology validation failed: {'; '.join(problems)}", problems=problems
        )
    for problem in problems:
        logger.warning("Topology problem: %s", problem)
    return problems
