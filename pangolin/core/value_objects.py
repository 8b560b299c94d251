"""Domain primitives for cluster identification."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ClusterName:
    """Validated cluster name. Used as a directory name in the metadata store."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("ClusterName cannot be empty")

        # Allow alphanumeric characters, underscores, hyphens and dots
        normalized = self.value.replace("_", "").replace("-", "").replace(".", "")
        if not normalized.isalnum() or self.value.startswith("."):
            raise ValueError(
                f"ClusterName must be alphanumeric with _ - or .: {self.value}"
            )

    def __str__(self) -> str:
        return self.value
