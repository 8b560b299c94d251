"""Option values threaded into operator primitives."""

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class Options(BaseModel):
    """Per-run operation options. Frozen; passed by value."""

    model_config = ConfigDict(frozen=True)

    concurrency: int = Field(5, ge=1)
    nodes: Tuple[str, ...] = ()  # instance IDs or hosts
    roles: Tuple[str, ...] = ()  # component names
    skip_confirm: bool = False
    wait_timeout: float = Field(60.0, gt=0)
    poll_interval: float = Field(1.0, gt=0)
    wait_stopped: bool = False


class CleanupOptions(BaseModel):
    """What to delete and what to keep when cleaning a cluster."""

    model_config = ConfigDict(frozen=True)

    clean_data: bool = False
    clean_log: bool = False
    clean_tls: bool = False
    retain_roles: Tuple[str, ...] = ()
    retain_nodes: Tuple[str, ...] = ()  # instance IDs or hosts

    def anything_to_clean(self) -> bool:
        return self.clean_data or self.clean_log or self.clean_tls
