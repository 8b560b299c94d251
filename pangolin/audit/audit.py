"""Audit logs: one file per mutating command, with retention cleanup."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from ..core.errors import PathError
from ..core.log import get_logger
from ..utils.filesystem import atomic_write, list_files, read_text, safe_remove

logger = get_logger(__name__)

_TIME_FORMAT = "%Y%m%d%H%M%S%f"


@dataclass(frozen=True)
class AuditRecord:
    id: str
    time: datetime
    command: str


def new_audit_id(when: Optional[datetime] = None) -> str:
    """Audit IDs sort by creation time and encode it."""
    when = when or datetime.now()
    return f"{when.strftime(_TIME_FORMAT)}-{uuid.uuid4().hex[:6]}"


def audit_time(audit_id: str) -> datetime:
    try:
        return datetime.strptime(audit_id.split("-", 1)[0], _TIME_FORMAT)
    except ValueError as e:
        raise PathError(f"Invalid audit ID: {audit_id}") from e


class AuditStore:
    """Audit files live in one directory; the first line is the command."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, audit_id: str) -> Path:
        if Path(audit_id).name != audit_id:
            raise PathError(f"Invalid audit ID: {audit_id}")
        audit_time(audit_id)
        return self.directory / audit_id

    def write(self, command: str, body: str = "", when: Optional[datetime] = None) -> str:
        audit_id = new_audit_id(when)
        atomic_write(self.path_for(audit_id), f"{command}\n{body}")
        logger.debug("Wrote audit log %s", audit_id)
        return audit_id

    def list(self) -> List[AuditRecord]:
        """All audit records, oldest first."""
        records = []
        for path in list_files(self.directory):
            try:
                when = audit_time(path.name)
            except PathError:
                logger.debug("Ignoring non-audit file %s", path)
                continue
            first_line = read_text(path).split("\n", 1)[0]
            records.append(AuditRecord(id=path.name, time=when, command=first_line))
        return sorted(records, key=lambda r: r.time)

    def show(self, audit_id: str) -> str:
        return read_text(self.path_for(audit_id))

    def cleanup(self, retain_days: int, now: Optional[datetime] = None) -> List[str]:
        """Remove audit logs older than `retain_days`; return removed IDs."""
        if retain_days < 0:
            raise ValueError("retain_days must not be negative")
        cutoff = (now or datetime.now()) - timedelta(days=retain_days)
        removed = []
        for record in self.list():
            if record.time < cutoff and safe_remove(self.path_for(record.id)):
                removed.append(record.id)
        logger.info("Removed %d audit log(s) older than %d day(s)", len(removed), retain_days)
        return removed
