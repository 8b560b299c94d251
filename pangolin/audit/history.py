"""Per-day command history.

Each executed command appends one JSON row to `history-YYYY-MM-DD` in the
history directory.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..core.errors import DeserializationError
from ..core.log import get_logger
from ..utils.codec import from_json_string, to_json_string
from ..utils.filesystem import append_line, list_files, read_text

logger = get_logger(__name__)

HISTORY_PREFIX = "history-"


@dataclass(frozen=True)
class HistoryRow:
    command: str
    time: datetime
    code: int

    def to_dict(self) -> dict:
        return {"command": self.command, "time": self.time.isoformat(), "code": self.code}

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryRow":
        return cls(
            command=str(data["command"]),
            time=datetime.fromisoformat(data["time"]),
            code=int(data["code"]),
        )


class HistoryStore:
    """Appends and reads command history rows."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _file_for(self, when: datetime) -> Path:
        return self.directory / f"{HISTORY_PREFIX}{when.strftime('%Y-%m-%d')}"

    def record(self, command: str, code: int, when: Optional[datetime] = None) -> HistoryRow:
        row = HistoryRow(command=command, time=when or datetime.now(), code=code)
        append_line(self._file_for(row.time), to_json_string(row.to_dict(), compact=True))
        return row

    def _read_file(self, path: Path) -> List[HistoryRow]:
        rows = []
        for number, line in enumerate(read_text(path).splitlines(), start=1):
            if not line.strip():
                continue
            try:
                rows.append(HistoryRow.from_dict(from_json_string(line)))
            except (DeserializationError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping bad history row %s:%d: %s", path, number, e)
        return rows

    def get_history(self, count: Optional[int] = None) -> List[HistoryRow]:
        """Return the newest `count` rows (all when None), oldest first."""
        # Day files sort lexically by date; read newest first and stop early
        files = sorted(list_files(self.directory, f"{HISTORY_PREFIX}*"), reverse=True)
        collected: List[HistoryRow] = []
        for path in files:
            rows = sorted(self._read_file(path), key=lambda r: r.time)
            collected = rows + collected
            if count is not None and len(collected) >= count:
                break
        if count is not None:
            collected = collected[-count:] if count > 0 else []
        return collected
