"""Filesystem helpers for local metadata, audit and history files."""

import os
import tempfile
from pathlib import Path
from typing import List, Union
from ..core.errors import FilesystemError, PathError, AtomicWriteError
from ..core.log import get_logger

logger = get_logger(__name__)


def atomic_write(path: Path, data: Union[str, bytes], mode: str = "w") -> None:
    """Atomically write data to a file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        write_mode = mode if "b" in mode else mode + "b"
    else:
        write_mode = mode.replace("b", "")
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode=write_mode,
            dir=path.parent,
            delete=False,
            prefix=f".{path.name}.tmp",
        ) as tmp_file:
            tmp_path = Path(tmp_file.name)
            tmp_file.write(data)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        tmp_path.replace(path)
        logger.debug("Atomically wrote %s", path)
    except BaseException as e:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                logger.warning("Could not remove temporary file %s", tmp_path)
        if isinstance(e, OSError):
            raise AtomicWriteError(f"Failed to atomically write to {path}: {e}") from e
        raise


def append_line(path: Path, line: str, encoding: str = "utf-8") -> None:
    """Append one newline-terminated line, creating parent directories."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding=encoding) as handle:
            handle.write(line.rstrip("\n") + "\n")
    except PermissionError as e:
        raise FilesystemError(f"Permission denied writing {path}") from e
    except OSError as e:
        raise FilesystemError(f"Error appending to {path}: {e}") from e


def read_text(path: Path, encoding: str = "utf-8") -> str:
    """Read text file with proper error handling."""
    try:
        return Path(path).read_text(encoding=encoding)
    except FileNotFoundError as e:
        raise PathError(f"File not found: {path}") from e
    except PermissionError as e:
        raise FilesystemError(f"Permission denied reading {path}") from e
    except UnicodeDecodeError as e:
        raise FilesystemError(f"Encoding error reading {path}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Error reading {path}: {e}") from e


def safe_remove(path: Path) -> bool:
    """Remove a file, returning whether it was removed."""
    try:
        path = Path(path)
        if path.is_file():
            path.unlink()
            return True
        return False
    except OSError as e:
        logger.warning("Failed to remove %s: %s", path, e)
        return False


def list_files(directory: Path, pattern: str = "*") -> List[Path]:
    """List files in a directory; a missing directory yields nothing."""
    directory = Path(directory)
    if not directory.exists():
        return []
    try:
        return sorted(p for p in directory.glob(pattern) if p.is_file())
    except OSError as e:
        raise FilesystemError(f"Error listing files in {directory}: {e}") from e
