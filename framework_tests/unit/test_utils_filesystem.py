"""Tests for filesystem helpers."""

from pathlib import Path
from unittest.mock import patch

import pytest

from pangolin.core.errors import AtomicWriteError, PathError
from pangolin.utils.filesystem import (
    append_line,
    atomic_write,
    list_files,
    read_text,
    safe_remove,
)


class TestAtomicWrite:
    """Test atomic writes."""

    def test_writes_text_and_creates_parents(self, temp_dir: Path) -> None:
        path = temp_dir / "a" / "b" / "meta.yaml"
        atomic_write(path, "content")
        assert path.read_text() == "content"

    def test_writes_bytes(self, temp_dir: Path) -> None:
        path = temp_dir / "blob"
        atomic_write(path, b"\x00\x01")
        assert path.read_bytes() == b"\x00\x01"

    def test_replaces_existing(self, temp_dir: Path) -> None:
        path = temp_dir / "file"
        atomic_write(path, "old")
        atomic_write(path, "new")
        assert path.read_text() == "new"
        assert [p.name for p in temp_dir.iterdir()] == ["file"]

    def test_failure_leaves_no_temp_file(self, temp_dir: Path) -> None:
        path = temp_dir / "file"
        with patch("pangolin.utils.filesystem.os.fsync", side_effect=OSError("disk full")):
            with pytest.raises(AtomicWriteError):
                atomic_write(path, "data")
        assert list(temp_dir.iterdir()) == []

    def test_bytes_with_explicit_binary_mode(self, temp_dir: Path) -> None:
        path = temp_dir / "blob"
        atomic_write(path, b"abc", mode="wb")
        assert path.read_bytes() == b"abc"

    def test_unexpected_error_leaves_no_temp_file(self, temp_dir: Path) -> None:
        path = temp_dir / "file"
        with patch("pangolin.utils.filesystem.os.fsync", side_effect=ValueError("closed")):
            with pytest.raises(ValueError):
                atomic_write(path, "data")
        assert list(temp_dir.iterdir()) == []


class TestHelpers:
    """Test the remaining helpers."""

    def test_append_line(self, temp_dir: Path) -> None:
        path = temp_dir / "log" / "rows"
        append_line(path, "one")
        append_line(path, "two\n")
        assert path.read_text() == "one\ntwo\n"

    def test_read_text_missing(self, temp_dir: Path) -> None:
        with pytest.raises(PathError):
            read_text(temp_dir / "missing")

    def test_safe_remove(self, temp_dir: Path) -> None:
        path = temp_dir / "file"
        path.write_text("x")
        assert safe_remove(path) is True
        assert safe_remove(path) is False

    def test_list_files(self, temp_dir: Path) -> None:
        (temp_dir / "b").write_text("")
        (temp_dir / "a").write_text("")
        (temp_dir / "sub").mkdir()
        assert [p.name for p in list_files(temp_dir)] == ["a", "b"]
        assert list_files(temp_dir / "missing") == []
