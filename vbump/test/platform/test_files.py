from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from vbump.platform.files import atomic_write_text, read_text_exact


def test_read_text_exact_keeps_crlf(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_bytes(b"[package]\r\nversion = \"1.0.0\"\r\n")

    assert read_text_exact(path) == '[package]\r\nversion = "1.0.0"\r\n'


def test_atomic_write_text_replaces_existing_content(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_text("old", encoding="utf-8")

    atomic_write_text(path, "new", encoding="utf-8")

    assert path.read_text(encoding="utf-8") == "new"


def test_atomic_write_text_writes_newlines_verbatim(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"

    atomic_write_text(path, "a\r\nb\n")

    assert path.read_bytes() == b"a\r\nb\n"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
def test_atomic_write_text_keeps_file_mode(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_text("old", encoding="utf-8")
    os.chmod(path, 0o640)

    atomic_write_text(path, "new")

    assert stat.S_IMODE(path.stat().st_mode) == 0o640


def test_atomic_write_text_cleans_temp_file_on_replace_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_text("old", encoding="utf-8")

    def fail_replace(_src: Path, _dst: Path) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError, match="replace failed"):
        atomic_write_text(path, "payload", encoding="utf-8")

    assert list(tmp_path.glob(f".{path.name}.*.tmp")) == []
    assert path.read_text(encoding="utf-8") == "old"
