"""Tests for vbump.platform.process."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from vbump.core.result import Err, Ok
from vbump.platform.process import ProcessError, run

PY = sys.executable


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("git", "-C", "/repo", "push", "origin"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "git -C /repo ... failed (exit 1)"

    def test_detail_prefers_stderr(self) -> None:
        error = ProcessError(("git",), 1, "out\n", "  err\n")
        assert error.detail == "err"

    def test_detail_falls_back_to_summary(self) -> None:
        error = ProcessError(("git", "push"), 128, "", "")
        assert error.detail == "git push failed (exit 128)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [PY, "-c", "import sys; sys.stderr.write('error msg'); sys.exit(42)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert "error msg" in result.error.stderr

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert len(result.error.stderr) > 0

    def test_uses_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text("", encoding="utf-8")

        result = run([PY, "-c", "import os; print(os.listdir('.'))"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "Cargo.toml" in result.value

    def test_env_is_layered_over_current_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VBUMP_OUTER", "outer")

        result = run(
            [PY, "-c", "import os; print(os.environ['VBUMP_OUTER'], os.environ['VBUMP_INNER'])"],
            cwd=tmp_path,
            env={"VBUMP_INNER": "inner"},
        )

        assert isinstance(result, Ok)
        assert result.value.strip() == "outer inner"

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import time; time.sleep(10)"], cwd=tmp_path, timeout=0.1)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr.lower()
