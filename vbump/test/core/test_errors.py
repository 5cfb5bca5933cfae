"""Tests for exit codes and their mapping from release errors."""

import pytest

from vbump.core.errors import ErrorCode
from vbump.release.errors import ReleaseError


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.STATE_ERROR == 2
        assert ErrorCode.GIT_ERROR == 3
        assert ErrorCode.IO_ERROR == 4


class TestReleaseErrorExitCode:
    @pytest.mark.parametrize(
        ("kind", "code"),
        [
            ("path", ErrorCode.USER_ERROR),
            ("selection", ErrorCode.USER_ERROR),
            ("consistency", ErrorCode.USER_ERROR),
            ("dirty_worktree", ErrorCode.STATE_ERROR),
            ("duplicate_tag", ErrorCode.STATE_ERROR),
            ("git_operation", ErrorCode.GIT_ERROR),
            ("manifest_write", ErrorCode.IO_ERROR),
        ],
    )
    def test_mapping(self, kind: str, code: ErrorCode) -> None:
        error = ReleaseError(kind=kind, message="x")  # type: ignore[arg-type]
        assert error.exit_code == code

    def test_with_hint_appends(self) -> None:
        error = ReleaseError(kind="git_operation", message="push failed", hint="check network")
        merged = error.with_hint("not rolled back -> tag v1 remains")
        assert merged.hint == "check network\nnot rolled back -> tag v1 remains"
        assert merged.message == "push failed"

    def test_with_empty_hint_is_identity(self) -> None:
        error = ReleaseError(kind="path", message="missing")
        assert error.with_hint(None) is error
