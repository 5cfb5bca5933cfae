from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from vbump.core.errors import ErrorCode

type ReleaseErrorKind = Literal[
    "path",
    "discovery",
    "selection",
    "version_parse",
    "consistency",
    "dirty_worktree",
    "duplicate_tag",
    "git_operation",
    "unimplemented",
    "manifest_read",
    "manifest_parse",
    "manifest_write",
    "config",
]


_EXIT_CODES: dict[str, ErrorCode] = {
    "path": ErrorCode.USER_ERROR,
    "discovery": ErrorCode.USER_ERROR,
    "selection": ErrorCode.USER_ERROR,
    "version_parse": ErrorCode.USER_ERROR,
    "consistency": ErrorCode.USER_ERROR,
    "unimplemented": ErrorCode.USER_ERROR,
    "config": ErrorCode.USER_ERROR,
    "dirty_worktree": ErrorCode.STATE_ERROR,
    "duplicate_tag": ErrorCode.STATE_ERROR,
    "git_operation": ErrorCode.GIT_ERROR,
    "manifest_read": ErrorCode.IO_ERROR,
    "manifest_parse": ErrorCode.IO_ERROR,
    "manifest_write": ErrorCode.IO_ERROR,
}


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    @property
    def exit_code(self) -> ErrorCode:
        return _EXIT_CODES.get(self.kind, ErrorCode.USER_ERROR)

    def with_hint(self, hint: str | None) -> ReleaseError:
        if not hint:
            return self
        merged = f"{self.hint}\n{hint}" if self.hint else hint
        return ReleaseError(kind=self.kind, message=self.message, hint=merged)
