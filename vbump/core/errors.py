"""Exit codes for the vbump CLI.

Every failure ends the process with one of these codes. The values are part of
the command line contract and must stay stable:
- 0: Success
- 1: User error (bad path, ambiguous selection, malformed version)
- 2: Repository state error (dirty tree, tag already exists)
- 3: Git error (commit, tag or push failed)
- 4: I/O error (manifest could not be read or written)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes."""

    OK = 0
    USER_ERROR = 1
    STATE_ERROR = 2
    GIT_ERROR = 3
    IO_ERROR = 4

