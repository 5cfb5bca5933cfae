"""Git operations used by the release pipeline.

Usage:
    from vbump.git import Repository

    repo = Repository(Path("/path/to/repo"))
    tags = repo.tag_names("v*")
"""

from vbump.git.repository import (
    GitError,
    GitStatus,
    Repository,
    Signature,
    StatusEntry,
)

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "Signature",
    "StatusEntry",
]
