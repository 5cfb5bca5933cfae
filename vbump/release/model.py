from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from vbump.git.repository import Signature


MANIFEST_NAME = "Cargo.toml"
VCS_MARKER = ".git"
CONFIG_FILE_NAME = ".vbump.toml"

DEFAULT_REMOTE = "origin"
DEFAULT_TAG_PREFIX = "v"


class ManifestSelector(StrEnum):
    """Which manifest(s) to rewrite when discovery finds more than one."""

    LEAF = "leaf"
    BASE = "base"
    ALL = "all"


class IncrementPart(StrEnum):
    """Semantic version component to increment."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


class ReleaseStage(StrEnum):
    LOCATED = "located"
    SELECTED = "selected"
    VERSION_COMPUTED = "version_computed"
    PREFLIGHT_CHECKED = "preflight_checked"
    WRITTEN = "written"
    COMMITTED = "committed"
    TAGGED = "tagged"
    PUSHED = "pushed"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class FixedVersion:
    full_version: str


@dataclass(frozen=True, slots=True)
class IncrementVersion:
    part: IncrementPart


@dataclass(frozen=True, slots=True)
class OnlyShow:
    pass


type ChangeRequest = FixedVersion | IncrementVersion | OnlyShow


@dataclass(frozen=True, slots=True)
class RepositoryContext:
    """Repository facts resolved once, before anything is modified."""

    root: Path
    remote: str
    signature: Signature
    head_ref: str  # e.g. refs/heads/main
    head_commit: str


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Everything a single release run needs from the caller.

    ``remote`` and ``tag_prefix`` left as None fall back to the repository
    config file, then to the built-in defaults.
    """

    change: ChangeRequest
    tag_message: str
    path: Path | None = None
    selector: ManifestSelector | None = None
    scan_subdirs: bool = False
    remote: str | None = None
    tag_prefix: str | None = None
    # Accepted for compatibility; the push stage always runs.
    do_push: bool = True
    verbose: int = 0
