"""Release pipeline: manifest discovery, version bump, commit, tag, push."""

from vbump.release.errors import ReleaseError
from vbump.release.model import (
    FixedVersion,
    IncrementPart,
    IncrementVersion,
    ManifestSelector,
    OnlyShow,
    ReleaseRequest,
    ReleaseStage,
)
from vbump.release.semver import Version, format_version, increment, parse
from vbump.release.service import ReleaseJournal, ReleaseOutcome, run_release

__all__ = [
    "FixedVersion",
    "IncrementPart",
    "IncrementVersion",
    "ManifestSelector",
    "OnlyShow",
    "ReleaseError",
    "ReleaseJournal",
    "ReleaseOutcome",
    "ReleaseRequest",
    "ReleaseStage",
    "Version",
    "format_version",
    "increment",
    "parse",
    "run_release",
]
