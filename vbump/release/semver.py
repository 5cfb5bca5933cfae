from __future__ import annotations

import re
from dataclasses import dataclass

from vbump.core.result import Err, Ok, Result
from vbump.release.errors import ReleaseError
from vbump.release.model import IncrementPart


# Unanchored: the first x.y.z anywhere in the input wins.
_VERSION_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)")


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0 or self.patch < 0:
            raise ValueError(
                f"version parts must be non-negative: {self.major}.{self.minor}.{self.patch}"
            )

    def __str__(self) -> str:
        return format_version(self)

    def increment(self, part: IncrementPart) -> Version:
        return increment(self, part)


def parse(text: str) -> Result[Version, ReleaseError]:
    m = _VERSION_RE.search(text)
    if m is None:
        return Err(
            ReleaseError(
                kind="version_parse",
                message=f"invalid version string: {text!r}",
                hint="Expected MAJOR.MINOR.PATCH, e.g. 1.4.0",
            )
        )
    return Ok(Version(int(m.group(1)), int(m.group(2)), int(m.group(3))))


def increment(version: Version, part: IncrementPart) -> Version:
    match part:
        case IncrementPart.MAJOR:
            return Version(version.major + 1, 0, 0)
        case IncrementPart.MINOR:
            return Version(version.major, version.minor + 1, 0)
        case IncrementPart.PATCH:
            return Version(version.major, version.minor, version.patch + 1)
        case _:
            raise AssertionError(f"unexpected increment part: {part}")


def format_version(version: Version) -> str:
    return f"{version.major}.{version.minor}.{version.patch}"


def release_tag(prefix: str, version: Version) -> str:
    return f"{prefix}{format_version(version)}"
