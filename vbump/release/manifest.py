"""Reading and rewriting the package version of Cargo manifests.

``tomllib`` gives the structured view used to validate the manifest and read
``[package].version``. The rewrite itself is a splice of the version string
into the original text, so key order, comments, whitespace and line endings
survive untouched.
"""

from __future__ import annotations

import re
import tomllib
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from vbump.core.result import Err, Ok, Result
from vbump.core.structured import get_table
from vbump.platform.files import atomic_write_text, read_text_exact
from vbump.release.errors import ReleaseError
from vbump.release.semver import Version, format_version, parse


_TABLE_HEADER_RE = re.compile(r"^\s*\[\s*([A-Za-z0-9_.\-\s\"']+?)\s*\]\s*(?:#.*)?$")
_ARRAY_TABLE_RE = re.compile(r"^\s*\[\[")
_VERSION_KEY_RE = re.compile(r"""^(\s*version\s*=\s*)(["'])([^"'\r\n]*)\2""")
_DOTTED_VERSION_KEY_RE = re.compile(r"""^(\s*package\s*\.\s*version\s*=\s*)(["'])([^"'\r\n]*)\2""")
_MULTILINE_DELIMITERS = ('"""', "'''")


@dataclass(frozen=True, slots=True)
class ManifestDocument:
    """Full manifest text plus the location of the package version value.

    ``value_start``/``value_end`` delimit the characters between the quotes.
    """

    text: str
    value_start: int
    value_end: int

    @property
    def version_text(self) -> str:
        return self.text[self.value_start : self.value_end]

    def with_version(self, version: str) -> ManifestDocument:
        text = self.text[: self.value_start] + version + self.text[self.value_end :]
        return ManifestDocument(
            text=text,
            value_start=self.value_start,
            value_end=self.value_start + len(version),
        )


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    path: Path
    version: Version
    document: ManifestDocument


type ManifestCollection = dict[Path, ManifestEntry]


def _open_multiline_delimiter(line: str, start: int = 0) -> str | None:
    """Delimiter of a multi-line string left open at the end of line, if any."""
    pos = start
    while True:
        hits = [(line.find(d, pos), d) for d in _MULTILINE_DELIMITERS if d in line[pos:]]
        if not hits:
            return None
        i, delimiter = min(hits)
        close = line.find(delimiter, i + 3)
        if close < 0:
            return delimiter
        pos = close + 3


def locate_package_version(text: str) -> ManifestDocument | None:
    """Find the ``[package]`` version value in raw manifest text.

    Handles ``version = "..."`` inside a ``[package]`` table and the dotted
    ``package.version = "..."`` form at the top level. Lines inside
    multi-line strings are skipped.
    """
    table: str | None = ""
    offset = 0
    open_string: str | None = None
    for line in text.splitlines(keepends=True):
        if open_string is not None:
            close = line.find(open_string)
            if close >= 0:
                open_string = _open_multiline_delimiter(line, close + 3)
            offset += len(line)
            continue

        if _ARRAY_TABLE_RE.match(line):
            table = None
        else:
            header = _TABLE_HEADER_RE.match(line)
            if header is not None:
                table = re.sub(r"\s+", "", header.group(1)).replace('"', "").replace("'", "")

        pattern = None
        if table == "package":
            pattern = _VERSION_KEY_RE
        elif table == "":
            pattern = _DOTTED_VERSION_KEY_RE

        if pattern is not None:
            m = pattern.match(line)
            if m is not None:
                return ManifestDocument(
                    text=text,
                    value_start=offset + m.start(3),
                    value_end=offset + m.end(3),
                )
        open_string = _open_multiline_delimiter(line)
        offset += len(line)
    return None


def read_manifest(path: Path) -> Result[ManifestEntry, ReleaseError]:
    try:
        text = read_text_exact(path)
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(kind="manifest_read", message=f"could not read '{path}': {e}")
        )

    try:
        data: dict[str, object] = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        return Err(
            ReleaseError(kind="manifest_parse", message=f"could not parse toml '{path}': {e}")
        )

    package = get_table(data, "package")
    if package is None:
        return Err(
            ReleaseError(kind="manifest_parse", message=f"missing [package] section in '{path}'")
        )

    raw_version = package.get("version")
    if not isinstance(raw_version, str):
        return Err(
            ReleaseError(
                kind="manifest_parse",
                message=f"missing package version in '{path}'",
                hint="version.workspace = true is not supported; bump the workspace manifest",
            )
        )

    parsed = parse(raw_version)
    if isinstance(parsed, Err):
        return Err(
            ReleaseError(
                kind="version_parse",
                message=f"could not parse version from '{path}': {raw_version!r}",
                hint=parsed.error.hint,
            )
        )

    document = locate_package_version(text)
    if document is None or document.version_text != raw_version:
        return Err(
            ReleaseError(
                kind="manifest_parse",
                message=f"cannot update version of '{path}' in place",
                hint='Expected a single-line version = "x.y.z" under [package]',
            )
        )

    return Ok(ManifestEntry(path=path, version=parsed.value, document=document))


def read_manifests(paths: Iterable[Path]) -> Result[ManifestCollection, ReleaseError]:
    """Read every manifest; stops at the first failure."""
    collection: ManifestCollection = {}
    for path in paths:
        entry = read_manifest(path)
        if isinstance(entry, Err):
            return entry
        collection[path] = entry.value
    return Ok(collection)


def write_manifest_version(
    entry: ManifestEntry,
    version: Version,
) -> Result[ManifestEntry, ReleaseError]:
    """Overwrite the manifest on disk with only its version value changed."""
    document = entry.document.with_version(format_version(version))
    try:
        atomic_write_text(entry.path, document.text)
    except OSError as e:
        return Err(
            ReleaseError(kind="manifest_write", message=f"failed to write to '{entry.path}': {e}")
        )
    return Ok(ManifestEntry(path=entry.path, version=version, document=document))
