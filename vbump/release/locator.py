"""Discovery of Cargo manifests and the enclosing git repository.

Two independent walks share a start directory:

- ascend: from the start directory towards the filesystem root, recording a
  ``Cargo.toml`` at every level until a ``.git`` directory marks the
  repository root;
- descend (opt-in): a depth-first walk below the start directory collecting
  every nested ``Cargo.toml``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from vbump.core.result import Err, Ok, Result
from vbump.release.errors import ReleaseError
from vbump.release.model import MANIFEST_NAME, VCS_MARKER


@dataclass(frozen=True, slots=True)
class Discovery:
    manifests: tuple[Path, ...]
    repo_root: Path | None


def resolve_start_path(path: Path | None) -> Result[Path, ReleaseError]:
    """Normalise the user supplied start path to an absolute directory."""
    raw = path if path is not None else Path.cwd()
    try:
        p = raw.expanduser().resolve()
    except OSError as e:
        return Err(ReleaseError(kind="path", message=f"invalid path ({raw}): {e}"))

    if p.is_file():
        p = p.parent
    if not p.exists():
        return Err(ReleaseError(kind="path", message=f"path does not exist ({p})"))
    if not p.is_dir():
        return Err(ReleaseError(kind="path", message=f"path is not a directory ({p})"))
    return Ok(p)


def find_upward(start: Path) -> tuple[list[Path], Path | None]:
    """Ascend from start; returns (manifests found, repository root or None)."""
    manifests: list[Path] = []
    for level in (start, *start.parents):
        candidate = level / MANIFEST_NAME
        if candidate.is_file():
            manifests.append(candidate)
        if (level / VCS_MARKER).is_dir():
            return manifests, level
    return manifests, None


def find_below(start: Path) -> list[Path]:
    """Every manifest strictly below start, depth first in name order."""
    found: list[Path] = []

    def walk(directory: Path) -> None:
        try:
            children = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError:
            return
        for child in children:
            if child.is_dir() and not child.is_symlink():
                nested = child / MANIFEST_NAME
                if nested.is_file():
                    found.append(nested)
                walk(child)

    walk(start)
    return found


def discover(start: Path, *, scan_subdirs: bool) -> Result[Discovery, ReleaseError]:
    manifests, repo_root = find_upward(start)
    if scan_subdirs:
        manifests.extend(find_below(start))

    unique = tuple(dict.fromkeys(manifests))
    if not unique:
        return Err(
            ReleaseError(
                kind="discovery",
                message=f"no {MANIFEST_NAME} found",
                hint=f"searched {start} and its parents"
                + (" and subdirectories" if scan_subdirs else ""),
            )
        )
    return Ok(Discovery(manifests=unique, repo_root=repo_root))


def require_repo_root(discovery: Discovery) -> Result[Path, ReleaseError]:
    if discovery.repo_root is None:
        return Err(
            ReleaseError(
                kind="discovery",
                message="could not find git base path",
                hint=f"no {VCS_MARKER} directory above {discovery.manifests[0].parent}",
            )
        )
    return Ok(discovery.repo_root)
