from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from vbump.core.result import Err, Ok, Result
from vbump.release.errors import ReleaseError
from vbump.release.model import ManifestSelector


def select_manifests(
    manifests: Sequence[Path],
    selector: ManifestSelector | None,
) -> Result[list[Path], ReleaseError]:
    """Reduce the discovered manifests according to the selection policy.

    ``leaf``/``base`` compare the length of the path string as a stand-in for
    nesting depth; on equal length the first discovered manifest wins.
    """
    if not manifests:
        return Err(ReleaseError(kind="selection", message="no manifests to select from"))

    match selector:
        case None:
            if len(manifests) > 1:
                return Err(
                    ReleaseError(
                        kind="selection",
                        message=(
                            f"{len(manifests)} manifests found but no manifest selector given"
                        ),
                        hint="Pass --cargo-file-selector leaf, base or all",
                    )
                )
            return Ok(list(manifests))
        case ManifestSelector.ALL:
            return Ok(list(manifests))
        case ManifestSelector.LEAF:
            return Ok([max(manifests, key=lambda p: len(str(p)))])
        case ManifestSelector.BASE:
            return Ok([min(manifests, key=lambda p: len(str(p)))])
