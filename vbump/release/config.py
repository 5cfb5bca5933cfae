"""Per-repository defaults from ``.vbump.toml``.

Example:

    remote = "upstream"
    tag_prefix = "release-"
    cargo_file_selector = "leaf"

Values given on the command line win over the file; the file wins over the
built-in defaults.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from vbump.core.result import Err, Ok, Result
from vbump.core.structured import StrDict, as_str_dict, get_str
from vbump.release.errors import ReleaseError
from vbump.release.model import (
    CONFIG_FILE_NAME,
    DEFAULT_REMOTE,
    DEFAULT_TAG_PREFIX,
    ManifestSelector,
    ReleaseRequest,
)


@dataclass(frozen=True, slots=True)
class VbumpConfig:
    remote: str = DEFAULT_REMOTE
    tag_prefix: str = DEFAULT_TAG_PREFIX
    selector: ManifestSelector | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> VbumpConfig:
        """Build from parsed TOML; raises ValueError on unknown selector names."""
        selector_name = get_str(data, "cargo_file_selector")
        # An explicit empty prefix is allowed, so read it without get_str.
        prefix = data.get("tag_prefix")
        if prefix is not None and not isinstance(prefix, str):
            raise ValueError("tag_prefix must be a string")

        return cls(
            remote=get_str(data, "remote") or DEFAULT_REMOTE,
            tag_prefix=DEFAULT_TAG_PREFIX if prefix is None else prefix,
            selector=ManifestSelector(selector_name) if selector_name else None,
        )

    def apply(self, request: ReleaseRequest) -> tuple[str, str, ManifestSelector | None]:
        """Effective (remote, tag prefix, selector) for a request."""
        return (
            request.remote if request.remote is not None else self.remote,
            request.tag_prefix if request.tag_prefix is not None else self.tag_prefix,
            request.selector if request.selector is not None else self.selector,
        )


def _parse_toml(path: Path) -> Result[StrDict, ReleaseError]:
    try:
        data = as_str_dict(tomllib.loads(path.read_bytes().decode("utf-8")))
    except OSError as e:
        return Err(ReleaseError(kind="config", message=f"cannot read {path}: {e}"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        return Err(ReleaseError(kind="config", message=f"invalid TOML in {path}: {e}"))
    if data is None:
        return Err(ReleaseError(kind="config", message=f"config root must be a table: {path}"))
    return Ok(data)


def load_config(repo_root: Path) -> Result[VbumpConfig, ReleaseError]:
    """Load ``.vbump.toml`` from the repository root; defaults if absent."""
    path = repo_root / CONFIG_FILE_NAME
    if not path.is_file():
        return Ok(VbumpConfig())

    data = _parse_toml(path)
    if isinstance(data, Err):
        return data

    try:
        return Ok(VbumpConfig.from_dict(data.value))
    except ValueError as e:
        return Err(
            ReleaseError(
                kind="config",
                message=f"invalid config in {path}: {e}",
                hint="cargo_file_selector must be one of: leaf, base, all",
            )
        )
