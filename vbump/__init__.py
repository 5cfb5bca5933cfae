"""vbump: bump Cargo.toml versions, commit, tag and push a release."""

__version__ = "0.3.0"
