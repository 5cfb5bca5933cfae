"""Unit tests for release/service.py helpers (git mocked)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from vbump.core.result import Err, Ok
from vbump.git.repository import GitError, GitStatus, Signature, StatusEntry
from vbump.release.manifest import ManifestDocument, ManifestEntry
from vbump.release.model import (
    FixedVersion,
    IncrementPart,
    IncrementVersion,
    OnlyShow,
    RepositoryContext,
)
from vbump.release.semver import Version
from vbump.release.service import (
    ReleaseJournal,
    commit_manifests,
    commit_message,
    compute_new_version,
    current_version,
    ensure_clean_worktree,
    ensure_tag_available,
    open_repository_context,
)


def _entry(path: str, version: Version) -> ManifestEntry:
    text = f'[package]\nversion = "{version}"\n'
    start = text.index('"') + 1
    doc = ManifestDocument(text=text, value_start=start, value_end=start + len(str(version)))
    return ManifestEntry(path=Path(path), version=version, document=doc)


def _collection(*entries: ManifestEntry) -> dict[Path, ManifestEntry]:
    return {e.path: e for e in entries}


# =============================================================================
# Version computation
# =============================================================================


class TestCurrentVersion:
    def test_single_manifest(self) -> None:
        collection = _collection(_entry("/r/Cargo.toml", Version(1, 0, 0)))
        change = IncrementVersion(IncrementPart.PATCH)
        assert current_version(collection, change) == Ok(Version(1, 0, 0))

    def test_equal_versions(self) -> None:
        collection = _collection(
            _entry("/r/Cargo.toml", Version(1, 0, 0)),
            _entry("/r/a/Cargo.toml", Version(1, 0, 0)),
        )
        change = IncrementVersion(IncrementPart.MINOR)
        assert current_version(collection, change) == Ok(Version(1, 0, 0))

    def test_mismatch_on_increment(self) -> None:
        collection = _collection(
            _entry("/r/Cargo.toml", Version(1, 0, 0)),
            _entry("/r/a/Cargo.toml", Version(1, 1, 0)),
        )
        result = current_version(collection, IncrementVersion(IncrementPart.MINOR))
        assert isinstance(result, Err)
        assert result.error.kind == "consistency"

    def test_mismatch_is_fine_for_fixed(self) -> None:
        collection = _collection(
            _entry("/r/Cargo.toml", Version(1, 0, 0)),
            _entry("/r/a/Cargo.toml", Version(1, 1, 0)),
        )
        assert isinstance(current_version(collection, FixedVersion("2.0.0")), Ok)


class TestComputeNewVersion:
    def test_fixed(self) -> None:
        assert compute_new_version(Version(1, 0, 0), FixedVersion("3.2.1")) == Ok(
            Version(3, 2, 1)
        )

    def test_fixed_malformed(self) -> None:
        result = compute_new_version(Version(1, 0, 0), FixedVersion("three"))
        assert isinstance(result, Err)
        assert result.error.kind == "version_parse"
        assert "three" in result.error.message

    def test_increment(self) -> None:
        change = IncrementVersion(IncrementPart.MAJOR)
        assert compute_new_version(Version(1, 4, 2), change) == Ok(Version(2, 0, 0))

    def test_only_show_is_unimplemented(self) -> None:
        result = compute_new_version(Version(1, 0, 0), OnlyShow())
        assert isinstance(result, Err)
        assert result.error.kind == "unimplemented"


def test_commit_message_names_the_operation() -> None:
    v = Version(1, 0, 1)
    assert "fixed version '1.0.1'" in commit_message(FixedVersion("1.0.1"), v)
    assert "incrementing patch" in commit_message(IncrementVersion(IncrementPart.PATCH), v)


# =============================================================================
# Preflight checks
# =============================================================================


class TestPreflight:
    def test_clean_worktree(self) -> None:
        repo = MagicMock()
        repo.status.return_value = Ok(GitStatus())
        assert ensure_clean_worktree(repo) == Ok(None)
        repo.status.assert_called_once_with(include_untracked=False)

    def test_dirty_worktree_reports_count(self) -> None:
        repo = MagicMock()
        entries = (StatusEntry(" M", "src/lib.rs"), StatusEntry("M ", "README.md"))
        repo.status.return_value = Ok(GitStatus(entries=entries))

        result = ensure_clean_worktree(repo)

        assert isinstance(result, Err)
        assert result.error.kind == "dirty_worktree"
        assert "2 uncommitted changes" in result.error.message

    def test_status_failure(self) -> None:
        repo = MagicMock()
        repo.status.return_value = Err(GitError("status", "fatal: broken"))
        result = ensure_clean_worktree(repo)
        assert isinstance(result, Err)
        assert result.error.kind == "git_operation"

    def test_tag_available(self) -> None:
        repo = MagicMock()
        repo.tag_names.return_value = Ok(["v1.0.0", "v1.0.10"])
        assert ensure_tag_available(repo, prefix="v", tag="v1.0.1") == Ok(None)
        repo.tag_names.assert_called_once_with("v*")

    def test_duplicate_tag(self) -> None:
        repo = MagicMock()
        repo.tag_names.return_value = Ok(["v1.0.0", "v1.0.1"])
        result = ensure_tag_available(repo, prefix="v", tag="v1.0.1")
        assert isinstance(result, Err)
        assert result.error.kind == "duplicate_tag"


# =============================================================================
# Commit
# =============================================================================


def _ctx(root: Path) -> RepositoryContext:
    return RepositoryContext(
        root=root,
        remote="origin",
        signature=Signature("Rel Bot", "rel@example.com"),
        head_ref="refs/heads/main",
        head_commit="parent1",
    )


class TestCommitManifests:
    def test_sequence(self) -> None:
        repo = MagicMock()
        repo.add.return_value = Ok(None)
        repo.write_tree.return_value = Ok("tree1")
        repo.commit_tree.return_value = Ok("commit1")
        repo.update_ref.return_value = Ok(None)
        ctx = _ctx(Path("/work/repo"))

        result = commit_manifests(
            repo,
            ctx,
            paths=[Path("/work/repo/Cargo.toml"), Path("/work/repo/crates/a/Cargo.toml")],
            message="bump",
        )

        assert result == Ok("commit1")
        repo.add.assert_called_once_with(["Cargo.toml", "crates/a/Cargo.toml"])
        repo.commit_tree.assert_called_once_with(
            tree="tree1", parent="parent1", message="bump", signature=ctx.signature
        )
        repo.update_ref.assert_called_once_with(
            "refs/heads/main", "commit1", old="parent1", reason="commit: bump"
        )

    def test_add_failure_stops(self) -> None:
        repo = MagicMock()
        repo.add.return_value = Err(GitError("add", "index.lock exists"))

        result = commit_manifests(
            repo, _ctx(Path("/r")), paths=[Path("/r/Cargo.toml")], message="bump"
        )

        assert isinstance(result, Err)
        assert result.error.kind == "git_operation"
        assert "index.lock" in result.error.message
        repo.write_tree.assert_not_called()


class TestReleaseJournal:
    def test_nothing_applied(self) -> None:
        assert ReleaseJournal().describe() is None

    def test_lists_applied_effects(self) -> None:
        journal = ReleaseJournal(
            written=[Path("/r/Cargo.toml")], commit="0123456789abcdef", tag="v1.0.1"
        )
        text = journal.describe()
        assert text is not None
        assert "/r/Cargo.toml" in text
        assert "0123456789ab" in text
        assert "v1.0.1" in text


# =============================================================================
# Repository context
# =============================================================================


def _repo_mock() -> MagicMock:
    repo = MagicMock()
    repo.is_bare.return_value = Ok(False)
    repo.remote_url.return_value = Ok("git@host:org/repo.git")
    repo.signature.return_value = Ok(Signature("Rel Bot", "rel@example.com"))
    repo.head_ref.return_value = Ok("refs/heads/main")
    repo.rev_parse.return_value = Ok("parent1")
    return repo


class TestOpenRepositoryContext:
    @patch("vbump.release.service.Repository")
    def test_resolves_branch_and_head_commit(self, repo_cls: MagicMock) -> None:
        repo_cls.return_value = _repo_mock()

        result = open_repository_context(root=Path("/r"), remote="origin")

        assert isinstance(result, Ok)
        _, ctx = result.value
        assert ctx == _ctx(Path("/r"))
        repo_cls.return_value.rev_parse.assert_called_once_with("refs/heads/main")

    @patch("vbump.release.service.Repository")
    def test_unborn_branch(self, repo_cls: MagicMock) -> None:
        repo = _repo_mock()
        repo.rev_parse.return_value = Err(GitError("rev-parse", "cannot resolve"))
        repo_cls.return_value = repo

        result = open_repository_context(root=Path("/r"), remote="origin")

        assert isinstance(result, Err)
        assert result.error.kind == "git_operation"
        assert "no commit yet" in result.error.message

    @patch("vbump.release.service.Repository")
    def test_missing_remote(self, repo_cls: MagicMock) -> None:
        repo = _repo_mock()
        repo.remote_url.return_value = Err(GitError("remote get-url", "No such remote 'up'"))
        repo_cls.return_value = repo

        result = open_repository_context(root=Path("/r"), remote="up")

        assert isinstance(result, Err)
        assert "'up'" in result.error.message
        repo.signature.assert_not_called()
