"""Release transaction: locate, bump, commit, tag, push.

``run_release`` walks a fixed sequence of stages and stops at the first
failure. Stages up to the preflight checks only read; from the manifest
rewrite on, every stage leaves something behind (files, a commit, a tag, a
pushed ref) and nothing is rolled back when a later stage fails. What was
already applied is recorded in a ``ReleaseJournal`` and attached to the
error so the user can clean up by hand.

The duplicate tag check and the tag creation are separate git calls; a tag
created by someone else in between makes the tag stage fail.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from vbump.core.result import Err, Ok, Result
from vbump.git.repository import Repository
from vbump.output.console import ConsoleProtocol, Style
from vbump.release.config import load_config
from vbump.release.errors import ReleaseError
from vbump.release.locator import discover, require_repo_root, resolve_start_path
from vbump.release.manifest import ManifestCollection, read_manifests, write_manifest_version
from vbump.release.model import (
    ChangeRequest,
    FixedVersion,
    IncrementVersion,
    OnlyShow,
    ReleaseRequest,
    ReleaseStage,
    RepositoryContext,
)
from vbump.release.selector import select_manifests
from vbump.release.semver import Version, increment, parse, release_tag

_STEPS = 5
_INDENT = "      "


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    previous: Version
    version: Version
    tag: str
    commit: str
    manifests: tuple[Path, ...]
    remote: str
    pushed_refs: tuple[str, ...]


@dataclass
class ReleaseJournal:
    """Stage reached and side effects applied during one run."""

    stage: ReleaseStage | None = None
    written: list[Path] = field(default_factory=list)
    commit: str | None = None
    tag: str | None = None

    def advance(self, stage: ReleaseStage) -> None:
        self.stage = stage

    def describe(self) -> str | None:
        """Human readable list of effects left in place, or None."""
        lines: list[str] = []
        if self.written:
            lines.append("manifests already rewritten: " + ", ".join(str(p) for p in self.written))
        if self.commit is not None:
            lines.append(f"commit {self.commit[:12]} remains on the local branch")
        if self.tag is not None:
            lines.append(f"tag {self.tag} remains in the local repository")
        if not lines:
            return None
        return "not rolled back -> " + "; ".join(lines)


def open_repository_context(
    *,
    root: Path,
    remote: str,
) -> Result[tuple[Repository, RepositoryContext], ReleaseError]:
    repo = Repository(root)

    bare = repo.is_bare()
    if isinstance(bare, Err):
        return Err(_git_failure("failed to open git repo", bare.error.message))
    if bare.value:
        return Err(ReleaseError(kind="git_operation", message="cannot use bare repository"))

    url = repo.remote_url(remote)
    if isinstance(url, Err):
        return Err(
            _git_failure(f"failed to find git remote '{remote}'", url.error.message)
        )

    signature = repo.signature()
    if isinstance(signature, Err):
        return Err(
            ReleaseError(
                kind="git_operation",
                message=signature.error.message,
                hint="Configure git user.name/user.email, then retry.",
            )
        )

    head_ref = repo.head_ref()
    if isinstance(head_ref, Err):
        return Err(_git_failure("cannot determine current branch", head_ref.error.message))

    head_commit = repo.rev_parse(head_ref.value)
    if isinstance(head_commit, Err):
        return Err(
            ReleaseError(
                kind="git_operation",
                message=f"branch {head_ref.value} has no commit yet",
                hint="Create an initial commit before releasing.",
            )
        )

    return Ok(
        (
            repo,
            RepositoryContext(
                root=root,
                remote=remote,
                signature=signature.value,
                head_ref=head_ref.value,
                head_commit=head_commit.value,
            ),
        )
    )


def current_version(
    collection: ManifestCollection,
    change: ChangeRequest,
) -> Result[Version, ReleaseError]:
    """Starting version of the run.

    An increment over several manifests requires them to agree.
    """
    versions = [entry.version for entry in collection.values()]
    first = versions[0]
    if isinstance(change, IncrementVersion) and len(versions) > 1:
        if any(v != first for v in versions[1:]):
            found = ", ".join(f"{p}={e.version}" for p, e in collection.items())
            return Err(
                ReleaseError(
                    kind="consistency",
                    message=(
                        "when incrementing several manifests their versions must be equal"
                    ),
                    hint=f"found {found}; use 'fixed' instead",
                )
            )
    return Ok(first)


def compute_new_version(current: Version, change: ChangeRequest) -> Result[Version, ReleaseError]:
    match change:
        case FixedVersion(full_version=text):
            parsed = parse(text)
            if isinstance(parsed, Err):
                return Err(
                    ReleaseError(
                        kind="version_parse",
                        message=f"wrong format for version specifier '{text}'",
                        hint=parsed.error.hint,
                    )
                )
            return parsed
        case IncrementVersion(part=part):
            return Ok(increment(current, part))
        case OnlyShow():
            return Err(
                ReleaseError(kind="unimplemented", message="only-show is not implemented yet")
            )


def commit_message(change: ChangeRequest, version: Version) -> str:
    match change:
        case FixedVersion():
            return f"Changed version in Cargo.toml to fixed version '{version}'"
        case IncrementVersion(part=part):
            return f"Changed version in Cargo.toml to '{version}' by incrementing {part}"
        case OnlyShow():
            raise AssertionError("no commit for only-show")


def ensure_clean_worktree(repo: Repository) -> Result[None, ReleaseError]:
    status = repo.status(include_untracked=False)
    if isinstance(status, Err):
        return Err(_git_failure("failed to check git status", status.error.message))
    count = status.value.change_count
    if count > 0:
        return Err(
            ReleaseError(
                kind="dirty_worktree",
                message=f"there are {count} uncommitted changes",
                hint="Commit or stash them before releasing.",
            )
        )
    return Ok(None)


def ensure_tag_available(repo: Repository, *, prefix: str, tag: str) -> Result[None, ReleaseError]:
    names = repo.tag_names(f"{prefix}*")
    if isinstance(names, Err):
        return Err(_git_failure("failed to list git tags", names.error.message))
    if tag in names.value:
        return Err(
            ReleaseError(
                kind="duplicate_tag",
                message=f"new version already exists as git tag '{tag}'",
            )
        )
    return Ok(None)


def commit_manifests(
    repo: Repository,
    ctx: RepositoryContext,
    *,
    paths: list[Path],
    message: str,
) -> Result[str, ReleaseError]:
    """Stage exactly paths and commit them on top of the branch head.

    The branch only moves if it still points at ``ctx.head_commit``.
    """
    rels = [p.relative_to(ctx.root).as_posix() for p in paths]

    added = repo.add(rels)
    if isinstance(added, Err):
        return Err(_git_failure("git add failed", added.error.message))

    tree = repo.write_tree()
    if isinstance(tree, Err):
        return Err(_git_failure("git write-tree failed", tree.error.message))

    commit = repo.commit_tree(
        tree=tree.value,
        parent=ctx.head_commit,
        message=message,
        signature=ctx.signature,
    )
    if isinstance(commit, Err):
        return Err(_git_failure("git commit failed", commit.error.message))

    moved = repo.update_ref(
        ctx.head_ref,
        commit.value,
        old=ctx.head_commit,
        reason=f"commit: {message}",
    )
    if isinstance(moved, Err):
        return Err(_git_failure(f"failed to advance {ctx.head_ref}", moved.error.message))

    return Ok(commit.value)


def run_release(
    request: ReleaseRequest,
    *,
    console: ConsoleProtocol,
    journal: ReleaseJournal | None = None,
) -> Result[ReleaseOutcome, ReleaseError]:
    """Run one release; the only entry point the CLI needs.

    Pass a journal to inspect the stage reached and the effects applied.
    """
    journal = journal if journal is not None else ReleaseJournal()
    result = _run(request, console=console, journal=journal)
    if isinstance(result, Err):
        return Err(result.error.with_hint(journal.describe()))
    return result


def _run(
    request: ReleaseRequest,
    *,
    console: ConsoleProtocol,
    journal: ReleaseJournal,
) -> Result[ReleaseOutcome, ReleaseError]:
    def detail(message: str) -> None:
        if request.verbose > 0:
            console.print(f"{_INDENT}{message}", Style.DIM)

    # 1. locate, select, open repository
    console.header(f"[1/{_STEPS}] Analysing cargo project ...")
    start = resolve_start_path(request.path)
    if isinstance(start, Err):
        return start
    detail(f"Using path: {start.value}")

    found = discover(start.value, scan_subdirs=request.scan_subdirs)
    if isinstance(found, Err):
        return found
    root = require_repo_root(found.value)
    if isinstance(root, Err):
        return root
    journal.advance(ReleaseStage.LOCATED)
    console.print(f"{_INDENT}Found git base path: {root.value}")
    console.print(f"{_INDENT}Found Cargo.toml:")
    for manifest in found.value.manifests:
        console.print(f"{_INDENT} - {manifest}")

    config = load_config(root.value)
    if isinstance(config, Err):
        return config
    remote, prefix, selector = config.value.apply(request)

    selected = select_manifests(found.value.manifests, selector)
    if isinstance(selected, Err):
        return selected
    journal.advance(ReleaseStage.SELECTED)
    if selector is not None:
        console.print(f"{_INDENT}  -> using {selector}: {', '.join(map(str, selected.value))}")

    opened = open_repository_context(root=root.value, remote=remote)
    if isinstance(opened, Err):
        return opened
    repo, ctx = opened.value
    console.print(f"{_INDENT}Found remote to be used: {ctx.remote}")
    detail(f"Signature: {ctx.signature}")
    detail(f"Branch: {ctx.head_ref}")
    if not request.do_push:
        console.warning("--no-do-push is not honoured yet; the release will still be pushed")
    console.success("Analysing cargo project done")

    # 2. read, compute, preflight, write
    console.header(f"[2/{_STEPS}] Writing version to Cargo.toml(s) ...")
    manifests = read_manifests(selected.value)
    if isinstance(manifests, Err):
        return manifests
    for path, entry in manifests.value.items():
        detail(f"{path}: {entry.version}")

    previous = current_version(manifests.value, request.change)
    if isinstance(previous, Err):
        return previous
    new_version = compute_new_version(previous.value, request.change)
    if isinstance(new_version, Err):
        return new_version
    version = new_version.value
    journal.advance(ReleaseStage.VERSION_COMPUTED)
    console.print(f"{_INDENT}New version to be written: {version}")

    clean = ensure_clean_worktree(repo)
    if isinstance(clean, Err):
        return clean
    tag = release_tag(prefix, version)
    available = ensure_tag_available(repo, prefix=prefix, tag=tag)
    if isinstance(available, Err):
        return available
    journal.advance(ReleaseStage.PREFLIGHT_CHECKED)

    for entry in manifests.value.values():
        written = write_manifest_version(entry, version)
        if isinstance(written, Err):
            return written
        journal.written.append(entry.path)
        detail(f"Wrote {entry.path}")
    journal.advance(ReleaseStage.WRITTEN)
    console.success("Writing version to Cargo.toml(s) done")

    # 3. commit
    console.header(f"[3/{_STEPS}] git commit for Cargo.toml(s) ...")
    commit = commit_manifests(
        repo,
        ctx,
        paths=list(manifests.value.keys()),
        message=commit_message(request.change, version),
    )
    if isinstance(commit, Err):
        return commit
    journal.commit = commit.value
    journal.advance(ReleaseStage.COMMITTED)
    console.print(f"{_INDENT}Cargo.toml(s) with updated version committed (id: {commit.value})")
    console.success("git commit for Cargo.toml(s) done")

    # 4. tag
    console.header(f"[4/{_STEPS}] Add git tag for version ...")
    tagged = repo.create_annotated_tag(
        name=tag,
        target=commit.value,
        message=request.tag_message,
        signature=ctx.signature,
    )
    if isinstance(tagged, Err):
        return Err(_git_failure(f"error adding git tag {tag}", tagged.error.message))
    journal.tag = tag
    journal.advance(ReleaseStage.TAGGED)
    console.success("Add git tag for version done")

    # 5. push
    console.header(f"[5/{_STEPS}] git push for Cargo.toml(s) and tag ...")
    refs = [ctx.head_ref, f"refs/tags/{tag}"]
    console.print(
        f"{_INDENT}pushing to remote '{ctx.remote}' with branch ref '{refs[0]}' and '{refs[1]}'"
    )
    pushed = repo.push(ctx.remote, refs)
    if isinstance(pushed, Err):
        return Err(_git_failure("error pushing to git remote", pushed.error.message))
    journal.advance(ReleaseStage.PUSHED)
    console.success("git push for Cargo.toml(s) and tag done")

    journal.advance(ReleaseStage.DONE)
    return Ok(
        ReleaseOutcome(
            previous=previous.value,
            version=version,
            tag=tag,
            commit=commit.value,
            manifests=tuple(manifests.value.keys()),
            remote=ctx.remote,
            pushed_refs=tuple(refs),
        )
    )


def _git_failure(message: str, detail: str) -> ReleaseError:
    return ReleaseError(kind="git_operation", message=f"{message}: {detail}")
