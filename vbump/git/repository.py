"""Git repository abstraction.

The ``Repository`` class wraps the ``git`` executable for the handful of
operations a release needs: status, tag listing, index staging, plumbing-level
commit creation, annotated tags and push. Every method returns a Result.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.status():
        case Ok(status):
            print(f"{status.change_count} pending changes")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from vbump.core.result import Err, Ok, Result
from vbump.platform.process import ProcessError
from vbump.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "Signature",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class Signature:
    """Author/committer identity taken from git config."""

    name: str
    email: str

    def as_env(self) -> dict[str, str]:
        return {
            "GIT_AUTHOR_NAME": self.name,
            "GIT_AUTHOR_EMAIL": self.email,
            "GIT_COMMITTER_NAME": self.name,
            "GIT_COMMITTER_EMAIL": self.email,
        }

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Working tree status.

    Attributes:
        entries: Status entries as reported by git
    """

    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def change_count(self) -> int:
        return len(self.entries)


class Repository:
    """A non-bare git repository rooted at ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def is_bare(self) -> Result[bool, GitError]:
        result = self._run(["rev-parse", "--is-bare-repository"])
        if isinstance(result, Err):
            return Err(_git_error("rev-parse", result.error))
        return Ok(result.value.strip() == "true")

    def status(self, *, include_untracked: bool = False) -> Result[GitStatus, GitError]:
        """Get working tree status.

        Untracked files are left out unless ``include_untracked`` is set.
        """
        untracked = "normal" if include_untracked else "no"
        result = self._run(["status", "--porcelain=v1", f"--untracked-files={untracked}"])
        match result:
            case Err(e):
                return Err(_git_error("status", e))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def remote_url(self, name: str) -> Result[str, GitError]:
        """Look up a configured remote by name."""
        result = self._run(["remote", "get-url", name])
        match result:
            case Err(e):
                return Err(_git_error("remote get-url", e, fallback=f"no such remote '{name}'"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def signature(self) -> Result[Signature, GitError]:
        """Read user.name and user.email from git config."""
        values: list[str] = []
        for key in ("user.name", "user.email"):
            result = self._run(["config", "--get", key])
            if isinstance(result, Err) or not result.value.strip():
                return Err(
                    GitError(
                        command="config",
                        message=f"git config {key} is not set",
                        returncode=result.error.returncode if isinstance(result, Err) else 1,
                    )
                )
            values.append(result.value.strip())
        return Ok(Signature(name=values[0], email=values[1]))

    def head_ref(self) -> Result[str, GitError]:
        """Full name of the branch HEAD points at (refs/heads/...)."""
        result = self._run(["symbolic-ref", "-q", "HEAD"])
        match result:
            case Err(e):
                return Err(
                    _git_error("symbolic-ref", e, fallback="HEAD is detached (not on a branch)")
                )
            case Ok(stdout):
                return Ok(stdout.strip())

    def rev_parse(self, rev: str) -> Result[str, GitError]:
        result = self._run(["rev-parse", "--verify", "-q", f"{rev}^{{commit}}"])
        match result:
            case Err(e):
                return Err(_git_error("rev-parse", e, fallback=f"cannot resolve '{rev}'"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def tag_names(self, pattern: str | None = None) -> Result[list[str], GitError]:
        """List tag names, optionally filtered by a glob pattern."""
        args = ["tag", "--list"]
        if pattern is not None:
            args.append(pattern)
        result = self._run(args)
        match result:
            case Err(e):
                return Err(_git_error("tag --list", e))
            case Ok(stdout):
                return Ok([ln.strip() for ln in stdout.splitlines() if ln.strip()])

    def add(self, paths: list[str]) -> Result[None, GitError]:
        """Stage the given repository-relative paths and write the index."""
        result = self._run(["add", "--", *paths])
        if isinstance(result, Err):
            return Err(_git_error("add", result.error))
        return Ok(None)

    def write_tree(self) -> Result[str, GitError]:
        """Write a tree object from the index; returns its id."""
        result = self._run(["write-tree"])
        match result:
            case Err(e):
                return Err(_git_error("write-tree", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def commit_tree(
        self,
        *,
        tree: str,
        parent: str,
        message: str,
        signature: Signature,
    ) -> Result[str, GitError]:
        """Create a commit object with a single parent; returns its id.

        No ref is moved; see ``update_ref``.
        """
        result = self._run(
            ["commit-tree", tree, "-p", parent, "-m", message],
            env=signature.as_env(),
        )
        match result:
            case Err(e):
                return Err(_git_error("commit-tree", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def update_ref(self, ref: str, new: str, *, old: str, reason: str) -> Result[None, GitError]:
        """Move ref to new, provided it still points at old."""
        result = self._run(["update-ref", "-m", reason, ref, new, old])
        if isinstance(result, Err):
            return Err(_git_error("update-ref", result.error))
        return Ok(None)

    def create_annotated_tag(
        self,
        *,
        name: str,
        target: str,
        message: str,
        signature: Signature,
    ) -> Result[None, GitError]:
        """Create an annotated tag; fails if the tag already exists."""
        result = self._run(
            ["tag", "-a", name, "-m", message, target],
            env=signature.as_env(),
        )
        if isinstance(result, Err):
            return Err(_git_error("tag", result.error))
        return Ok(None)

    def push(self, remote: str, refs: list[str]) -> Result[str, GitError]:
        """Push refs to remote in a single call.

        Runs without a timeout; credentials are negotiated by git itself.
        """
        result = self._run(["push", "--porcelain", remote, *refs], timeout=None)
        match result:
            case Err(e):
                return Err(_git_error("push", e, fallback="push rejected"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def _run(
        self,
        args: list[str],
        *,
        env: dict[str, str] | None = None,
        timeout: float | None = _GIT_TIMEOUT_SECONDS,
    ) -> Result[str, ProcessError]:
        return run_process(
            ["git", "-C", str(self.path), *args],
            cwd=self.path,
            env=env,
            timeout=timeout,
        )

    def _parse_status(self, output: str) -> GitStatus:
        """Parse ``git status --porcelain=v1`` output."""
        entries: list[StatusEntry] = []
        for line in output.splitlines():
            if len(line) < 4:
                continue
            entries.append(StatusEntry(xy=line[:2], path=line[3:]))
        return GitStatus(entries=tuple(entries))


def _git_error(command: str, e: ProcessError, *, fallback: str | None = None) -> GitError:
    message = e.stderr.strip() or e.stdout.strip() or fallback or f"git {command} failed"
    return GitError(command=command, message=message, returncode=e.returncode)
