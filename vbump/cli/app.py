from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from vbump import __version__
from vbump.core.result import Err
from vbump.output.console import ConsoleProtocol, RichConsole, Style
from vbump.release.errors import ReleaseError
from vbump.release.model import (
    ChangeRequest,
    FixedVersion,
    IncrementPart,
    IncrementVersion,
    ManifestSelector,
    OnlyShow,
    ReleaseRequest,
)
from vbump.release.service import run_release


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Bump the version in Cargo.toml, commit, tag and push the release.",
)


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    path: Path | None
    selector: ManifestSelector | None
    scan_subdirs: bool
    do_push: bool
    verbose: int
    tag_message: str
    remote: str | None
    tag_prefix: str | None


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    path: Path | None = typer.Option(
        None, "--path", "-p", help="Path of the project (default: current directory)"
    ),
    cargo_file_selector: ManifestSelector | None = typer.Option(
        None,
        "--cargo-file-selector",
        "-c",
        case_sensitive=False,
        help="Select Cargo.toml file(s) if several are found",
    ),
    scan_subdirs: bool = typer.Option(
        False, "--scan-subdirs", "-s", help="Scan subdirectories for Cargo.toml files"
    ),
    do_push: bool = typer.Option(
        True, "--do-push/--no-do-push", help="Push branch and tag (currently always pushes)"
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More output"),
    tag_message: str = typer.Option(
        ..., "--tag-message", "-t", help="Message of the annotated git tag"
    ),
    remote: str | None = typer.Option(
        None, "--remote", "-r", help="git remote to push to (default: origin)"
    ),
    git_prefix_for_tag: str | None = typer.Option(
        None, "--git-prefix-for-tag", "-g", help="Prefix for the version tag (default: v)"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        is_eager=True,
        callback=_print_version,
        help="Show version and exit.",
    ),
) -> None:
    ctx.obj = GlobalOptions(
        path=path,
        selector=cargo_file_selector,
        scan_subdirs=scan_subdirs,
        do_push=do_push,
        verbose=verbose,
        tag_message=tag_message,
        remote=remote,
        tag_prefix=git_prefix_for_tag,
    )


@app.command()
def fixed(
    ctx: typer.Context,
    full_version: str = typer.Argument(..., help="Version to set, e.g. 1.4.0"),
) -> None:
    """Set a fixed version."""
    _release(ctx, FixedVersion(full_version=full_version))


@app.command()
def increment(
    ctx: typer.Context,
    vtype: IncrementPart = typer.Argument(..., case_sensitive=False, help="patch|minor|major"),
) -> None:
    """Increment part of the version.

    Incrementing major or minor resets the lower parts to zero.
    """
    _release(ctx, IncrementVersion(part=vtype))


@app.command("only-show")
def only_show(ctx: typer.Context) -> None:
    """Only show versions from Cargo.toml and git (not implemented)."""
    _release(ctx, OnlyShow())


def _release(ctx: typer.Context, change: ChangeRequest) -> None:
    opts: GlobalOptions = ctx.obj
    console = RichConsole()
    request = ReleaseRequest(
        change=change,
        tag_message=opts.tag_message,
        path=opts.path,
        selector=opts.selector,
        scan_subdirs=opts.scan_subdirs,
        remote=opts.remote,
        tag_prefix=opts.tag_prefix,
        do_push=opts.do_push,
        verbose=opts.verbose,
    )

    result = run_release(request, console=console)
    if isinstance(result, Err):
        _exit(result.error, console=console, verbose=opts.verbose)

    outcome = result.value
    console.print(
        f"Released {outcome.tag} ({outcome.previous} -> {outcome.version})",
        Style.SUCCESS,
    )


def _exit(error: ReleaseError, *, console: ConsoleProtocol, verbose: int) -> NoReturn:
    console.error(error.message)
    if error.hint and verbose > 0:
        console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(error.exit_code))


def main() -> None:
    app()
