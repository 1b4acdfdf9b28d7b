"""gitument CLI: keep HWPX/DOCX documents diffable in git.

Commands:
- extract / pack: manual conversion between a document and its directory
- init / uninstall: manage the pre-commit and post-merge hooks
- status: show pending documents and extracted directories
- process-pre-commit / process-post-merge: invoked by the installed hooks
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gitument.config import load_config
from gitument.core import extract_artifact, pack_directory
from gitument.detect.base import classify_by_extension, format_spec
from gitument.errors import (
    GitError,
    GitumentError,
    NotAccessible,
    NotARepository,
    OutputExists,
    UnrecognizedFormat,
)
from gitument.hooks.install import HOOK_NAMES, install_hooks, uninstall_hooks
from gitument.hooks.orchestrator import (
    extract_dir_for,
    inspect_repository,
    process_post_merge,
    process_pre_commit,
)
from gitument.hooks.vcs import Git
from gitument.logging import set_verbosity
from gitument.metadata import metadata_path, read_metadata
from gitument.types import ArtifactFormat, SyncState, WorkflowConfig

app = typer.Typer(add_completion=False, help="Version HWPX/DOCX documents as extracted directories")
console = Console()
err_console = Console(stderr=True)

_state = {"verbose": False}

_STATE_STYLE = {
    SyncState.IN_SYNC: "green",
    SyncState.DIVERGED: "yellow",
    SyncState.ARTIFACT_MISSING: "red",
}


def _size_mb(num_bytes: int) -> str:
    return f"{num_bytes / (1024 * 1024):.2f} MB"


def _fail(error: GitumentError, context: str = "Error") -> NoReturn:
    err_console.print(f"[red]{context}:[/red] {escape(str(error))}")
    if _state["verbose"]:
        err_console.print_exception(show_locals=False)
    raise typer.Exit(code=1)


def _config_near(path: Path) -> WorkflowConfig:
    """Config of the repository containing *path*, or defaults outside one."""
    try:
        root = Git(path if path.is_dir() else path.parent).repository_root()
    except GitError:
        return WorkflowConfig()
    return load_config(root)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logs and full error causes"),
    quiet: bool = typer.Option(False, "--quiet", help="Only log warnings and errors"),
) -> None:
    _state["verbose"] = verbose
    set_verbosity(verbose=verbose, quiet=quiet)


@app.command()
def extract(
    file: str = typer.Argument(..., help="HWPX or DOCX document"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output directory"),
    force: bool = typer.Option(False, "--force", "-f", help="Replace an existing directory"),
) -> None:
    try:
        src = Path(file)
        if not src.exists():
            raise NotAccessible(f"File does not exist: {src}", src)
        if classify_by_extension(src) is ArtifactFormat.UNKNOWN:
            raise UnrecognizedFormat("Unsupported file type; use an HWPX or DOCX file", src)

        out = Path(output) if output else extract_dir_for(src.resolve(), _config_near(src.resolve()))
        if out.exists() and not force:
            raise OutputExists(f"Output directory already exists: {out} (use --force)", out)

        result = extract_artifact(src, out)
    except GitumentError as e:
        _fail(e)

    rprint("[green]Extracted[/green]")
    rprint(f"  Source:    [cyan]{escape(str(src))}[/cyan]")
    rprint(f"  Directory: [cyan]{escape(str(result))}[/cyan]")
    rprint(f"  Size:      [yellow]{_size_mb(src.stat().st_size)}[/yellow]")


@app.command()
def pack(
    directory: str = typer.Argument(..., help="Extracted directory"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output document"),
    type_: ArtifactFormat | None = typer.Option(
        None, "--type", "-t", help="Override the output extension (hwpx|docx)"
    ),
) -> None:
    try:
        src = Path(directory)
        if not src.is_dir():
            raise NotAccessible(f"Not a directory: {src}", src)
        metadata = read_metadata(metadata_path(src))

        if output:
            out = Path(output)
        else:
            out = src.resolve().parent / metadata.original_file
            if type_ is not None and type_ is not ArtifactFormat.UNKNOWN:
                out = out.with_suffix(format_spec(type_).extensions[0])

        result = pack_directory(src, out)
    except GitumentError as e:
        _fail(e)

    rprint("[green]Packed[/green]")
    rprint(f"  Directory: [cyan]{escape(str(src))}[/cyan]")
    rprint(f"  Output:    [cyan]{escape(str(result))}[/cyan]")
    rprint(f"  Size:      [yellow]{_size_mb(result.stat().st_size)}[/yellow]")


@app.command()
def init(force: bool = typer.Option(False, "--force", help="Overwrite existing hooks")) -> None:
    try:
        root = Git(Path.cwd()).repository_root()
        install_hooks(root, force=force)
    except GitumentError as e:
        _fail(e)

    rprint(f"[green]Hooks installed in[/green] [cyan]{escape(str(root))}[/cyan]")
    rprint("  pre-commit: extracts changed HWPX/DOCX documents")
    rprint("  post-merge: packs extracted directories back into documents")


@app.command()
def uninstall() -> None:
    try:
        root = Git(Path.cwd()).repository_root()
        removed = uninstall_hooks(root)
    except GitumentError as e:
        _fail(e)
    rprint(f"[green]Removed {len(removed)} of {len(HOOK_NAMES)} hooks[/green]")


@app.command()
def status(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show details")) -> None:
    try:
        vcs = Git(Path.cwd())
        if not vcs.is_repository():
            raise NotARepository(f"Not a git repository: {Path.cwd()}", Path.cwd())
        root = vcs.repository_root()
        report = inspect_repository(vcs, load_config(root))
    except GitumentError as e:
        _fail(e)

    cfg = report.config
    rprint("[green]Configuration[/green]")
    rprint(f"  Pattern:      {cfg.extract_dir_pattern}")
    rprint(f"  Auto cleanup: {'on' if cfg.auto_cleanup else 'off'}")
    rprint(f"  Formats:      {', '.join(t.value for t in cfg.supported_types)}")

    rprint("\n[green]Changed documents[/green]")
    if not report.pending:
        rprint("  none")
    for artifact in report.pending:
        fmt = classify_by_extension(artifact)
        rel = artifact.relative_to(report.root)
        rprint(f"  [bold]{fmt.value.upper()}[/bold] {escape(str(rel))}")
        if verbose and artifact.exists():
            st = artifact.stat()
            rprint(f"    size: {_size_mb(st.st_size)}")

    table = Table(title="Extracted directories")
    table.add_column("Directory", style="cyan")
    table.add_column("Document")
    table.add_column("Format")
    table.add_column("State")
    if verbose:
        table.add_column("Extracted at")
    for item in report.managed:
        row = [
            escape(str(item.path.relative_to(report.root))),
            escape(item.metadata.original_file),
            item.metadata.format.value,
            f"[{_STATE_STYLE[item.state]}]{item.state.value}[/]",
        ]
        if verbose:
            row.append(item.metadata.extracted_at.isoformat(timespec="seconds"))
        table.add_row(*row)
    console.print(table)

    gs = report.git_status
    rprint("\n[green]Git status[/green]")
    rprint(f"  modified: {len(gs.modified)}")
    rprint(f"  added:    {len(gs.created)}")
    rprint(f"  deleted:  {len(gs.deleted)}")
    rprint(f"  renamed:  {len(gs.renamed)}")
    if verbose:
        for label, paths in (
            ("modified", gs.modified),
            ("added", gs.created),
            ("deleted", gs.deleted),
        ):
            for p in paths:
                rprint(f"    {label}: {escape(p)}")


@app.command("process-pre-commit")
def process_pre_commit_cmd(
    repo_path: str = typer.Argument(..., help="Repository path (passed by the hook)"),
) -> None:
    try:
        vcs = Git(Path(repo_path))
        config = load_config(vcs.repository_root())
        extracted = process_pre_commit(vcs, config)
    except GitumentError as e:
        _fail(e, "Pre-commit processing failed")
    for d in extracted:
        rprint(f"[green]extracted[/green] {escape(str(d))}")


@app.command("process-post-merge")
def process_post_merge_cmd(
    repo_path: str = typer.Argument(..., help="Repository path (passed by the hook)"),
) -> None:
    try:
        root = Git(Path(repo_path)).repository_root()
        packed = process_post_merge(root, load_config(root))
    except GitumentError as e:
        _fail(e, "Post-merge processing failed")
    for f in packed:
        rprint(f"[green]packed[/green] {escape(str(f))}")


if __name__ == "__main__":
    app()
