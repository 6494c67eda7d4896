"""
Command-line interface for twig.

Maps each command onto a Repository method and prints results in the
classic log and status formats.

Example:
    twig init
    twig add notes.txt
    twig commit "Add notes"
"""

import functools
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import click

from twig.config import config
from twig.logging import get_twig_logger, initialize_logging
from twig.version_control import Repository, VersionControlError

log = get_twig_logger("cli")


def handle_errors(func: Callable) -> Callable:
    """Print engine errors as their user-facing message and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except VersionControlError as e:
            log.debug(f"Command failed: {type(e).__name__}")
            click.echo(str(e))
            sys.exit(1)

    return wrapper


def open_repository(ctx: click.Context) -> Repository:
    return Repository.open(ctx.obj["root"])


@click.group()
@click.option(
    "--root",
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
    help="Work tree root (default: current directory)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, root: Path, verbose: bool):
    """twig: a small local version-control system."""
    log_config = config.logging
    initialize_logging(
        log_dir=Path(log_config.log_dir),
        level="DEBUG" if verbose else log_config.level,
        rotation=log_config.rotation,
        retention=log_config.retention,
        enable_file_logging=log_config.enable_file_logging,
        enable_console_logging=log_config.enable_console_logging,
    )
    ctx.ensure_object(dict)
    ctx.obj["root"] = root


@cli.command()
@click.pass_context
@handle_errors
def init(ctx: click.Context):
    """Create a repository in the work tree."""
    Repository.init(ctx.obj["root"])


@cli.command()
@click.argument("path")
@click.pass_context
@handle_errors
def add(ctx: click.Context, path: str):
    """Stage a file for the next commit."""
    open_repository(ctx).add(path)


@cli.command()
@click.argument("message", required=False, default="")
@click.pass_context
@handle_errors
def commit(ctx: click.Context, message: str):
    """Commit the staged changes."""
    open_repository(ctx).commit(message)


@cli.command()
@click.argument("path")
@click.pass_context
@handle_errors
def rm(ctx: click.Context, path: str):
    """Unstage a file or stage it for removal."""
    open_repository(ctx).rm(path)


@cli.command()
@click.argument("branch", required=False)
@click.option("--file", "file_path", default=None, help="Restore this file instead")
@click.option("--commit", "commit_id", default=None, help="Commit to restore the file from")
@click.pass_context
@handle_errors
def checkout(
    ctx: click.Context,
    branch: Optional[str],
    file_path: Optional[str],
    commit_id: Optional[str],
):
    """
    Check out a branch, or restore one file with --file.

    Examples:
        twig checkout feature
        twig checkout --file notes.txt
        twig checkout --file notes.txt --commit 1a2b3c4d
    """
    if (branch is None) == (file_path is None) or (commit_id and not file_path):
        raise click.UsageError("Give either a branch name or --file PATH [--commit ID].")

    repo = open_repository(ctx)
    if file_path is not None:
        repo.checkout_file(file_path, commit_id)
    elif branch is not None:
        repo.checkout_branch(branch)


@cli.command(name="log")
@click.pass_context
@handle_errors
def log_command(ctx: click.Context):
    """Show the history of the current branch."""
    for entry in open_repository(ctx).log():
        click.echo(entry.format_log())


@cli.command(name="global-log")
@click.pass_context
@handle_errors
def global_log(ctx: click.Context):
    """Show every commit ever made."""
    for entry in open_repository(ctx).global_log():
        click.echo(entry.format_log())


@cli.command()
@click.argument("message")
@click.pass_context
@handle_errors
def find(ctx: click.Context, message: str):
    """Print the ids of commits whose message contains MESSAGE."""
    for commit_id in open_repository(ctx).find(message):
        click.echo(commit_id)


@cli.command()
@click.argument("name")
@click.pass_context
@handle_errors
def branch(ctx: click.Context, name: str):
    """Create a branch at the current commit."""
    open_repository(ctx).branch(name)


@cli.command(name="rm-branch")
@click.argument("name")
@click.pass_context
@handle_errors
def rm_branch(ctx: click.Context, name: str):
    """Delete a branch."""
    open_repository(ctx).rm_branch(name)


@cli.command()
@click.pass_context
@handle_errors
def status(ctx: click.Context):
    """Show branches, staged files and work tree changes."""
    click.echo(open_repository(ctx).status().format(), nl=False)


@cli.command()
@click.argument("commit_id")
@click.pass_context
@handle_errors
def reset(ctx: click.Context, commit_id: str):
    """Check out a commit and move the current branch to it."""
    open_repository(ctx).reset(commit_id)


@cli.command()
@click.argument("branch_name")
@click.pass_context
@handle_errors
def merge(ctx: click.Context, branch_name: str):
    """Merge BRANCH_NAME into the current branch."""
    result = open_repository(ctx).merge(branch_name)
    if result.fast_forward:
        click.echo("Current branch fast-forwarded.")
    elif result.has_conflicts:
        click.echo("Encountered a merge conflict.")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
