# src/ghbackup/cli.py
"""ghbackup Command Line Interface.

Entry point for the ghbackup CLI tool.
"""

from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from ghbackup import __version__
from ghbackup.contracts import GhBackupError, RunReport
from ghbackup.core.checkpoint import CheckpointID
from ghbackup.core.config import BackupSettings, load_settings
from ghbackup.core.logging import configure_logging
from ghbackup.core.rate_limit import build_pacer
from ghbackup.engine import BackupRunner, branch_name, resolve_targets
from ghbackup.remote import GitHubClient
from ghbackup.vcs import GitWorkTree

app = typer.Typer(
    name="ghbackup",
    help="ghbackup: Incremental, resumable backups of GitHub users and repositories.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ghbackup version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """ghbackup: Incremental, resumable backups of GitHub users and repositories."""
    pass


def _load(settings: str | None, overrides: dict[str, Any]) -> BackupSettings:
    """Load settings or exit with the reason printed."""
    settings_path = Path(settings) if settings is not None else None
    try:
        return load_settings(settings_path, overrides)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _open_worktree(config: BackupSettings) -> GitWorkTree:
    try:
        return GitWorkTree.open(config.resolved_git_dir())
    except GhBackupError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _print_report(report: RunReport, verbose: bool) -> None:
    state = "committed" if report.committed else "nothing committed"
    typer.echo(f"{report.target}: {report.outcome.value} on {report.branch} ({state})")
    if verbose and report.traversal is not None:
        typer.echo(f"  Steps executed: {report.traversal.executed}")
        typer.echo(f"  Steps skipped: {report.traversal.skipped}")
        typer.echo(f"  Accesses remaining: {report.traversal.budget_remaining}")
        if report.traversal.halted_at is not None:
            typer.echo(f"  Halted at: {report.traversal.halted_at}")
    for line in report.diagnostics:
        typer.echo(f"  - {line}", err=True)


@app.command()
def run(
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    git_dir: str | None = typer.Option(
        None,
        "--git-dir",
        "-d",
        help="Local git repository to store the backup in (default: current directory).",
    ),
    login: str | None = typer.Option(
        None,
        "--login",
        "-l",
        help="GitHub login to authenticate as (used with --token).",
    ),
    token: str | None = typer.Option(
        None,
        "--token",
        "-t",
        help="GitHub personal access token.",
    ),
    user: str | None = typer.Option(
        None,
        "--user",
        "-u",
        help="GitHub user to back up.",
    ),
    repo: str | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="GitHub repository to back up, as owner/name.",
    ),
    clean: bool = typer.Option(
        False,
        "--clean",
        "-c",
        help="Ignore any saved resume point and run a full backup.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed output.",
    ),
) -> None:
    """Back up a GitHub user and/or repository into a local git branch.

    With no --user or --repo, the repository behind the origin remote of the
    local repository is backed up. An interrupted or rate-limited backup
    resumes where it stopped on the next run.
    """
    overrides: dict[str, Any] = {
        "git_dir": git_dir,
        "clean": True if clean else None,
        "github": {"login": login, "token": token, "user": user, "repository": repo},
    }
    if verbose:
        overrides["logging"] = {"level": "debug"}

    config = _load(settings, overrides)
    configure_logging(config.logging.level, json_output=config.logging.json_output)
    worktree = _open_worktree(config)

    try:
        with GitHubClient(config.github, pacer=build_pacer(config.pacing)) as remote:
            reports = BackupRunner(config, remote, worktree).run()
    except GhBackupError as e:
        typer.echo(f"Error during backup: {e}", err=True)
        raise typer.Exit(1) from None

    for report in reports:
        _print_report(report, verbose)

    if not all(report.success for report in reports):
        raise typer.Exit(1)


@app.command()
def status(
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    git_dir: str | None = typer.Option(
        None,
        "--git-dir",
        "-d",
        help="Local git repository holding the backups (default: current directory).",
    ),
    user: str | None = typer.Option(
        None,
        "--user",
        "-u",
        help="GitHub user whose backup to inspect.",
    ),
    repo: str | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="GitHub repository whose backup to inspect, as owner/name.",
    ),
) -> None:
    """Show whether each backup is complete or where it will resume.

    Reads the last commit of each backup branch; nothing is checked out.
    """
    config = _load(
        settings,
        {"git_dir": git_dir, "github": {"user": user, "repository": repo}},
    )
    configure_logging(config.logging.level, json_output=config.logging.json_output)
    worktree = _open_worktree(config)

    try:
        targets = resolve_targets(config, worktree)
        for target in targets:
            branch = branch_name(target.name, config.branch_prefix)
            if not worktree.branch_exists(branch):
                typer.echo(f"{target.name}: no backup yet ({branch})")
                continue
            text = worktree.show(branch, config.marker_file)
            resume_at = CheckpointID.parse(text.splitlines()[0]) if text and text.strip() else None
            if resume_at is None or resume_at.is_root:
                typer.echo(f"{target.name}: complete ({branch})")
            else:
                typer.echo(f"{target.name}: incremental, resumes at {resume_at} ({branch})")
    except (GhBackupError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


if __name__ == "__main__":
    app()
