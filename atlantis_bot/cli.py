"""atlantis-bot CLI."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from atlantis_bot import app as app_wiring
from atlantis_bot.models.command_models import CommandName, CommentCommand
from atlantis_bot.models.vcs_models import Repo, User, VCSHostType
from atlantis_bot.shared.log import configure_logging
from atlantis_bot.shared.settings import OrchestratorSettings
from atlantis_bot.vcs.auth import github_auth, gitlab_auth


app = typer.Typer(add_completion=False, help="atlantis-bot: pull request comment command runner")


def _load_settings(config: Path | None) -> OrchestratorSettings:
    try:
        return OrchestratorSettings.from_env(config_path=config)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


@app.command()
def status(config: Path = typer.Option(None, "--config")) -> None:
    """Print which providers are configured, with credentials redacted."""
    settings = _load_settings(config)
    payload = {
        "github": {
            "enabled": settings.github_enabled,
            "hostname": settings.github_hostname,
            **github_auth(settings).redacted(),
        },
        "gitlab": {
            "enabled": settings.gitlab_enabled,
            "hostname": settings.gitlab_hostname,
            **gitlab_auth(settings).redacted(),
        },
        "allow_fork_prs": settings.allow_fork_prs,
        "project_runner": settings.project_runner,
    }
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def comment(
    repo: str = typer.Argument(..., help="Base repository as <owner>/<name>"),
    pull_num: int = typer.Argument(..., min=1),
    command: str = typer.Argument(..., help="plan, apply, or help"),
    host: str = typer.Option("github", "--host"),
    user: str = typer.Option(..., "--user"),
    workspace: str = typer.Option("", "--workspace", "-w"),
    directory: str = typer.Option("", "--dir", "-d"),
    project: str = typer.Option("", "--project", "-p"),
    verbose: bool = typer.Option(False, "--verbose"),
    tf_args: list[str] = typer.Option([], "--tf-arg"),
    config: Path = typer.Option(None, "--config"),
) -> None:
    """Run one comment command against the configured VCS host."""
    settings = _load_settings(config)
    configure_logging(settings.log_level)
    try:
        host_type = VCSHostType(host.strip().lower())
    except ValueError as exc:
        raise typer.BadParameter("Expected github or gitlab", param_hint="--host") from exc
    try:
        command_name = CommandName(command.strip().lower())
    except ValueError as exc:
        raise typer.BadParameter("Expected plan, apply, or help", param_hint="COMMAND") from exc
    try:
        hostname = settings.github_hostname if host_type is VCSHostType.GITHUB else settings.gitlab_hostname
        base_repo = Repo.from_full_name(repo, host_type, hostname=hostname)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="REPO") from exc

    runner = app_wiring.create_command_runner(settings)
    runner.run_comment_command(
        base_repo,
        None,
        None,
        User(username=user),
        pull_num,
        CommentCommand(
            name=command_name,
            workspace=workspace,
            dir=directory,
            project=project,
            flags=tuple(tf_args),
            verbose=verbose,
        ),
    )
    typer.echo(f"Ran {command_name.value} on {base_repo.full_name}#{pull_num}")


if __name__ == "__main__":
    app()
