"""Commit status reporting for comment commands."""

from __future__ import annotations

from typing import Protocol

from atlantis_bot.models.command_models import CommandName, CommandResult, ResultStatus
from atlantis_bot.models.vcs_models import PullRequest, Repo
from atlantis_bot.vcs.client import STATUS_CONTEXT, VCSClient


class CommitStatusUpdater(Protocol):
    def update_from_result(
        self, repo: Repo, pull: PullRequest, command_name: CommandName, result: CommandResult
    ) -> None: ...


def status_for_result(command_name: CommandName, result: CommandResult) -> tuple[str, str]:
    """Return the ``(state, description)`` pair for an aggregate result."""

    title = command_name.title_string()
    if result.is_noop:
        return "success", f"{title}: no projects matched."
    if result.status is ResultStatus.SUCCESS:
        return "success", f"{title} succeeded."
    return "failure", f"{title} failed."


class DefaultCommitStatusUpdater:
    def __init__(self, client: VCSClient, context: str = STATUS_CONTEXT, target_url: str = "") -> None:
        self.client = client
        self.context = context
        self.target_url = target_url

    def update_from_result(
        self, repo: Repo, pull: PullRequest, command_name: CommandName, result: CommandResult
    ) -> None:
        state, description = status_for_result(command_name, result)
        self.client.update_status(
            repo, pull, state, description, self.context, target_url=self.target_url
        )
