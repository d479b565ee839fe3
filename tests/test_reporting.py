from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from atlantis_bot.events.commit_status_updater import DefaultCommitStatusUpdater, status_for_result
from atlantis_bot.events.markdown_renderer import MarkdownRenderer
from atlantis_bot.models.command_models import (
    CommandName,
    CommandResult,
    ProjectResult,
    ResultStatus,
)
from atlantis_bot.models.vcs_models import PullRequest, PullRequestState, Repo, VCSHostType


def _result(*projects: ProjectResult) -> CommandResult:
    return CommandResult(project_results=tuple(projects))


def test_single_project_plan_includes_apply_hint() -> None:
    body = MarkdownRenderer().render(
        _result(ProjectResult(".", "default", ResultStatus.SUCCESS, "+ aws_s3_bucket.logs\n")),
        CommandName.PLAN,
    )
    assert body == (
        "Ran Plan in dir: `.` workspace: `default`\n\n"
        "```diff\n+ aws_s3_bucket.logs\n```\n\n"
        "* To **apply** this plan, comment:\n"
        "    * `atlantis apply -d . -w default`\n"
    )


def test_single_project_apply_has_no_apply_hint() -> None:
    body = MarkdownRenderer().render(
        _result(ProjectResult(".", "default", ResultStatus.SUCCESS, "Apply complete!")),
        CommandName.APPLY,
    )
    assert "To **apply**" not in body
    assert body.startswith("Ran Apply in dir: `.` workspace: `default`")


def test_multiple_projects_are_listed_in_given_order() -> None:
    body = MarkdownRenderer().render(
        _result(
            ProjectResult("staging", "default", ResultStatus.ERROR, "exit status 1"),
            ProjectResult("production", "prod", ResultStatus.FAILURE, "locked by #3"),
        ),
        CommandName.PLAN,
    )
    assert body.startswith(
        "Ran Plan for 2 projects:\n"
        "1. dir: `staging` workspace: `default`\n"
        "1. dir: `production` workspace: `prod`\n\n"
    )
    assert "### dir: `staging` workspace: `default`\n**Plan Error**\n```\nexit status 1\n```" in body
    assert "### dir: `production` workspace: `prod`\n**Plan Failed**: locked by #3" in body
    assert body.index("staging") < body.index("production")


def test_pipeline_level_failure_and_error() -> None:
    renderer = MarkdownRenderer()
    assert renderer.render(CommandResult(failure="locked"), CommandName.APPLY) == (
        "**Apply Failed**: locked"
    )
    assert renderer.render(CommandResult(error="boom\n"), CommandName.PLAN) == (
        "**Plan Error**\n```\nboom\n```"
    )


@pytest.mark.parametrize(
    ("result", "expected"),
    [
        (CommandResult(), ("success", "Plan: no projects matched.")),
        (
            _result(ProjectResult(".", "default", ResultStatus.SUCCESS)),
            ("success", "Plan succeeded."),
        ),
        (
            _result(
                ProjectResult(".", "default", ResultStatus.SUCCESS),
                ProjectResult("a", "default", ResultStatus.FAILURE),
            ),
            ("failure", "Plan failed."),
        ),
        (CommandResult(error="boom"), ("failure", "Plan failed.")),
    ],
)
def test_status_for_result(result: CommandResult, expected: tuple[str, str]) -> None:
    assert status_for_result(CommandName.PLAN, result) == expected


@dataclass
class RecordingClient:
    calls: list[tuple[str, int, str, str, str]] = field(default_factory=list)
    target_urls: list[str] = field(default_factory=list)

    def update_status(
        self,
        repo: Repo,
        pull: PullRequest,
        state: str,
        description: str,
        context: str = "Atlantis",
        target_url: str = "",
    ) -> None:
        self.calls.append((repo.full_name, pull.num, state, description, context))
        self.target_urls.append(target_url)


def test_commit_status_updater_posts_once() -> None:
    client = RecordingClient()
    repo = Repo.from_full_name("runatlantis/atlantis", VCSHostType.GITHUB)
    pull = PullRequest(num=9, head_commit="abc", state=PullRequestState.OPEN)

    DefaultCommitStatusUpdater(client).update_from_result(
        repo, pull, CommandName.APPLY, _result(ProjectResult(".", "default", ResultStatus.ERROR))
    )

    assert client.calls == [("runatlantis/atlantis", 9, "failure", "Apply failed.", "Atlantis")]


def test_commit_status_updater_links_to_atlantis_url() -> None:
    client = RecordingClient()
    repo = Repo.from_full_name("runatlantis/atlantis", VCSHostType.GITHUB)
    pull = PullRequest(num=9, head_commit="abc", state=PullRequestState.OPEN)

    DefaultCommitStatusUpdater(client, target_url="https://atlantis.example.com").update_from_result(
        repo, pull, CommandName.PLAN, _result(ProjectResult(".", "default", ResultStatus.SUCCESS))
    )

    assert client.target_urls == ["https://atlantis.example.com"]
