from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from atlantis_bot import cli
from atlantis_bot.models.vcs_models import VCSHostType
from atlantis_bot.vcs.client_inmemory import InMemoryVCSClient


runner = CliRunner()


def _clear_atlantis_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    for key in (
        "ATLANTIS_GH_TOKEN",
        "ATLANTIS_GITLAB_TOKEN",
        "ATLANTIS_CONFIG",
        "ATLANTIS_ALLOW_FORK_PRS",
        "ATLANTIS_PROJECT_RUNNER",
    ):
        monkeypatch.delenv(key, raising=False)


def test_status_redacts_tokens(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_atlantis_env(monkeypatch)
    monkeypatch.setenv("ATLANTIS_GH_TOKEN", "ghp_supersecret1234")

    result = runner.invoke(cli.app, ["status"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["github"]["enabled"] is True
    assert payload["github"]["token"] == "ghp_...1234"
    assert payload["gitlab"]["enabled"] is False
    assert "supersecret" not in result.output


def test_comment_runs_against_configured_clients(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_atlantis_env(monkeypatch)
    client = InMemoryVCSClient()
    client.seed_pull(
        "runatlantis/atlantis",
        4,
        {
            "number": 4,
            "state": "closed",
            "html_url": "https://github.com/runatlantis/atlantis/pull/4",
            "user": {"login": "lkysow"},
            "head": {"sha": "abc", "ref": "f", "repo": {"full_name": "runatlantis/atlantis"}},
            "base": {"ref": "main", "repo": {"full_name": "runatlantis/atlantis"}},
        },
    )
    monkeypatch.setattr(
        cli.app_wiring, "build_vcs_clients", lambda settings: {VCSHostType.GITHUB: client}
    )

    result = runner.invoke(
        cli.app, ["comment", "runatlantis/atlantis", "4", "plan", "--user", "lkysow"]
    )

    assert result.exit_code == 0, result.output
    assert "Ran plan on runatlantis/atlantis#4" in result.output
    assert [c.body for c in client.comments] == [
        "Atlantis commands can't be run on closed pull requests"
    ]


@pytest.mark.parametrize(
    ("args", "hint"),
    [
        (["comment", "runatlantis/atlantis", "1", "destroy", "--user", "u"], "plan, apply, or help"),
        (["comment", "runatlantis/atlantis", "1", "plan", "--user", "u", "--host", "svn"], "github or gitlab"),
        (["comment", "not-a-repo", "1", "plan", "--user", "u"], "invalid repo full name"),
    ],
)
def test_comment_rejects_bad_arguments(
    monkeypatch: pytest.MonkeyPatch, args: list[str], hint: str
) -> None:
    _clear_atlantis_env(monkeypatch)
    result = runner.invoke(cli.app, args)
    assert result.exit_code == 2
    assert hint in result.output
