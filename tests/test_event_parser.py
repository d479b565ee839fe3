from __future__ import annotations

import copy
from typing import Any

import pytest

from atlantis_bot.events.event_parser import EventParser, ParseError
from atlantis_bot.models.vcs_models import PullRequestState, Repo, VCSHostType


GITHUB_PULL: dict[str, Any] = {
    "number": 12,
    "state": "open",
    "merged": False,
    "html_url": "https://github.com/runatlantis/atlantis/pull/12",
    "user": {"login": "lkysow"},
    "head": {
        "sha": "abc123",
        "ref": "feature",
        "repo": {
            "full_name": "forkrepo/atlantis",
            "clone_url": "https://github.com/forkrepo/atlantis.git",
        },
    },
    "base": {
        "ref": "main",
        "repo": {
            "full_name": "runatlantis/atlantis",
            "clone_url": "https://github.com/runatlantis/atlantis.git",
        },
    },
}

GITLAB_MR: dict[str, Any] = {
    "iid": 3,
    "sha": "def456",
    "web_url": "https://gitlab.com/group/sub/project/-/merge_requests/3",
    "source_branch": "feature",
    "target_branch": "main",
    "author": {"username": "lkysow"},
    "state": "opened",
    "source_project_id": 99,
    "target_project_id": 99,
}

GITLAB_REPO = Repo.from_full_name("group/sub/project", VCSHostType.GITLAB)


def test_parse_github_pull_builds_canonical_models() -> None:
    pull, base_repo, head_repo = EventParser().parse_github_pull(GITHUB_PULL)

    assert pull.num == 12
    assert pull.head_commit == "abc123"
    assert pull.author == "lkysow"
    assert pull.state is PullRequestState.OPEN
    assert pull.base_repo == base_repo
    assert pull.head_repo == head_repo
    assert base_repo.owner == "runatlantis"
    assert base_repo.vcs_host.type is VCSHostType.GITHUB
    assert head_repo.full_name == "forkrepo/atlantis"
    assert head_repo.owner == "forkrepo"
    assert head_repo.clone_url == "https://github.com/forkrepo/atlantis.git"


def test_parse_github_pull_uses_configured_hostname() -> None:
    _pull, base_repo, _head = EventParser(github_hostname="ghe.example.com").parse_github_pull(
        GITHUB_PULL
    )
    assert base_repo.vcs_host.hostname == "ghe.example.com"


@pytest.mark.parametrize(
    ("merged", "merged_at", "expected"),
    [
        (False, None, PullRequestState.CLOSED),
        (True, None, PullRequestState.MERGED),
        (None, "2024-01-01T00:00:00Z", PullRequestState.MERGED),
    ],
)
def test_parse_github_closed_states(merged: Any, merged_at: Any, expected: PullRequestState) -> None:
    raw = copy.deepcopy(GITHUB_PULL)
    raw.update({"state": "closed", "merged": merged, "merged_at": merged_at})
    pull, _base, _head = EventParser().parse_github_pull(raw)
    assert pull.state is expected


@pytest.mark.parametrize(
    ("path", "message"),
    [
        (("head", "sha"), "head.sha is null"),
        (("html_url",), "html_url is null"),
        (("user",), "user.login is null"),
        (("base", "repo"), "base.repo is null"),
    ],
)
def test_parse_github_pull_missing_fields(path: tuple[str, ...], message: str) -> None:
    raw = copy.deepcopy(GITHUB_PULL)
    target = raw
    for key in path[:-1]:
        target = target[key]
    del target[path[-1]]

    with pytest.raises(ParseError, match=message):
        EventParser().parse_github_pull(raw)


def test_parse_github_repo_rejects_bad_full_name() -> None:
    with pytest.raises(ParseError, match="invalid repo full name"):
        EventParser().parse_github_repo({"full_name": "no-slash"})


@pytest.mark.parametrize(
    ("side", "repo"),
    [
        ("base", {"full_name": 12345}),
        ("head", {"full_name": ["runatlantis", "atlantis"]}),
    ],
)
def test_parse_github_pull_rejects_non_string_repo_name(side: str, repo: dict[str, Any]) -> None:
    raw = copy.deepcopy(GITHUB_PULL)
    raw[side]["repo"] = repo

    with pytest.raises(ParseError, match=f"{side}.repo.full_name is not a string"):
        EventParser().parse_github_pull(raw)


def test_parse_github_pull_rejects_non_object_repo() -> None:
    raw = copy.deepcopy(GITHUB_PULL)
    raw["head"]["repo"] = "forkrepo/atlantis"

    with pytest.raises(ParseError, match="head.repo is not an object"):
        EventParser().parse_github_pull(raw)


def test_parse_gitlab_merge_request_same_project_infers_head() -> None:
    pull, base_repo, head_repo = EventParser().parse_gitlab_merge_request(GITLAB_MR, GITLAB_REPO)

    assert pull.num == 3
    assert pull.state is PullRequestState.OPEN
    assert base_repo == GITLAB_REPO
    assert head_repo == GITLAB_REPO
    assert pull.head_repo == GITLAB_REPO
    assert GITLAB_REPO.owner == "group/sub"


def test_parse_gitlab_merge_request_prefers_known_head_repo() -> None:
    fork = Repo.from_full_name("someone/project", VCSHostType.GITLAB)
    raw = dict(GITLAB_MR, source_project_id=100)
    pull, _base, head_repo = EventParser().parse_gitlab_merge_request(raw, GITLAB_REPO, fork)
    assert head_repo == fork
    assert pull.head_repo == fork


def test_parse_gitlab_merge_request_cross_project_without_head_fails() -> None:
    raw = dict(GITLAB_MR, source_project_id=100)
    with pytest.raises(ParseError, match="head repository unknown"):
        EventParser().parse_gitlab_merge_request(raw, GITLAB_REPO)


@pytest.mark.parametrize(
    ("raw_state", "expected"),
    [
        ("closed", PullRequestState.CLOSED),
        ("locked", PullRequestState.CLOSED),
        ("merged", PullRequestState.MERGED),
    ],
)
def test_parse_gitlab_states(raw_state: str, expected: PullRequestState) -> None:
    pull, _base, _head = EventParser().parse_gitlab_merge_request(
        dict(GITLAB_MR, state=raw_state), GITLAB_REPO
    )
    assert pull.state is expected


def test_parse_gitlab_unknown_state() -> None:
    with pytest.raises(ParseError, match="unknown merge request state"):
        EventParser().parse_gitlab_merge_request(dict(GITLAB_MR, state="weird"), GITLAB_REPO)
