"""In-memory VCS client for deterministic local runs and tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from atlantis_bot.models.vcs_models import PullRequest, Repo
from atlantis_bot.vcs.client import COMMIT_STATES, STATUS_CONTEXT, FetchError


@dataclass(frozen=True)
class PostedComment:
    repo_full_name: str
    pull_num: int
    body: str


@dataclass(frozen=True)
class PostedStatus:
    repo_full_name: str
    pull_num: int
    state: str
    description: str
    context: str
    target_url: str = ""


class InMemoryVCSClient:
    """Serves seeded pull payloads and records every comment and status."""

    def __init__(self) -> None:
        self.pulls: dict[tuple[str, int], dict[str, Any]] = {}
        self.comments: list[PostedComment] = []
        self.statuses: list[PostedStatus] = []

    def seed_pull(self, repo_full_name: str, num: int, payload: dict[str, Any]) -> None:
        self.pulls[(repo_full_name, num)] = dict(payload)

    def get_pull_request(self, repo: Repo, num: int) -> dict[str, Any]:
        return self.get_merge_request(repo.full_name, num)

    def get_merge_request(self, repo_full_name: str, num: int) -> dict[str, Any]:
        payload = self.pulls.get((repo_full_name, num))
        if payload is None:
            raise FetchError(f"404 Not Found: {repo_full_name}#{num}")
        return dict(payload)

    def create_comment(self, repo: Repo, pull_num: int, comment: str) -> None:
        self.comments.append(PostedComment(repo.full_name, pull_num, comment))

    def update_status(
        self,
        repo: Repo,
        pull: PullRequest,
        state: str,
        description: str,
        context: str = STATUS_CONTEXT,
        target_url: str = "",
    ) -> None:
        if state not in COMMIT_STATES:
            raise ValueError(f"Unsupported commit status state: {state}")
        self.statuses.append(
            PostedStatus(repo.full_name, pull.num, state, description, context, target_url)
        )
