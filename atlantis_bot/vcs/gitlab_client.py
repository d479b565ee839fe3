"""GitLab REST API client: merge request source, notes, and commit statuses."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests

from atlantis_bot.models.vcs_models import PullRequest, Repo
from atlantis_bot.vcs.auth import VCSAuth
from atlantis_bot.vcs.client import (
    COMMIT_STATES,
    STATUS_CONTEXT,
    FetchError,
    RetryableVCSError,
    VCSError,
)


# GitLab names the failed state differently from GitHub.
_STATE_MAP = {"pending": "pending", "success": "success", "failure": "failed"}

# GitLab rejects notes longer than one million characters.
MAX_COMMENT_LENGTH = 1_000_000
TRUNCATION_NOTICE = "\n\n**Warning**: Output truncated, comment exceeded GitLab's size limit."


class GitLabAPIClient:
    def __init__(
        self,
        hostname: str = "gitlab.com",
        auth: VCSAuth | None = None,
        session: requests.Session | None = None,
        timeout_s: float = 15,
    ) -> None:
        self.hostname = hostname
        self.auth = auth or VCSAuth(user="", token=None)
        self.base_url = f"https://{hostname.strip().rstrip('/') or 'gitlab.com'}/api/v4"
        self.session = session or requests.Session()
        self.timeout_s = timeout_s

    def get_merge_request(self, repo_full_name: str, num: int) -> dict[str, Any]:
        try:
            payload = self._request(
                "GET", f"/projects/{_project_id(repo_full_name)}/merge_requests/{num}"
            )
        except (requests.RequestException, VCSError) as exc:
            raise FetchError(str(exc)) from exc
        if not isinstance(payload, dict):
            raise FetchError(f"unexpected merge request payload type {type(payload).__name__}")
        return payload

    def create_comment(self, repo: Repo, pull_num: int, comment: str) -> None:
        if len(comment) > MAX_COMMENT_LENGTH:
            comment = comment[: MAX_COMMENT_LENGTH - len(TRUNCATION_NOTICE)] + TRUNCATION_NOTICE
        self._request(
            "POST",
            f"/projects/{_project_id(repo.full_name)}/merge_requests/{pull_num}/notes",
            json={"body": comment},
        )

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
        if not pull.head_commit:
            raise VCSError(f"merge request !{pull.num} has no head commit to set status on")
        payload = {"state": _STATE_MAP[state], "description": description, "name": context}
        if pull.head_branch:
            payload["ref"] = pull.head_branch
        if target_url:
            payload["target_url"] = target_url
        self._request(
            "POST",
            f"/projects/{_project_id(repo.full_name)}/statuses/{pull.head_commit}",
            json=payload,
        )

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if self.auth.token:
            headers["PRIVATE-TOKEN"] = self.auth.token

        response = self.session.request(
            method=method,
            url=f"{self.base_url}{path}",
            headers=headers,
            json=json,
            params=None,
            timeout=self.timeout_s,
        )
        if response.status_code == 429:
            raise RetryableVCSError("GitLab API rate limited", reason_code="gitlab_rate_limited")
        if response.status_code in {500, 502, 503, 504}:
            raise RetryableVCSError(
                f"GitLab API {response.status_code} response",
                reason_code=f"gitlab_{response.status_code}",
            )

        response.raise_for_status()
        if not response.content:
            return {}
        return response.json()


def _project_id(repo_full_name: str) -> str:
    return quote(repo_full_name, safe="")
