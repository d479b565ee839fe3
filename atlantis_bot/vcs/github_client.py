"""GitHub REST API client: pull request source, comments, and commit statuses."""

from __future__ import annotations

from typing import Any

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


# GitHub rejects issue comments longer than this.
MAX_COMMENT_LENGTH = 65536
TRUNCATION_NOTICE = "\n\n**Warning**: Output truncated, comment exceeded GitHub's size limit."


class GitHubAPIClient:
    def __init__(
        self,
        hostname: str = "github.com",
        auth: VCSAuth | None = None,
        session: requests.Session | None = None,
        timeout_s: float = 15,
    ) -> None:
        self.hostname = hostname
        self.auth = auth or VCSAuth(user="", token=None)
        self.base_url = _api_base_url(hostname)
        self.session = session or requests.Session()
        self.timeout_s = timeout_s

    def get_pull_request(self, repo: Repo, num: int) -> dict[str, Any]:
        try:
            payload = self._request("GET", f"/repos/{repo.full_name}/pulls/{num}")
        except (requests.RequestException, VCSError) as exc:
            raise FetchError(str(exc)) from exc
        if not isinstance(payload, dict):
            raise FetchError(f"unexpected pull request payload type {type(payload).__name__}")
        return payload

    def create_comment(self, repo: Repo, pull_num: int, comment: str) -> None:
        if len(comment) > MAX_COMMENT_LENGTH:
            comment = comment[: MAX_COMMENT_LENGTH - len(TRUNCATION_NOTICE)] + TRUNCATION_NOTICE
        self._request(
            "POST",
            f"/repos/{repo.full_name}/issues/{pull_num}/comments",
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
            raise VCSError(f"pull request #{pull.num} has no head commit to set status on")
        payload = {"state": state, "description": description, "context": context}
        if target_url:
            payload["target_url"] = target_url
        self._request(
            "POST",
            f"/repos/{repo.full_name}/statuses/{pull.head_commit}",
            json=payload,
        )

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.auth.token:
            headers["Authorization"] = f"Bearer {self.auth.token}"

        response = self.session.request(
            method=method,
            url=f"{self.base_url}{path}",
            headers=headers,
            json=json,
            params=params,
            timeout=self.timeout_s,
        )

        if response.status_code in {429, 403} and _looks_like_rate_limit(response):
            raise RetryableVCSError(
                "GitHub API rate limited",
                reason_code="github_rate_limited",
                retry_after_s=_parse_retry_after((response.headers or {}).get("Retry-After")),
            )
        if response.status_code in {500, 502, 503, 504}:
            raise RetryableVCSError(
                f"GitHub API {response.status_code} response",
                reason_code=f"github_{response.status_code}",
            )

        response.raise_for_status()
        if not response.content:
            return {}
        return response.json()


def _api_base_url(hostname: str) -> str:
    host = hostname.strip().rstrip("/")
    if host in {"", "github.com"}:
        return "https://api.github.com"
    return f"https://{host}/api/v3"


def _looks_like_rate_limit(response: requests.Response) -> bool:
    if response.status_code == 429:
        return True
    try:
        payload = response.json()
    except ValueError:
        return False
    if not isinstance(payload, dict):
        return False
    return "rate limit" in str(payload.get("message", "")).lower()


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    return parsed if parsed >= 0 else None
