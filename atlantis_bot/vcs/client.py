"""VCS client contracts, pull request sources, and factory helpers."""

from __future__ import annotations

from typing import Any, Protocol

from atlantis_bot.models.vcs_models import PullRequest, Repo, VCSHostType
from atlantis_bot.shared.settings import OrchestratorSettings


STATUS_CONTEXT = "Atlantis"
COMMIT_STATES = {"pending", "success", "failure"}


class VCSError(RuntimeError):
    """Transport or API failure talking to a VCS host."""


class RetryableVCSError(VCSError):
    def __init__(self, message: str, reason_code: str, retry_after_s: float | None = None) -> None:
        super().__init__(message)
        self.reason_code = reason_code
        self.retry_after_s = retry_after_s


class FetchError(VCSError):
    """Raised by pull request sources when the pull cannot be retrieved."""


class VCSClient(Protocol):
    """Comment and commit-status surface shared by every provider."""

    def create_comment(self, repo: Repo, pull_num: int, comment: str) -> None: ...

    def update_status(
        self,
        repo: Repo,
        pull: PullRequest,
        state: str,
        description: str,
        context: str = STATUS_CONTEXT,
        target_url: str = "",
    ) -> None: ...


class GithubPullGetter(Protocol):
    def get_pull_request(self, repo: Repo, num: int) -> dict[str, Any]: ...


class GitlabMergeRequestGetter(Protocol):
    def get_merge_request(self, repo_full_name: str, num: int) -> dict[str, Any]: ...


def build_vcs_clients(
    settings: OrchestratorSettings,
    connector_type: str = "api",
) -> dict[VCSHostType, Any]:
    """Build one client per configured provider.

    Providers without a token are left out, which is how the command runner
    learns that a host is unsupported.
    """

    if connector_type == "in_memory":
        from atlantis_bot.vcs.client_inmemory import InMemoryVCSClient

        shared = InMemoryVCSClient()
        return {VCSHostType.GITHUB: shared, VCSHostType.GITLAB: shared}

    clients: dict[VCSHostType, Any] = {}
    if settings.github_enabled:
        from atlantis_bot.vcs.auth import github_auth
        from atlantis_bot.vcs.github_client import GitHubAPIClient

        clients[VCSHostType.GITHUB] = GitHubAPIClient(
            hostname=settings.github_hostname, auth=github_auth(settings)
        )
    if settings.gitlab_enabled:
        from atlantis_bot.vcs.auth import gitlab_auth
        from atlantis_bot.vcs.gitlab_client import GitLabAPIClient

        clients[VCSHostType.GITLAB] = GitLabAPIClient(
            hostname=settings.gitlab_hostname, auth=gitlab_auth(settings)
        )
    return clients


__all__ = [
    "COMMIT_STATES",
    "FetchError",
    "GithubPullGetter",
    "GitlabMergeRequestGetter",
    "RetryableVCSError",
    "STATUS_CONTEXT",
    "VCSClient",
    "VCSError",
    "build_vcs_clients",
]
