"""Routes comment and status calls to the client for a repository's host."""

from __future__ import annotations

from typing import Any

from atlantis_bot.models.vcs_models import PullRequest, Repo, VCSHostType
from atlantis_bot.vcs.client import STATUS_CONTEXT, VCSClient, VCSError


class ClientProxy:
    def __init__(self, clients: dict[VCSHostType, Any]) -> None:
        self.clients = dict(clients)

    def _client_for(self, repo: Repo) -> VCSClient:
        client = self.clients.get(repo.vcs_host.type)
        if client is None:
            raise VCSError(f"no VCS client configured for {repo.vcs_host.type.display_name}")
        return client

    def create_comment(self, repo: Repo, pull_num: int, comment: str) -> None:
        self._client_for(repo).create_comment(repo, pull_num, comment)

    def update_status(
        self,
        repo: Repo,
        pull: PullRequest,
        state: str,
        description: str,
        context: str = STATUS_CONTEXT,
        target_url: str = "",
    ) -> None:
        self._client_for(repo).update_status(
            repo, pull, state, description, context, target_url=target_url
        )
