"""Normalize provider pull request payloads into the canonical models."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from atlantis_bot.models.vcs_models import PullRequest, PullRequestState, Repo, VCSHostType


class ParseError(ValueError):
    """A provider payload is missing a field the orchestrator requires."""


_GITLAB_STATES = {
    "opened": PullRequestState.OPEN,
    "closed": PullRequestState.CLOSED,
    "locked": PullRequestState.CLOSED,
    "merged": PullRequestState.MERGED,
}


class EventParser:
    def __init__(self, github_hostname: str = "github.com", gitlab_hostname: str = "gitlab.com") -> None:
        self.github_hostname = github_hostname
        self.gitlab_hostname = gitlab_hostname

    def parse_github_pull(self, pull: dict[str, Any]) -> tuple[PullRequest, Repo, Repo]:
        """Return ``(pull, base_repo, head_repo)`` for a GitHub pull payload."""

        head_commit = _require(pull, "head.sha")
        url = _require(pull, "html_url")
        head_branch = _require(pull, "head.ref")
        base_branch = _require(pull, "base.ref")
        author = _require(pull, "user.login")
        num = _require(pull, "number")
        raw_state = _require(pull, "state")

        base_repo = self.parse_github_repo(_require(pull, "base.repo"), field="base.repo")
        head_repo = self.parse_github_repo(_require(pull, "head.repo"), field="head.repo")

        if raw_state == "open":
            state = PullRequestState.OPEN
        elif pull.get("merged") or pull.get("merged_at"):
            state = PullRequestState.MERGED
        else:
            state = PullRequestState.CLOSED

        return (
            _build_pull(
                num=num,
                head_commit=head_commit,
                url=url,
                head_branch=head_branch,
                base_branch=base_branch,
                author=author,
                state=state,
                base_repo=base_repo,
                head_repo=head_repo,
            ),
            base_repo,
            head_repo,
        )

    def parse_github_repo(self, repo: dict[str, Any], field: str = "repo") -> Repo:
        if not isinstance(repo, dict):
            raise ParseError(f"{field} is not an object")
        full_name = _require(repo, "full_name", prefix=field)
        if not isinstance(full_name, str):
            raise ParseError(f"{field}.full_name is not a string")
        clone_url = str(repo.get("clone_url") or "")
        try:
            return Repo.from_full_name(
                full_name, VCSHostType.GITHUB, hostname=self.github_hostname, clone_url=clone_url
            )
        except (ValueError, ValidationError) as exc:
            raise ParseError(str(exc)) from exc

    def parse_gitlab_merge_request(
        self,
        mr: dict[str, Any],
        base_repo: Repo,
        head_repo: Repo | None = None,
    ) -> tuple[PullRequest, Repo, Repo]:
        """Return ``(pull, base_repo, head_repo)`` for a GitLab merge request.

        Merge request payloads carry project ids rather than repository
        identities, so the repositories come from the triggering event. A
        missing head repository can only be inferred when the merge request
        stays within the base project.
        """

        num = _require(mr, "iid")
        head_commit = _require(mr, "sha")
        url = _require(mr, "web_url")
        head_branch = _require(mr, "source_branch")
        base_branch = _require(mr, "target_branch")
        author = _require(mr, "author.username")
        raw_state = _require(mr, "state")

        state = _GITLAB_STATES.get(str(raw_state))
        if state is None:
            raise ParseError(f"unknown merge request state {raw_state!r}")

        if head_repo is None:
            source_project = mr.get("source_project_id")
            target_project = mr.get("target_project_id")
            if source_project is None or source_project != target_project:
                raise ParseError("head repository unknown for merge request from another project")
            head_repo = base_repo

        return (
            _build_pull(
                num=num,
                head_commit=head_commit,
                url=url,
                head_branch=head_branch,
                base_branch=base_branch,
                author=author,
                state=state,
                base_repo=base_repo,
                head_repo=head_repo,
            ),
            base_repo,
            head_repo,
        )


def _require(payload: dict[str, Any], dotted: str, prefix: str = "") -> Any:
    label = f"{prefix}.{dotted}" if prefix else dotted
    value: Any = payload
    for key in dotted.split("."):
        if not isinstance(value, dict):
            raise ParseError(f"{label} is null")
        value = value.get(key)
    if value is None or value == "":
        raise ParseError(f"{label} is null")
    return value


def _build_pull(**values: Any) -> PullRequest:
    try:
        return PullRequest(**values)
    except ValidationError as exc:
        raise ParseError(f"invalid pull request: {exc.errors()[0]['msg']}") from exc
