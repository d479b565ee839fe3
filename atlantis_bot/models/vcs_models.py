"""Provider-neutral repository, user, and pull request models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class VCSHostType(str, Enum):
    GITHUB = "github"
    GITLAB = "gitlab"

    @property
    def display_name(self) -> str:
        return "GitHub" if self is VCSHostType.GITHUB else "GitLab"


class PullRequestState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"


class VCSHost(BaseModel):
    model_config = ConfigDict(frozen=True)

    hostname: str = Field(min_length=1)
    type: VCSHostType


class Repo(BaseModel):
    """Immutable repository identity."""

    model_config = ConfigDict(frozen=True)

    full_name: str = Field(min_length=3)
    owner: str = Field(min_length=1)
    name: str = Field(min_length=1)
    clone_url: str = ""
    vcs_host: VCSHost

    @classmethod
    def from_full_name(
        cls,
        full_name: str,
        host_type: VCSHostType,
        hostname: str = "",
        clone_url: str = "",
    ) -> "Repo":
        if not isinstance(full_name, str):
            raise ValueError(f"invalid repo full name {full_name!r}: expected a string")
        owner, sep, name = full_name.strip().rpartition("/")
        if not sep or not owner or not name:
            raise ValueError(f"invalid repo full name {full_name!r}: expected <owner>/<name>")
        default_host = "github.com" if host_type is VCSHostType.GITHUB else "gitlab.com"
        return cls(
            full_name=full_name.strip(),
            owner=owner,
            name=name,
            clone_url=clone_url,
            vcs_host=VCSHost(hostname=hostname or default_host, type=host_type),
        )


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str


class PullRequest(BaseModel):
    """Canonical pull/merge request, built once per request by the event parser."""

    model_config = ConfigDict(frozen=True)

    num: int = Field(ge=0)
    head_commit: str = ""
    url: str = ""
    head_branch: str = ""
    base_branch: str = ""
    author: str = ""
    state: PullRequestState
    base_repo: Repo | None = None
    head_repo: Repo | None = None
