"""Expansion of a comment command into project execution units."""

from __future__ import annotations

import posixpath
from typing import Protocol

from atlantis_bot.models.command_models import (
    DEFAULT_DIR,
    DEFAULT_WORKSPACE,
    CommentCommand,
    ProjectCommandContext,
)
from atlantis_bot.models.vcs_models import PullRequest, Repo, User


class BuildError(RuntimeError):
    """The command could not be expanded into projects."""


class ProjectCommandBuilder(Protocol):
    def build_commands(
        self,
        base_repo: Repo,
        head_repo: Repo,
        pull: PullRequest,
        user: User,
        command: CommentCommand,
    ) -> list[ProjectCommandContext]: ...


class DefaultProjectCommandBuilder:
    """Builds a single context from the command's directory and workspace."""

    def build_commands(
        self,
        base_repo: Repo,
        head_repo: Repo,
        pull: PullRequest,
        user: User,
        command: CommentCommand,
    ) -> list[ProjectCommandContext]:
        return [
            ProjectCommandContext(
                base_repo=base_repo,
                head_repo=head_repo,
                pull=pull,
                user=user,
                command_name=command.name,
                repo_rel_dir=clean_repo_rel_dir(command.dir or DEFAULT_DIR),
                workspace=validate_workspace(command.workspace or DEFAULT_WORKSPACE),
                project_name=command.project,
                extra_args=tuple(command.flags),
                verbose=command.verbose,
            )
        ]


def clean_repo_rel_dir(raw: str) -> str:
    if posixpath.isabs(raw):
        raise BuildError(f"dir {raw!r} must be relative to the repository root")
    cleaned = posixpath.normpath(raw)
    if cleaned == ".." or cleaned.startswith("../"):
        raise BuildError(f"dir {raw!r} escapes the repository root")
    return cleaned


def validate_workspace(raw: str) -> str:
    workspace = raw.strip()
    if not workspace or "/" in workspace or workspace in {".", ".."}:
        raise BuildError(f"invalid workspace {raw!r}")
    return workspace
