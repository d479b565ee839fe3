"""Comment command, project execution unit, and result contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from atlantis_bot.models.vcs_models import PullRequest, Repo, User


DEFAULT_WORKSPACE = "default"
DEFAULT_DIR = "."


def project_heading(project_name: str, repo_rel_dir: str, workspace: str) -> str:
    if project_name:
        return f"project: `{project_name}` dir: `{repo_rel_dir}` workspace: `{workspace}`"
    return f"dir: `{repo_rel_dir}` workspace: `{workspace}`"


class CommandName(str, Enum):
    PLAN = "plan"
    APPLY = "apply"
    HELP = "help"

    def title_string(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class CommentCommand:
    """A directive parsed from a pull request comment."""

    name: CommandName
    workspace: str = ""
    dir: str = ""
    project: str = ""
    flags: tuple[str, ...] = ()
    verbose: bool = False

    def __str__(self) -> str:
        parts = [self.name.value]
        if self.workspace:
            parts.append(f"-w {self.workspace}")
        if self.dir:
            parts.append(f"-d {self.dir}")
        if self.project:
            parts.append(f"-p {self.project}")
        if self.verbose:
            parts.append("--verbose")
        if self.flags:
            parts.append("-- " + " ".join(self.flags))
        return " ".join(parts)


@dataclass(frozen=True)
class ProjectCommandContext:
    """One expanded directory/workspace unit of a comment command."""

    base_repo: Repo
    head_repo: Repo
    pull: PullRequest
    user: User
    command_name: CommandName
    repo_rel_dir: str = DEFAULT_DIR
    workspace: str = DEFAULT_WORKSPACE
    project_name: str = ""
    extra_args: tuple[str, ...] = ()
    verbose: bool = False

    @property
    def heading(self) -> str:
        return project_heading(self.project_name, self.repo_rel_dir, self.workspace)


class ResultStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


@dataclass(frozen=True)
class ProjectResult:
    repo_rel_dir: str
    workspace: str
    status: ResultStatus
    output: str = ""
    project_name: str = ""

    @classmethod
    def for_context(
        cls, ctx: ProjectCommandContext, status: ResultStatus, output: str = ""
    ) -> "ProjectResult":
        return cls(
            repo_rel_dir=ctx.repo_rel_dir,
            workspace=ctx.workspace,
            status=status,
            output=output,
            project_name=ctx.project_name,
        )

    @property
    def heading(self) -> str:
        return project_heading(self.project_name, self.repo_rel_dir, self.workspace)


@dataclass(frozen=True)
class CommandResult:
    """Aggregate outcome of one comment command.

    ``error`` and ``failure`` are pipeline-level messages, set when no
    project could be run at all. Otherwise ``project_results`` holds one
    entry per built context in builder order.
    """

    error: str = ""
    failure: str = ""
    project_results: tuple[ProjectResult, ...] = field(default_factory=tuple)

    @property
    def status(self) -> ResultStatus:
        if self.error or any(r.status is ResultStatus.ERROR for r in self.project_results):
            return ResultStatus.ERROR
        if self.failure or any(r.status is ResultStatus.FAILURE for r in self.project_results):
            return ResultStatus.FAILURE
        return ResultStatus.SUCCESS

    @property
    def is_noop(self) -> bool:
        return not self.error and not self.failure and not self.project_results
