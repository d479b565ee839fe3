"""Comment command orchestration: authorize, fetch, build, run, report."""

from __future__ import annotations

import functools
import logging
import traceback
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from atlantis_bot.events.authorization import (
    GateDecision,
    check_fork,
    check_provider_configured,
    check_pull_state,
)
from atlantis_bot.events.commit_status_updater import CommitStatusUpdater
from atlantis_bot.events.event_parser import EventParser, ParseError
from atlantis_bot.events.markdown_renderer import MarkdownRenderer
from atlantis_bot.events.project_command_builder import BuildError, ProjectCommandBuilder
from atlantis_bot.events.project_runners.base import ProjectCommandRunner
from atlantis_bot.models.command_models import (
    CommandName,
    CommandResult,
    CommentCommand,
    ProjectCommandContext,
    ProjectResult,
    ResultStatus,
)
from atlantis_bot.models.vcs_models import PullRequest, Repo, User, VCSHostType
from atlantis_bot.shared.log import PullLogger, pull_logger
from atlantis_bot.shared.settings import OrchestratorSettings
from atlantis_bot.vcs.client import (
    GithubPullGetter,
    GitlabMergeRequestGetter,
    VCSClient,
    VCSError,
)


LOGGER = logging.getLogger(__name__)

INTERNAL_PANIC_MARKER = "Error: internal panic"


class RequestStage(str, Enum):
    RECEIVED = "received"
    CONFIG_CHECKED = "config_checked"
    PULL_FETCHED = "pull_fetched"
    PULL_PARSED = "pull_parsed"
    AUTHORIZED = "authorized"
    BUILT = "built"
    EXECUTED = "executed"
    REPORTED = "reported"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class _RequestContext:
    """Mutable per-request state; never shared between requests."""

    base_repo: Repo
    pull_num: int
    user: User
    log: PullLogger
    stage: RequestStage = RequestStage.RECEIVED
    commented: bool = False

    def advance(self, stage: RequestStage) -> None:
        self.log.debug("%s -> %s", self.stage.value, stage.value)
        self.stage = stage


def recover_panics(func: Callable[..., None]) -> Callable[..., None]:
    """Contain any unexpected fault raised while handling one request.

    The fault is reported back on the pull request, unless the request
    already commented, and is never re-raised.
    """

    @functools.wraps(func)
    def wrapper(self: "DefaultCommandRunner", ctx: _RequestContext, *args: Any) -> None:
        try:
            func(self, ctx, *args)
        except Exception as exc:  # noqa: BLE001
            stack = traceback.format_exc()
            ctx.log.error("panic in stage %s: %s\n%s", ctx.stage.value, exc, stack)
            ctx.advance(RequestStage.FAILED)
            if ctx.commented:
                return
            body = f"{INTERNAL_PANIC_MARKER}. This is a bug.\n```\n{exc!r}\n{stack}```"
            self._comment(ctx, body)

    return wrapper


class DefaultCommandRunner:
    def __init__(
        self,
        *,
        vcs_client: VCSClient,
        commit_status_updater: CommitStatusUpdater,
        event_parser: EventParser,
        project_command_builder: ProjectCommandBuilder,
        project_command_runner: ProjectCommandRunner,
        github_pull_getter: GithubPullGetter | None = None,
        gitlab_merge_request_getter: GitlabMergeRequestGetter | None = None,
        markdown_renderer: MarkdownRenderer | None = None,
        settings: OrchestratorSettings | None = None,
    ) -> None:
        self.vcs_client = vcs_client
        self.commit_status_updater = commit_status_updater
        self.event_parser = event_parser
        self.project_command_builder = project_command_builder
        self.project_command_runner = project_command_runner
        self.github_pull_getter = github_pull_getter
        self.gitlab_merge_request_getter = gitlab_merge_request_getter
        self.markdown_renderer = markdown_renderer or MarkdownRenderer()
        self.settings = settings or OrchestratorSettings()

    def run_comment_command(
        self,
        base_repo: Repo,
        maybe_head_repo: Repo | None,
        maybe_pull: dict[str, Any] | None,
        user: User,
        pull_num: int,
        command: CommentCommand | None,
    ) -> None:
        """Handle one comment command end to end.

        ``maybe_pull`` is a raw provider payload already delivered with the
        event; when absent the pull request is fetched from the provider.
        Every outcome is observed through at most one comment and at most one
        commit status; nothing is raised to the caller.
        """

        try:
            ctx = _RequestContext(
                base_repo=base_repo,
                pull_num=pull_num,
                user=user,
                log=pull_logger(base_repo.full_name, pull_num, name=__name__),
            )
        except Exception:  # noqa: BLE001
            # Without a repository there is nowhere to comment.
            LOGGER.exception("dropping comment command for pull %s: malformed request", pull_num)
            return
        self._run(ctx, maybe_head_repo, maybe_pull, command)
        ctx.log.info("finished %s in stage %s", command or "<no command>", ctx.stage.value)

    @recover_panics
    def _run(
        self,
        ctx: _RequestContext,
        maybe_head_repo: Repo | None,
        maybe_pull: dict[str, Any] | None,
        command: CommentCommand | None,
    ) -> None:
        host_type = ctx.base_repo.vcs_host.type
        pull_source = self._pull_source(host_type)
        if not self._passes(ctx, check_provider_configured(host_type, pull_source)):
            return
        ctx.advance(RequestStage.CONFIG_CHECKED)

        try:
            raw_pull = maybe_pull if maybe_pull is not None else self._fetch(ctx, host_type, pull_source)
        except VCSError as exc:
            noun = "pull request" if host_type is VCSHostType.GITHUB else "merge request"
            self._fail(ctx, f"`Error: making {noun} API call to {host_type.display_name}: {exc}`")
            return
        ctx.advance(RequestStage.PULL_FETCHED)

        try:
            pull, head_repo = self._parse(ctx, host_type, raw_pull, maybe_head_repo)
        except ParseError as exc:
            self._fail(ctx, f"`Error: extracting required fields from comment data: {exc}`")
            return
        ctx.advance(RequestStage.PULL_PARSED)

        fork_decision = check_fork(
            ctx.base_repo,
            head_repo,
            self.settings.allow_fork_prs,
            self.settings.allow_fork_prs_flag,
        )
        if not self._passes(ctx, fork_decision):
            return
        if not self._passes(ctx, check_pull_state(pull)):
            return
        ctx.advance(RequestStage.AUTHORIZED)

        if command is None:
            ctx.log.info("no command to run")
            return
        if command.name is CommandName.HELP:
            self._comment(ctx, self.markdown_renderer.render_help())
            ctx.advance(RequestStage.REPORTED)
            return

        result = self._build_and_run(ctx, head_repo, pull, command)
        self._report(ctx, pull, command.name, result)

    def _pull_source(self, host_type: VCSHostType) -> Any | None:
        if host_type is VCSHostType.GITHUB:
            return self.github_pull_getter
        return self.gitlab_merge_request_getter

    def _fetch(self, ctx: _RequestContext, host_type: VCSHostType, pull_source: Any) -> dict[str, Any]:
        if host_type is VCSHostType.GITHUB:
            return pull_source.get_pull_request(ctx.base_repo, ctx.pull_num)
        return pull_source.get_merge_request(ctx.base_repo.full_name, ctx.pull_num)

    def _parse(
        self,
        ctx: _RequestContext,
        host_type: VCSHostType,
        raw_pull: dict[str, Any],
        maybe_head_repo: Repo | None,
    ) -> tuple[PullRequest, Repo]:
        if host_type is VCSHostType.GITHUB:
            pull, _base, head_repo = self.event_parser.parse_github_pull(raw_pull)
        else:
            pull, _base, head_repo = self.event_parser.parse_gitlab_merge_request(
                raw_pull, ctx.base_repo, maybe_head_repo
            )
        return pull, head_repo

    def _build_and_run(
        self,
        ctx: _RequestContext,
        head_repo: Repo,
        pull: PullRequest,
        command: CommentCommand,
    ) -> CommandResult:
        try:
            contexts = self.project_command_builder.build_commands(
                ctx.base_repo, head_repo, pull, ctx.user, command
            )
        except BuildError as exc:
            ctx.log.warning("building project commands failed: %s", exc)
            ctx.advance(RequestStage.BUILT)
            return CommandResult(error=str(exc))
        ctx.advance(RequestStage.BUILT)
        ctx.log.info("running %s for %d project(s)", command.name.value, len(contexts))

        if self.settings.parallel_projects and len(contexts) > 1:
            workers = min(len(contexts), self.settings.worker_count)
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(self._run_project, contexts))
        else:
            results = [self._run_project(project_ctx) for project_ctx in contexts]
        ctx.advance(RequestStage.EXECUTED)
        return CommandResult(project_results=tuple(results))

    def _run_project(self, project_ctx: ProjectCommandContext) -> ProjectResult:
        run = (
            self.project_command_runner.apply
            if project_ctx.command_name is CommandName.APPLY
            else self.project_command_runner.plan
        )
        try:
            return run(project_ctx)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception(
                "project runner raised for %s dir=%s workspace=%s",
                project_ctx.base_repo.full_name,
                project_ctx.repo_rel_dir,
                project_ctx.workspace,
            )
            return ProjectResult.for_context(project_ctx, ResultStatus.ERROR, str(exc))

    def _report(
        self,
        ctx: _RequestContext,
        pull: PullRequest,
        command_name: CommandName,
        result: CommandResult,
    ) -> None:
        body = self.markdown_renderer.render(result, command_name)
        self._comment(ctx, body)
        try:
            self.commit_status_updater.update_from_result(ctx.base_repo, pull, command_name, result)
        except Exception as exc:  # noqa: BLE001
            ctx.log.error("unable to update commit status: %s", exc)
        ctx.advance(RequestStage.REPORTED)

    def _passes(self, ctx: _RequestContext, decision: GateDecision) -> bool:
        if decision.allowed:
            return True
        if decision.comment:
            self._fail(ctx, decision.comment)
        else:
            ctx.log.error(decision.log_message)
            ctx.advance(RequestStage.REJECTED)
        return False

    def _fail(self, ctx: _RequestContext, comment: str) -> None:
        ctx.log.warning("%s", comment)
        self._comment(ctx, comment)
        ctx.advance(RequestStage.FAILED)

    def _comment(self, ctx: _RequestContext, body: str) -> None:
        if ctx.commented:
            ctx.log.error("refusing to post a second comment")
            return
        ctx.commented = True
        try:
            self.vcs_client.create_comment(ctx.base_repo, ctx.pull_num, body)
        except Exception as exc:  # noqa: BLE001
            ctx.log.error("unable to comment: %s", exc)
