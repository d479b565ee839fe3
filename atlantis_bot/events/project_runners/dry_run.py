"""Runner that reports what would execute without touching infrastructure."""

from __future__ import annotations

from atlantis_bot.models.command_models import ProjectCommandContext, ProjectResult, ResultStatus


class DryRunProjectCommandRunner:
    """Deterministic baseline runner used for local runs and tests."""

    name = "dry_run"

    def plan(self, ctx: ProjectCommandContext) -> ProjectResult:
        return ProjectResult.for_context(ctx, ResultStatus.SUCCESS, _describe("plan", ctx))

    def apply(self, ctx: ProjectCommandContext) -> ProjectResult:
        return ProjectResult.for_context(ctx, ResultStatus.SUCCESS, _describe("apply", ctx))


def _describe(step: str, ctx: ProjectCommandContext) -> str:
    args = " ".join(ctx.extra_args)
    command = f"terraform {step} {args}".strip()
    return (
        f"dry run: `{command}` in {ctx.head_repo.full_name}@{ctx.pull.head_commit or ctx.pull.head_branch}"
        f" dir {ctx.repo_rel_dir} workspace {ctx.workspace} for {ctx.user.username}"
    )
