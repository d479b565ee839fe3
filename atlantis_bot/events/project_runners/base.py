"""Project command runner contract."""

from __future__ import annotations

from typing import Protocol

from atlantis_bot.models.command_models import ProjectCommandContext, ProjectResult


class ProjectCommandRunner(Protocol):
    """Runs one project context.

    Implementations encode failures in the returned result rather than
    raising.
    """

    name: str

    def plan(self, ctx: ProjectCommandContext) -> ProjectResult: ...

    def apply(self, ctx: ProjectCommandContext) -> ProjectResult: ...
