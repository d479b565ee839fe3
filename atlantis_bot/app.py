"""Wiring of the command runner from settings."""

from __future__ import annotations

from typing import Any

from atlantis_bot.events.command_runner import DefaultCommandRunner
from atlantis_bot.events.commit_status_updater import DefaultCommitStatusUpdater
from atlantis_bot.events.event_parser import EventParser
from atlantis_bot.events.markdown_renderer import MarkdownRenderer
from atlantis_bot.events.project_command_builder import DefaultProjectCommandBuilder
from atlantis_bot.events.project_runners import build_project_runner
from atlantis_bot.events.worker_pool import CommentCommandWorkerPool
from atlantis_bot.models.vcs_models import VCSHostType
from atlantis_bot.shared.settings import OrchestratorSettings
from atlantis_bot.vcs.client import build_vcs_clients
from atlantis_bot.vcs.client_proxy import ClientProxy


def create_command_runner(
    settings: OrchestratorSettings,
    clients: dict[VCSHostType, Any] | None = None,
    project_runner: Any | None = None,
) -> DefaultCommandRunner:
    vcs_clients = build_vcs_clients(settings) if clients is None else dict(clients)
    proxy = ClientProxy(vcs_clients)
    return DefaultCommandRunner(
        vcs_client=proxy,
        commit_status_updater=DefaultCommitStatusUpdater(proxy, target_url=settings.atlantis_url),
        event_parser=EventParser(
            github_hostname=settings.github_hostname,
            gitlab_hostname=settings.gitlab_hostname,
        ),
        markdown_renderer=MarkdownRenderer(),
        project_command_builder=DefaultProjectCommandBuilder(),
        project_command_runner=project_runner or build_project_runner(settings),
        github_pull_getter=vcs_clients.get(VCSHostType.GITHUB),
        gitlab_merge_request_getter=vcs_clients.get(VCSHostType.GITLAB),
        settings=settings,
    )


def create_worker_pool(
    settings: OrchestratorSettings,
    clients: dict[VCSHostType, Any] | None = None,
) -> CommentCommandWorkerPool:
    return CommentCommandWorkerPool(
        create_command_runner(settings, clients=clients), worker_count=settings.worker_count
    )
