"""Project runner registration and settings-driven selection."""

from __future__ import annotations

from typing import Any

from atlantis_bot.events.project_runners.dry_run import DryRunProjectCommandRunner
from atlantis_bot.shared.settings import OrchestratorSettings


def registered_project_runners(extra: dict[str, Any] | None = None) -> dict[str, Any]:
    runners: dict[str, Any] = {DryRunProjectCommandRunner.name: DryRunProjectCommandRunner()}
    for name, runner in (extra or {}).items():
        runners[name] = runner
    return dict(sorted(runners.items(), key=lambda kv: kv[0]))


def build_project_runner(
    settings: OrchestratorSettings,
    *,
    runners: dict[str, Any] | None = None,
) -> Any:
    available = runners or registered_project_runners()
    configured = settings.project_runner.strip()
    if configured not in available:
        raise ValueError(f"unknown_project_runner:{configured}")
    return available[configured]
