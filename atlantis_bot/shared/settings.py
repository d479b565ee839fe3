"""Runtime settings for the comment command orchestrator."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml


DEFAULT_ALLOW_FORK_PRS_FLAG = "allow-fork-prs"
_TRUE_VALUES = {"1", "true", "yes", "on"}

# Dashed config-file keys mirror the server flag names.
_FILE_KEYS: dict[str, str] = {
    "allow-fork-prs": "allow_fork_prs",
    "allow-fork-prs-flag": "allow_fork_prs_flag",
    "gh-hostname": "github_hostname",
    "gh-user": "github_user",
    "gh-token": "github_token",
    "gitlab-hostname": "gitlab_hostname",
    "gitlab-user": "gitlab_user",
    "gitlab-token": "gitlab_token",
    "worker-count": "worker_count",
    "parallel-projects": "parallel_projects",
    "project-runner": "project_runner",
    "log-level": "log_level",
    "atlantis-url": "atlantis_url",
}

_ENV_KEYS: dict[str, str] = {
    "ATLANTIS_ALLOW_FORK_PRS": "allow_fork_prs",
    "ATLANTIS_ALLOW_FORK_PRS_FLAG": "allow_fork_prs_flag",
    "ATLANTIS_GH_HOSTNAME": "github_hostname",
    "ATLANTIS_GH_USER": "github_user",
    "ATLANTIS_GH_TOKEN": "github_token",
    "ATLANTIS_GITLAB_HOSTNAME": "gitlab_hostname",
    "ATLANTIS_GITLAB_USER": "gitlab_user",
    "ATLANTIS_GITLAB_TOKEN": "gitlab_token",
    "ATLANTIS_WORKER_COUNT": "worker_count",
    "ATLANTIS_PARALLEL_PROJECTS": "parallel_projects",
    "ATLANTIS_PROJECT_RUNNER": "project_runner",
    "ATLANTIS_LOG_LEVEL": "log_level",
    "ATLANTIS_URL": "atlantis_url",
}


@dataclass(frozen=True)
class OrchestratorSettings:
    """Configuration injected into the command runner at construction."""

    allow_fork_prs: bool = False
    allow_fork_prs_flag: str = DEFAULT_ALLOW_FORK_PRS_FLAG
    github_hostname: str = "github.com"
    github_user: str = ""
    github_token: str | None = None
    gitlab_hostname: str = "gitlab.com"
    gitlab_user: str = ""
    gitlab_token: str | None = None
    worker_count: int = 4
    parallel_projects: bool = False
    project_runner: str = "dry_run"
    log_level: str = "INFO"
    atlantis_url: str = ""

    @property
    def github_enabled(self) -> bool:
        return bool(self.github_token)

    @property
    def gitlab_enabled(self) -> bool:
        return bool(self.gitlab_token)

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        config_path: str | Path | None = None,
    ) -> "OrchestratorSettings":
        source = os.environ if env is None else env
        settings = cls()
        path = config_path or source.get("ATLANTIS_CONFIG")
        if path:
            settings = settings.merged(_load_config_file(Path(path)))
        overrides = {
            attr: source[key] for key, attr in _ENV_KEYS.items() if source.get(key, "") != ""
        }
        return settings.merged(overrides)

    def merged(self, overrides: Mapping[str, Any]) -> "OrchestratorSettings":
        """Return a copy with ``overrides`` coerced onto the declared field types."""

        known = {field.name: field for field in fields(self)}
        coerced: dict[str, Any] = {}
        for name, raw in overrides.items():
            if name not in known:
                raise ValueError(f"unknown_setting:{name}")
            coerced[name] = _coerce(name, raw, getattr(self, name))
        return replace(self, **coerced)


def _load_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    loaded = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    overrides: dict[str, Any] = {}
    for key, value in loaded.items():
        attr = _FILE_KEYS.get(str(key))
        if attr is None:
            raise ValueError(f"unknown_config_key:{key}")
        overrides[attr] = value
    return overrides


def _coerce(name: str, raw: Any, current: Any) -> Any:
    if isinstance(current, bool):
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in _TRUE_VALUES
    if isinstance(current, int):
        try:
            value = int(raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid_integer_setting:{name}") from exc
        if value < 1:
            raise ValueError(f"invalid_integer_setting:{name}")
        return value
    if raw is None:
        return None
    value = str(raw).strip()
    if name.endswith("_token"):
        return value or None
    return value
