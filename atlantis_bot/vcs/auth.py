"""Per-provider API credentials with safe handling."""

from __future__ import annotations

from dataclasses import dataclass

from atlantis_bot.shared.settings import OrchestratorSettings


@dataclass(frozen=True)
class VCSAuth:
    user: str
    token: str | None

    def redacted(self) -> dict[str, str]:
        return {"user": self.user or "unset", "token": _redact_token(self.token)}


def github_auth(settings: OrchestratorSettings) -> VCSAuth:
    return VCSAuth(user=settings.github_user, token=_clean(settings.github_token))


def gitlab_auth(settings: OrchestratorSettings) -> VCSAuth:
    return VCSAuth(user=settings.gitlab_user, token=_clean(settings.gitlab_token))


def _clean(token: str | None) -> str | None:
    if token is None:
        return None
    value = token.strip()
    return value or None


def _redact_token(token: str | None) -> str:
    if token is None:
        return "unset"
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"
