"""Policy checks applied before any project is built or run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from atlantis_bot.models.vcs_models import PullRequest, PullRequestState, Repo, VCSHostType


REASON_ALLOWED = "allowed"
REASON_PROVIDER_NOT_CONFIGURED = "provider_not_configured"
REASON_FORK_DISALLOWED = "fork_disallowed"
REASON_PULL_NOT_OPEN = "pull_not_open"

CLOSED_PULL_COMMENT = "Atlantis commands can't be run on closed pull requests"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of a gate check.

    A rejection carries either a ``comment`` for the pull request or, for
    configuration problems, only a ``log_message``.
    """

    allowed: bool
    reason_code: str
    comment: str = ""
    log_message: str = ""


ALLOW = GateDecision(allowed=True, reason_code=REASON_ALLOWED)


def check_provider_configured(host_type: VCSHostType, pull_source: Any | None) -> GateDecision:
    if pull_source is not None:
        return ALLOW
    return GateDecision(
        allowed=False,
        reason_code=REASON_PROVIDER_NOT_CONFIGURED,
        log_message=f"Atlantis not configured to support {host_type.display_name}",
    )


def is_fork(base_repo: Repo, head_repo: Repo) -> bool:
    # Owning namespace only; a branch of the base repository shares its owner.
    return head_repo.owner != base_repo.owner


def check_fork(
    base_repo: Repo,
    head_repo: Repo,
    allow_fork_prs: bool,
    allow_fork_prs_flag: str,
) -> GateDecision:
    if allow_fork_prs or not is_fork(base_repo, head_repo):
        return ALLOW
    return GateDecision(
        allowed=False,
        reason_code=REASON_FORK_DISALLOWED,
        comment=(
            "Atlantis commands can't be run on fork pull requests. "
            f"To enable, set --{allow_fork_prs_flag}"
        ),
    )


def check_pull_state(pull: PullRequest) -> GateDecision:
    if pull.state is PullRequestState.OPEN:
        return ALLOW
    return GateDecision(allowed=False, reason_code=REASON_PULL_NOT_OPEN, comment=CLOSED_PULL_COMMENT)
