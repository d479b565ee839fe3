"""Independent worker tasks for inbound comment commands."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from atlantis_bot.events.command_runner import DefaultCommandRunner
from atlantis_bot.models.command_models import CommentCommand
from atlantis_bot.models.vcs_models import Repo, User


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommentCommandRequest:
    base_repo: Repo
    user: User
    pull_num: int
    command: CommentCommand | None
    maybe_head_repo: Repo | None = None
    maybe_pull: dict[str, Any] | None = None


class CommentCommandWorkerPool:
    """Schedules each request on its own worker so requests never block each other."""

    def __init__(self, runner: DefaultCommandRunner, worker_count: int = 4) -> None:
        if worker_count < 1:
            raise ValueError("worker_count must be >= 1")
        self.runner = runner
        self._pool = ThreadPoolExecutor(
            max_workers=worker_count, thread_name_prefix="comment-command"
        )
        self._pending: set[Future[None]] = set()
        self._lock = threading.Lock()

    def submit(self, request: CommentCommandRequest) -> Future[None]:
        future = self._pool.submit(self._handle, request)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)
        LOGGER.debug("queued pull %d: %s", request.pull_num, request.command)
        return future

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "CommentCommandWorkerPool":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown(wait=True)

    def _handle(self, request: CommentCommandRequest) -> None:
        self.runner.run_comment_command(
            request.base_repo,
            request.maybe_head_repo,
            request.maybe_pull,
            request.user,
            request.pull_num,
            request.command,
        )

    def _discard(self, future: Future[None]) -> None:
        with self._lock:
            self._pending.discard(future)
