"""Logging setup and the per-pull-request logger."""

from __future__ import annotations

import logging
from typing import Any, MutableMapping


ROOT_LOGGER_NAME = "atlantis_bot"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class PullLogger(logging.LoggerAdapter):
    """Prefixes records with the ``owner/repo#num`` they belong to."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra or {})
        kwargs["extra"] = extra
        return f"{self.extra['repo']}#{self.extra['pull_num']}: {msg}", kwargs


def pull_logger(repo_full_name: str, pull_num: int, name: str = ROOT_LOGGER_NAME) -> PullLogger:
    return PullLogger(logging.getLogger(name), {"repo": repo_full_name, "pull_num": pull_num})


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stream handler to the package logger."""

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    numeric = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    logger.setLevel(numeric)
    if not any(getattr(handler, "_atlantis_bot", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._atlantis_bot = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
