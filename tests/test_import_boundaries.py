from __future__ import annotations

import ast
from pathlib import Path


def test_events_core_does_not_import_http_transport() -> None:
    forbidden = (
        "requests",
        "urllib",
        "http",
        "atlantis_bot.vcs.github_client",
        "atlantis_bot.vcs.gitlab_client",
    )
    events_dir = Path(__file__).resolve().parents[1] / "atlantis_bot" / "events"
    paths = sorted(events_dir.rglob("*.py"))
    assert paths
    for path in paths:
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                names = [alias.name for alias in node.names]
            elif isinstance(node, ast.ImportFrom):
                names = [node.module or ""]
            else:
                continue
            for name in names:
                assert not any(
                    name == token or name.startswith(f"{token}.") for token in forbidden
                ), f"{path} imports transport dependency: {name}"
