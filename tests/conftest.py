"""Pytest configuration and fixtures for smartpreload tests."""

from datetime import datetime, timedelta

import pytest


class FakeClock:
    """Controllable stand-in for datetime.now."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0):
        self.now += timedelta(minutes=minutes, seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 18, 9, 0, 0))


@pytest.fixture
def offline_tokens(monkeypatch):
    """Force the 4-chars-per-token estimate (no BPE download)."""
    from smartpreload import tokens
    monkeypatch.setattr(tokens, "_encoding", lambda: None)


@pytest.fixture
def workspace(tmp_path, monkeypatch, offline_tokens):
    """Empty agent workspace wired in through PRELOAD_WORKSPACE."""
    from smartpreload import config

    ws = tmp_path / "workspace"
    ws.mkdir()
    monkeypatch.setenv("PRELOAD_WORKSPACE", str(ws))
    monkeypatch.setattr(config, "GLOBAL_CONFIG", tmp_path / "no-global-preload.json")
    return ws


@pytest.fixture
def populated_workspace(workspace):
    """Workspace with core files, daily notes and a codebook."""
    (workspace / "SOUL.md").write_text("# Soul\n\nThink before speaking.\n", encoding="utf-8")
    (workspace / "USER.md").write_text("# User\n\nPrefers Chinese.\n", encoding="utf-8")
    (workspace / "AGENTS.md").write_text("# Agents\n\nSTOP SCOPE FIX VERIFY\n", encoding="utf-8")
    (workspace / "TOOLS.md").write_text("# Tools\n\n## GitHub\nUse the gh CLI for pushes.\n", encoding="utf-8")

    memory = workspace / "memory"
    memory.mkdir()
    (memory / "2026-10-17.md").write_text(
        "# Daily Notes - 2026-10-17\n\n## 2026-10-17 10:00:00\nFixed the router\n",
        encoding="utf-8",
    )
    (memory / "notes.md").write_text("not a daily note\n", encoding="utf-8")
    (memory / ".codebook.json").write_text('{"a": "alpha", "b": "beta"}', encoding="utf-8")
    observations = memory / "observations"
    observations.mkdir()
    (observations / "s1.json").write_text("{}", encoding="utf-8")
    return workspace
