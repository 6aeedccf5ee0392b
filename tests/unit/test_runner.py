"""Tests for the server runner's config overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

import run
from milestones.config_schema import AppConfig


@pytest.fixture
def served(monkeypatch: pytest.MonkeyPatch) -> list[AppConfig]:
    """Capture the config run_server would have been started with."""
    configs: list[AppConfig] = []
    monkeypatch.setattr(run, "run_server", configs.append)
    for name in ("CONFIG", "HOST", "PORT", "STORE", "DB", "EVENTS"):
        monkeypatch.delenv(f"MILESTONES_{name}", raising=False)
    return configs


class TestRunnerOverrides:
    """Flags and environment variables override config.yaml."""

    def test_defaults_from_repo_config(self, served: list[AppConfig]) -> None:
        """No flags and no environment means the shipped config."""
        run.main([])

        assert served[0].server.port == 8080
        assert served[0].store.backend == "memory"

    def test_environment_overrides(
        self, served: list[AppConfig], monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """MILESTONES_* variables are applied like flags."""
        monkeypatch.setenv("MILESTONES_PORT", "9123")
        monkeypatch.setenv("MILESTONES_STORE", "sqlite")
        monkeypatch.setenv("MILESTONES_DB", str(tmp_path / "m.db"))

        run.main([])

        assert served[0].server.port == 9123
        assert served[0].store.backend == "sqlite"
        assert served[0].store.path == str(tmp_path / "m.db")

    def test_flags_win_over_environment(
        self, served: list[AppConfig], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An explicit flag beats the environment."""
        monkeypatch.setenv("MILESTONES_PORT", "9123")

        run.main(["--port", "9000"])

        assert served[0].server.port == 9000
