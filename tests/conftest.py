"""Pytest fixtures for milestone registry tests.

Common fixtures for building a registry against an in-memory store with a
controllable block height.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from milestones.config import load_config, reset_config
from milestones.config_schema import RegistryConfig
from milestones.registry import BlockHeight, EventLogger, MilestoneRegistry, MilestoneStore

REPO_CONFIG: Path = Path(__file__).parent.parent / "config" / "config.yaml"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "feature(name): mark test as belonging to a feature. "
        "Usage: @pytest.mark.feature('orphans')"
    )


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom command-line options."""
    parser.addoption(
        "--feature",
        action="store",
        type=str,
        default=None,
        help="Run tests for a specific feature (e.g., --feature orphans)",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Filter tests based on command-line options."""
    feature_filter = config.getoption("--feature")
    if feature_filter is None:
        return
    selected = []
    deselected = []
    for item in items:
        marker = item.get_closest_marker("feature")
        if marker is not None:
            feature_name = marker.args[0] if marker.args else ""
            if feature_name == feature_filter:
                selected.append(item)
                continue
        deselected.append(item)
    config.hook.pytest_deselected(items=deselected)
    items[:] = selected


@pytest.fixture(autouse=True)
def repo_config() -> Iterator[None]:
    """Load the repository config fresh for every test."""
    load_config(REPO_CONFIG)
    yield
    reset_config()


@pytest.fixture
def registry_config() -> RegistryConfig:
    """Default registry config (100-char descriptions, tiers 1-3, u64 heights)."""
    return RegistryConfig()


@pytest.fixture
def height() -> BlockHeight:
    """Block height starting at 100."""
    return BlockHeight(initial=100)


@pytest.fixture
def store() -> MilestoneStore:
    """Empty in-memory store."""
    return MilestoneStore.in_memory()


@pytest.fixture
def registry(
    store: MilestoneStore, height: BlockHeight, registry_config: RegistryConfig
) -> MilestoneRegistry:
    """Registry over the in-memory store and the test block height."""
    return MilestoneRegistry(store=store, height=height, registry_config=registry_config)


@pytest.fixture
def event_logger(tmp_path: Path) -> EventLogger:
    """Event logger writing to a temp file."""
    return EventLogger(tmp_path / "events.jsonl")
