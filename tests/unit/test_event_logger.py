"""Unit tests for the JSONL event logger."""

from __future__ import annotations

import json
from pathlib import Path

from milestones.config import set_config_value
from milestones.registry import EventLogger


class TestEventLogger:
    """Append-only JSONL logging."""

    def test_log_writes_jsonl(self, event_logger: EventLogger) -> None:
        """Each event is one JSON line with timestamp and sequence."""
        event_logger.log("milestone_initialized", {"owner": "alice", "block_height": 3})

        lines = event_logger.output_path.read_text().splitlines()
        assert len(lines) == 1
        event = json.loads(lines[0])
        assert event["event_type"] == "milestone_initialized"
        assert event["owner"] == "alice"
        assert event["sequence"] == 1
        assert "timestamp" in event

    def test_sequence_is_monotonic(self, event_logger: EventLogger) -> None:
        """Sequence increments per event."""
        for i in range(3):
            event_logger.log("priority_set", {"tier": i + 1})
        assert [e["sequence"] for e in event_logger.read_recent()] == [1, 2, 3]
        assert event_logger.sequence == 3

    def test_read_recent_limits(self, event_logger: EventLogger) -> None:
        """read_recent returns the last N events."""
        for i in range(5):
            event_logger.log("deadline_set", {"target_block": i})
        recent = event_logger.read_recent(2)
        assert [e["target_block"] for e in recent] == [3, 4]

    def test_read_recent_default_from_config(self, event_logger: EventLogger) -> None:
        """Default N comes from logging.default_recent."""
        set_config_value("logging.default_recent", 2)
        for i in range(4):
            event_logger.log("deadline_set", {"target_block": i})
        assert len(event_logger.read_recent()) == 2

    def test_appends_to_existing_file(self, tmp_path: Path) -> None:
        """A new logger keeps earlier events unless told to truncate."""
        path = tmp_path / "logs" / "events.jsonl"
        EventLogger(path).log("milestone_initialized", {"owner": "alice"})

        EventLogger(path).log("milestone_terminated", {"owner": "alice"})
        assert len(path.read_text().splitlines()) == 2

        EventLogger(path, truncate=True)
        assert path.read_text() == ""

    def test_read_recent_missing_file(self, event_logger: EventLogger) -> None:
        """A deleted log reads as empty."""
        event_logger.output_path.unlink()
        assert event_logger.read_recent() == []
