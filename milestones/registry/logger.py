"""JSONL event logger - append-only record of committed registry writes"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import get


class EventLogger:
    """Append-only JSONL event log.

    One line per committed write. Failed calls commit nothing and are not
    logged here. Every event carries a monotonic 'sequence' for ordering
    within this logger's lifetime.
    """

    output_path: Path
    _sequence: int

    def __init__(self, output_file: str | Path, truncate: bool = False) -> None:
        """Initialize the event logger.

        Args:
            output_file: JSONL file to append to (parent dirs are created)
            truncate: Clear the file first instead of appending
        """
        self.output_path = Path(output_file)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        if truncate or not self.output_path.exists():
            self.output_path.write_text("")
        self._sequence = 0

    def log(self, event_type: str, data: dict[str, Any]) -> None:
        """Log an event to the JSONL file."""
        self._sequence += 1
        event: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "sequence": self._sequence,
            "event_type": event_type,
            **data,
        }
        with open(self.output_path, "a") as f:
            f.write(json.dumps(event) + "\n")

    def read_recent(self, n: int | None = None) -> list[dict[str, Any]]:
        """Read the last N events from the log.

        N defaults to logging.default_recent from config.
        """
        if n is None:
            default_recent = get("logging.default_recent")
            if isinstance(default_recent, int):
                n = default_recent
            else:
                n = 50
        if not self.output_path.exists():
            return []
        lines = self.output_path.read_text().strip().split("\n")
        lines = [line for line in lines if line]
        recent = lines[-n:] if len(lines) > n else lines
        return [json.loads(line) for line in recent]

    @property
    def sequence(self) -> int:
        """Number of events logged by this instance."""
        return self._sequence
