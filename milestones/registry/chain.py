"""Block height supplied by the host ledger.

The registry never produces heights; it only reads the current one when
computing deadlines. BlockHeight is the host-side counter used by the
server and tests. Anything with a `current` property can stand in for it.
"""

from __future__ import annotations

from typing import Protocol

from ..config_schema import UINT64_MAX


class HeightSource(Protocol):
    """Read access to the current block height."""

    @property
    def current(self) -> int: ...


class BlockHeight:
    """Monotonic block height counter.

    Heights only move forward. Setting a lower height or advancing past
    max_height raises ValueError.
    """

    def __init__(self, initial: int = 0, max_height: int = UINT64_MAX) -> None:
        if not 0 <= initial <= max_height:
            raise ValueError(f"Initial height {initial} outside [0, {max_height}]")
        self._height = initial
        self.max_height = max_height

    @property
    def current(self) -> int:
        return self._height

    def advance(self, blocks: int = 1) -> int:
        """Move forward by `blocks` and return the new height."""
        if blocks < 0:
            raise ValueError(f"Cannot advance by a negative number of blocks ({blocks})")
        if blocks > self.max_height - self._height:
            raise ValueError(
                f"Advancing {blocks} blocks from {self._height} exceeds max height {self.max_height}"
            )
        self._height += blocks
        return self._height

    def set(self, height: int) -> None:
        """Jump to `height` (called by the host when syncing)."""
        if height < self._height:
            raise ValueError(f"Height cannot decrease ({self._height} -> {height})")
        if height > self.max_height:
            raise ValueError(f"Height {height} exceeds max height {self.max_height}")
        self._height = height
