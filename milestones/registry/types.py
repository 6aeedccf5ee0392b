"""Milestone registry - Type definitions

Shared TypedDict definitions for stored rows and method results.
"""

from typing import TypedDict


class MethodInfo(TypedDict):
    """Information about a registry method for listing."""
    name: str
    cost: int
    description: str


# Stored rows, one table each, all keyed by owner principal

class MilestoneRecord(TypedDict):
    """Core milestone row."""
    description: str
    completed: bool


class PriorityAnnotation(TypedDict):
    """Priority row. May outlive its MilestoneRecord."""
    tier: int


class TemporalBound(TypedDict):
    """Deadline row. May outlive its MilestoneRecord."""
    target_block: int
    alert_active: bool


# Method results

class ConfirmResult(TypedDict):
    """Result from a successful write."""
    success: bool
    message: str
    owner: str


class DeadlineSetResult(ConfirmResult):
    """Result from set_deadline."""
    target_block: int


class StatusView(TypedDict):
    """Result from get_status. Always succeeds; check `exists`."""
    success: bool
    exists: bool
    description_length: int
    completed: bool


class PriorityView(TypedDict):
    """Result from get_priority."""
    success: bool
    exists: bool
    tier: int | None


class DeadlineView(TypedDict):
    """Result from get_deadline."""
    success: bool
    exists: bool
    target_block: int | None
    alert_active: bool
