"""Milestone registry package

The registry is a system-owned artifact exposing milestone methods to
principals. Storage, block height and event logging are injected.
"""

# Base classes and utilities
from .base import (
    RegistryArtifact,
    RegistryMethod,
)

# Errors
from .errors import (
    ErrorCategory,
    ErrorCode,
    ErrorResponse,
    http_status_for,
    resource_error,
    validation_error,
)

# Type definitions
from .types import (
    MethodInfo,
    MilestoneRecord,
    PriorityAnnotation,
    TemporalBound,
    ConfirmResult,
    DeadlineSetResult,
    StatusView,
    PriorityView,
    DeadlineView,
)

# Collaborators
from .chain import BlockHeight, HeightSource
from .logger import EventLogger
from .store import (
    InMemoryTable,
    KeyValueTable,
    MilestoneStore,
    SqliteTable,
    create_store,
)

# Registry
from .milestone_registry import MilestoneRegistry

__all__ = [
    # Base
    "RegistryArtifact",
    "RegistryMethod",
    # Errors
    "ErrorCategory",
    "ErrorCode",
    "ErrorResponse",
    "http_status_for",
    "resource_error",
    "validation_error",
    # Types
    "MethodInfo",
    "MilestoneRecord",
    "PriorityAnnotation",
    "TemporalBound",
    "ConfirmResult",
    "DeadlineSetResult",
    "StatusView",
    "PriorityView",
    "DeadlineView",
    # Collaborators
    "BlockHeight",
    "HeightSource",
    "EventLogger",
    "InMemoryTable",
    "KeyValueTable",
    "MilestoneStore",
    "SqliteTable",
    "create_store",
    # Registry
    "MilestoneRegistry",
]
