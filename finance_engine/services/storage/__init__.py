"""
Storage Services Package

Provides abstract interfaces and an in-memory implementation for the
caller-side persistence the allocation flow relies on.
"""

from finance_engine.services.storage.interface import (
    AuditStorageInterface,
    GoalStorageInterface,
    NotFoundError,
    StorageError,
    VersionConflictError,
)
from finance_engine.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryGoalStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "GoalStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "VersionConflictError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryGoalStorage",
]
