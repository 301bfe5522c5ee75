"""Services package."""

from finance_engine.services.storage import (
    AuditStorageInterface,
    GoalStorageInterface,
    InMemoryAuditStorage,
    InMemoryGoalStorage,
    NotFoundError,
    StorageError,
    VersionConflictError,
)

__all__ = [
    "AuditStorageInterface",
    "GoalStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryGoalStorage",
    "NotFoundError",
    "StorageError",
    "VersionConflictError",
]
