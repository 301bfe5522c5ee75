"""
Abstract Storage Interface

The engine never touches storage. These interfaces describe what the
calling service needs from its persistence layer to honour the
allocation invariant, so the reference flows in
``finance_engine.orchestrator`` can be written (and tested) against any
backend.

DESIGN DECISION: Goal writes are versioned.
``list_goals`` returns the household's goals together with a version
number, and ``save_goal`` only succeeds if nothing has been written
since that version was read. This is the optimistic equivalent of
running validate-then-write inside one serializable transaction.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from finance_engine.models.audit import AuditEvent
from finance_engine.models.goal import GoalSnapshot


class GoalStorageInterface(ABC):
    """
    Abstract interface for goal storage operations.

    Any storage implementation (SQL, document store, etc.)
    must implement these methods.
    """

    @abstractmethod
    def list_goals(self) -> tuple[list[GoalSnapshot], int]:
        """
        Read every goal of the household.

        Returns:
            (goals, version) where version identifies this read for a
            later conditional write
        """
        pass

    @abstractmethod
    def get_goal(self, goal_id: UUID) -> Optional[GoalSnapshot]:
        """
        Retrieve a goal by its ID.

        Args:
            goal_id: The goal's unique identifier

        Returns:
            The goal if found, None otherwise
        """
        pass

    @abstractmethod
    def save_goal(self, goal: GoalSnapshot, expected_version: int) -> int:
        """
        Insert or replace a goal if the household is still at ``expected_version``.

        Args:
            goal: The goal to write
            expected_version: Version returned by the read this write is based on

        Returns:
            The new version

        Raises:
            VersionConflictError: If another write happened since that read
        """
        pass

    @abstractmethod
    def delete_goal(self, goal_id: UUID) -> bool:
        """
        Delete a goal by ID.

        Returns:
            True if a goal was deleted
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., every retry of one edit).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class VersionConflictError(StorageError):
    """A conditional write found newer data than the read it was based on."""

    def __init__(self, expected_version: int, actual_version: int):
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Stale write: expected version {expected_version}, found {actual_version}"
        )
