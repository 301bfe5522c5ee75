"""
In-Memory Storage Implementation

Thread-safe dictionaries standing in for a real database. Used by the
tests and by callers that want the allocation flow without a backend.

The household has a single version counter: any goal write bumps it,
so a write based on an older read is refused even if it touches a
different goal. Allocation validity depends on all goals together,
which is why per-row versions would not be enough.
"""

import threading
from typing import Optional
from uuid import UUID

from finance_engine.models.audit import AuditEvent
from finance_engine.models.goal import GoalSnapshot
from finance_engine.services.storage.interface import (
    AuditStorageInterface,
    GoalStorageInterface,
    VersionConflictError,
)


class InMemoryGoalStorage(GoalStorageInterface):
    """Goal storage with household-wide optimistic versioning."""

    def __init__(self, goals: Optional[list[GoalSnapshot]] = None):
        self._lock = threading.Lock()
        self._goals: dict[UUID, GoalSnapshot] = {goal.id: goal for goal in goals or []}
        self._version = 0

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def list_goals(self) -> tuple[list[GoalSnapshot], int]:
        with self._lock:
            return list(self._goals.values()), self._version

    def get_goal(self, goal_id: UUID) -> Optional[GoalSnapshot]:
        with self._lock:
            return self._goals.get(goal_id)

    def save_goal(self, goal: GoalSnapshot, expected_version: int) -> int:
        with self._lock:
            if expected_version != self._version:
                raise VersionConflictError(expected_version, self._version)
            self._goals[goal.id] = goal
            self._version += 1
            return self._version

    def delete_goal(self, goal_id: UUID) -> bool:
        with self._lock:
            removed = self._goals.pop(goal_id, None) is not None
            if removed:
                self._version += 1
            return removed


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in a list."""

    def __init__(self):
        self._lock = threading.Lock()
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            self._events.append(event)
        return True

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        with self._lock:
            return [e for e in self._events if e.correlation_id == correlation_id]

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        with self._lock:
            return list(reversed(self._events[-limit:])) if limit > 0 else []
