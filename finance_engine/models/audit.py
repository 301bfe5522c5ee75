"""
Audit Models for the Finance Engine

The calculators are pure and log nothing of their own beyond debug
traces. The caller-side flows record what they decided with these
events: allocation accepted or rejected, write conflicts, emergency fund
refreshes and debt re-projections.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Goal allocation
    ALLOCATION_ACCEPTED = "allocation_accepted"
    ALLOCATION_REJECTED = "allocation_rejected"
    ALLOCATION_CONFLICT = "allocation_conflict"
    INCOME_PERCENTAGE_DERIVED = "income_percentage_derived"

    # Goal balance
    GOAL_COMPLETED = "goal_completed"
    GOAL_REOPENED = "goal_reopened"

    # Emergency fund
    EMERGENCY_FUND_UPDATED = "emergency_fund_updated"
    EMERGENCY_FUND_INSUFFICIENT_DATA = "emergency_fund_insufficient_data"

    # Debts
    DEBT_REPROJECTED = "debt_reprojected"
    DEBT_PAID_OFF = "debt_paid_off"
    FORECAST_UNDETERMINED = "forecast_undetermined"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'goal', 'debt')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all retries of one edit)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_row(self) -> list:
        """
        Convert to a flat row for tabular audit storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Amounts are passed as strings so the details stay JSON-serializable.

    Usage:
        event = AuditEventBuilder.allocation_rejected(goal_id, "105", correlation_id)
    """

    @staticmethod
    def allocation_accepted(
        goal_id: UUID,
        percentage: Decimal,
        total: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALLOCATION_ACCEPTED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Income allocation set to {percentage}% (total {total}%)",
            details={
                "income_percentage": str(percentage),
                "total_allocation": str(total),
            },
        )

    @staticmethod
    def allocation_rejected(
        goal_id: Optional[UUID],
        percentage: Decimal,
        total: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALLOCATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Income allocation of {percentage}% rejected (total would be {total}%)",
            details={
                "income_percentage": str(percentage),
                "total_allocation": str(total),
            },
        )

    @staticmethod
    def allocation_conflict(
        goal_id: UUID,
        expected_version: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALLOCATION_CONFLICT,
            severity=AuditSeverity.WARNING,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description="Goal write lost a version race; re-validating",
            details={
                "expected_version": expected_version,
            },
        )

    @staticmethod
    def income_percentage_derived(
        goal_id: UUID,
        target_months: int,
        income_basis: Decimal,
        percentage: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INCOME_PERCENTAGE_DERIVED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Derived {percentage}% of income from a {target_months}-month target",
            details={
                "target_months": target_months,
                "income_basis": str(income_basis),
                "income_percentage": str(percentage),
            },
        )

    @staticmethod
    def goal_completion_changed(
        goal_id: UUID,
        is_completed: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        event_type = (
            AuditEventType.GOAL_COMPLETED
            if is_completed
            else AuditEventType.GOAL_REOPENED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description="Goal reached its target" if is_completed else "Goal fell below its target",
        )

    @staticmethod
    def emergency_fund_updated(
        goal_id: UUID,
        target_amount: Decimal,
        percentage: Decimal,
        monthly_income: Decimal,
        monthly_expenses: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EMERGENCY_FUND_UPDATED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Emergency fund target {target_amount:.2f} at {percentage:.2f}% of income",
            details={
                "target_amount": str(target_amount),
                "income_percentage": str(percentage),
                "monthly_income": str(monthly_income),
                "monthly_expenses": str(monthly_expenses),
            },
        )

    @staticmethod
    def emergency_fund_insufficient_data(
        goal_id: UUID,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EMERGENCY_FUND_INSUFFICIENT_DATA,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description="Emergency fund left unchanged: income and expenses are both zero",
        )

    @staticmethod
    def debt_reprojected(
        debt_id: UUID,
        principal_paid: Decimal,
        interest_paid: Decimal,
        current_balance: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_REPROJECTED,
            entity_type="debt",
            entity_id=debt_id,
            correlation_id=correlation_id,
            description="Stored debt accruals differ from projection",
            details={
                "principal_paid": str(principal_paid),
                "interest_paid": str(interest_paid),
                "current_balance": str(current_balance),
            },
        )

    @staticmethod
    def debt_paid_off(
        debt_id: UUID,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_PAID_OFF,
            entity_type="debt",
            entity_id=debt_id,
            correlation_id=correlation_id,
            description="Debt balance reached zero",
        )

    @staticmethod
    def forecast_undetermined(
        debt_id: UUID,
        current_balance: Decimal,
        monthly_payment: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FORECAST_UNDETERMINED,
            severity=AuditSeverity.WARNING,
            entity_type="debt",
            entity_id=debt_id,
            correlation_id=correlation_id,
            description="Payment does not retire the balance; payoff horizon undetermined",
            details={
                "current_balance": str(current_balance),
                "monthly_payment": str(monthly_payment),
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
