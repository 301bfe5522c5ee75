"""
Data Models Package

This package contains all Pydantic models used by the finance engine.
Every value crossing the engine boundary conforms to these schemas.
"""

from finance_engine.models.loan import (
    DebtForecast,
    DebtMetrics,
    LoanSnapshot,
    PaymentDistribution,
    PaymentFrequency,
    ProjectedPayments,
)
from finance_engine.models.goal import (
    AllocationResult,
    EmergencyFundRecommendation,
    GoalProgress,
    GoalSnapshot,
)
from finance_engine.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Loan models
    "DebtForecast",
    "DebtMetrics",
    "LoanSnapshot",
    "PaymentDistribution",
    "PaymentFrequency",
    "ProjectedPayments",
    # Goal models
    "AllocationResult",
    "EmergencyFundRecommendation",
    "GoalProgress",
    "GoalSnapshot",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
