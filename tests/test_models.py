"""
Tests for the Finance Engine models

Test strategy:
1. Unit tests for snapshots and results (validation, derived properties)
2. Calculators and flows are covered in their own modules
3. No storage backends beyond the in-memory one
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from finance_engine.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from finance_engine.models.goal import AllocationResult, GoalSnapshot
from finance_engine.models.loan import (
    DebtForecast,
    LoanSnapshot,
    PaymentFrequency,
)


class TestLoanModels:
    """Tests for loan snapshots and results."""

    def test_loan_snapshot_creation(self):
        """Test LoanSnapshot model creation with defaults."""
        loan = LoanSnapshot(
            principal=Decimal("20000"),
            annual_interest_rate=Decimal("4.5"),
            term_months=60,
            first_payment_date=date(2024, 2, 1),
        )
        assert loan.payment_frequency == PaymentFrequency.MONTHLY
        assert loan.additional_contribution == Decimal("0")
        assert loan.is_paused is False
        assert loan.current_balance == Decimal("20000")

    def test_loan_snapshot_rejects_zero_principal(self):
        """Test that an empty principal needs a paid-off debt."""
        with pytest.raises(ValueError, match="Principal must be greater than zero"):
            LoanSnapshot(principal=Decimal("0"), first_payment_date=date(2024, 1, 1))

    def test_loan_snapshot_rejects_negative_rate(self):
        """Test that negative rates are rejected."""
        with pytest.raises(ValueError):
            LoanSnapshot(
                principal=Decimal("1000"),
                annual_interest_rate=Decimal("-1"),
                first_payment_date=date(2024, 1, 1),
            )

    def test_loan_snapshot_is_frozen(self):
        """Test that snapshots cannot be mutated."""
        loan = LoanSnapshot(principal=Decimal("1000"), first_payment_date=date(2024, 1, 1))
        with pytest.raises(ValueError):
            loan.principal = Decimal("5")

    def test_from_financing_subtracts_down_payment(self):
        """Test principal is the initial amount minus the down payment."""
        loan = LoanSnapshot.from_financing(
            Decimal("25000"),
            Decimal("5000"),
            first_payment_date=date(2024, 1, 1),
        )
        assert loan.principal == Decimal("20000")
        assert loan.is_paid_off is False

    def test_from_financing_full_down_payment_is_paid_off(self):
        """Test a down payment covering everything leaves nothing to repay."""
        loan = LoanSnapshot.from_financing(
            Decimal("1000"),
            Decimal("1500"),
            first_payment_date=date(2024, 1, 1),
        )
        assert loan.principal == Decimal("0")
        assert loan.is_paid_off is True
        assert loan.current_balance == Decimal("0")

    def test_current_balance_uses_cached_principal_paid(self):
        """Test the balance reflects stored accruals."""
        loan = LoanSnapshot(
            principal=Decimal("1000"),
            principal_paid=Decimal("400"),
            first_payment_date=date(2024, 1, 1),
        )
        assert loan.current_balance == Decimal("600")

    def test_debt_forecast_is_determined(self):
        """Test an undetermined horizon is reported through None."""
        known = DebtForecast(
            months_remaining=10,
            total_interest_remaining=Decimal("5"),
            progress_pct=Decimal("50"),
        )
        unknown = DebtForecast(
            months_remaining=None,
            total_interest_remaining=Decimal("0"),
            progress_pct=Decimal("0"),
        )
        assert known.is_determined is True
        assert unknown.is_determined is False


class TestGoalModels:
    """Tests for goal snapshots and allocation results."""

    def test_goal_snapshot_creation(self):
        """Test GoalSnapshot model creation."""
        goal = GoalSnapshot(
            name="  New roof  ",
            target_amount=Decimal("8000"),
            current_balance=Decimal("2000"),
            income_percentage=Decimal("15"),
        )
        assert goal.name == "New roof"
        assert goal.remaining_amount == Decimal("6000")
        assert goal.is_completed is False

    def test_goal_snapshot_rejects_percentage_above_100(self):
        """Test the income percentage is bounded."""
        with pytest.raises(ValueError):
            GoalSnapshot(target_amount=Decimal("100"), income_percentage=Decimal("101"))

    def test_goal_snapshot_requires_target(self):
        """Test that user goals need a positive target."""
        with pytest.raises(ValueError, match="Target amount must be greater than 0"):
            GoalSnapshot(target_amount=Decimal("0"))

    def test_system_goal_may_start_without_target(self):
        """Test the emergency fund goal can exist before it is sized."""
        goal = GoalSnapshot(target_amount=Decimal("0"), is_system_goal=True)
        assert goal.remaining_amount == Decimal("0")

    def test_remaining_amount_never_negative(self):
        """Test an over-funded goal has nothing remaining."""
        goal = GoalSnapshot(target_amount=Decimal("100"), current_balance=Decimal("150"))
        assert goal.remaining_amount == Decimal("0")

    def test_allocation_result_rejects_negative_headroom(self):
        """Test available headroom is never negative."""
        with pytest.raises(ValueError):
            AllocationResult(valid=False, total=Decimal("120"), available=Decimal("-20"))


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.ALLOCATION_ACCEPTED,
            description="Allocation accepted",
        )
        assert event.event_type == AuditEventType.ALLOCATION_ACCEPTED
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        goal_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.EMERGENCY_FUND_UPDATED,
            entity_type="goal",
            entity_id=goal_id,
            description="Emergency fund updated",
            details={"target_amount": "18000"},
        )
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "emergency_fund_updated"
        assert log_dict["entity_id"] == str(goal_id)
        assert log_dict["details"]["target_amount"] == "18000"
        assert log_dict["correlation_id"] is None
        datetime.fromisoformat(log_dict["timestamp"])

    def test_audit_event_to_row(self):
        """Test conversion to a flat storage row."""
        event = AuditEvent(
            event_type=AuditEventType.DEBT_PAID_OFF,
            description="Debt balance reached zero",
        )
        row = event.to_row()

        assert len(row) == 10
        assert row[2] == "debt_paid_off"
        assert row[4] == ""
        assert row[8] == ""

    def test_builder_allocation_rejected(self):
        """Test rejected allocations are warnings carrying the total."""
        goal_id = uuid4()
        correlation_id = uuid4()
        event = AuditEventBuilder.allocation_rejected(
            goal_id=goal_id,
            percentage=Decimal("20"),
            total=Decimal("105"),
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.ALLOCATION_REJECTED
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == goal_id
        assert event.correlation_id == correlation_id
        assert event.details["total_allocation"] == "105"

    def test_builder_goal_completion_changed(self):
        """Test completion and reopening map to distinct event types."""
        goal_id = uuid4()
        completed = AuditEventBuilder.goal_completion_changed(goal_id, True)
        reopened = AuditEventBuilder.goal_completion_changed(goal_id, False)

        assert completed.event_type == AuditEventType.GOAL_COMPLETED
        assert reopened.event_type == AuditEventType.GOAL_REOPENED

    def test_builder_system_error(self):
        """Test system error event creation."""
        event = AuditEventBuilder.system_error(
            error_type="StorageError",
            error_message="Connection refused",
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "Connection refused"
