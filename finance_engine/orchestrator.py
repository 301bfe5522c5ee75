"""
Caller-Side Flows for the Finance Engine

The engine is pure. This module shows how a calling service puts it
to work against storage while keeping the guarantees the engine cannot
give on its own:

1. Goal allocation (read goals -> validate -> conditional write)
2. Emergency fund refresh (aggregate history -> recommend -> write)
3. Debt review (project -> forecast -> decide whether stored values are stale)

DESIGN DECISION: The allocation check and the write form one unit.
Validating against a snapshot and then writing unconditionally lets two
concurrent edits each pass against the same stale total and together
exceed 100%. Every write here is conditional on the version that was
validated; a lost race re-reads and re-validates, and gives up after a
bounded number of attempts.
"""

from collections.abc import Callable, Sequence
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from finance_engine.audit import AuditLogger, create_correlation_id
from finance_engine.config import Settings, get_settings
from finance_engine.engine import (
    apply_recommendation,
    calculate_debt_metrics,
    income_basis_from_transactions,
    income_percentage_from_target_months,
    needs_sync,
    project,
    recommend,
    refresh_completion,
    resolve_income_basis,
    validate_allocation,
)
from finance_engine.engine.numbers import ZERO, Number, as_decimal
from finance_engine.models.audit import AuditEvent, AuditEventBuilder
from finance_engine.models.goal import AllocationResult, GoalSnapshot
from finance_engine.models.loan import DebtMetrics, LoanSnapshot
from finance_engine.services.storage import (
    GoalStorageInterface,
    NotFoundError,
    VersionConflictError,
)


class AllocationExceededError(Exception):
    """A goal edit would push active allocations over the limit."""

    def __init__(self, result: AllocationResult, limit: Decimal):
        self.result = result
        self.limit = limit
        super().__init__(
            f"Total allocation would be {result.total:.1f}%. Maximum is {limit:.0f}%."
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GoalAllocationFlow:
    """
    Creates and edits goals without ever breaking the allocation invariant.

    Every write goes through ``_write_validated``: read all goals with
    their version, validate the candidate against its peers, write
    conditionally on that version.
    """

    def __init__(
        self,
        storage: GoalStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._settings = settings or get_settings()
        self._clock = clock

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _trailing(self, monthly_amounts: Sequence[Number]) -> list[Number]:
        """Keep the configured trailing window, oldest month first."""
        window = self._settings.allocation.income_window_months
        return list(monthly_amounts)[-window:]

    def _write_validated(
        self,
        goal_id: UUID,
        build: Callable[[Optional[GoalSnapshot], list[GoalSnapshot]], GoalSnapshot],
        correlation_id: UUID,
    ) -> GoalSnapshot:
        """
        Validate-then-write with optimistic retries.

        ``build`` receives the goal as currently stored (None when
        creating) and the full read it came from, and returns the
        candidate to write. It is called again on every retry, so it
        always works from fresh data. The candidate is re-validated as a
        model only after the allocation check, so an oversized share on an
        active goal is reported as an allocation failure. A paused
        candidate is checked with a zero share.
        """
        limit = self._settings.allocation.max_total_percentage
        retrying = Retrying(
            stop=stop_after_attempt(self._settings.allocation.conflict_retry_attempts),
            retry=retry_if_exception_type(VersionConflictError),
            reraise=True,
        )

        for attempt in retrying:
            with attempt:
                goals, version = self._storage.list_goals()
                current = next((g for g in goals if g.id == goal_id), None)
                candidate = build(current, goals)

                # A paused goal adds nothing to the active total.
                share = ZERO if candidate.is_paused else candidate.income_percentage
                result = validate_allocation(goals, goal_id, share, limit=limit)
                if not result.valid:
                    self._audit(AuditEventBuilder.allocation_rejected(
                        goal_id=goal_id,
                        percentage=candidate.income_percentage,
                        total=result.total,
                        correlation_id=correlation_id,
                    ))
                    raise AllocationExceededError(result, limit)

                candidate = GoalSnapshot.model_validate(candidate.model_dump())

                try:
                    self._storage.save_goal(candidate, version)
                except VersionConflictError:
                    self._audit(AuditEventBuilder.allocation_conflict(
                        goal_id=goal_id,
                        expected_version=version,
                        correlation_id=correlation_id,
                    ))
                    raise

                self._audit(AuditEventBuilder.allocation_accepted(
                    goal_id=goal_id,
                    percentage=candidate.income_percentage,
                    total=result.total,
                    correlation_id=correlation_id,
                ))
                if current is not None and current.is_completed != candidate.is_completed:
                    self._audit(AuditEventBuilder.goal_completion_changed(
                        goal_id=goal_id,
                        is_completed=candidate.is_completed,
                        correlation_id=correlation_id,
                    ))
                return candidate

    def _derive_percentage(
        self,
        goal: GoalSnapshot,
        monthly_incomes: Sequence[Number],
        correlation_id: UUID,
    ) -> GoalSnapshot:
        """Fill in the income percentage from target months when none was given."""
        if not goal.target_months or goal.income_percentage > 0:
            return goal

        basis = resolve_income_basis(self._trailing(monthly_incomes), goal.expected_income)
        if basis <= 0:
            return goal

        percentage = income_percentage_from_target_months(
            goal.target_amount,
            goal.current_balance,
            goal.target_months,
            basis,
        )
        self._audit(AuditEventBuilder.income_percentage_derived(
            goal_id=goal.id,
            target_months=goal.target_months,
            income_basis=basis,
            percentage=percentage,
            correlation_id=correlation_id,
        ))
        return goal.model_copy(update={"income_percentage": percentage})

    def create_goal(
        self,
        goal: GoalSnapshot,
        monthly_incomes: Sequence[Number] = (),
        correlation_id: Optional[UUID] = None,
    ) -> GoalSnapshot:
        """
        Store a new goal.

        A percentage above 100 on its own never reaches storage: pydantic
        rejects it when the candidate is built.

        Raises:
            AllocationExceededError: If the goal does not fit
        """
        correlation_id = correlation_id or create_correlation_id()
        prepared = self._derive_percentage(goal, monthly_incomes, correlation_id)
        prepared = refresh_completion(prepared, self._clock())

        return self._write_validated(goal.id, lambda _current, _goals: prepared, correlation_id)

    def set_income_percentage(
        self,
        goal_id: UUID,
        percentage: Number,
        correlation_id: Optional[UUID] = None,
    ) -> GoalSnapshot:
        """
        Change the share of income a goal receives.

        Raises:
            NotFoundError: If the goal does not exist
            AllocationExceededError: If the new share does not fit
        """
        correlation_id = correlation_id or create_correlation_id()
        value = as_decimal(percentage)

        def build(current: Optional[GoalSnapshot], _goals: list[GoalSnapshot]) -> GoalSnapshot:
            if current is None:
                raise NotFoundError(f"Goal {goal_id} not found")
            return current.model_copy(update={"income_percentage": value})

        return self._write_validated(goal_id, build, correlation_id)

    def set_target_months(
        self,
        goal_id: UUID,
        target_months: int,
        monthly_incomes: Sequence[Number] = (),
        correlation_id: Optional[UUID] = None,
    ) -> GoalSnapshot:
        """
        Set a target horizon and derive the percentage it requires.

        Without an income basis the percentage is left unchanged.

        Raises:
            NotFoundError: If the goal does not exist
            AllocationExceededError: If the derived share does not fit
        """
        correlation_id = correlation_id or create_correlation_id()

        def build(current: Optional[GoalSnapshot], _goals: list[GoalSnapshot]) -> GoalSnapshot:
            if current is None:
                raise NotFoundError(f"Goal {goal_id} not found")
            updated = current.model_copy(
                update={"target_months": target_months, "income_percentage": ZERO}
            )
            derived = self._derive_percentage(updated, monthly_incomes, correlation_id)
            if derived.income_percentage == 0:
                derived = derived.model_copy(update={"income_percentage": current.income_percentage})
            return derived

        return self._write_validated(goal_id, build, correlation_id)

    def set_paused(
        self,
        goal_id: UUID,
        paused: bool,
        correlation_id: Optional[UUID] = None,
    ) -> GoalSnapshot:
        """
        Pause or resume a goal.

        Resuming brings the goal's percentage back into the total, so it
        is validated like any other edit.
        """
        correlation_id = correlation_id or create_correlation_id()

        def build(current: Optional[GoalSnapshot], _goals: list[GoalSnapshot]) -> GoalSnapshot:
            if current is None:
                raise NotFoundError(f"Goal {goal_id} not found")
            return current.model_copy(update={"is_paused": paused})

        return self._write_validated(goal_id, build, correlation_id)

    def refresh_emergency_fund(
        self,
        goal_id: UUID,
        monthly_incomes: Sequence[Number],
        monthly_expenses: Sequence[Number],
        after_tax_income: Optional[Number] = None,
        correlation_id: Optional[UUID] = None,
    ) -> GoalSnapshot:
        """
        Recompute the system emergency fund goal from trailing history.

        The recommended percentage is reduced to whatever headroom the
        other goals leave, so the refresh never fails on allocation.
        Without any income or expense data the goal is left as stored.

        Raises:
            NotFoundError: If the goal does not exist
        """
        correlation_id = correlation_id or create_correlation_id()
        income = income_basis_from_transactions(self._trailing(monthly_incomes))
        expenses = income_basis_from_transactions(self._trailing(monthly_expenses))

        current = self._storage.get_goal(goal_id)
        if current is None:
            raise NotFoundError(f"Goal {goal_id} not found")

        policy = self._settings.emergency_fund
        if not recommend(income, expenses, ZERO, after_tax_income, policy).has_sufficient_data:
            self._audit(AuditEventBuilder.emergency_fund_insufficient_data(
                goal_id=goal_id,
                correlation_id=correlation_id,
            ))
            return current

        def build(stored: Optional[GoalSnapshot], goals: list[GoalSnapshot]) -> GoalSnapshot:
            if stored is None:
                raise NotFoundError(f"Goal {goal_id} not found")
            recommendation = recommend(
                income,
                expenses,
                stored.current_balance,
                after_tax_income=after_tax_income,
                policy=policy,
            )
            headroom = validate_allocation(
                goals, goal_id, 0, limit=self._settings.allocation.max_total_percentage
            ).available
            capped = recommendation.model_copy(
                update={"income_percentage": min(recommendation.income_percentage, headroom)}
            )
            return apply_recommendation(stored, capped, self._clock())

        updated = self._write_validated(goal_id, build, correlation_id)

        self._audit(AuditEventBuilder.emergency_fund_updated(
            goal_id=goal_id,
            target_amount=updated.target_amount,
            percentage=updated.income_percentage,
            monthly_income=income,
            monthly_expenses=expenses,
            correlation_id=correlation_id,
        ))
        return updated


class DebtReviewFlow:
    """
    Re-derives a debt's paid-to-date state and decides what to persist.

    The stored accruals are only a cache of the projection. When they
    drift beyond the sync tolerance, the flow hands back an updated
    snapshot for the caller to write.
    """

    def __init__(
        self,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
    ):
        self._audit_logger = audit_logger
        self._settings = settings or get_settings()

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def review(
        self,
        loan: LoanSnapshot,
        as_of: date,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[DebtMetrics, Optional[LoanSnapshot]]:
        """
        Compute a debt's metrics and any update its stored values need.

        Returns:
            (metrics, updated_loan) where updated_loan is None when the
            stored accruals are already current
        """
        correlation_id = correlation_id or create_correlation_id()
        forecast_settings = self._settings.forecast

        projected = project(loan, as_of)
        updated: Optional[LoanSnapshot] = None

        if needs_sync(loan, projected, tolerance=forecast_settings.sync_tolerance):
            updated = loan.model_copy(update={
                "principal_paid": projected.principal_paid,
                "interest_paid": projected.interest_paid,
                "is_paid_off": projected.is_paid_off,
            })
            self._audit(AuditEventBuilder.debt_reprojected(
                debt_id=loan.id,
                principal_paid=projected.principal_paid,
                interest_paid=projected.interest_paid,
                current_balance=projected.current_balance,
                correlation_id=correlation_id,
            ))
            if projected.is_paid_off:
                self._audit(AuditEventBuilder.debt_paid_off(
                    debt_id=loan.id,
                    correlation_id=correlation_id,
                ))

        metrics = calculate_debt_metrics(
            updated or loan, as_of, max_months=forecast_settings.max_months
        )
        if metrics.months_remaining is None:
            self._audit(AuditEventBuilder.forecast_undetermined(
                debt_id=loan.id,
                current_balance=metrics.remaining_balance,
                monthly_payment=metrics.monthly_payment,
                correlation_id=correlation_id,
            ))

        return metrics, updated
