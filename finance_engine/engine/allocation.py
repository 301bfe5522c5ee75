"""
Income Allocation

PRINCIPAL INVARIANT: the income percentages of all active (non-paused)
goals must never sum to more than 100%.

The check is a pure function over a snapshot of goals. It never fixes a
violation by scaling other goals down; an edit that would break the
invariant is rejected and the caller decides what to tell the user.

CONCURRENCY CONTRACT: validating and persisting are separate steps. Two
edits validated against the same snapshot can each pass and together
exceed the limit. The caller must run validate-then-write inside one
transactional boundary (row lock, optimistic version check or a
serializable transaction). ``finance_engine.orchestrator`` shows the
optimistic-version variant.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Optional
from uuid import UUID

from finance_engine.config import get_settings
from finance_engine.engine.numbers import HUNDRED, ZERO, Number, as_decimal, clamp
from finance_engine.models.goal import AllocationResult, GoalProgress, GoalSnapshot


def active_allocation(
    goals: Iterable[GoalSnapshot],
    exclude_goal_id: Optional[UUID] = None,
) -> Decimal:
    """Sum of income percentages over non-paused goals, minus the excluded one."""
    return sum(
        (
            goal.income_percentage
            for goal in goals
            if not goal.is_paused and goal.id != exclude_goal_id
        ),
        ZERO,
    )


def validate_allocation(
    goals: Iterable[GoalSnapshot],
    exclude_goal_id: Optional[UUID],
    new_percentage: Number,
    limit: Optional[Number] = None,
) -> AllocationResult:
    """
    Check whether a goal may take ``new_percentage`` of income.

    ``exclude_goal_id`` is the goal being edited, so an update is compared
    against its peers rather than its own current value. Pass None when
    creating a goal.
    """
    ceiling = (
        as_decimal(limit)
        if limit is not None
        else get_settings().allocation.max_total_percentage
    )
    peers = active_allocation(goals, exclude_goal_id)
    total = peers + as_decimal(new_percentage)

    return AllocationResult(
        valid=total <= ceiling,
        total=total,
        available=max(ZERO, ceiling - peers),
    )


def income_basis_from_transactions(monthly_incomes: Sequence[Number]) -> Decimal:
    """
    Average monthly income over the trailing window.

    Every month in the window counts, including months with no income
    transactions at all. A quiet month pulls the basis down; this keeps
    the estimate conservative.
    """
    if not monthly_incomes:
        return ZERO
    total = sum((as_decimal(amount) for amount in monthly_incomes), ZERO)
    return total / len(monthly_incomes)


def resolve_income_basis(
    monthly_incomes: Sequence[Number],
    expected_income: Optional[Number] = None,
) -> Decimal:
    """A positive expected-income override wins over transaction history."""
    override = as_decimal(expected_income)
    if override > 0:
        return override
    return income_basis_from_transactions(monthly_incomes)


def income_percentage_from_target_months(
    target_amount: Number,
    current_balance: Number,
    target_months: Optional[int],
    income_basis: Number,
) -> Decimal:
    """
    Share of monthly income needed to close the gap in ``target_months``.

    Returns zero when there is no income basis or no horizon to spread
    the gap over. The result is not capped; the allocation check decides
    whether it fits.
    """
    basis = as_decimal(income_basis)
    months = int(target_months or 0)
    if basis <= 0 or months <= 0:
        return ZERO

    remaining = max(ZERO, as_decimal(target_amount) - as_decimal(current_balance))
    return (remaining / months) / basis * HUNDRED


def calculate_goal_progress(goal: GoalSnapshot, income_basis: Number) -> GoalProgress:
    """
    Progress of a goal and the pace its allocation implies.

    ``months_to_goal`` is zero once the target is reached and None while
    nothing is being contributed.
    """
    basis = max(ZERO, as_decimal(income_basis))

    if goal.target_amount > 0:
        progress = clamp(goal.current_balance / goal.target_amount * HUNDRED, ZERO, HUNDRED)
    else:
        progress = ZERO

    contribution = basis * goal.income_percentage / HUNDRED
    remaining = goal.remaining_amount

    if goal.target_amount > 0 and remaining <= 0:
        months: Optional[Decimal] = ZERO
    elif contribution <= 0:
        months = None
    else:
        months = remaining / contribution

    return GoalProgress(
        progress_pct=progress,
        monthly_contribution=contribution,
        months_to_goal=months,
        income_basis=basis,
    )
