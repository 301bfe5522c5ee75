"""
Goal Balance Lifecycle

A goal is completed while its balance covers a positive target. The
completion timestamp is set on the first crossing and cleared if a
withdrawal later drops the balance below target; it is not moved by
further top-ups.

Each function returns a new snapshot for the caller to persist.
"""

from datetime import datetime

from finance_engine.engine.errors import InvalidGoalAmountError
from finance_engine.engine.numbers import ZERO, Number, as_decimal
from finance_engine.models.goal import GoalSnapshot


def is_target_reached(goal: GoalSnapshot) -> bool:
    return goal.target_amount > 0 and goal.current_balance >= goal.target_amount


def refresh_completion(goal: GoalSnapshot, now: datetime) -> GoalSnapshot:
    """Recompute ``is_completed`` and ``completed_at`` from the balance."""
    completed = is_target_reached(goal)

    if completed:
        completed_at = goal.completed_at or now
    else:
        completed_at = None

    if completed == goal.is_completed and completed_at == goal.completed_at:
        return goal
    return goal.model_copy(update={"is_completed": completed, "completed_at": completed_at})


def top_up(goal: GoalSnapshot, amount: Number, now: datetime) -> GoalSnapshot:
    """
    Add money to a goal.

    Raises:
        InvalidGoalAmountError: If ``amount`` is not positive
    """
    value = as_decimal(amount)
    if value <= 0:
        raise InvalidGoalAmountError("Top-up amount must be positive")

    updated = goal.model_copy(update={"current_balance": goal.current_balance + value})
    return refresh_completion(updated, now)


def withdraw(goal: GoalSnapshot, amount: Number, now: datetime) -> GoalSnapshot:
    """
    Take money out of a goal. The balance never goes below zero.

    Raises:
        InvalidGoalAmountError: If ``amount`` is not positive
    """
    value = as_decimal(amount)
    if value <= 0:
        raise InvalidGoalAmountError("Withdrawal amount must be positive")

    new_balance = max(ZERO, goal.current_balance - value)
    updated = goal.model_copy(update={"current_balance": new_balance})
    return refresh_completion(updated, now)
