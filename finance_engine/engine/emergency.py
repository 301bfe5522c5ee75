"""
Emergency Fund Advisor

Sizes the system-managed emergency fund goal from the household's
average income and expenses:

- target: six months of expenses (or of 80% of income when there is no
  expense history)
- contribution: the share of income that closes the gap in 30 months,
  kept between 5% and 20% so the fund grows without squeezing the cost
  of living

All of these figures are policy and come from ``EmergencyFundSettings``.

Tax is not computed here. When the tax collaborator supplies an
after-tax monthly income, it replaces the gross figure.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from finance_engine.config import EmergencyFundSettings, get_settings
from finance_engine.engine.goals import refresh_completion
from finance_engine.engine.numbers import HUNDRED, ZERO, Number, as_decimal, clamp
from finance_engine.models.goal import EmergencyFundRecommendation, GoalSnapshot


def recommend(
    monthly_income: Number,
    monthly_expenses: Number,
    current_balance: Number,
    after_tax_income: Optional[Number] = None,
    policy: Optional[EmergencyFundSettings] = None,
) -> EmergencyFundRecommendation:
    """
    Recommend a target amount and an income percentage for the fund.

    The percentage is zero when there is no income, when nothing remains
    to save, or once the balance is within the "effectively met" band of
    the target.
    """
    policy = policy or get_settings().emergency_fund

    income = as_decimal(after_tax_income) if after_tax_income is not None else as_decimal(monthly_income)
    expenses = as_decimal(monthly_expenses)
    balance = max(ZERO, as_decimal(current_balance))

    if expenses > 0:
        basis = expenses
    else:
        basis = max(ZERO, income * policy.expense_ratio)
    target = basis * policy.reserve_months

    remaining = max(ZERO, target - balance)
    percentage = ZERO

    if income > 0:
        raw = (remaining / policy.paydown_months) / income * HUNDRED
        percentage = clamp(raw, policy.min_percentage, policy.max_percentage)

        if remaining <= 0 or balance >= target * policy.met_threshold:
            percentage = ZERO

    return EmergencyFundRecommendation(
        target_amount=target,
        income_percentage=percentage,
        target_months=policy.reserve_months,
        monthly_basis=basis,
        has_sufficient_data=income > 0 or expenses > 0,
    )


def apply_recommendation(
    goal: GoalSnapshot,
    recommendation: EmergencyFundRecommendation,
    now: datetime,
) -> GoalSnapshot:
    """
    Return the emergency fund goal updated with a recommendation.

    A recommendation built without any data leaves the goal untouched.
    """
    if not recommendation.has_sufficient_data:
        return goal

    updated = goal.model_copy(
        update={
            "target_amount": recommendation.target_amount,
            "income_percentage": recommendation.income_percentage,
            "target_months": recommendation.target_months,
        }
    )
    return refresh_completion(updated, now)
