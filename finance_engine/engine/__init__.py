"""
Calculation Engine Package

Pure, synchronous calculators. Nothing in this package performs I/O,
holds shared mutable state or blocks, so every function is safe to call
from any thread or request.
"""

from finance_engine.engine.allocation import (
    active_allocation,
    calculate_goal_progress,
    income_basis_from_transactions,
    income_percentage_from_target_months,
    resolve_income_basis,
    validate_allocation,
)
from finance_engine.engine.amortization import (
    monthly_interest_rate,
    monthly_payment,
    payment_distribution,
)
from finance_engine.engine.emergency import apply_recommendation, recommend
from finance_engine.engine.errors import (
    DebtAlreadyPaidOffError,
    EngineError,
    InvalidGoalAmountError,
    InvalidPaymentAmountError,
    UnknownFrequencyError,
)
from finance_engine.engine.forecast import (
    calculate_debt_metrics,
    forecast,
    months_to_payoff,
    progress_pct,
)
from finance_engine.engine.frequency import (
    convert,
    from_monthly,
    iter_payment_dates,
    next_payment_dates,
    parse_frequency,
    to_monthly,
)
from finance_engine.engine.goals import refresh_completion, top_up, withdraw
from finance_engine.engine.projection import (
    apply_payment,
    effective_monthly_payment,
    elapsed_months,
    needs_sync,
    project,
)

__all__ = [
    # Frequency
    "convert",
    "from_monthly",
    "iter_payment_dates",
    "next_payment_dates",
    "parse_frequency",
    "to_monthly",
    # Amortization
    "monthly_interest_rate",
    "monthly_payment",
    "payment_distribution",
    # Projection
    "apply_payment",
    "effective_monthly_payment",
    "elapsed_months",
    "needs_sync",
    "project",
    # Forecast
    "calculate_debt_metrics",
    "forecast",
    "months_to_payoff",
    "progress_pct",
    # Allocation
    "active_allocation",
    "calculate_goal_progress",
    "income_basis_from_transactions",
    "income_percentage_from_target_months",
    "resolve_income_basis",
    "validate_allocation",
    # Emergency fund
    "apply_recommendation",
    "recommend",
    # Goal lifecycle
    "refresh_completion",
    "top_up",
    "withdraw",
    # Errors
    "DebtAlreadyPaidOffError",
    "EngineError",
    "InvalidGoalAmountError",
    "InvalidPaymentAmountError",
    "UnknownFrequencyError",
]
