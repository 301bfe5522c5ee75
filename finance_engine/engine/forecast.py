"""
Debt Forecast

Projects the remaining life of a debt forward from its current balance,
using the same fixed payment and rate the history projection uses.

GUARANTEE: every forecast terminates. The forward walk stops at a fixed
iteration ceiling (100 years by default). A payment that never retires
the balance yields ``months_remaining = None``, meaning "cannot
determine". It is never reported as infinity and never raises.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from finance_engine.config import get_settings
from finance_engine.engine.amortization import monthly_interest_rate
from finance_engine.engine.numbers import HUNDRED, ZERO, clamp
from finance_engine.engine.projection import effective_monthly_payment, project
from finance_engine.models.loan import (
    DebtForecast,
    DebtMetrics,
    LoanSnapshot,
    ProjectedPayments,
)


logger = structlog.get_logger(__name__)


def progress_pct(principal_paid: Decimal, principal: Decimal) -> Decimal:
    """Share of principal repaid, clamped to [0, 100]. Zero for an empty principal."""
    if principal <= 0:
        return ZERO
    return clamp(principal_paid / principal * HUNDRED, ZERO, HUNDRED)


def months_to_payoff(
    balance: Decimal,
    annual_rate_pct: Decimal,
    monthly_amount: Decimal,
    max_months: Optional[int] = None,
    extra: Decimal = ZERO,
) -> tuple[Optional[int], Decimal]:
    """
    Walk the amortization forward until the balance reaches zero.

    Each month applies the same rule as the history projection: the
    payment covers interest first, and whatever it leaves over plus
    ``extra`` repays principal. An extra contribution therefore keeps
    reducing the balance even when the payment alone does not cover
    interest.

    Returns (months, total_interest). ``months`` is None when the balance
    cannot be retired within ``max_months``; the interest is then zero,
    because no total is known for an open-ended debt.
    """
    if balance <= 0:
        return 0, ZERO

    ceiling = max_months if max_months is not None else get_settings().forecast.max_months
    rate = monthly_interest_rate(annual_rate_pct)

    # Nothing ever reaches principal; the balance never falls.
    if extra <= 0 and monthly_amount <= balance * rate:
        return None, ZERO

    remaining = balance
    total_interest = ZERO
    months = 0

    while remaining > 0:
        if months >= ceiling:
            return None, ZERO
        interest = remaining * rate
        remaining -= min(max(ZERO, monthly_amount - interest) + extra, remaining)
        total_interest += min(interest, monthly_amount)
        months += 1

    return months, total_interest


def forecast(
    loan: LoanSnapshot,
    projected: ProjectedPayments,
    max_months: Optional[int] = None,
) -> DebtForecast:
    """
    Months and interest left until payoff, plus progress so far.

    Paid-off debts report zero remaining. The additional monthly
    contribution goes to principal every month going forward, exactly as
    in the history projection.
    """
    progress = progress_pct(projected.principal_paid, loan.principal)

    if loan.is_paid_off or projected.is_paid_off or projected.current_balance <= 0:
        return DebtForecast(
            months_remaining=0,
            total_interest_remaining=ZERO,
            progress_pct=progress,
        )

    payment = effective_monthly_payment(loan)
    months, interest = months_to_payoff(
        projected.current_balance,
        loan.annual_interest_rate,
        payment,
        max_months=max_months,
        extra=loan.additional_contribution,
    )

    if months is None:
        logger.debug(
            "forecast_undetermined",
            debt_id=str(loan.id),
            current_balance=str(projected.current_balance),
            monthly_payment=str(payment),
            additional_contribution=str(loan.additional_contribution),
        )

    return DebtForecast(
        months_remaining=months,
        total_interest_remaining=interest,
        progress_pct=progress,
    )


def calculate_debt_metrics(
    loan: LoanSnapshot,
    as_of: date,
    max_months: Optional[int] = None,
) -> DebtMetrics:
    """
    Project a debt to ``as_of`` and forecast it in one call.

    This is what a debt list needs per row.
    """
    projected = project(loan, as_of)
    outlook = forecast(loan, projected, max_months=max_months)

    return DebtMetrics(
        debt_id=loan.id,
        monthly_payment=effective_monthly_payment(loan),
        remaining_balance=projected.current_balance,
        remaining_principal=max(ZERO, loan.principal - projected.principal_paid),
        months_remaining=outlook.months_remaining,
        total_interest_paid=projected.interest_paid,
        total_interest_remaining=outlook.total_interest_remaining,
        progress_pct=outlook.progress_pct,
        is_paid_off=loan.is_paid_off or projected.is_paid_off,
    )
