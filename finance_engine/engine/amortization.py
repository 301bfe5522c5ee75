"""
Amortization Calculator

Standard fixed-payment math. Forms call these functions with half-filled
input, so zero or negative principal and term are answered with zero
rather than an error.
"""

from decimal import Decimal
from typing import Optional

from finance_engine.engine.numbers import HUNDRED, MONTHS_PER_YEAR, ZERO, Number, as_decimal
from finance_engine.models.loan import PaymentDistribution


def monthly_interest_rate(annual_rate_pct: Optional[Number]) -> Decimal:
    """Convert an APR percentage (e.g. ``6.5``) to a monthly fraction."""
    rate = as_decimal(annual_rate_pct)
    if rate <= 0:
        return ZERO
    return rate / HUNDRED / MONTHS_PER_YEAR


def monthly_payment(
    principal: Optional[Number],
    annual_rate_pct: Optional[Number],
    term_months: Optional[int],
) -> Decimal:
    """
    Calculate the fully amortizing monthly payment for a loan.

    ``principal`` is the amount financed, ``annual_rate_pct`` the nominal
    yearly rate as a percentage and ``term_months`` the number of monthly
    payments. A zero rate falls back to straight-line repayment, which
    also keeps the exponential formula away from a zero denominator.
    """
    amount = as_decimal(principal)
    n = int(term_months or 0)
    if n <= 0 or amount <= 0:
        return ZERO

    r = monthly_interest_rate(annual_rate_pct)
    if r == 0:
        return amount / n

    growth = (1 + r) ** n
    return amount * r * growth / (growth - 1)


def payment_distribution(
    payment: Optional[Number],
    balance: Optional[Number],
    annual_rate_pct: Optional[Number],
) -> PaymentDistribution:
    """
    Split one payment into the interest it covers and the principal it repays.

    Interest for the period is charged on ``balance``; a payment smaller
    than that interest repays no principal. The principal share never
    exceeds the balance, so an overpayment is not counted twice.
    """
    amount = max(ZERO, as_decimal(payment))
    outstanding = max(ZERO, as_decimal(balance))

    accrued = outstanding * monthly_interest_rate(annual_rate_pct)
    interest = min(accrued, amount)
    principal = min(amount - interest, outstanding)

    return PaymentDistribution(principal=principal, interest=interest)
