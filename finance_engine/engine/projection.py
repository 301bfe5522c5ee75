"""
Payment History Projection

DESIGN DECISION: Paid-to-date state is re-derived, not read from a ledger.
Starting at the first payment date, every elapsed calendar month applies
the loan's fixed payment, split between interest and principal. This
avoids storing one row per payment.

CONSEQUENCE: the projection always reflects the loan's CURRENT terms.
Editing the rate, the payment or the first payment date re-projects the
whole history. Pausing stops accrual only while the pause lasts; once
resumed, the projection walks every month since the first payment again.
This is the intended behaviour, not drift.

Elapsed periods are counted by calendar month (year * 12 + month), never
by days, matching loan-servicing convention.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from finance_engine.config import get_settings
from finance_engine.engine.amortization import monthly_interest_rate, monthly_payment
from finance_engine.engine.errors import DebtAlreadyPaidOffError, InvalidPaymentAmountError
from finance_engine.engine.frequency import to_monthly
from finance_engine.engine.numbers import ZERO, Number, as_decimal
from finance_engine.models.loan import LoanSnapshot, ProjectedPayments


logger = structlog.get_logger(__name__)


def elapsed_months(start: date, as_of: date) -> int:
    """Whole calendar months from ``start`` to ``as_of``; never negative."""
    months = (as_of.year * 12 + as_of.month) - (start.year * 12 + start.month)
    return max(0, months)


def effective_monthly_payment(loan: LoanSnapshot) -> Decimal:
    """
    The fixed monthly-equivalent payment applied each period.

    An explicit payment is converted from its cadence; otherwise the
    payment is amortized over the term. A revolving debt with neither has
    no scheduled payment.
    """
    if loan.payment_amount is not None and loan.payment_amount > 0:
        return to_monthly(loan.payment_amount, loan.payment_frequency)
    return monthly_payment(loan.principal, loan.annual_interest_rate, loan.term_months)


def _stored_state(loan: LoanSnapshot) -> ProjectedPayments:
    if loan.is_paid_off:
        principal_paid = loan.principal_paid if loan.principal_paid is not None else loan.principal
    else:
        principal_paid = loan.principal_paid or ZERO
    return ProjectedPayments(
        principal_paid=principal_paid,
        interest_paid=loan.interest_paid or ZERO,
        current_balance=loan.current_balance,
        is_paid_off=loan.is_paid_off,
    )


def project(loan: LoanSnapshot, as_of: date) -> ProjectedPayments:
    """
    Reconstruct principal paid, interest paid and balance as of ``as_of``.

    Paid-off debts are terminal and paused debts do not accrue: both
    return their stored values unchanged.
    """
    if loan.is_paid_off or loan.is_paused:
        return _stored_state(loan)

    payment = effective_monthly_payment(loan)
    extra = loan.additional_contribution
    rate = monthly_interest_rate(loan.annual_interest_rate)
    periods = elapsed_months(loan.first_payment_date, as_of)

    balance = loan.principal
    principal_paid = ZERO
    interest_paid = ZERO
    shortfall = ZERO
    applied = 0

    for _ in range(periods):
        if balance <= 0:
            break

        interest = balance * rate
        if payment >= interest:
            covered = interest
        else:
            covered = payment
            shortfall += interest - payment

        repaid = min(max(ZERO, payment - interest) + extra, balance)

        balance -= repaid
        principal_paid += repaid
        interest_paid += covered
        applied += 1

    if balance <= 0 and applied < periods:
        logger.debug(
            "loan_paid_off_early",
            debt_id=str(loan.id),
            periods_applied=applied,
            periods_elapsed=periods,
        )

    return ProjectedPayments(
        principal_paid=principal_paid,
        interest_paid=interest_paid,
        current_balance=max(ZERO, balance),
        periods_applied=applied,
        interest_shortfall=shortfall,
        is_paid_off=balance <= 0,
    )


def apply_payment(loan: LoanSnapshot, amount: Number) -> ProjectedPayments:
    """
    Apply one manual payment on top of the stored accruals.

    The whole payment repays principal, capped at the balance. Interest
    paid is left as stored; scheduled interest is only ever derived by
    the projection.

    Raises:
        InvalidPaymentAmountError: If ``amount`` is not positive
        DebtAlreadyPaidOffError: If nothing is left to repay
    """
    value = as_decimal(amount)
    if value <= 0:
        raise InvalidPaymentAmountError("Payment amount must be positive")

    balance = loan.current_balance
    if loan.is_paid_off or balance <= 0:
        raise DebtAlreadyPaidOffError(f"Debt {loan.id} is already paid off")

    reduction = min(value, balance)
    new_balance = balance - reduction

    return ProjectedPayments(
        principal_paid=(loan.principal_paid or ZERO) + reduction,
        interest_paid=loan.interest_paid or ZERO,
        current_balance=new_balance,
        periods_applied=1,
        is_paid_off=new_balance <= 0,
    )


def needs_sync(
    loan: LoanSnapshot,
    projected: ProjectedPayments,
    tolerance: Optional[Number] = None,
) -> bool:
    """
    Whether the stored accruals are stale against a projection.

    Paused and paid-off debts are never rewritten.
    """
    if loan.is_paused or loan.is_paid_off:
        return False

    if tolerance is None:
        limit = get_settings().forecast.sync_tolerance
    else:
        limit = as_decimal(tolerance)

    pairs = (
        (loan.principal_paid or ZERO, projected.principal_paid),
        (loan.interest_paid or ZERO, projected.interest_paid),
        (loan.current_balance, projected.current_balance),
    )
    return any(abs(stored - derived) > limit for stored, derived in pairs)
