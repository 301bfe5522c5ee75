"""
Payment Frequency Conversion

Debts are paid on one of five cadences. Everything downstream of this
module works in monthly-equivalent amounts, so conversion happens once
here, against a single table of periods per year.

No rounding is applied. Rounding to currency precision belongs to the
presentation boundary; rounding here would compound across repeated
conversions.

The payment calendar helpers answer "when is the next payment due",
using calendar rules per cadence rather than a fixed day count.
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator, Optional, Union

from finance_engine.engine.errors import UnknownFrequencyError
from finance_engine.engine.numbers import ZERO, MONTHS_PER_YEAR, Number, as_decimal
from finance_engine.models.loan import PaymentFrequency


FrequencyLike = Union[PaymentFrequency, str]

PERIODS_PER_YEAR: dict[PaymentFrequency, Decimal] = {
    PaymentFrequency.MONTHLY: Decimal("12"),
    PaymentFrequency.BIWEEKLY: Decimal("26"),
    PaymentFrequency.WEEKLY: Decimal("52"),
    PaymentFrequency.SEMIMONTHLY: Decimal("24"),
    PaymentFrequency.DAILY: Decimal("365"),
}

# Fixed-step cadences; monthly and semimonthly follow the calendar instead.
_DAY_STEPS: dict[PaymentFrequency, int] = {
    PaymentFrequency.DAILY: 1,
    PaymentFrequency.WEEKLY: 7,
    PaymentFrequency.BIWEEKLY: 14,
}

_SEMIMONTHLY_GAP_DAYS = 15


def parse_frequency(value: FrequencyLike) -> PaymentFrequency:
    """
    Resolve a frequency tag to the enum.

    Raises:
        UnknownFrequencyError: If the tag is not a supported cadence
    """
    if isinstance(value, PaymentFrequency):
        return value
    if isinstance(value, str):
        try:
            return PaymentFrequency(value.strip().lower())
        except ValueError:
            raise UnknownFrequencyError(value) from None
    raise UnknownFrequencyError(value)


def monthly_factor(frequency: FrequencyLike) -> Decimal:
    """Number of payments of ``frequency`` that fit in an average month."""
    return PERIODS_PER_YEAR[parse_frequency(frequency)] / MONTHS_PER_YEAR


def to_monthly(amount: Optional[Number], frequency: FrequencyLike) -> Decimal:
    """
    Convert a per-period payment to its monthly equivalent.

    Zero or negative amounts map to zero.
    """
    factor = monthly_factor(frequency)
    value = as_decimal(amount)
    if value <= 0:
        return ZERO
    return value * factor


def from_monthly(monthly_amount: Optional[Number], frequency: FrequencyLike) -> Decimal:
    """
    Convert a monthly amount to the payment per period of ``frequency``.

    Zero or negative amounts map to zero.
    """
    factor = monthly_factor(frequency)
    value = as_decimal(monthly_amount)
    if value <= 0:
        return ZERO
    return value / factor


def convert(
    amount: Optional[Number],
    source: FrequencyLike,
    target: FrequencyLike,
) -> Decimal:
    """Convert a per-period amount between two cadences via the monthly form."""
    return from_monthly(to_monthly(amount, source), target)


# =============================================================================
# PAYMENT CALENDAR
# =============================================================================

def _clamped_day(year: int, month: int, day: int) -> date:
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def _semimonthly_days(anchor_day: int) -> tuple[int, int]:
    """The two due days of a month, given the day of the first payment."""
    if anchor_day <= _SEMIMONTHLY_GAP_DAYS:
        return anchor_day, anchor_day + _SEMIMONTHLY_GAP_DAYS
    return anchor_day - _SEMIMONTHLY_GAP_DAYS, anchor_day


def iter_payment_dates(
    first_payment_date: date,
    frequency: FrequencyLike,
) -> Iterator[date]:
    """
    Yield due dates from the first payment onwards, without end.

    Monthly payments keep the anchor day and clamp it to short months
    (a loan due on the 31st falls due on 28 or 29 February). Semimonthly
    payments fall twice a month, on the anchor day and the day fifteen
    days away from it, both clamped to the month end.
    """
    frequency = parse_frequency(frequency)

    if frequency in _DAY_STEPS:
        step = timedelta(days=_DAY_STEPS[frequency])
        current = first_payment_date
        while True:
            yield current
            current += step

    anchor = first_payment_date.day
    offset = 0
    while True:
        year, month = _shift_month(first_payment_date.year, first_payment_date.month, offset)
        if frequency == PaymentFrequency.MONTHLY:
            yield _clamped_day(year, month, anchor)
        else:
            for day in _semimonthly_days(anchor):
                due = _clamped_day(year, month, day)
                if due >= first_payment_date:
                    yield due
        offset += 1


def next_payment_dates(
    first_payment_date: date,
    frequency: FrequencyLike,
    after: date,
    count: int = 1,
) -> list[date]:
    """
    Return the next ``count`` due dates strictly after ``after``.

    Before the first payment this is simply the start of the schedule.
    """
    if count <= 0:
        return []

    dates: list[date] = []
    for due in iter_payment_dates(first_payment_date, frequency):
        if due <= after:
            continue
        dates.append(due)
        if len(dates) == count:
            break
    return dates
