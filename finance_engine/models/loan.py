"""
Loan Models for the Finance Engine

These models describe a debt as the persistence collaborator hands it to
the engine, and the values the engine derives from it.

DESIGN DECISION: Snapshots are frozen.
The engine never mutates its inputs; every operation returns a new
derived value that the caller may persist.

All amounts are Decimal in a single implicit currency. Rates are
percentages (4.5 means 4.5% APR), never pre-divided fractions.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class PaymentFrequency(str, Enum):
    """
    Cadence at which a debt is paid.

    DESIGN DECISION: A closed set. Anything else is a programmer error
    and is rejected by the frequency converter.
    """
    MONTHLY = "monthly"
    BIWEEKLY = "biweekly"
    WEEKLY = "weekly"
    SEMIMONTHLY = "semimonthly"
    DAILY = "daily"


# =============================================================================
# INPUT SNAPSHOT
# =============================================================================

class LoanSnapshot(BaseModel):
    """
    A debt as stored, captured for one calculation call.

    ``payment_amount`` is the amount per period of ``payment_frequency``.
    When it is absent the payment is derived by amortization.
    ``principal_paid`` and ``interest_paid`` are the cached accruals; when
    absent they are derived by projection.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Debt identifier"
    )
    name: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Display name"
    )

    principal: Decimal = Field(
        ...,
        ge=0,
        description="Original amount financed (initial amount minus down payment)"
    )
    annual_interest_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Annual rate as a percentage, e.g. 4.5"
    )
    term_months: Optional[int] = Field(
        default=None,
        ge=0,
        description="Fixed term in months; None for revolving debts"
    )
    first_payment_date: date = Field(
        ...,
        description="Date the first payment falls due"
    )
    payment_frequency: PaymentFrequency = Field(
        default=PaymentFrequency.MONTHLY,
        description="Payment cadence"
    )
    payment_amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Explicit payment per period of payment_frequency"
    )

    # Cached accruals
    principal_paid: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Principal repaid so far, if already known"
    )
    interest_paid: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Interest paid so far, if already known"
    )

    additional_contribution: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Extra amount applied to principal every month"
    )

    # Status
    is_paused: bool = False
    is_paid_off: bool = False

    @model_validator(mode='after')
    def validate_principal(self) -> 'LoanSnapshot':
        """Only a paid-off debt may have nothing financed."""
        if self.principal <= 0 and not self.is_paid_off:
            raise ValueError("Principal must be greater than zero unless the debt is paid off")
        return self

    @classmethod
    def from_financing(
        cls,
        initial_amount: Decimal,
        down_payment: Decimal = Decimal("0"),
        **fields,
    ) -> 'LoanSnapshot':
        """
        Build a snapshot from the purchase amount and the down payment.

        A down payment covering the whole amount yields a paid-off debt.
        """
        principal = Decimal(str(initial_amount)) - Decimal(str(down_payment))
        principal = max(Decimal("0"), principal)
        fields.setdefault("is_paid_off", principal <= 0)
        return cls(principal=principal, **fields)

    @property
    def current_balance(self) -> Decimal:
        """Outstanding principal according to the cached accruals."""
        if self.is_paid_off:
            return Decimal("0")
        paid = self.principal_paid or Decimal("0")
        return max(Decimal("0"), self.principal - paid)


# =============================================================================
# DERIVED RESULTS
# =============================================================================

class PaymentDistribution(BaseModel):
    """How a single payment splits between interest and principal."""
    model_config = ConfigDict(frozen=True)

    principal: Decimal = Field(ge=0)
    interest: Decimal = Field(ge=0)


class ProjectedPayments(BaseModel):
    """
    Paid-to-date state reconstructed without a ledger.

    ``interest_shortfall`` reports interest that accrued but was not
    covered by the payment (negative amortization). It is never added to
    the balance.
    """
    model_config = ConfigDict(frozen=True)

    principal_paid: Decimal = Field(ge=0)
    interest_paid: Decimal = Field(ge=0)
    current_balance: Decimal = Field(ge=0)
    periods_applied: int = Field(default=0, ge=0)
    interest_shortfall: Decimal = Field(default=Decimal("0"), ge=0)
    is_paid_off: bool = False


class DebtForecast(BaseModel):
    """
    Forward-looking payoff metrics.

    ``months_remaining`` is None when the horizon cannot be determined,
    i.e. the payment never retires the balance. An undetermined forecast
    always reports ``total_interest_remaining`` as zero: the total of an
    open-ended debt is unknown, not the interest counted before giving up.
    """
    model_config = ConfigDict(frozen=True)

    months_remaining: Optional[int] = Field(default=None, ge=0)
    total_interest_remaining: Decimal = Field(ge=0)
    progress_pct: Decimal = Field(ge=0, le=100)

    @property
    def is_determined(self) -> bool:
        return self.months_remaining is not None


class DebtMetrics(BaseModel):
    """Everything a debt card shows, computed in one pass."""
    model_config = ConfigDict(frozen=True)

    debt_id: UUID
    monthly_payment: Decimal = Field(ge=0)
    remaining_balance: Decimal = Field(ge=0)
    remaining_principal: Decimal = Field(ge=0)
    months_remaining: Optional[int] = Field(default=None, ge=0)
    total_interest_paid: Decimal = Field(ge=0)
    total_interest_remaining: Decimal = Field(ge=0)
    progress_pct: Decimal = Field(ge=0, le=100)
    is_paid_off: bool = False
