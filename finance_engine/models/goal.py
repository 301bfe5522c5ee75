"""
Savings Goal Models for the Finance Engine

A goal receives a share of the household's monthly income. The sum of
those shares across active goals is the allocation the engine guards.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


class GoalSnapshot(BaseModel):
    """
    A savings goal as stored, captured for one calculation call.

    ``is_completed`` and ``completed_at`` are the cached completion state.
    Use ``finance_engine.engine.goals.refresh_completion`` to recompute
    them after a balance change.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Goal identifier"
    )
    name: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Display name"
    )

    target_amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount to save; zero only for system-managed goals"
    )
    current_balance: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount saved so far"
    )
    income_percentage: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        le=100,
        description="Share of monthly income allocated to this goal"
    )
    target_months: Optional[int] = Field(
        default=None,
        ge=0,
        description="Desired months to reach the target"
    )
    expected_income: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Monthly income override used instead of transaction history"
    )

    # Status
    is_paused: bool = False
    is_system_goal: bool = False
    is_completed: bool = False
    completed_at: Optional[datetime] = None

    @model_validator(mode='after')
    def validate_target(self) -> 'GoalSnapshot':
        """Only system goals may start without a target."""
        if self.target_amount <= 0 and not self.is_system_goal:
            raise ValueError("Target amount must be greater than 0")
        return self

    @property
    def remaining_amount(self) -> Decimal:
        return max(Decimal("0"), self.target_amount - self.current_balance)


class AllocationResult(BaseModel):
    """
    Outcome of an allocation check.

    The calling service builds any user-facing message from these fields.
    """
    model_config = ConfigDict(frozen=True)

    valid: bool = Field(
        ...,
        description="Would the new total stay within the limit?"
    )
    total: Decimal = Field(
        ...,
        description="Peers' active allocation plus the candidate percentage"
    )
    available: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Headroom left for the edited goal before the candidate is added"
    )


class GoalProgress(BaseModel):
    """Progress and pace of a goal at a given income basis."""
    model_config = ConfigDict(frozen=True)

    progress_pct: Decimal = Field(ge=0, le=100)
    monthly_contribution: Decimal = Field(ge=0)
    months_to_goal: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="None when nothing is being contributed"
    )
    income_basis: Decimal = Field(default=Decimal("0"), ge=0)


class EmergencyFundRecommendation(BaseModel):
    """Target and contribution advised for the emergency fund goal."""
    model_config = ConfigDict(frozen=True)

    target_amount: Decimal = Field(ge=0)
    income_percentage: Decimal = Field(ge=0, le=100)
    target_months: int = Field(
        ge=1,
        description="Months of expenses the target covers"
    )
    monthly_basis: Decimal = Field(
        ge=0,
        description="Monthly expense figure the target was built from"
    )
    has_sufficient_data: bool = Field(
        default=True,
        description="False when neither income nor expense history is available"
    )
