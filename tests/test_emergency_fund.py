"""Tests for the emergency fund advisor."""

import pytest
from decimal import Decimal

from finance_engine.config import EmergencyFundSettings
from finance_engine.engine import apply_recommendation, recommend


class TestRecommend:
    """Tests for target and percentage recommendations."""

    def test_six_months_of_expenses(self):
        """Test the target covers six months and the gap closes over thirty."""
        rec = recommend(Decimal("5000"), Decimal("3000"), Decimal("0"))

        assert rec.target_amount == Decimal("18000")
        assert rec.income_percentage == Decimal("12")
        assert rec.target_months == 6
        assert rec.monthly_basis == Decimal("3000")
        assert rec.has_sufficient_data is True

    def test_percentage_floor(self):
        """Test a high income is still asked for the minimum share."""
        rec = recommend(Decimal("100000"), Decimal("3000"), Decimal("0"))
        assert rec.income_percentage == Decimal("5")

    def test_percentage_ceiling(self):
        """Test a low income is never asked for more than the maximum share."""
        rec = recommend(Decimal("1000"), Decimal("3000"), Decimal("0"))
        assert rec.income_percentage == Decimal("20")

    def test_fully_funded(self):
        """Test nothing is recommended once the target is covered."""
        rec = recommend(Decimal("5000"), Decimal("3000"), Decimal("20000"))
        assert rec.income_percentage == Decimal("0")

    def test_effectively_met(self):
        """Test a balance within the met threshold stops contributions."""
        rec = recommend(Decimal("5000"), Decimal("3000"), Decimal("17500"))
        assert rec.income_percentage == Decimal("0")

    def test_income_fallback_without_expenses(self):
        """Test expenses are assumed to be 80% of income when unknown."""
        rec = recommend(Decimal("5000"), Decimal("0"), Decimal("0"))

        assert rec.monthly_basis == Decimal("4000")
        assert rec.target_amount == Decimal("24000")

    def test_no_income(self):
        """Test a target is still sized from expenses when income is zero."""
        rec = recommend(Decimal("0"), Decimal("3000"), Decimal("0"))

        assert rec.target_amount == Decimal("18000")
        assert rec.income_percentage == Decimal("0")
        assert rec.has_sufficient_data is True

    def test_no_data(self):
        """Test zero income and zero expenses are flagged as insufficient."""
        rec = recommend(Decimal("0"), Decimal("0"), Decimal("0"))

        assert rec.target_amount == Decimal("0")
        assert rec.has_sufficient_data is False

    def test_after_tax_income_replaces_gross(self):
        """Test a supplied after-tax income is used instead of gross income."""
        rec = recommend(Decimal("5000"), Decimal("0"), Decimal("0"), after_tax_income=Decimal("4000"))
        assert rec.target_amount == Decimal("19200")

    def test_policy_override(self):
        """Test an explicit policy replaces the configured one."""
        policy = EmergencyFundSettings(reserve_months=3)
        rec = recommend(Decimal("5000"), Decimal("3000"), Decimal("0"), policy=policy)

        assert rec.target_amount == Decimal("9000")
        assert rec.target_months == 3

    def test_policy_from_environment(self, monkeypatch):
        """Test the configured policy is read from the environment."""
        monkeypatch.setenv("EMERGENCY_FUND_RESERVE_MONTHS", "4")
        rec = recommend(Decimal("5000"), Decimal("3000"), Decimal("0"))
        assert rec.target_amount == Decimal("12000")

    @pytest.mark.parametrize("income", [Decimal("0"), Decimal("800"), Decimal("4200"), Decimal("250000")])
    @pytest.mark.parametrize("expenses", [Decimal("0"), Decimal("1500"), Decimal("9000")])
    @pytest.mark.parametrize("balance", [Decimal("0"), Decimal("5000"), Decimal("60000")])
    def test_percentage_bounds(self, income, expenses, balance):
        """Test the percentage stays in [0, 20] and is zero with nothing remaining."""
        rec = recommend(income, expenses, balance)

        assert Decimal("0") <= rec.income_percentage <= Decimal("20")
        if rec.target_amount - balance <= 0:
            assert rec.income_percentage == Decimal("0")


class TestApplyRecommendation:
    """Tests for updating the system goal."""

    def test_updates_system_goal(self, make_goal, now):
        """Test target, percentage and horizon are written to the goal."""
        goal = make_goal(target_amount=Decimal("0"), is_system_goal=True)
        rec = recommend(Decimal("5000"), Decimal("3000"), Decimal("0"))
        updated = apply_recommendation(goal, rec, now)

        assert updated.target_amount == Decimal("18000")
        assert updated.income_percentage == Decimal("12")
        assert updated.target_months == 6
        assert updated.id == goal.id

    def test_insufficient_data_leaves_goal(self, make_goal, now):
        """Test a recommendation without data changes nothing."""
        goal = make_goal(target_amount=Decimal("0"), is_system_goal=True)
        rec = recommend(Decimal("0"), Decimal("0"), Decimal("0"))
        assert apply_recommendation(goal, rec, now) is goal

    def test_marks_funded_goal_completed(self, make_goal, now):
        """Test a goal already above its new target is completed."""
        goal = make_goal(
            target_amount=Decimal("0"),
            is_system_goal=True,
            current_balance=Decimal("20000"),
        )
        rec = recommend(Decimal("5000"), Decimal("3000"), goal.current_balance)
        updated = apply_recommendation(goal, rec, now)

        assert updated.is_completed is True
        assert updated.completed_at == now
        assert updated.income_percentage == Decimal("0")
