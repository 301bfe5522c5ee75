"""Tests for payoff forecasting and debt metrics."""

import pytest
from datetime import date
from decimal import Decimal

from finance_engine.engine import (
    calculate_debt_metrics,
    forecast,
    monthly_payment,
    months_to_payoff,
    progress_pct,
    project,
)


class TestProgress:
    """Tests for repayment progress."""

    def test_progress_clamps_at_100(self):
        """Test over-repayment never reports more than 100%."""
        assert progress_pct(Decimal("1500"), Decimal("1000")) == Decimal("100")

    def test_progress_with_empty_principal(self):
        """Test a zero principal reports zero progress rather than dividing by zero."""
        assert progress_pct(Decimal("10"), Decimal("0")) == Decimal("0")

    def test_progress_share(self):
        """Test progress is principal repaid over principal."""
        assert progress_pct(Decimal("250"), Decimal("1000")) == Decimal("25")


class TestMonthsToPayoff:
    """Tests for the forward amortization walk."""

    def test_zero_rate(self):
        """Test a zero-rate balance needs balance / payment months."""
        assert months_to_payoff(Decimal("1200"), Decimal("0"), Decimal("100")) == (12, Decimal("0"))

    def test_final_partial_month_counts(self):
        """Test a remainder smaller than the payment still takes a month."""
        months, interest = months_to_payoff(Decimal("1000"), Decimal("12"), Decimal("110"))
        assert months == 10
        assert Decimal("0") < interest < Decimal("100")

    def test_matches_amortized_term(self):
        """Test the amortized payment retires a mortgage in its term."""
        payment = monthly_payment(Decimal("100000"), Decimal("6"), 360)
        months, _ = months_to_payoff(Decimal("100000"), Decimal("6"), payment)
        assert months in (360, 361)

    def test_payment_below_interest_is_undetermined(self):
        """Test a payment that never covers interest yields None."""
        months, interest = months_to_payoff(Decimal("10000"), Decimal("12"), Decimal("50"))
        assert months is None
        assert interest == Decimal("0")

    def test_payment_equal_to_interest_is_undetermined(self):
        """Test a payment that only covers interest never retires the balance."""
        months, _ = months_to_payoff(Decimal("10000"), Decimal("12"), Decimal("100"))
        assert months is None

    def test_ceiling_stops_walk(self):
        """Test a tiny payment gives up at the iteration ceiling."""
        months, _ = months_to_payoff(
            Decimal("1000000"), Decimal("0"), Decimal("1"), max_months=10
        )
        assert months is None

    def test_ceiling_reports_no_interest(self):
        """Test an undetermined horizon reports zero interest whichever check gave up."""
        months, interest = months_to_payoff(
            Decimal("1000000"), Decimal("12"), Decimal("10001"), max_months=10
        )
        assert months is None
        assert interest == Decimal("0")

    def test_extra_contribution_below_interest_still_retires(self):
        """Test an extra contribution repays principal even when the payment misses interest."""
        months, interest = months_to_payoff(
            Decimal("10000"), Decimal("12"), Decimal("50"), extra=Decimal("40")
        )
        assert months is not None
        assert months > 125
        assert interest > Decimal("0")

    def test_ceiling_from_settings(self, monkeypatch):
        """Test the default ceiling is read from configuration."""
        monkeypatch.setenv("FORECAST_MAX_MONTHS", "5")
        months, _ = months_to_payoff(Decimal("1200"), Decimal("0"), Decimal("100"))
        assert months is None

    def test_empty_balance(self):
        """Test nothing remains to pay on a zero balance."""
        assert months_to_payoff(Decimal("0"), Decimal("5"), Decimal("0")) == (0, Decimal("0"))


class TestForecast:
    """Tests for debt forecasts built on a projection."""

    def test_paid_off_debt(self, make_loan):
        """Test a closed debt has nothing remaining."""
        loan = make_loan(is_paid_off=True)
        outlook = forecast(loan, project(loan, date(2024, 6, 1)))

        assert outlook.months_remaining == 0
        assert outlook.total_interest_remaining == Decimal("0")
        assert outlook.progress_pct == Decimal("100")

    def test_additional_contribution_shortens_payoff(self, make_loan):
        """Test the extra monthly amount is part of the forward payment."""
        loan = make_loan(additional_contribution=Decimal("100"))
        outlook = forecast(loan, project(loan, date(2024, 1, 1)))
        assert outlook.months_remaining == 6

    def test_forecast_agrees_with_projection_on_extra(self, make_loan):
        """Test a debt the projection is paying down is never forecast as undetermined."""
        loan = make_loan(
            principal=Decimal("10000"),
            annual_interest_rate=Decimal("12"),
            term_months=None,
            payment_amount=Decimal("50"),
            additional_contribution=Decimal("40"),
        )
        projected = project(loan, date(2025, 1, 1))
        outlook = forecast(loan, projected)

        assert projected.current_balance == Decimal("9520")
        assert outlook.months_remaining is not None
        assert outlook.is_determined is True

    def test_revolving_debt_without_payment(self, make_loan):
        """Test a debt with no scheduled payment is undetermined."""
        loan = make_loan(term_months=None)
        outlook = forecast(loan, project(loan, date(2024, 1, 1)))

        assert outlook.months_remaining is None
        assert outlook.is_determined is False


class TestDebtMetrics:
    """Tests for the combined projection and forecast."""

    def test_metrics_mid_term(self, make_loan):
        """Test a debt a quarter repaid."""
        loan = make_loan()
        metrics = calculate_debt_metrics(loan, date(2024, 4, 1))

        assert metrics.debt_id == loan.id
        assert metrics.monthly_payment == Decimal("100")
        assert metrics.remaining_balance == Decimal("900")
        assert metrics.remaining_principal == Decimal("900")
        assert metrics.months_remaining == 9
        assert metrics.progress_pct == Decimal("25")
        assert metrics.total_interest_paid == Decimal("0")
        assert metrics.is_paid_off is False

    def test_metrics_after_payoff(self, make_loan):
        """Test a debt projected past its term reports completion."""
        metrics = calculate_debt_metrics(make_loan(), date(2030, 1, 1))

        assert metrics.is_paid_off is True
        assert metrics.months_remaining == 0
        assert metrics.progress_pct == Decimal("100")

    def test_metrics_undetermined(self, make_loan):
        """Test a payment below interest is reported as undetermined, not infinite."""
        loan = make_loan(
            principal=Decimal("10000"),
            annual_interest_rate=Decimal("12"),
            term_months=None,
            payment_amount=Decimal("50"),
        )
        metrics = calculate_debt_metrics(loan, date(2024, 1, 1))

        assert metrics.months_remaining is None
        assert metrics.total_interest_remaining == Decimal("0")

    @pytest.mark.parametrize("as_of", [date(2023, 1, 1), date(2024, 6, 1), date(2099, 1, 1)])
    def test_progress_within_bounds(self, make_loan, as_of):
        """Test progress stays in [0, 100] at any date."""
        metrics = calculate_debt_metrics(make_loan(), as_of)
        assert Decimal("0") <= metrics.progress_pct <= Decimal("100")
