"""Shared fixtures for the finance engine tests."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from finance_engine.audit import AuditLogger
from finance_engine.config import get_settings
from finance_engine.models.goal import GoalSnapshot
from finance_engine.models.loan import LoanSnapshot
from finance_engine.services.storage import InMemoryAuditStorage


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(storage=audit_storage)


@pytest.fixture
def make_loan():
    """Factory for loans with sensible defaults."""
    def _make(**overrides):
        fields = {
            "name": "Car loan",
            "principal": Decimal("1200"),
            "annual_interest_rate": Decimal("0"),
            "term_months": 12,
            "first_payment_date": date(2024, 1, 1),
        }
        fields.update(overrides)
        return LoanSnapshot(**fields)
    return _make


@pytest.fixture
def make_goal():
    """Factory for goals with sensible defaults."""
    def _make(**overrides):
        fields = {
            "name": "Holiday",
            "target_amount": Decimal("1000"),
        }
        fields.update(overrides)
        return GoalSnapshot(**fields)
    return _make
