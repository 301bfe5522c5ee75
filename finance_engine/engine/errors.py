"""
Engine Errors

The engine prefers defined edge-case values (zero, None) over exceptions
for partially filled input. These errors are reserved for broken call
contracts, which are programmer errors rather than data-quality issues.
"""


class EngineError(Exception):
    """Base exception for all engine errors."""
    pass


class UnknownFrequencyError(EngineError, ValueError):
    """Payment frequency tag is not one of the supported cadences."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unknown payment frequency: {value!r}")


class InvalidPaymentAmountError(EngineError, ValueError):
    """A manual debt payment must be positive."""
    pass


class DebtAlreadyPaidOffError(EngineError):
    """Payment applied to a debt with nothing left to repay."""
    pass


class InvalidGoalAmountError(EngineError, ValueError):
    """Top-ups and withdrawals must be positive."""
    pass
