"""
Household Finance Engine - Source Package

The calculation core of a household finance tracker: debt amortization
and payoff forecasting, income-allocation checks for savings goals, and
emergency fund sizing.

DESIGN PRINCIPLES:
1. Calculators are pure: snapshots in, results out
2. Money is Decimal end to end
3. No silent corrections: an over-allocation is rejected, never rescaled
4. Policy numbers live in settings, not in code
5. Storage is the caller's; the engine never touches it
"""

__version__ = "1.0.0"
__author__ = "Household Finance Team"
