"""
Spread construction between two instruments.

All functions are pure and return 0 instead of dividing by zero or taking
the log of a non-positive price.
"""

from __future__ import annotations

import math


DAYS_PER_YEAR = 365


def ratio_spread(price_a: float, price_b: float) -> float:
    """price_a / price_b."""
    if price_b == 0:
        return 0.0
    return price_a / price_b


def log_spread(price_a: float, price_b: float, beta: float = 1.0) -> float:
    """ln(price_a) - beta * ln(price_b)."""
    if price_a <= 0 or price_b <= 0:
        return 0.0
    return math.log(price_a) - beta * math.log(price_b)


def residual_spread(price_a: float, price_b: float, alpha: float, beta: float) -> float:
    """
    Regression residual spread used for cointegrated pairs.

    spread = price_a - (alpha + beta * price_b)
    """
    return price_a - (alpha + beta * price_b)


def percentage_spread(price_a: float, price_b: float) -> float:
    """(price_a - price_b) / price_b."""
    if price_b == 0:
        return 0.0
    return (price_a - price_b) / price_b


def basis(derivative_price: float, spot_price: float) -> float:
    """Derivative premium over spot as a fraction of spot."""
    if spot_price == 0:
        return 0.0
    return (derivative_price - spot_price) / spot_price


def annualized_basis(period_basis: float, period_length_days: float) -> float:
    """
    Linear (non-compounded) annualization of a per-period basis.

    Args:
        period_basis: Basis observed over one period
        period_length_days: Period length in days

    Returns:
        period_basis * 365 / period_length_days
    """
    if period_length_days <= 0:
        return 0.0
    return period_basis * (DAYS_PER_YEAR / period_length_days)
