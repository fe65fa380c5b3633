"""
Statistical calculations for pairs and spread analysis.

This module provides pure functions for:
- Descriptive statistics (mean, population standard deviation, z-score)
- Pearson correlation on the trailing common window
- Ordinary least squares hedge-ratio estimation
- Augmented Dickey-Fuller stationarity testing
- Ornstein-Uhlenbeck half-life and Hurst exponent estimation

Every function degrades to a neutral value on short or degenerate input
instead of raising, so a single bad window never fails a price tick.

Standard deviations use the population convention (divide by N) throughout.

Reference:
    - Engle, R.F. and Granger, C.W.J. (1987). "Co-Integration and Error Correction"
    - Hurst, H.E. (1951). "Long-term storage capacity of reservoirs"
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from loguru import logger
from statsmodels.tsa.stattools import adfuller


MIN_ADF_OBSERVATIONS = 30
MIN_HALF_LIFE_OBSERVATIONS = 10
DEFAULT_HURST_MAX_LAG = 20

# Significance level -> key in statsmodels' critical value table
_ADF_CRITICAL_KEYS = {0.01: "1%", 0.05: "5%", 0.10: "10%"}


@dataclass
class OLSResult:
    """Result of a simple y = alpha + beta * x regression."""
    alpha: float
    beta: float
    residuals: np.ndarray = field(default_factory=lambda: np.array([]))


@dataclass
class ADFResult:
    """Result of an Augmented Dickey-Fuller unit-root test."""
    is_stationary: bool
    test_stat: float
    critical_value: float
    p_value: float
    used_lag: int = 0
    n_obs: int = 0

    def to_dict(self) -> dict:
        return {
            "is_stationary": self.is_stationary,
            "test_stat": self.test_stat,
            "critical_value": self.critical_value,
            "p_value": self.p_value,
            "used_lag": self.used_lag,
            "n_obs": self.n_obs,
        }


def _as_array(values: Sequence[float] | np.ndarray) -> np.ndarray:
    return np.asarray(values, dtype=float).ravel()


def _finite(values: Sequence[float] | np.ndarray) -> np.ndarray:
    arr = _as_array(values)
    return arr[np.isfinite(arr)]


def _trailing_window(
    a: Sequence[float] | np.ndarray,
    b: Sequence[float] | np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Align two series on their most recent common window."""
    a_arr = _as_array(a)
    b_arr = _as_array(b)
    n = min(a_arr.size, b_arr.size)
    return a_arr[a_arr.size - n:], b_arr[b_arr.size - n:]


def mean(values: Sequence[float] | np.ndarray) -> float:
    """Arithmetic mean; 0 for empty input."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def std(values: Sequence[float] | np.ndarray) -> float:
    """Population standard deviation; 0 below two observations."""
    arr = _as_array(values)
    if arr.size < 2:
        return 0.0
    return float(arr.std(ddof=0))


def z_score(value: float, mu: float, sigma: float) -> float:
    """(value - mu) / sigma, or 0 when sigma is 0."""
    if sigma == 0:
        return 0.0
    return (value - mu) / sigma


def correlation(
    series_a: Sequence[float] | np.ndarray,
    series_b: Sequence[float] | np.ndarray,
) -> float:
    """
    Pearson correlation of two series.

    Series of different lengths are aligned on the trailing window of the
    shorter one.

    Args:
        series_a: First series
        series_b: Second series

    Returns:
        Correlation in [-1, 1]; 0 with fewer than two points or a constant side
    """
    a, b = _trailing_window(series_a, series_b)
    if a.size < 2:
        return 0.0

    da = a - a.mean()
    db = b - b.mean()

    denom = math.sqrt(float(np.dot(da, da))) * math.sqrt(float(np.dot(db, db)))
    if denom == 0:
        return 0.0

    return float(np.dot(da, db) / denom)


def ols(
    x: Sequence[float] | np.ndarray,
    y: Sequence[float] | np.ndarray,
) -> OLSResult:
    """
    Ordinary least squares fit of y = alpha + beta * x.

    Args:
        x: Regressor
        y: Dependent variable

    Returns:
        OLSResult with residuals[i] = y[i] - (alpha + beta * x[i])
    """
    x_arr, y_arr = _trailing_window(x, y)
    if x_arr.size < 2:
        return OLSResult(alpha=0.0, beta=1.0, residuals=np.array([]))

    mean_x = x_arr.mean()
    mean_y = y_arr.mean()
    dx = x_arr - mean_x

    denom = float(np.dot(dx, dx))
    beta = float(np.dot(dx, y_arr - mean_y) / denom) if denom != 0 else 1.0
    alpha = float(mean_y - beta * mean_x)

    residuals = y_arr - (alpha + beta * x_arr)
    return OLSResult(alpha=alpha, beta=beta, residuals=residuals)


def _non_stationary_default() -> ADFResult:
    return ADFResult(is_stationary=False, test_stat=0.0, critical_value=0.0, p_value=1.0)


def adf_test(
    series: Sequence[float] | np.ndarray,
    significance_level: float = 0.05,
) -> ADFResult:
    """
    Augmented Dickey-Fuller test for a unit root.

    Uses a constant-only regression with AIC lag selection. The critical
    value is taken from the tabulated level (1%, 5%, 10%) closest to
    ``significance_level``.

    Args:
        series: Series to test (typically regression residuals)
        significance_level: Test size

    Returns:
        ADFResult; series shorter than 30 points or constant series are
        reported non-stationary with p_value=1
    """
    arr = _finite(series)
    if arr.size < MIN_ADF_OBSERVATIONS or np.ptp(arr) == 0:
        return _non_stationary_default()

    try:
        test_stat, p_value, used_lag, n_obs, critical_values, _ = adfuller(
            arr, regression="c", autolag="AIC"
        )
    except (ValueError, np.linalg.LinAlgError) as e:
        logger.warning(f"ADF regression failed on {arr.size} points: {e}")
        return _non_stationary_default()

    level = min(_ADF_CRITICAL_KEYS, key=lambda lvl: abs(lvl - significance_level))
    critical_value = float(critical_values[_ADF_CRITICAL_KEYS[level]])

    return ADFResult(
        is_stationary=bool(test_stat < critical_value),
        test_stat=float(test_stat),
        critical_value=critical_value,
        p_value=float(p_value),
        used_lag=int(used_lag),
        n_obs=int(n_obs),
    )


def calculate_half_life(series: Sequence[float] | np.ndarray) -> float:
    """
    Estimate mean reversion half-life.

    Regresses first differences on the lagged level:
    delta_t = a + lambda * s_{t-1}
    Half-life = -ln(2) / lambda

    Args:
        series: Spread series

    Returns:
        Half-life in bars; inf for short input or lambda >= 0
    """
    arr = _finite(series)
    if arr.size < MIN_HALF_LIFE_OBSERVATIONS:
        return math.inf

    reversion_speed = ols(arr[:-1], np.diff(arr)).beta
    if reversion_speed >= 0:
        return math.inf

    return float(-math.log(2) / reversion_speed)


def _rescaled_range(arr: np.ndarray, lag: int) -> float:
    """Average R/S over non-overlapping chunks of length ``lag``."""
    n_chunks = arr.size // lag
    if n_chunks < 1:
        return 0.0

    chunks = arr[: n_chunks * lag].reshape(n_chunks, lag)
    deviations = np.cumsum(chunks - chunks.mean(axis=1, keepdims=True), axis=1)
    ranges = deviations.max(axis=1) - deviations.min(axis=1)
    scales = chunks.std(axis=1)

    valid = scales > 0
    rs = np.zeros(n_chunks)
    rs[valid] = ranges[valid] / scales[valid]

    # Chunks with zero dispersion count as zero, as in the textbook estimator
    return float(rs.sum() / n_chunks)


def hurst_exponent(
    series: Sequence[float] | np.ndarray,
    max_lag: int = DEFAULT_HURST_MAX_LAG,
) -> float:
    """
    Estimate the Hurst exponent using rescaled range (R/S) analysis.

    H < 0.5: mean reverting
    H = 0.5: random walk
    H > 0.5: trending

    Args:
        series: Input series
        max_lag: Largest chunk length

    Returns:
        Hurst exponent clipped to [0, 1]; 0.5 when the series is too short
    """
    arr = _finite(series)
    if arr.size < 2 * max_lag:
        return 0.5

    log_lags = []
    log_rs = []
    for lag in range(2, max_lag + 1):
        rs = _rescaled_range(arr, lag)
        if rs > 0:
            log_lags.append(math.log(lag))
            log_rs.append(math.log(rs))

    if len(log_lags) < 3:
        return 0.5

    slope = ols(log_lags, log_rs).beta
    return float(np.clip(slope, 0.0, 1.0))
