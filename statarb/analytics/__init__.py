"""
Analytics module: statistical tests and spread construction.

Both submodules are namespaces of pure functions:
- statistics: mean/std/z-score, correlation, OLS, ADF, half-life, Hurst
- spread: ratio, log, residual, percentage, basis, annualized basis
"""

from statarb.analytics import spread, statistics
from statarb.analytics.statistics import ADFResult, OLSResult

__all__ = [
    "spread",
    "statistics",
    "ADFResult",
    "OLSResult",
]
