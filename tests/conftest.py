"""
Pytest Configuration and Fixtures
==================================

Shared fixtures for the statistical arbitrage engine tests.
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from statarb.execution.engine import ExecutionEngine


# =============================================================================
# CONFIGURATION
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get project root path."""
    return PROJECT_ROOT


# =============================================================================
# DATA FIXTURES
# =============================================================================

@pytest.fixture
def mean_reverting_series() -> np.ndarray:
    """AR(1) series with coefficient 0.5 around zero."""
    np.random.seed(42)
    n = 200
    series = np.zeros(n)
    for i in range(1, n):
        series[i] = 0.5 * series[i - 1] + np.random.normal(0, 1)
    return series


@pytest.fixture
def random_walk_series() -> np.ndarray:
    """Gaussian random walk starting at 100."""
    np.random.seed(7)
    return 100 + np.cumsum(np.random.normal(0, 1, 200))


@pytest.fixture
def cointegrated_prices() -> tuple[np.ndarray, np.ndarray]:
    """
    Cointegrated price pair.

    B is a random walk around 100; A = 10 + 2 * B + AR(0.6) noise.
    """
    np.random.seed(42)
    n = 150
    prices_b = 100 + np.cumsum(np.random.normal(0, 1, n))

    noise = np.zeros(n)
    for i in range(1, n):
        noise[i] = 0.6 * noise[i - 1] + np.random.normal(0, 0.5)

    prices_a = 10 + 2 * prices_b + noise
    return prices_a, prices_b


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def mock_engine() -> MagicMock:
    """Execution engine mock with 100k capital."""
    engine = MagicMock(spec=ExecutionEngine)
    engine.buy = AsyncMock(return_value={"status": "filled"})
    engine.sell = AsyncMock(return_value={"status": "filled"})
    engine.buy_percent = AsyncMock(return_value={"status": "filled"})
    engine.close_position = AsyncMock(return_value={"status": "closed"})
    engine.get_capital.return_value = 100000.0
    engine.get_equity.return_value = 100000.0
    engine.get_position.return_value = None
    return engine
