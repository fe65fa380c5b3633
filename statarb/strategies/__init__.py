"""
Trading strategies.

- BaseStrategy: event-driven lifecycle, signals and engine delegation
- StatisticalArbitrageStrategy: pairs, cross-exchange and perpetual/spot arbitrage
"""

from statarb.strategies.base import BaseStrategy, StrategySignal, StrategyState
from statarb.strategies.stat_arb import (
    StatisticalArbitrageStrategy,
    StrategyStats,
    TradeSignal,
)

__all__ = [
    "BaseStrategy",
    "StrategySignal",
    "StrategyState",
    "StatisticalArbitrageStrategy",
    "StrategyStats",
    "TradeSignal",
]
