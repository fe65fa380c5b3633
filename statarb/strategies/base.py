"""
Base strategy class for the statistical arbitrage engine.

This module provides the abstract base class for event-driven strategies
with common functionality: lifecycle hooks, signal state, engine
delegation for order intent, and scratch state/indicator storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from loguru import logger

from statarb.execution.engine import ExecutionEngine


@dataclass
class StrategySignal:
    """
    Last directional intent recorded by a strategy.

    Recording a signal does not trade; orders go through buy/sell/close.

    Attributes:
        type: "buy" or "sell"
        reason: Human readable reason
        timestamp: When the signal was recorded
    """

    type: str
    reason: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def side(self) -> str:
        return self.type


@dataclass
class StrategyState:
    """Mutable runtime state of a strategy."""

    initialized: bool = False
    signal: StrategySignal | None = None
    last_signal: StrategySignal | None = None
    data: dict[str, Any] = field(default_factory=dict)


class BaseStrategy(ABC):
    """
    Abstract base class for event-driven strategies.

    All strategies must implement:
    - on_candle(): React to a new price observation

    Provides common functionality:
    - Lifecycle hooks (on_init, on_funding_rate, on_finish)
    - Signal recording
    - Order delegation to an ExecutionEngine
    - Logging
    """

    def __init__(
        self,
        name: str,
        params: dict[str, Any] | None = None,
        engine: ExecutionEngine | None = None,
    ) -> None:
        """
        Initialize the strategy.

        Args:
            name: Strategy name
            params: Strategy parameters
            engine: Execution collaborator
        """
        self.name = name
        self.params = params or {}
        self.engine = engine
        self.state = StrategyState()
        self.indicators: dict[str, Any] = {}

        logger.info(f"Initialized strategy: {self.name}")

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def on_init(self) -> None:
        """Called once before the first candle."""
        self.state.initialized = True
        self.log("Strategy initialized")

    @abstractmethod
    async def on_candle(self, candle: Mapping[str, Any]) -> None:
        """
        Handle a price observation.

        Args:
            candle: Mapping with at least ``symbol`` and ``close``
        """
        pass

    async def on_funding_rate(self, data: Mapping[str, Any]) -> None:
        """Funding rate update; ignored unless overridden."""
        pass

    async def on_finish(self) -> None:
        """Called once after the last candle."""
        self.log("Strategy execution completed")

    def get_required_symbols(self) -> list[str]:
        """Symbols the strategy needs market data for."""
        return list(self.params.get("symbols", []))

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def set_buy_signal(self, reason: str = "") -> None:
        self.state.last_signal = self.state.signal
        self.state.signal = StrategySignal(type="buy", reason=reason)

    def set_sell_signal(self, reason: str = "") -> None:
        self.state.last_signal = self.state.signal
        self.state.signal = StrategySignal(type="sell", reason=reason)

    def clear_signal(self) -> None:
        self.state.last_signal = self.state.signal
        self.state.signal = None

    def get_signal(self) -> StrategySignal | None:
        return self.state.signal

    # =========================================================================
    # ORDER DELEGATION
    # =========================================================================

    async def buy(self, symbol: str, amount: float) -> Any:
        """Send a buy order through the engine."""
        if self.engine is None:
            self.log("Engine not set, buy ignored", "error")
            return None
        self.log(f"Buy {symbol} amount={amount}", "debug")
        return await self.engine.buy(symbol, amount)

    async def sell(self, symbol: str, amount: float) -> Any:
        """Send a sell order through the engine."""
        if self.engine is None:
            self.log("Engine not set, sell ignored", "error")
            return None
        self.log(f"Sell {symbol} amount={amount}", "debug")
        return await self.engine.sell(symbol, amount)

    async def buy_percent(self, symbol: str, percent: float) -> Any:
        """Buy with a percentage of capital through the engine."""
        if self.engine is None:
            self.log("Engine not set, buy_percent ignored", "error")
            return None
        self.log(f"Buy {symbol} percent={percent}", "debug")
        return await self.engine.buy_percent(symbol, percent)

    async def close_position(self, symbol: str) -> Any:
        """Flatten a symbol through the engine."""
        if self.engine is None:
            self.log("Engine not set, close_position ignored", "error")
            return None
        self.log(f"Close position {symbol}", "debug")
        return await self.engine.close_position(symbol)

    def get_position(self, symbol: str) -> Any:
        if self.engine is None:
            return None
        return self.engine.get_position(symbol)

    def get_capital(self) -> float:
        if self.engine is None:
            return 0.0
        return float(self.engine.get_capital())

    def get_equity(self) -> float:
        if self.engine is None:
            return 0.0
        return float(self.engine.get_equity())

    # =========================================================================
    # STATE AND INDICATORS
    # =========================================================================

    def set_state(self, key: str, value: Any) -> None:
        self.state.data[key] = value

    def get_state(self, key: str, default: Any = None) -> Any:
        return self.state.data.get(key, default)

    def set_indicator(self, name: str, value: Any) -> None:
        self.indicators[name] = value

    def get_indicator(self, name: str) -> Any:
        return self.indicators.get(name)

    def log(self, message: str, level: str = "info") -> None:
        """Log a message tagged with the strategy name."""
        log_func = getattr(logger, level.lower(), logger.info)
        log_func(f"[{self.name}] {message}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
