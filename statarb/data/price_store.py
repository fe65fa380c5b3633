"""
Rolling price storage for the statistical arbitrage engine.

Keeps a bounded, per-symbol history of (price, timestamp) observations.
The oldest observation is evicted once a symbol reaches capacity.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Any


class PriceSeriesStore:
    """
    Per-symbol bounded FIFO of prices and timestamps.

    Reads for unknown symbols return empty lists or None rather than raising.

    Example:
        store = PriceSeriesStore(max_length=200)
        store.add_price("BTC/USDT", 50000.0)
        store.get_latest_price("BTC/USDT")  # 50000.0
    """

    def __init__(self, max_length: int = 500) -> None:
        if max_length < 1:
            raise ValueError(f"max_length must be positive, got {max_length}")

        self.max_length = max_length
        self._prices: dict[str, deque[float]] = {}
        self._timestamps: dict[str, deque[Any]] = {}

    @property
    def symbols(self) -> list[str]:
        """Symbols with at least one stored price."""
        return list(self._prices)

    def add_price(
        self,
        symbol: str,
        price: float,
        timestamp: Any = None,
    ) -> None:
        """
        Append a price observation.

        Args:
            symbol: Instrument identifier
            price: Observed price
            timestamp: Observation time (defaults to now)
        """
        if symbol not in self._prices:
            self._prices[symbol] = deque(maxlen=self.max_length)
            self._timestamps[symbol] = deque(maxlen=self.max_length)

        self._prices[symbol].append(float(price))
        self._timestamps[symbol].append(timestamp if timestamp is not None else datetime.now())

    def get_prices(self, symbol: str, length: int | None = None) -> list[float]:
        """Most recent ``length`` prices (all when None), oldest first."""
        prices = self._prices.get(symbol)
        if not prices:
            return []
        if length is None or length >= len(prices):
            return list(prices)
        if length <= 0:
            return []
        return list(prices)[-length:]

    def get_timestamps(self, symbol: str, length: int | None = None) -> list[Any]:
        """Timestamps aligned with ``get_prices``."""
        timestamps = self._timestamps.get(symbol)
        if not timestamps:
            return []
        if length is None or length >= len(timestamps):
            return list(timestamps)
        if length <= 0:
            return []
        return list(timestamps)[-length:]

    def get_latest_price(self, symbol: str) -> float | None:
        prices = self._prices.get(symbol)
        if not prices:
            return None
        return prices[-1]

    def has_enough_data(self, symbol: str, min_length: int) -> bool:
        return len(self._prices.get(symbol, ())) >= min_length

    def get_returns(self, symbol: str, length: int | None = None) -> list[float]:
        """
        Simple period-over-period returns.

        Args:
            symbol: Instrument identifier
            length: Number of trailing prices to use (all when None)

        Returns:
            N-1 returns for N prices; empty below two prices
        """
        prices = self.get_prices(symbol, length)
        if len(prices) < 2:
            return []

        returns = []
        for prev, curr in zip(prices[:-1], prices[1:]):
            returns.append((curr - prev) / prev if prev != 0 else 0.0)
        return returns

    def clear(self, symbol: str | None = None) -> None:
        """Drop one symbol's history, or everything when symbol is None."""
        if symbol is None:
            self._prices.clear()
            self._timestamps.clear()
        else:
            self._prices.pop(symbol, None)
            self._timestamps.pop(symbol, None)

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._prices
