"""
Shared enumerations for the statistical arbitrage engine.
"""

from __future__ import annotations

from enum import Enum


class ArbType(str, Enum):
    """Supported arbitrage flavours."""

    COINTEGRATION = "cointegration"
    PAIRS_TRADING = "pairs_trading"
    CROSS_EXCHANGE = "cross_exchange"
    PERPETUAL_SPOT = "perpetual_spot"
    TRIANGULAR = "triangular"


class PairStatus(str, Enum):
    """Lifecycle status of a trading pair."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    BROKEN = "broken"
    PENDING = "pending"


class SignalType(str, Enum):
    """Spread trading signal types."""

    OPEN_LONG_SPREAD = "open_long_spread"
    OPEN_SHORT_SPREAD = "open_short_spread"
    CLOSE_SPREAD = "close_spread"
    NO_SIGNAL = "no_signal"

    @property
    def is_open(self) -> bool:
        """True for the two entry signals."""
        return self in (SignalType.OPEN_LONG_SPREAD, SignalType.OPEN_SHORT_SPREAD)


class LegSide(str, Enum):
    """Direction of a single leg of a spread position."""

    LONG = "long"
    SHORT = "short"


class PairEvent(str, Enum):
    """Lifecycle notifications published by the pair manager."""

    ADDED = "pair_added"
    ACTIVATED = "pair_activated"
    DEACTIVATED = "pair_deactivated"
    REMOVED = "pair_removed"
