"""
Data model for trading pairs and their spread positions.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Mapping

from statarb.analytics.statistics import ADFResult
from statarb.core.types import LegSide, PairStatus, SignalType


@dataclass
class PairStatistics:
    """
    Snapshot of the estimated relationship between the two legs.

    Attributes:
        correlation: Pearson correlation of the price windows
        alpha: OLS intercept of A on B
        beta: OLS hedge ratio of A on B
        spread_mean: Mean of the regression residuals
        spread_std: Population std of the regression residuals
        half_life: Mean reversion half-life in bars (None until estimated)
        hurst_exponent: Hurst exponent of the residuals (None until estimated)
        cointegration: ADF result on the residuals (None until estimated)
    """

    correlation: float = 0.0
    alpha: float = 0.0
    beta: float = 1.0
    spread_mean: float = 0.0
    spread_std: float = 0.0
    half_life: float | None = None
    hurst_exponent: float | None = None
    cointegration: ADFResult | None = None

    # Live observations written during signal evaluation
    current_z_score: float | None = None
    current_spread: float | None = None
    net_spread: float | None = None
    current_basis: float | None = None
    annualized_basis: float | None = None
    last_analysis_time: datetime | None = None

    def merge(self, updates: Mapping[str, Any] | PairStatistics | None) -> PairStatistics:
        """Return a copy with the supplied fields replaced."""
        if updates is None:
            return replace(self)
        if isinstance(updates, PairStatistics):
            updates = {f.name: getattr(updates, f.name) for f in fields(updates)}
        return replace(self, **dict(updates))


@dataclass
class PositionLeg:
    """
    One side of a spread position.

    A leg is open until ``exit_price`` is set; a flat leg's PnL is frozen
    at its exit price.
    """

    symbol: str
    side: LegSide
    amount: float
    entry_price: float
    exit_price: float | None = None

    @property
    def is_open(self) -> bool:
        return self.exit_price is None

    def pnl(self, current_price: float) -> float:
        """PnL of this leg, marked at ``current_price`` while open."""
        price = current_price if self.exit_price is None else self.exit_price
        if self.side == LegSide.LONG:
            return (price - self.entry_price) * self.amount
        return (self.entry_price - price) * self.amount


@dataclass
class SpreadPosition:
    """
    An open spread position: one long leg and one short leg.

    Attributes:
        type: Entry signal that opened the position
        asset_a: Leg on the pair's first asset
        asset_b: Leg on the pair's second asset
        value: Notional committed at entry
        entry_time: Time the position was opened
        entry_z_score: Z-score at entry (z-score strategies only)
        entry_spread: Spread at entry
    """

    type: SignalType
    asset_a: PositionLeg
    asset_b: PositionLeg
    value: float = 0.0
    entry_time: datetime = field(default_factory=datetime.now)
    entry_z_score: float | None = None
    entry_spread: float | None = None

    @property
    def is_hedged(self) -> bool:
        """Both legs still open."""
        return self.asset_a.is_open and self.asset_b.is_open


@dataclass
class PairPerformance:
    """Realized trade statistics for one pair."""

    total_trades: int = 0
    win_count: int = 0
    loss_count: int = 0
    total_pnl: float = 0.0
    max_drawdown: float = 0.0  # largest single realized loss, positive


@dataclass
class Pair:
    """A candidate or active trading pair."""

    id: str
    asset_a: str
    asset_b: str
    status: PairStatus = PairStatus.PENDING
    stats: PairStatistics = field(default_factory=PairStatistics)
    position: SpreadPosition | None = None
    open_time: datetime | None = None
    last_signal: SignalType | None = None
    performance: PairPerformance = field(default_factory=PairPerformance)
    created_at: datetime = field(default_factory=datetime.now)
    last_update: datetime = field(default_factory=datetime.now)

    @property
    def has_position(self) -> bool:
        return self.position is not None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
