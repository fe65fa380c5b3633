"""
Statistical Arbitrage Strategy.

Trades mean reversion of the spread between two related instruments.
Supported flavours:
- Pairs trading / cointegration: z-score of the OLS residual spread
- Cross-exchange: percentage spread net of round-trip costs
- Perpetual / spot: annualized basis of the derivative over spot

Per price tick the strategy records the price, periodically re-estimates
each pair's relationship, closes positions whose exit conditions hold,
and opens new spread positions on active pairs within risk limits.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

from config import load_strategy_config
from config.settings import StrategySettings, get_settings
from statarb.analytics import spread as spread_calc
from statarb.analytics import statistics as stats_calc
from statarb.core.exceptions import ConfigurationError
from statarb.core.types import ArbType, LegSide, PairEvent, PairStatus, SignalType
from statarb.data.price_store import PriceSeriesStore
from statarb.execution.engine import ExecutionEngine
from statarb.pairs.manager import PairManager
from statarb.pairs.models import Pair, PositionLeg, SpreadPosition
from statarb.risk.circuit_breakers import DrawdownBreaker, LossStreakBreaker
from statarb.strategies.base import BaseStrategy
from statarb.utils.logger import get_logger, trade_logger

logger = get_logger(__name__)


# Arbitrage types whose pairs must pass cointegration gates before trading
Z_SCORE_ARB_TYPES = (ArbType.PAIRS_TRADING, ArbType.COINTEGRATION)


@dataclass
class TradeSignal:
    """Outcome of one signal evaluation for a pair."""

    type: SignalType
    reason: str = ""
    z_score: float | None = None
    spread: float | None = None
    net_spread: float | None = None
    basis: float | None = None
    annualized_basis: float | None = None

    @classmethod
    def none(cls, **kwargs: Any) -> TradeSignal:
        return cls(type=SignalType.NO_SIGNAL, **kwargs)


@dataclass
class StrategyStats:
    """Aggregate trading statistics."""

    total_signals: int = 0
    total_trades: int = 0
    total_pnl: float = 0.0
    win_count: int = 0
    loss_count: int = 0
    last_trade_time: datetime | None = None


class StatisticalArbitrageStrategy(BaseStrategy):
    """
    Event-driven statistical arbitrage across instrument pairs.

    Entry (pairs trading): |z| of the residual spread reaches entry_z_score
    Exit: |z| reverts within exit_z_score, or stop-out at stop_loss_z_score

    Risk controls:
    - At most max_active_pairs open spreads, capped at max_total_position of capital
    - Per-pair notional of max_position_per_pair of capital, split by hedge ratio
    - Cooling-off after consecutive_loss_limit losing trades
    - Entries halted while realized drawdown exceeds max_drawdown of capital

    Example:
        strategy = StatisticalArbitrageStrategy(
            params={"candidate_pairs": [("BTC/USDT", "ETH/USDT")]},
            engine=engine,
        )
        await strategy.on_init()
        await strategy.on_candle({"symbol": "BTC/USDT", "close": 50000.0})
    """

    def __init__(
        self,
        params: dict[str, Any] | None = None,
        name: str = "StatisticalArbitrageStrategy",
        engine: ExecutionEngine | None = None,
    ) -> None:
        """
        Initialize the strategy.

        Args:
            params: Overrides on top of the global strategy settings
            name: Strategy name
            engine: Execution collaborator

        Raises:
            pydantic.ValidationError: If a parameter has the wrong type or range
        """
        merged_params = get_settings().strategy.model_dump()
        if params:
            merged_params.update(params)

        self.config = StrategySettings(**merged_params)

        super().__init__(name, merged_params, engine)

        self.price_store = PriceSeriesStore(self.config.cointegration_test_period * 2)
        self.pair_manager = PairManager(
            max_active_pairs=self.config.max_active_pairs,
            min_correlation=self.config.min_correlation,
            min_half_life=self.config.min_half_life,
            max_half_life=self.config.max_half_life,
        )

        self.running = False
        self.stats = StrategyStats()

        self.loss_breaker = LossStreakBreaker(
            consecutive_loss_limit=self.config.consecutive_loss_limit,
            cooling_period=self.config.cooling_period,
        )
        self.drawdown_breaker = DrawdownBreaker(max_drawdown=self.config.max_drawdown)

        self._tick_count = 0

        self._setup_event_listeners()

    @classmethod
    def from_config_file(
        cls,
        config_name: str = "stat_arb",
        config_dir: Path | None = None,
        engine: ExecutionEngine | None = None,
        **overrides: Any,
    ) -> StatisticalArbitrageStrategy:
        """Build a strategy from config/<config_name>.yaml plus keyword overrides."""
        params = load_strategy_config(config_name, config_dir)
        params.update(overrides)
        return cls(params=params, engine=engine)

    def _setup_event_listeners(self) -> None:
        self.pair_manager.subscribe(
            PairEvent.ADDED, lambda pair: self.log(f"Pair added: {pair.id}"), name="strategy.added"
        )
        self.pair_manager.subscribe(
            PairEvent.ACTIVATED, lambda pair: self.log(f"Pair activated: {pair.id}"), name="strategy.activated"
        )
        self.pair_manager.subscribe(
            PairEvent.DEACTIVATED,
            lambda pair: self.log(f"Pair deactivated: {pair.id} ({pair.status.value})"),
            name="strategy.deactivated",
        )

    @property
    def cooling_until(self) -> datetime | None:
        return self.loss_breaker.cooling_until

    @cooling_until.setter
    def cooling_until(self, value: datetime | None) -> None:
        self.loss_breaker.cooling_until = value

    def is_cooling(self) -> bool:
        return self.loss_breaker.is_cooling(self._now())

    @staticmethod
    def _now() -> datetime:
        return datetime.now()

    @property
    def _requires_cointegration(self) -> bool:
        return self.config.arb_type in Z_SCORE_ARB_TYPES

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def _validate_config(self) -> None:
        """
        Check cross-field invariants.

        Raises:
            ConfigurationError: On a malformed candidate list or inconsistent thresholds
        """
        cfg = self.config

        for asset_a, asset_b in cfg.candidate_pairs:
            if not asset_a or not asset_b:
                raise ConfigurationError(f"Candidate pair has an empty symbol: {(asset_a, asset_b)}")
            if asset_a == asset_b:
                raise ConfigurationError(f"Candidate pair has identical legs: {asset_a}")

        if not cfg.exit_z_score < cfg.entry_z_score < cfg.stop_loss_z_score:
            raise ConfigurationError(
                "Expected exit_z_score < entry_z_score < stop_loss_z_score, got "
                f"{cfg.exit_z_score}, {cfg.entry_z_score}, {cfg.stop_loss_z_score}"
            )

        if cfg.min_half_life > cfg.max_half_life:
            raise ConfigurationError(
                f"min_half_life {cfg.min_half_life} exceeds max_half_life {cfg.max_half_life}"
            )

        if cfg.lookback_period > cfg.cointegration_test_period:
            raise ConfigurationError(
                f"lookback_period {cfg.lookback_period} exceeds "
                f"cointegration_test_period {cfg.cointegration_test_period}"
            )

        if cfg.max_position_per_pair > cfg.max_total_position:
            raise ConfigurationError(
                f"max_position_per_pair {cfg.max_position_per_pair} exceeds "
                f"max_total_position {cfg.max_total_position}"
            )

        if cfg.spread_exit_threshold > cfg.spread_entry_threshold:
            raise ConfigurationError("spread_exit_threshold exceeds spread_entry_threshold")

        if cfg.basis_exit_threshold > cfg.basis_entry_threshold:
            raise ConfigurationError("basis_exit_threshold exceeds basis_entry_threshold")

    async def on_init(self) -> None:
        """Validate configuration, register candidate pairs and start."""
        self._validate_config()

        self.log(f"Arbitrage type: {self.config.arb_type.value}")
        self.log(f"Candidate pairs: {len(self.config.candidate_pairs)}")

        if self.config.arb_type == ArbType.TRIANGULAR:
            self.log("Triangular arbitrage has no signal generator; pairs are tracked only", "warning")

        for asset_a, asset_b in self.config.candidate_pairs:
            self.pair_manager.add_pair(asset_a, asset_b)

        await super().on_init()
        self.running = True

    async def on_candle(self, candle: Mapping[str, Any]) -> None:
        """
        Handle a close price for one symbol.

        Args:
            candle: Mapping with ``symbol``, ``close`` and optional ``timestamp``
        """
        if not self.running:
            return

        symbol = candle.get("symbol")
        close = candle.get("close")
        if not symbol or close is None:
            logger.debug(f"Ignoring candle without symbol/close: {dict(candle)}")
            return

        self.price_store.add_price(symbol, close, candle.get("timestamp"))
        self._tick_count += 1

        if self._tick_count % self.config.reanalysis_interval == 0:
            await self._update_pairs()

        await self._manage_positions()
        await self._check_signals()

    async def on_funding_rate(self, data: Mapping[str, Any]) -> None:
        """Store funding rate updates (perpetual/spot mode only)."""
        if self.config.arb_type != ArbType.PERPETUAL_SPOT:
            return

        symbol = data.get("symbol")
        rate = data.get("funding_rate")
        if not symbol or rate is None:
            return

        rate = float(rate)
        self.set_state(
            f"funding_rate:{symbol}",
            {"rate": rate, "timestamp": data.get("timestamp") or self._now()},
        )

        if abs(rate) >= self.config.funding_rate_threshold:
            self.log(
                f"Funding rate {symbol} {rate:.4%} beyond threshold "
                f"{self.config.funding_rate_threshold:.4%}"
            )

    async def on_finish(self) -> None:
        """Stop and liquidate every open spread."""
        self.running = False

        for pair in self.pair_manager.get_pairs_with_positions():
            try:
                await self._close_position(pair, "strategy finished")
            except Exception as e:
                self.log(f"Liquidation of {pair.id} failed: {e}", "error")

        decided = self.stats.win_count + self.stats.loss_count
        win_rate = self.stats.win_count / decided if decided else 0.0

        self.log("Final statistics:")
        self.log(f"  Signals: {self.stats.total_signals}")
        self.log(f"  Trades: {self.stats.total_trades}")
        self.log(f"  Total PnL: {self.stats.total_pnl:.2f}")
        self.log(f"  Win rate: {win_rate:.1%}")
        self.log(f"  Max drawdown: {abs(self.drawdown_breaker.max_drawdown):.2f}")

        await super().on_finish()

    # =========================================================================
    # PAIR ANALYSIS
    # =========================================================================

    async def _update_pairs(self) -> int:
        """Re-estimate statistics for every pair with enough history."""
        analyzed = 0
        lookback = self.config.lookback_period

        for pair in self.pair_manager.get_all_pairs():
            if not (
                self.price_store.has_enough_data(pair.asset_a, lookback)
                and self.price_store.has_enough_data(pair.asset_b, lookback)
            ):
                continue

            self._analyze_pair(pair)
            analyzed += 1

        return analyzed

    def _analyze_pair(self, pair: Pair) -> None:
        cfg = self.config

        prices_a = self.price_store.get_prices(pair.asset_a, cfg.cointegration_test_period)
        prices_b = self.price_store.get_prices(pair.asset_b, cfg.cointegration_test_period)

        correlation = stats_calc.correlation(prices_a, prices_b)
        regression = stats_calc.ols(prices_b, prices_a)
        residuals = regression.residuals

        cointegration = stats_calc.adf_test(residuals, cfg.adf_significance_level)
        half_life = stats_calc.calculate_half_life(residuals)

        updates = {
            "correlation": correlation,
            "alpha": regression.alpha,
            "beta": regression.beta,
            "spread_mean": stats_calc.mean(residuals),
            "spread_std": stats_calc.std(residuals),
            "cointegration": cointegration,
            "half_life": half_life,
            "hurst_exponent": stats_calc.hurst_exponent(residuals),
            "last_analysis_time": self._now(),
        }

        if not self._requires_cointegration:
            # Same-underlying legs: keep the estimates for reporting only
            self.pair_manager.merge_pair_stats(pair.id, updates)
            if pair.status == PairStatus.PENDING:
                self.pair_manager.activate_pair(pair.id)
            return

        updated = self.pair_manager.update_pair_stats(pair.id, updates)
        if updated is None or updated.status != PairStatus.PENDING:
            return

        if cointegration.is_stationary and self.pair_manager.qualifies(updated.stats):
            if not self.pair_manager.activate_pair(pair.id):
                logger.debug(f"Activation of {pair.id} refused, active set full")

    async def reanalyze_all_pairs(self) -> int:
        """Force re-estimation of every pair; returns how many were analyzed."""
        self.log("Re-analyzing all pairs")
        return await self._update_pairs()

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def _generate_signal(self, pair: Pair) -> TradeSignal:
        price_a = self.price_store.get_latest_price(pair.asset_a)
        price_b = self.price_store.get_latest_price(pair.asset_b)

        if not price_a or not price_b:
            return TradeSignal.none()

        arb_type = self.config.arb_type
        if arb_type in Z_SCORE_ARB_TYPES:
            return self._generate_pairs_signal(pair, price_a, price_b)
        if arb_type == ArbType.CROSS_EXCHANGE:
            return self._generate_cross_exchange_signal(pair, price_a, price_b)
        if arb_type == ArbType.PERPETUAL_SPOT:
            return self._generate_perpetual_spot_signal(pair, price_a, price_b)

        return TradeSignal.none()

    def _generate_pairs_signal(self, pair: Pair, price_a: float, price_b: float) -> TradeSignal:
        """Z-score signal on the regression residual spread."""
        cfg = self.config
        stats = pair.stats

        current_spread = spread_calc.residual_spread(price_a, price_b, stats.alpha, stats.beta)
        z = stats_calc.z_score(current_spread, stats.spread_mean, stats.spread_std)

        stats.current_z_score = z
        stats.current_spread = current_spread

        if pair.position is not None:
            if abs(z) >= cfg.stop_loss_z_score:
                return TradeSignal(
                    type=SignalType.CLOSE_SPREAD,
                    reason=f"stop loss |z|={abs(z):.2f} >= {cfg.stop_loss_z_score}",
                    z_score=z,
                    spread=current_spread,
                )
            if abs(z) <= cfg.exit_z_score:
                return TradeSignal(
                    type=SignalType.CLOSE_SPREAD,
                    reason=f"mean reversion |z|={abs(z):.2f} <= {cfg.exit_z_score}",
                    z_score=z,
                    spread=current_spread,
                )
            return TradeSignal.none(z_score=z, spread=current_spread)

        if z >= cfg.entry_z_score:
            # Spread rich: short A, long B
            return TradeSignal(
                type=SignalType.OPEN_SHORT_SPREAD,
                reason=f"z={z:.2f} >= {cfg.entry_z_score}",
                z_score=z,
                spread=current_spread,
            )
        if z <= -cfg.entry_z_score:
            return TradeSignal(
                type=SignalType.OPEN_LONG_SPREAD,
                reason=f"z={z:.2f} <= -{cfg.entry_z_score}",
                z_score=z,
                spread=current_spread,
            )

        return TradeSignal.none(z_score=z, spread=current_spread)

    def _generate_cross_exchange_signal(self, pair: Pair, price_a: float, price_b: float) -> TradeSignal:
        """Venue price gap net of round-trip trading cost and slippage."""
        cfg = self.config

        spread = spread_calc.percentage_spread(price_a, price_b)
        net_spread = abs(spread) - 2 * cfg.trading_cost - 2 * cfg.slippage_estimate

        pair.stats.current_spread = spread
        pair.stats.net_spread = net_spread

        if pair.position is not None:
            if abs(spread) <= cfg.spread_exit_threshold:
                return TradeSignal(
                    type=SignalType.CLOSE_SPREAD,
                    reason=f"spread converged {spread:.3%}",
                    spread=spread,
                    net_spread=net_spread,
                )
            return TradeSignal.none(spread=spread, net_spread=net_spread)

        if net_spread > cfg.spread_entry_threshold:
            signal_type = SignalType.OPEN_SHORT_SPREAD if spread > 0 else SignalType.OPEN_LONG_SPREAD
            return TradeSignal(
                type=signal_type,
                reason=f"cross-exchange spread {spread:.3%}, net {net_spread:.3%}",
                spread=spread,
                net_spread=net_spread,
            )

        return TradeSignal.none(spread=spread, net_spread=net_spread)

    def _generate_perpetual_spot_signal(
        self,
        pair: Pair,
        perpetual_price: float,
        spot_price: float,
    ) -> TradeSignal:
        """Annualized basis of the perpetual (leg A) over spot (leg B)."""
        cfg = self.config

        period_basis = spread_calc.basis(perpetual_price, spot_price)
        annualized = spread_calc.annualized_basis(period_basis, cfg.basis_period_days)

        pair.stats.current_basis = period_basis
        pair.stats.annualized_basis = annualized

        if pair.position is not None:
            if abs(annualized) <= cfg.basis_exit_threshold:
                return TradeSignal(
                    type=SignalType.CLOSE_SPREAD,
                    reason=f"basis converged {annualized:.2%} annualized",
                    basis=period_basis,
                    annualized_basis=annualized,
                )
            return TradeSignal.none(basis=period_basis, annualized_basis=annualized)

        if annualized > cfg.basis_entry_threshold:
            # Rich perpetual: short perpetual, long spot
            return TradeSignal(
                type=SignalType.OPEN_SHORT_SPREAD,
                reason=f"annualized basis {annualized:.2%}",
                basis=period_basis,
                annualized_basis=annualized,
            )
        if annualized < -cfg.basis_entry_threshold:
            return TradeSignal(
                type=SignalType.OPEN_LONG_SPREAD,
                reason=f"annualized basis {annualized:.2%}",
                basis=period_basis,
                annualized_basis=annualized,
            )

        return TradeSignal.none(basis=period_basis, annualized_basis=annualized)

    async def _check_signals(self) -> int:
        """Open spreads on active pairs without a position; returns how many opened."""
        if self.is_cooling():
            logger.debug(f"Cooling until {self.cooling_until}, entries suppressed")
            return 0

        if self.drawdown_breaker.is_breached(self.get_capital()):
            return 0

        opened = 0
        for pair in self.pair_manager.get_active_pairs():
            if pair.position is not None:
                continue

            signal = self._generate_signal(pair)
            pair.last_signal = signal.type

            if signal.type.is_open and await self._execute_signal(pair, signal):
                opened += 1

        return opened

    # =========================================================================
    # EXECUTION AND RISK
    # =========================================================================

    def _check_position_limits(self) -> bool:
        """Whether one more spread position fits the pair-count and notional limits."""
        cfg = self.config
        open_pairs = self.pair_manager.get_pairs_with_positions()

        if len(open_pairs) >= cfg.max_active_pairs:
            return False

        capital = self.get_capital()
        if capital <= 0:
            return False

        total_value = sum(pair.position.value for pair in open_pairs)
        projected = total_value + capital * cfg.max_position_per_pair

        if projected > capital * cfg.max_total_position + 1e-9:
            return False

        return True

    async def _execute_signal(self, pair: Pair, signal: TradeSignal) -> bool:
        """Size and place both legs of a new spread position."""
        if not self._check_position_limits():
            trade_logger.log_risk_event(
                "POSITION_LIMIT", f"{pair.id} {signal.type.value} rejected", severity="DEBUG"
            )
            return False

        price_a = self.price_store.get_latest_price(pair.asset_a)
        price_b = self.price_store.get_latest_price(pair.asset_b)
        if not price_a or not price_b:
            return False

        capital = self.get_capital()
        position_value = capital * self.config.max_position_per_pair

        # Hedge-ratio weighted split: beta=1 -> 50/50, beta=2 -> 33/67
        value_a = position_value / (1 + abs(pair.stats.beta))
        value_b = position_value - value_a

        amount_a = value_a / price_a
        amount_b = value_b / price_b

        long_spread = signal.type == SignalType.OPEN_LONG_SPREAD
        side_a = LegSide.LONG if long_spread else LegSide.SHORT
        side_b = LegSide.SHORT if long_spread else LegSide.LONG

        position = SpreadPosition(
            type=signal.type,
            asset_a=PositionLeg(symbol=pair.asset_a, side=side_a, amount=amount_a, entry_price=price_a),
            asset_b=PositionLeg(symbol=pair.asset_b, side=side_b, amount=amount_b, entry_price=price_b),
            value=position_value,
            entry_time=self._now(),
            entry_z_score=signal.z_score,
            entry_spread=signal.spread if signal.spread is not None else pair.stats.current_spread,
        )

        order_a = self.buy if long_spread else self.sell
        order_b = self.sell if long_spread else self.buy

        try:
            await order_a(pair.asset_a, amount_a)
        except Exception as e:
            self.log(f"Failed to open {pair.id} {signal.type.value}: {e}", "error")
            return False

        try:
            await order_b(pair.asset_b, amount_b)
        except Exception as e:
            self.log(f"Second leg of {pair.id} failed, unwinding {pair.asset_a}: {e}", "error")
            await self._unwind_first_leg(pair, position)
            return False

        self.pair_manager.set_position(pair.id, position)
        self.set_buy_signal(f"{self.config.log_prefix} {signal.reason}")

        self.stats.total_signals += 1
        self.stats.total_trades += 2
        self.stats.last_trade_time = self._now()

        trade_logger.log_spread_open(
            pair.id,
            signal.type.value,
            pair.asset_a,
            side_a.value,
            amount_a,
            pair.asset_b,
            side_b.value,
            amount_b,
            position_value,
        )
        self.log(f"Opened {pair.id} {signal.type.value}: {signal.reason}")

        return True

    async def _unwind_first_leg(self, pair: Pair, position: SpreadPosition) -> None:
        """
        Flatten leg A after leg B failed to fill.

        If the unwind fails too, the pair keeps a one-leg position (leg B
        marked flat with zero size) so exposure stays counted and the next
        tick retries the close.
        """
        symbol = position.asset_a.symbol
        try:
            await self.close_position(symbol)
        except Exception as e:
            position.asset_b.amount = 0.0
            position.asset_b.exit_price = position.asset_b.entry_price
            self.pair_manager.set_position(pair.id, position)
            trade_logger.log_risk_event(
                "UNHEDGED_LEG", f"{pair.id} holds {symbol} without a hedge, unwind failed: {e}", severity="ERROR"
            )
            return

        trade_logger.log_risk_event("LEG_UNWOUND", f"{pair.id} flattened {symbol} after a failed entry")

    async def _manage_positions(self) -> int:
        """Close positions whose exit conditions hold; returns how many closed."""
        closed = 0
        for pair in self.pair_manager.get_pairs_with_positions():
            reason = self._check_close_conditions(pair)
            if reason and await self._close_position(pair, reason) is not None:
                closed += 1
        return closed

    def _check_close_conditions(self, pair: Pair) -> str | None:
        """Reason to close the pair's position, or None to keep it."""
        position = pair.position
        if position is None:
            return None

        if not position.is_hedged:
            return "unhedged leg"

        price_a = self.price_store.get_latest_price(pair.asset_a)
        price_b = self.price_store.get_latest_price(pair.asset_b)
        if not price_a or not price_b:
            return None

        signal = self._generate_signal(pair)
        if signal.type == SignalType.CLOSE_SPREAD:
            return signal.reason

        if self._now() - position.entry_time >= self.config.max_holding_period:
            return "max holding period reached"

        if pair.status == PairStatus.BROKEN:
            return "pair relationship broken"

        if position.value > 0:
            pnl = self._calculate_position_pnl(position, price_a, price_b)
            if pnl / position.value <= -self.config.max_loss_per_pair:
                return f"max loss per pair ({pnl / position.value:.2%})"

        return None

    @staticmethod
    def _calculate_position_pnl(
        position: SpreadPosition,
        current_price_a: float,
        current_price_b: float,
    ) -> float:
        """Sum of leg-wise mark-to-market PnL."""
        return position.asset_a.pnl(current_price_a) + position.asset_b.pnl(current_price_b)

    async def _close_position(self, pair: Pair, reason: str) -> float | None:
        """
        Close the open legs and book the result.

        Legs flattened on an earlier, partially failed attempt keep their exit
        price and are not sent to the engine again.

        Returns:
            Realized PnL, or None if there was nothing to close or the engine failed
        """
        position = pair.position
        if position is None:
            return None

        price_a = self.price_store.get_latest_price(pair.asset_a) or position.asset_a.entry_price
        price_b = self.price_store.get_latest_price(pair.asset_b) or position.asset_b.entry_price

        for leg, price in ((position.asset_a, price_a), (position.asset_b, price_b)):
            if not leg.is_open:
                continue
            try:
                await self.close_position(leg.symbol)
            except Exception as e:
                self.log(f"Failed to close {leg.symbol} of {pair.id} ({reason}): {e}", "error")
                return None
            leg.exit_price = price

        pnl = self._calculate_position_pnl(position, price_a, price_b)
        is_win = pnl > 0

        self.stats.total_pnl += pnl
        if is_win:
            self.stats.win_count += 1
        else:
            self.stats.loss_count += 1

        if self.loss_breaker.record_trade(pnl, self._now()):
            trade_logger.log_risk_event(
                "COOLING",
                f"{self.loss_breaker.consecutive_losses} consecutive losses, "
                f"entries blocked until {self.loss_breaker.cooling_until}",
            )

        self.drawdown_breaker.update(pnl)
        self.pair_manager.record_trade_result(pair.id, pnl, is_win)
        self.pair_manager.set_position(pair.id, None)

        self.set_sell_signal(f"{self.config.log_prefix} close: {reason}")
        trade_logger.log_spread_close(pair.id, reason, pnl)
        self.log(
            f"Closed {pair.id}: {reason} PnL={pnl:.2f}",
            "info" if is_win else "warning",
        )

        return pnl

    # =========================================================================
    # MAINTENANCE AND OBSERVATION
    # =========================================================================

    def add_pair(self, asset_a: str, asset_b: str) -> Pair:
        pair = self.pair_manager.add_pair(asset_a, asset_b)
        self.log(f"Manually added pair: {pair.id}")
        return pair

    def remove_pair(self, pair_id: str) -> bool:
        """Remove a pair unless it holds a position."""
        pair = self.pair_manager.get_pair(pair_id)
        if pair is not None and pair.position is not None:
            self.log(f"Cannot remove {pair_id} while a position is open", "warning")
            return False

        removed = self.pair_manager.remove_pair(pair_id)
        if removed:
            self.log(f"Removed pair: {pair_id}")
        return removed

    def get_required_symbols(self) -> list[str]:
        """Every symbol referenced by a candidate or registered pair, in first-seen order."""
        symbols: dict[str, None] = {}
        for asset_a, asset_b in self.config.candidate_pairs:
            symbols.setdefault(asset_a)
            symbols.setdefault(asset_b)
        for pair in self.pair_manager.get_all_pairs():
            symbols.setdefault(pair.asset_a)
            symbols.setdefault(pair.asset_b)
        return list(symbols)

    def get_status(self) -> dict[str, Any]:
        decided = self.stats.win_count + self.stats.loss_count
        cooling_until = self.cooling_until

        return {
            "name": self.name,
            "arb_type": self.config.arb_type.value,
            "running": self.running,
            "cooling": self.is_cooling(),
            "cooling_until": cooling_until.isoformat() if cooling_until else None,
            "pairs": {
                "total": len(self.pair_manager),
                "active": len(self.pair_manager.get_active_pairs()),
                "with_positions": len(self.pair_manager.get_pairs_with_positions()),
            },
            "stats": {
                **asdict(self.stats),
                "consecutive_losses": self.loss_breaker.consecutive_losses,
                "current_drawdown": self.drawdown_breaker.current_drawdown,
                "max_drawdown": self.drawdown_breaker.max_drawdown,
            },
            "win_rate": self.stats.win_count / decided if decided else 0.0,
        }

    def get_pair_details(self, pair_id: str) -> dict[str, Any] | None:
        pair = self.pair_manager.get_pair(pair_id)
        if pair is None:
            return None

        details = pair.to_dict()
        details["current_price_a"] = self.price_store.get_latest_price(pair.asset_a)
        details["current_price_b"] = self.price_store.get_latest_price(pair.asset_b)
        return details

    def get_all_pairs_summary(self) -> list[dict[str, Any]]:
        def _round(value: float | None, digits: int) -> float | None:
            return round(value, digits) if value is not None else None

        return [
            {
                "id": pair.id,
                "asset_a": pair.asset_a,
                "asset_b": pair.asset_b,
                "status": pair.status.value,
                "correlation": _round(pair.stats.correlation, 3),
                "half_life": _round(pair.stats.half_life, 1),
                "current_z_score": _round(pair.stats.current_z_score, 2),
                "has_position": pair.position is not None,
                "performance": asdict(pair.performance),
            }
            for pair in self.pair_manager.get_all_pairs()
        ]

    def log(self, message: str, level: str = "info") -> None:
        super().log(f"{self.config.log_prefix} {message}", level)
