"""
Unit tests for pair lifecycle management.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from statarb.analytics.statistics import ADFResult
from statarb.core.types import LegSide, PairEvent, PairStatus, SignalType
from statarb.pairs.manager import PairManager
from statarb.pairs.models import PairStatistics, PositionLeg, SpreadPosition


def _stationary(flag: bool = True) -> ADFResult:
    return ADFResult(is_stationary=flag, test_stat=-4.0 if flag else -1.0, critical_value=-2.9, p_value=0.01)


def _good_stats(**overrides) -> dict:
    stats = {"correlation": 0.9, "half_life": 5.0, "cointegration": _stationary()}
    stats.update(overrides)
    return stats


def _position(symbol_a: str = "BTC/USDT", symbol_b: str = "ETH/USDT") -> SpreadPosition:
    return SpreadPosition(
        type=SignalType.OPEN_LONG_SPREAD,
        asset_a=PositionLeg(symbol_a, LegSide.LONG, 0.1, 50000.0),
        asset_b=PositionLeg(symbol_b, LegSide.SHORT, 1.5, 3000.0),
        value=10000.0,
    )


class TestPairRegistration:
    """Tests for pair identity and registration."""

    def setup_method(self):
        self.manager = PairManager(max_active_pairs=2)

    def test_pair_id_is_order_independent(self):
        """Test id sorts the two symbols."""
        assert PairManager.generate_pair_id("ETH/USDT", "BTC/USDT") == "BTC/USDT:ETH/USDT"
        assert PairManager.generate_pair_id("BTC/USDT", "ETH/USDT") == "BTC/USDT:ETH/USDT"

    def test_add_pair(self):
        """Test new pair starts pending and keeps leg order."""
        pair = self.manager.add_pair("ETH/USDT", "BTC/USDT")

        assert pair.id == "BTC/USDT:ETH/USDT"
        assert pair.asset_a == "ETH/USDT"
        assert pair.asset_b == "BTC/USDT"
        assert pair.status == PairStatus.PENDING
        assert pair.id in self.manager

    def test_add_existing_pair_merges_stats(self):
        """Test re-adding returns the same pair and emits ADDED once."""
        added = []
        self.manager.subscribe(PairEvent.ADDED, added.append)

        first = self.manager.add_pair("BTC/USDT", "ETH/USDT")
        second = self.manager.add_pair("ETH/USDT", "BTC/USDT", {"correlation": 0.8})

        assert first is second
        assert second.stats.correlation == 0.8
        assert len(added) == 1
        assert len(self.manager) == 1

    def test_remove_pair(self):
        """Test removal deactivates, deletes and emits REMOVED."""
        removed = []
        self.manager.subscribe(PairEvent.REMOVED, removed.append)
        pair = self.manager.add_pair("BTC/USDT", "ETH/USDT")
        self.manager.activate_pair(pair.id)

        assert self.manager.remove_pair(pair.id)
        assert pair.id not in self.manager
        assert pair.id not in self.manager.active_pairs
        assert removed == [pair]

    def test_remove_pair_with_position_refused(self):
        """Test a pair holding a position cannot be removed."""
        pair = self.manager.add_pair("BTC/USDT", "ETH/USDT")
        self.manager.set_position(pair.id, _position())

        assert not self.manager.remove_pair(pair.id)
        assert pair.id in self.manager

    def test_unknown_ids(self):
        """Test unknown ids return None or False."""
        assert self.manager.get_pair("X:Y") is None
        assert self.manager.update_pair_stats("X:Y", {"correlation": 1.0}) is None
        assert self.manager.set_position("X:Y", None) is None
        assert not self.manager.activate_pair("X:Y")
        assert not self.manager.deactivate_pair("X:Y")
        assert not self.manager.remove_pair("X:Y")
        assert not self.manager.record_trade_result("X:Y", 1.0, True)


class TestPairActivation:
    """Tests for the bounded active set."""

    def setup_method(self):
        self.manager = PairManager(max_active_pairs=2)
        self.ids = [
            self.manager.add_pair(a, b).id
            for a, b in [("A", "B"), ("C", "D"), ("E", "F")]
        ]

    def test_activate(self):
        """Test activation sets status and emits ACTIVATED."""
        activated = []
        self.manager.subscribe(PairEvent.ACTIVATED, activated.append)

        assert self.manager.activate_pair(self.ids[0])

        pair = self.manager.get_pair(self.ids[0])
        assert pair.status == PairStatus.ACTIVE
        assert activated == [pair]
        assert self.manager.get_active_pairs() == [pair]

    def test_active_set_is_bounded(self):
        """Test activation beyond the limit is refused without state change."""
        assert self.manager.activate_pair(self.ids[0])
        assert self.manager.activate_pair(self.ids[1])

        assert not self.manager.activate_pair(self.ids[2])
        assert self.manager.get_pair(self.ids[2]).status == PairStatus.PENDING
        assert len(self.manager.active_pairs) == 2

    def test_activate_twice(self):
        """Test activating an active pair is a no-op success."""
        activated = []
        self.manager.subscribe(PairEvent.ACTIVATED, activated.append)

        self.manager.activate_pair(self.ids[0])

        assert self.manager.activate_pair(self.ids[0])
        assert len(activated) == 1

    def test_deactivate(self):
        """Test deactivation suspends and emits DEACTIVATED once."""
        deactivated = []
        self.manager.subscribe(PairEvent.DEACTIVATED, deactivated.append)
        self.manager.activate_pair(self.ids[0])

        assert self.manager.deactivate_pair(self.ids[0])
        assert self.manager.deactivate_pair(self.ids[0])

        assert self.manager.get_pair(self.ids[0]).status == PairStatus.SUSPENDED
        assert len(deactivated) == 1

    def test_suspended_pair_needs_requalification(self):
        """Test a suspended pair cannot be activated directly."""
        self.manager.activate_pair(self.ids[0])
        self.manager.deactivate_pair(self.ids[0])

        assert not self.manager.activate_pair(self.ids[0])


class TestPairValidation:
    """Tests for statistics-driven status transitions."""

    def setup_method(self):
        self.manager = PairManager(min_correlation=0.7, min_half_life=1.0, max_half_life=30.0)
        self.pair = self.manager.add_pair("BTC/USDT", "ETH/USDT")
        self.manager.update_pair_stats(self.pair.id, _good_stats())
        self.manager.activate_pair(self.pair.id)

    def test_qualifying_stats_keep_pair_active(self):
        """Test passing statistics leave an active pair active."""
        self.manager.update_pair_stats(self.pair.id, _good_stats(correlation=0.95))

        assert self.pair.status == PairStatus.ACTIVE
        assert self.pair.id in self.manager.active_pairs

    def test_non_stationary_breaks_pair(self):
        """Test a failed cointegration test breaks the pair."""
        self.manager.update_pair_stats(self.pair.id, {"cointegration": _stationary(False)})

        assert self.pair.status == PairStatus.BROKEN
        assert self.pair.id not in self.manager.active_pairs

    def test_weak_correlation_suspends_pair(self):
        """Test correlation below the minimum suspends the pair."""
        self.manager.update_pair_stats(self.pair.id, {"correlation": 0.5})

        assert self.pair.status == PairStatus.SUSPENDED
        assert self.pair.id not in self.manager.active_pairs

    def test_negative_correlation_uses_magnitude(self):
        """Test strong negative correlation qualifies."""
        self.manager.update_pair_stats(self.pair.id, {"correlation": -0.9})

        assert self.pair.status == PairStatus.ACTIVE

    def test_half_life_out_of_range_suspends_pair(self):
        """Test half-life outside the window suspends the pair."""
        self.manager.update_pair_stats(self.pair.id, {"half_life": 45.0})

        assert self.pair.status == PairStatus.SUSPENDED

    def test_requalified_pair_returns_to_pending(self):
        """Test a broken pair passing again becomes pending and can be re-activated."""
        self.manager.update_pair_stats(self.pair.id, {"cointegration": _stationary(False)})
        self.manager.update_pair_stats(self.pair.id, {"cointegration": _stationary(True)})

        assert self.pair.status == PairStatus.PENDING
        assert self.manager.activate_pair(self.pair.id)

    def test_qualifies(self):
        """Test eligibility gates on a bare statistics object."""
        assert self.manager.qualifies(PairStatistics(correlation=0.8, half_life=10.0))
        assert not self.manager.qualifies(PairStatistics(correlation=0.8, half_life=0.5))
        assert not self.manager.qualifies(PairStatistics(correlation=0.1))

    def test_merge_stats_skips_validation(self):
        """Test merged statistics stamp the pair without changing its status."""
        self.pair.last_update = datetime(2020, 1, 1)

        merged = self.manager.merge_pair_stats(self.pair.id, {"correlation": 0.1})

        assert merged is self.pair
        assert self.pair.stats.correlation == 0.1
        assert self.pair.status == PairStatus.ACTIVE
        assert self.pair.last_update > datetime(2020, 1, 1)
        assert self.manager.merge_pair_stats("X:Y", {"correlation": 0.9}) is None


class TestPositionsAndPerformance:
    """Tests for position bookkeeping and trade results."""

    def setup_method(self):
        self.manager = PairManager()
        self.pair = self.manager.add_pair("BTC/USDT", "ETH/USDT")

    def test_set_and_clear_position(self):
        """Test open_time follows the position."""
        self.manager.set_position(self.pair.id, _position())

        assert self.pair.has_position
        assert self.pair.open_time is not None
        assert self.manager.get_pairs_with_positions() == [self.pair]

        self.manager.set_position(self.pair.id, None)

        assert not self.pair.has_position
        assert self.pair.open_time is None

    def test_record_trade_result(self):
        """Test performance counters and largest loss."""
        self.manager.record_trade_result(self.pair.id, 100.0, True)
        self.manager.record_trade_result(self.pair.id, -40.0, False)
        self.manager.record_trade_result(self.pair.id, -70.0, False)

        performance = self.pair.performance
        assert performance.total_trades == 3
        assert performance.win_count == 1
        assert performance.loss_count == 2
        assert performance.total_pnl == pytest.approx(-10.0)
        assert performance.max_drawdown == pytest.approx(70.0)

    def test_leg_pnl(self):
        """Test long and short leg marking."""
        position = _position()

        assert position.asset_a.pnl(51000.0) == pytest.approx(100.0)
        assert position.asset_b.pnl(3100.0) == pytest.approx(-150.0)

    def test_flat_leg_pnl_is_frozen(self):
        """Test a leg with an exit price ignores later marks."""
        position = _position()
        position.asset_a.exit_price = 50500.0

        assert not position.asset_a.is_open
        assert position.asset_b.is_open
        assert not position.is_hedged
        assert position.asset_a.pnl(40000.0) == pytest.approx(50.0)

    def test_to_dict(self):
        """Test pair serializes with nested statistics."""
        data = self.pair.to_dict()

        assert data["id"] == "BTC/USDT:ETH/USDT"
        assert data["stats"]["beta"] == 1.0
        assert data["position"] is None


class TestSubscriptions:
    """Tests for lifecycle event delivery."""

    def test_failing_handler_is_isolated(self):
        """Test a raising handler does not block others or the operation."""
        manager = PairManager()
        received = []

        def broken(pair):
            raise RuntimeError("handler failure")

        manager.subscribe(PairEvent.ADDED, broken, name="broken")
        manager.subscribe(PairEvent.ADDED, received.append)

        pair = manager.add_pair("BTC/USDT", "ETH/USDT")

        assert received == [pair]
        assert pair.id in manager

    def test_unsubscribe(self):
        """Test unsubscribed handlers stop receiving events."""
        manager = PairManager()
        received = []
        subscription = manager.subscribe(PairEvent.ADDED, received.append)

        assert manager.unsubscribe(subscription)
        manager.add_pair("BTC/USDT", "ETH/USDT")

        assert received == []
        assert not manager.unsubscribe(subscription)

    def test_string_event_name(self):
        """Test events may be given by value."""
        manager = PairManager()
        received = []
        manager.subscribe("pair_added", received.append)

        manager.add_pair("BTC/USDT", "ETH/USDT")

        assert len(received) == 1
