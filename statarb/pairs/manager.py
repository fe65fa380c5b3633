"""
Pair lifecycle management.

The PairManager owns pair identity, status transitions, statistics,
open-position bookkeeping and per-pair trade performance. Lifecycle
changes are published to subscribers:

    PENDING --activate--> ACTIVE --deactivate--> SUSPENDED
       ^                    |
       |               (validation)
       +---- re-qualifies --+--> BROKEN / SUSPENDED

Operations on unknown pair ids return None/False instead of raising.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping

from loguru import logger

from statarb.core.types import PairEvent, PairStatus
from statarb.pairs.models import Pair, PairStatistics, SpreadPosition


PairHandler = Callable[[Pair], None]


@dataclass(eq=False)
class Subscription:
    """Registered lifecycle handler"""
    event: PairEvent
    handler: PairHandler
    name: str = ""
    active: bool = True


class PairManager:
    """
    Registry of trading pairs with a bounded active set.

    Example:
        manager = PairManager(max_active_pairs=5)
        manager.subscribe(PairEvent.ACTIVATED, lambda pair: print(pair.id))

        pair = manager.add_pair("ETH/USDT", "BTC/USDT")   # id "BTC/USDT:ETH/USDT"
        manager.activate_pair(pair.id)
    """

    def __init__(
        self,
        max_active_pairs: int = 5,
        min_correlation: float = 0.7,
        min_half_life: float = 1.0,
        max_half_life: float = 30.0,
    ) -> None:
        """
        Initialize the pair manager.

        Args:
            max_active_pairs: Maximum number of simultaneously active pairs
            min_correlation: Minimum absolute correlation for a valid pair
            min_half_life: Minimum acceptable half-life (bars)
            max_half_life: Maximum acceptable half-life (bars)
        """
        self.max_active_pairs = max_active_pairs
        self.min_correlation = min_correlation
        self.min_half_life = min_half_life
        self.max_half_life = max_half_life

        self.pairs: dict[str, Pair] = {}
        self.active_pairs: set[str] = set()

        self._subscriptions: dict[PairEvent, list[Subscription]] = defaultdict(list)

    # =========================================================================
    # OBSERVERS
    # =========================================================================

    def subscribe(
        self,
        event: PairEvent | str,
        handler: PairHandler,
        name: str = "",
    ) -> Subscription:
        """Register a handler for a lifecycle event."""
        event = PairEvent(event)
        subscription = Subscription(event=event, handler=handler, name=name or repr(handler))
        self._subscriptions[event].append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        handlers = self._subscriptions.get(subscription.event, [])
        if subscription in handlers:
            subscription.active = False
            handlers.remove(subscription)
            return True
        return False

    def _emit(self, event: PairEvent, pair: Pair) -> None:
        for subscription in list(self._subscriptions.get(event, [])):
            if not subscription.active:
                continue
            try:
                subscription.handler(pair)
            except Exception as e:
                logger.error(f"Pair event handler {subscription.name} failed on {event.value}: {e}")

    # =========================================================================
    # IDENTITY AND REGISTRATION
    # =========================================================================

    @staticmethod
    def generate_pair_id(asset_a: str, asset_b: str) -> str:
        """Canonical id: both symbols sorted lexicographically, joined by ':'."""
        first, second = sorted([asset_a, asset_b])
        return f"{first}:{second}"

    def add_pair(
        self,
        asset_a: str,
        asset_b: str,
        stats: Mapping[str, Any] | PairStatistics | None = None,
    ) -> Pair:
        """
        Register a pair, or merge statistics into an existing one.

        Args:
            asset_a: First asset
            asset_b: Second asset
            stats: Optional statistics to attach

        Returns:
            The new or existing pair
        """
        pair_id = self.generate_pair_id(asset_a, asset_b)

        existing = self.pairs.get(pair_id)
        if existing is not None:
            existing.stats = existing.stats.merge(stats)
            existing.last_update = datetime.now()
            return existing

        pair = Pair(
            id=pair_id,
            asset_a=asset_a,
            asset_b=asset_b,
            stats=PairStatistics().merge(stats),
        )
        self.pairs[pair_id] = pair
        self._emit(PairEvent.ADDED, pair)

        return pair

    def remove_pair(self, pair_id: str) -> bool:
        """Delete a pair; refused while it holds a position."""
        pair = self.pairs.get(pair_id)
        if pair is None:
            return False
        if pair.position is not None:
            return False

        self.deactivate_pair(pair_id)
        del self.pairs[pair_id]
        self._emit(PairEvent.REMOVED, pair)
        return True

    # =========================================================================
    # STATISTICS AND VALIDATION
    # =========================================================================

    def merge_pair_stats(
        self,
        pair_id: str,
        stats: Mapping[str, Any] | PairStatistics,
    ) -> Pair | None:
        """Merge statistics into a pair without touching its status."""
        pair = self.pairs.get(pair_id)
        if pair is None:
            return None

        pair.stats = pair.stats.merge(stats)
        pair.last_update = datetime.now()

        return pair

    def update_pair_stats(
        self,
        pair_id: str,
        stats: Mapping[str, Any] | PairStatistics,
    ) -> Pair | None:
        """Merge statistics into a pair and re-validate it."""
        pair = self.merge_pair_stats(pair_id, stats)
        if pair is None:
            return None

        self.validate_pair(pair)

        return pair

    def qualifies(self, stats: PairStatistics) -> bool:
        """Whether known statistics satisfy the eligibility gates."""
        if stats.cointegration is not None and not stats.cointegration.is_stationary:
            return False
        if abs(stats.correlation) < self.min_correlation:
            return False
        if stats.half_life is not None and not (
            self.min_half_life <= stats.half_life <= self.max_half_life
        ):
            return False
        return True

    def validate_pair(self, pair: Pair) -> bool:
        """
        Apply status transitions implied by the pair's statistics.

        A non-stationary spread breaks the pair; weak correlation or an
        out-of-range half-life suspends it. Both drop it from the active set.
        A previously broken or suspended pair that passes again returns to
        PENDING so it can be re-activated.

        Returns:
            True if the pair passes validation
        """
        stats = pair.stats

        if stats.cointegration is not None and not stats.cointegration.is_stationary:
            self.deactivate_pair(pair.id)
            pair.status = PairStatus.BROKEN
            return False

        if not self.qualifies(stats):
            self.deactivate_pair(pair.id)
            pair.status = PairStatus.SUSPENDED
            return False

        if pair.status in (PairStatus.BROKEN, PairStatus.SUSPENDED):
            pair.status = PairStatus.PENDING

        return True

    # =========================================================================
    # ACTIVATION
    # =========================================================================

    def activate_pair(self, pair_id: str) -> bool:
        """
        Move a pending pair into the active set.

        Refused (no state change) for unknown or non-pending pairs, or when
        the active set is full.
        """
        pair = self.pairs.get(pair_id)
        if pair is None:
            return False

        if pair_id in self.active_pairs:
            return True

        if pair.status != PairStatus.PENDING:
            return False

        if len(self.active_pairs) >= self.max_active_pairs:
            return False

        pair.status = PairStatus.ACTIVE
        self.active_pairs.add(pair_id)
        self._emit(PairEvent.ACTIVATED, pair)

        return True

    def deactivate_pair(self, pair_id: str) -> bool:
        """Remove a pair from the active set without deleting it."""
        pair = self.pairs.get(pair_id)
        if pair is None:
            return False

        was_active = pair_id in self.active_pairs
        self.active_pairs.discard(pair_id)
        if pair.status == PairStatus.ACTIVE:
            pair.status = PairStatus.SUSPENDED

        if was_active:
            self._emit(PairEvent.DEACTIVATED, pair)

        return True

    # =========================================================================
    # POSITIONS AND PERFORMANCE
    # =========================================================================

    def set_position(self, pair_id: str, position: SpreadPosition | None) -> Pair | None:
        """Attach a position (stamping open_time) or clear both when None."""
        pair = self.pairs.get(pair_id)
        if pair is None:
            return None

        pair.position = position
        pair.open_time = datetime.now() if position is not None else None

        return pair

    def record_trade_result(self, pair_id: str, pnl: float, is_win: bool) -> bool:
        pair = self.pairs.get(pair_id)
        if pair is None:
            return False

        performance = pair.performance
        performance.total_trades += 1
        performance.total_pnl += pnl

        if is_win:
            performance.win_count += 1
        else:
            performance.loss_count += 1

        if pnl < 0:
            performance.max_drawdown = max(performance.max_drawdown, abs(pnl))

        return True

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_pair(self, pair_id: str) -> Pair | None:
        return self.pairs.get(pair_id)

    def get_all_pairs(self) -> list[Pair]:
        return list(self.pairs.values())

    def get_active_pairs(self) -> list[Pair]:
        return [
            pair for pair in self.pairs.values()
            if pair.id in self.active_pairs and pair.status == PairStatus.ACTIVE
        ]

    def get_pairs_with_positions(self) -> list[Pair]:
        return [pair for pair in self.pairs.values() if pair.position is not None]

    def clear(self) -> None:
        """Drop every pair and the active index."""
        self.pairs.clear()
        self.active_pairs.clear()

    def __len__(self) -> int:
        return len(self.pairs)

    def __contains__(self, pair_id: object) -> bool:
        return pair_id in self.pairs
