"""
Circuit breakers for the statistical arbitrage engine.

Automated trading restrictions based on realized results:
- Consecutive-loss cooling-off (blocks new entries for a fixed period)
- Realized drawdown guard (blocks new entries past a fraction of capital)

Breakers only gate new spread entries; closing existing positions is
always allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from loguru import logger


@dataclass
class CircuitBreakerEvent:
    """Record of a circuit breaker trigger event."""

    timestamp: datetime
    breaker_name: str
    trigger_value: float
    threshold: float
    message: str


@dataclass
class CoolingState:
    """Current state of the loss-streak breaker."""

    consecutive_losses: int = 0
    cooling_until: datetime | None = None
    events: list[CircuitBreakerEvent] = field(default_factory=list)


class LossStreakBreaker:
    """
    Cooling-off after a run of losing trades.

    A win resets the streak. When the streak reaches the limit the breaker
    cools until ``now + cooling_period``; the cooling state expires on its
    own.
    """

    def __init__(
        self,
        consecutive_loss_limit: int = 3,
        cooling_period: timedelta = timedelta(hours=24),
    ) -> None:
        """
        Initialize loss-streak breaker.

        Args:
            consecutive_loss_limit: Losses in a row that trigger cooling
            cooling_period: How long new entries stay blocked
        """
        self.consecutive_loss_limit = consecutive_loss_limit
        self.cooling_period = cooling_period
        self.state = CoolingState()

    @property
    def consecutive_losses(self) -> int:
        return self.state.consecutive_losses

    @property
    def cooling_until(self) -> datetime | None:
        return self.state.cooling_until

    @cooling_until.setter
    def cooling_until(self, value: datetime | None) -> None:
        self.state.cooling_until = value

    def record_trade(self, pnl: float, now: datetime | None = None) -> bool:
        """
        Record a closed trade.

        Args:
            pnl: Realized PnL (> 0 counts as a win)
            now: Current time

        Returns:
            True if this trade triggered cooling
        """
        if pnl > 0:
            self.state.consecutive_losses = 0
            return False

        self.state.consecutive_losses += 1

        if self.state.consecutive_losses < self.consecutive_loss_limit:
            return False

        now = now or datetime.now()
        self.state.cooling_until = now + self.cooling_period

        event = CircuitBreakerEvent(
            timestamp=now,
            breaker_name="LossStreak",
            trigger_value=float(self.state.consecutive_losses),
            threshold=float(self.consecutive_loss_limit),
            message=(
                f"{self.state.consecutive_losses} consecutive losses, "
                f"cooling until {self.state.cooling_until.isoformat()}"
            ),
        )
        self.state.events.append(event)
        logger.warning(f"Circuit breaker event: {event.message}")

        return True

    def is_cooling(self, now: datetime | None = None) -> bool:
        """Check whether new entries are currently blocked."""
        if self.state.cooling_until is None:
            return False
        return (now or datetime.now()) < self.state.cooling_until

    def reset(self) -> None:
        """Clear streak and cooling."""
        self.state.consecutive_losses = 0
        self.state.cooling_until = None
        logger.info("Loss-streak breaker reset")

    def get_status_report(self) -> dict[str, Any]:
        return {
            "consecutive_losses": self.state.consecutive_losses,
            "consecutive_loss_limit": self.consecutive_loss_limit,
            "cooling": self.is_cooling(),
            "cooling_until": self.state.cooling_until.isoformat() if self.state.cooling_until else None,
            "total_events": len(self.state.events),
        }


class DrawdownBreaker:
    """
    Guard on realized drawdown.

    ``current_drawdown`` accumulates realized PnL floored at zero from above
    (it is always <= 0 and recovers with profits); ``max_drawdown`` keeps the
    deepest value seen.
    """

    def __init__(self, max_drawdown: float = 0.10) -> None:
        """
        Initialize drawdown breaker.

        Args:
            max_drawdown: Fraction of capital at which new entries stop
        """
        self.max_drawdown_pct = max_drawdown
        self.current_drawdown = 0.0
        self.max_drawdown = 0.0

    def update(self, pnl: float) -> float:
        """Apply a realized PnL and return the current drawdown."""
        self.current_drawdown = min(self.current_drawdown + pnl, 0.0)
        self.max_drawdown = min(self.max_drawdown, self.current_drawdown)
        return self.current_drawdown

    def drawdown_pct(self, capital: float) -> float:
        if capital <= 0:
            return 0.0
        return abs(self.current_drawdown) / capital

    def is_breached(self, capital: float) -> bool:
        """True when the realized drawdown reaches the configured fraction of capital."""
        if capital <= 0:
            return False
        breached = self.drawdown_pct(capital) >= self.max_drawdown_pct
        if breached:
            logger.debug(
                f"Drawdown {self.drawdown_pct(capital):.2%} >= limit {self.max_drawdown_pct:.2%}"
            )
        return breached

    def reset(self) -> None:
        self.current_drawdown = 0.0
        self.max_drawdown = 0.0
