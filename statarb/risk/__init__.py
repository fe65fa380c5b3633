"""
Risk controls: loss-streak cooling and realized drawdown guard.
"""

from statarb.risk.circuit_breakers import (
    CircuitBreakerEvent,
    CoolingState,
    DrawdownBreaker,
    LossStreakBreaker,
)

__all__ = [
    "CircuitBreakerEvent",
    "CoolingState",
    "DrawdownBreaker",
    "LossStreakBreaker",
]
