"""
Pair registry and data model.
"""

from statarb.pairs.manager import PairManager, Subscription
from statarb.pairs.models import (
    Pair,
    PairPerformance,
    PairStatistics,
    PositionLeg,
    SpreadPosition,
)

__all__ = [
    "PairManager",
    "Subscription",
    "Pair",
    "PairPerformance",
    "PairStatistics",
    "PositionLeg",
    "SpreadPosition",
]
