"""
Core types and exceptions shared across the engine.
"""

from statarb.core.exceptions import ConfigurationError, StatArbError
from statarb.core.types import ArbType, LegSide, PairEvent, PairStatus, SignalType

__all__ = [
    "ArbType",
    "LegSide",
    "PairEvent",
    "PairStatus",
    "SignalType",
    "StatArbError",
    "ConfigurationError",
]
