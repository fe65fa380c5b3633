"""
Exception hierarchy for the statistical arbitrage engine.
"""


class StatArbError(Exception):
    """Base class for errors raised by the engine"""
    pass


class ConfigurationError(StatArbError):
    """Configuration violates an invariant the strategy cannot start with"""
    pass
