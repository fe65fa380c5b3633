"""
Statistical arbitrage engine.

Subpackages:
- core: enums and exceptions
- data: rolling price history
- analytics: statistical tests and spread construction
- pairs: pair registry and lifecycle
- risk: loss-streak and drawdown breakers
- execution: execution collaborator interface
- strategies: event-driven strategies (imports config.settings)
- utils: loguru setup and trade logging
"""

__version__ = "1.0.0"
