"""
Utility modules for the statistical arbitrage engine.

This module provides common utilities including:
- Custom logging with loguru
- Trade event logging
"""

from statarb.utils.logger import TradeLogger, get_logger, setup_logging, trade_logger

__all__ = [
    "TradeLogger",
    "get_logger",
    "setup_logging",
    "trade_logger",
]
