"""
Custom logging configuration using loguru.

This module provides a centralized logging setup with:
- Console and file handlers
- Structured logging support
- Trade-specific logging for spread positions
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from config.settings import settings


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    rotation: str = "10 MB",
    retention: str = "30 days",
    serialize: bool = False,
    console: bool = True,
) -> None:
    """
    Configure the global logger with specified settings.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (None to disable file logging)
        rotation: When to rotate the log file
        retention: How long to keep old log files
        serialize: Whether to output JSON logs
        console: Whether to log to console
    """
    # Remove default handler
    logger.remove()

    # Console handler
    if console:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            colorize=True,
        )

    # File handler
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_path),
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )


def get_logger(name: str | None = None) -> "logger":
    """
    Get a logger instance with optional name binding.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger


class TradeLogger:
    """
    Specialized logger for spread trading events.

    Provides structured logging for:
    - Spread openings (both legs)
    - Spread closings with realized PnL
    - Risk events (cooling, limit rejections)
    """

    def __init__(self, log_file: Path | str | None = None) -> None:
        """
        Initialize trade logger.

        Args:
            log_file: Dedicated trade log file (None to log only through the global sinks)
        """
        self._logger = logger.bind(category="trades")

        if log_file:
            trade_log = Path(log_file)
            trade_log.parent.mkdir(parents=True, exist_ok=True)

            logger.add(
                str(trade_log),
                level="INFO",
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {message}",
                rotation="5 MB",
                retention="90 days",
                filter=lambda record: record["extra"].get("category") == "trades",
            )

    def log_spread_open(
        self,
        pair_id: str,
        signal_type: str,
        symbol_a: str,
        side_a: str,
        amount_a: float,
        symbol_b: str,
        side_b: str,
        amount_b: float,
        value: float,
        **kwargs: Any,
    ) -> None:
        """
        Log a spread position opening.

        Args:
            pair_id: Pair identifier
            signal_type: Entry signal
            symbol_a: First leg symbol
            side_a: First leg side
            amount_a: First leg quantity
            symbol_b: Second leg symbol
            side_b: Second leg side
            amount_b: Second leg quantity
            value: Notional committed
            **kwargs: Additional details
        """
        self._logger.bind(pair_id=pair_id, signal_type=signal_type, value=value, **kwargs).info(
            f"OPEN | {pair_id} | {signal_type} | {symbol_a} {side_a} {amount_a:.6f} | "
            f"{symbol_b} {side_b} {amount_b:.6f} | value={value:.2f}"
        )

    def log_spread_close(
        self,
        pair_id: str,
        reason: str,
        pnl: float,
        **kwargs: Any,
    ) -> None:
        """
        Log a spread position closing.

        Args:
            pair_id: Pair identifier
            reason: Why the position was closed
            pnl: Realized PnL
            **kwargs: Additional details
        """
        self._logger.bind(pair_id=pair_id, reason=reason, pnl=pnl, **kwargs).info(
            f"CLOSE | {pair_id} | {reason} | pnl={pnl:.2f}"
        )

    def log_risk_event(
        self,
        event_type: str,
        message: str,
        severity: str = "WARNING",
        **kwargs: Any,
    ) -> None:
        """
        Log a risk management event.

        Args:
            event_type: Type of risk event
            message: Event description
            severity: Event severity
            **kwargs: Additional event details
        """
        bound = self._logger.bind(event_type=event_type, **kwargs)
        log_func = getattr(bound, severity.lower(), bound.warning)
        log_func(f"RISK | {event_type} | {message}")


# Initialize logging with default settings
setup_logging(
    level=settings.logging.level,
    log_file=settings.logging.log_file,
    rotation=settings.logging.rotation,
    retention=settings.logging.retention,
    serialize=settings.logging.serialize,
)

# Create global logger instance
trade_logger = TradeLogger(settings.logging.trade_log_file)
