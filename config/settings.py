"""
Global settings and configuration management for the statistical arbitrage engine.

This module provides centralized configuration using Pydantic for validation
and environment variable support.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from statarb.core.types import ArbType


# Project paths
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
CONFIG_DIR = PROJECT_ROOT / "config"
LOGS_DIR = PROJECT_ROOT / "logs"


DEFAULT_CANDIDATE_PAIRS: list[tuple[str, str]] = [
    ("BTC/USDT", "ETH/USDT"),
    ("ETH/USDT", "BNB/USDT"),
    ("SOL/USDT", "AVAX/USDT"),
]


class StrategySettings(BaseSettings):
    """Statistical arbitrage strategy configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="STATARB_STRATEGY_",
        env_file=".env",
        extra="ignore"
    )

    # Strategy type
    arb_type: ArbType = ArbType.PAIRS_TRADING

    # Pair universe
    candidate_pairs: list[tuple[str, str]] = Field(
        default_factory=lambda: list(DEFAULT_CANDIDATE_PAIRS)
    )
    max_active_pairs: int = Field(default=5, gt=0)
    lookback_period: int = Field(default=60, ge=2)
    cointegration_test_period: int = Field(default=100, ge=2)
    reanalysis_interval: int = Field(default=1, ge=1)  # ticks between re-estimation

    # Cointegration / eligibility gates
    adf_significance_level: float = Field(default=0.05, gt=0.0, lt=1.0)
    min_correlation: float = Field(default=0.7, ge=0.0, le=1.0)
    min_half_life: float = Field(default=1.0, ge=0.0)
    max_half_life: float = Field(default=30.0, gt=0.0)

    # Z-score thresholds
    entry_z_score: float = Field(default=2.0, gt=0.0)
    exit_z_score: float = Field(default=0.5, ge=0.0)
    stop_loss_z_score: float = Field(default=4.0, gt=0.0)
    max_holding_period: timedelta = timedelta(days=7)

    # Cross-exchange
    spread_entry_threshold: float = Field(default=0.003, ge=0.0)
    spread_exit_threshold: float = Field(default=0.001, ge=0.0)
    trading_cost: float = Field(default=0.001, ge=0.0)  # one side
    slippage_estimate: float = Field(default=0.0005, ge=0.0)

    # Perpetual / spot basis (annualized)
    basis_entry_threshold: float = Field(default=0.15, ge=0.0)
    basis_exit_threshold: float = Field(default=0.05, ge=0.0)
    basis_period_days: float = Field(default=8.0, gt=0.0)
    funding_rate_threshold: float = Field(default=0.001, ge=0.0)

    # Position sizing (fractions of capital)
    max_position_per_pair: float = Field(default=0.1, gt=0.0, le=1.0)
    max_total_position: float = Field(default=0.5, gt=0.0, le=1.0)

    # Risk limits
    max_loss_per_pair: float = Field(default=0.02, gt=0.0)
    max_drawdown: float = Field(default=0.10, gt=0.0)
    consecutive_loss_limit: int = Field(default=3, ge=1)
    cooling_period: timedelta = timedelta(hours=24)

    log_prefix: str = "[StatArb]"

    @field_validator("candidate_pairs", mode="before")
    @classmethod
    def convert_pairs(cls, v: list) -> list:
        """Accept {"asset_a": ..., "asset_b": ...} mappings as well as 2-sequences."""
        converted = []
        for item in v:
            if isinstance(item, dict):
                converted.append((item.get("asset_a"), item.get("asset_b")))
            else:
                converted.append(item)
        return converted


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="STATARB_LOG_",
        env_file=".env",
        extra="ignore"
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Path | None = LOGS_DIR / "statarb.log"
    trade_log_file: Path | None = LOGS_DIR / "trades.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    serialize: bool = False  # JSON logging

    @field_validator("log_file", "trade_log_file", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects; empty string disables the sink."""
        if v == "":
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseSettings):
    """Main settings container combining all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    strategy: StrategySettings = Field(default_factory=StrategySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Environment
    environment: Literal["development", "testing", "production"] = "development"
    debug: bool = False


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment and config files."""
    global settings
    settings = Settings()
    return settings
