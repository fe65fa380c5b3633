"""
Configuration module for the statistical arbitrage engine.

This module provides centralized configuration management including:
- Global settings (settings.py)
- Strategy overrides (stat_arb.yaml)
"""

from pathlib import Path

import yaml

from config.settings import (
    PROJECT_ROOT,
    CONFIG_DIR,
    LOGS_DIR,
    LoggingSettings,
    Settings,
    StrategySettings,
    get_settings,
    reload_settings,
    settings,
)


def load_yaml_config(config_name: str, config_dir: Path | None = None) -> dict:
    """
    Load a YAML configuration file.

    Args:
        config_name: Name of the config file (with or without .yaml extension)
        config_dir: Directory to look in (defaults to the project config dir)

    Returns:
        Dictionary containing the configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid
    """
    if not config_name.endswith(".yaml"):
        config_name = f"{config_name}.yaml"

    config_path = (config_dir or CONFIG_DIR) / config_name

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_strategy_config(config_name: str = "stat_arb", config_dir: Path | None = None) -> dict:
    """Load the strategy section of a YAML config file."""
    data = load_yaml_config(config_name, config_dir)
    return data.get("strategy", data)


__all__ = [
    "PROJECT_ROOT",
    "CONFIG_DIR",
    "LOGS_DIR",
    "LoggingSettings",
    "Settings",
    "StrategySettings",
    "get_settings",
    "reload_settings",
    "settings",
    "load_yaml_config",
    "load_strategy_config",
]
