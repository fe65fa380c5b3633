"""
Tests Module
============

Unit tests for the statistical arbitrage engine.

Test Categories:
- test_statistics.py / test_spread.py: Analytics functions
- test_price_store.py: Rolling price history
- test_pair_manager.py: Pair lifecycle
- test_circuit_breakers.py: Risk breakers
- test_base_strategy.py / test_stat_arb_strategy.py: Strategies
- test_settings.py: Configuration loading
"""
