"""
Price data storage.
"""

from statarb.data.price_store import PriceSeriesStore

__all__ = ["PriceSeriesStore"]
