"""Normalizers module for pricing data sources."""

from .history_normalizer import HistoryNormalizer
from .market_normalizer import MarketNormalizer
from .pricing_normalizer import PricingNormalizer

__all__ = [
    "HistoryNormalizer",
    "MarketNormalizer",
    "PricingNormalizer",
]
