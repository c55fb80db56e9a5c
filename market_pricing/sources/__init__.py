"""Data sources consumed by the pricing analysis orchestrator."""

from .base_source import BaseSource
from .current_analysis_source import CurrentAnalysisSource
from .market_comparison_source import MarketComparisonSource
from .price_history_source import PriceHistorySource

__all__ = [
    "BaseSource",
    "CurrentAnalysisSource",
    "MarketComparisonSource",
    "PriceHistorySource",
]
