"""Analytical components of the pricing analysis engine."""

from .config_validator import ConfigValidator
from .market_aggregator import MarketAggregator
from .position_classifier import PositionClassifier
from .recommendation_engine import RULE_TABLE, RecommendationEngine, lookup_rule
from .trend_analyzer import TrendAnalyzer

__all__ = [
    "ConfigValidator",
    "MarketAggregator",
    "PositionClassifier",
    "RULE_TABLE",
    "RecommendationEngine",
    "lookup_rule",
    "TrendAnalyzer",
]
