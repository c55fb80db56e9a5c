"""
Sous-package `models` : objets valeur échangés par le moteur d'analyse.
"""

from .entities import (
    BusinessContext,
    CompetitivePositioning,
    ConfigValidationResult,
    CurrentPricing,
    DynamicPricingConfig,
    MarketAverage,
    MarketComparison,
    MarketInsights,
    MarketPosition,
    MergedAnalysis,
    PositionIndicator,
    PositionResult,
    PriceHistoryPoint,
    PriceObservation,
    PriceRange,
    PriceTrend,
    PricingAnalysisResult,
    PricingStrategy,
    RevenueOptimization,
    ServiceRecommendation,
    Trend,
    UpdateFrequency,
)

__all__ = [
    "BusinessContext",
    "CompetitivePositioning",
    "ConfigValidationResult",
    "CurrentPricing",
    "DynamicPricingConfig",
    "MarketAverage",
    "MarketComparison",
    "MarketInsights",
    "MarketPosition",
    "MergedAnalysis",
    "PositionIndicator",
    "PositionResult",
    "PriceHistoryPoint",
    "PriceObservation",
    "PriceRange",
    "PriceTrend",
    "PricingAnalysisResult",
    "PricingStrategy",
    "RevenueOptimization",
    "ServiceRecommendation",
    "Trend",
    "UpdateFrequency",
]
