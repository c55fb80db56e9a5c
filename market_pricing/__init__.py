"""
Moteur d'analyse de prix de marché et de recommandations.

Ce package contient :
- les objets valeur échangés avec la couche de présentation (`models`),
- les composants d'analyse : agrégation marché, position, tendances,
  recommandations par service, validation de configuration (`analysis`),
- les sources de données HTTP et leurs normaliseurs,
- l'orchestrateur qui fusionne le tout (`orchestrator`),
- le serveur JSON ligne par ligne (`server`).
"""

from .errors import (
    AuthRequiredError,
    ConfigError,
    DivisionByZeroError,
    EmptyMarketError,
    InsufficientDataError,
    PartialDataError,
    PricingAnalysisError,
    SourceError,
)
from .models.entities import DynamicPricingConfig, MergedAnalysis, PricingAnalysisResult
from .orchestrator import PricingAnalysisOrchestrator

__all__ = [
    "AuthRequiredError",
    "ConfigError",
    "DivisionByZeroError",
    "DynamicPricingConfig",
    "EmptyMarketError",
    "InsufficientDataError",
    "MergedAnalysis",
    "PartialDataError",
    "PricingAnalysisError",
    "PricingAnalysisOrchestrator",
    "PricingAnalysisResult",
    "SourceError",
]
