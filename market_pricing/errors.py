"""
Taxonomie des erreurs du moteur d'analyse de prix.

Chaque erreur est distincte pour que l'appelant puisse afficher
"données insuffisantes" plutôt qu'une erreur générique.
"""

from enum import Enum
from typing import Dict, Optional


class PricingAnalysisError(Exception):
    """Erreur de base du moteur d'analyse de prix."""


class EmptyMarketError(PricingAnalysisError):
    """Aucune observation de prix concurrent à agréger."""


class DivisionByZeroError(PricingAnalysisError):
    """Moyenne de marché nulle : données amont invalides."""


class InsufficientDataError(PricingAnalysisError):
    """Pas assez de données pour produire une analyse."""


class ConfigErrorReason(Enum):
    """Motifs de rejet d'une configuration de pricing dynamique."""
    RANGE_INVALID = "range_invalid"
    INVALID_MULTIPLIER = "invalid_multiplier"
    INCONSISTENT_AUTO_ADJUST = "inconsistent_auto_adjust"


class ConfigError(PricingAnalysisError):
    """
    Configuration de pricing dynamique rejetée.

    Attributes:
        reason: Motif du rejet (ConfigErrorReason)
    """

    reason: Optional[ConfigErrorReason] = None

    def __init__(self, message: str, reason: Optional[ConfigErrorReason] = None):
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class RangeInvalidError(ConfigError):
    reason = ConfigErrorReason.RANGE_INVALID


class InvalidMultiplierError(ConfigError):
    reason = ConfigErrorReason.INVALID_MULTIPLIER


class InconsistentAutoAdjustError(ConfigError):
    reason = ConfigErrorReason.INCONSISTENT_AUTO_ADJUST


class AuthRequiredError(PricingAnalysisError):
    """Authentification requise ou refusée. Jamais réessayée automatiquement."""


class SourceError(PricingAnalysisError):
    """
    Échec d'une source de données (HTTP, réseau, payload invalide).

    Attributes:
        source_name: Nom de la source en échec
        status: Code HTTP si disponible
    """

    def __init__(self, message: str, source_name: str, status: Optional[int] = None):
        super().__init__(message)
        self.source_name = source_name
        self.status = status


class PartialDataError(PricingAnalysisError):
    """
    Toutes les sources de données ont échoué.

    Attributes:
        failures: {nom de la source: {"type": ..., "message": ...}}
    """

    def __init__(self, failures: Dict[str, Dict[str, str]]):
        self.failures = failures
        details = ", ".join(
            f"{source} ({failure['type']})" for source, failure in failures.items()
        )
        super().__init__(f"All pricing data sources failed: {details}")
