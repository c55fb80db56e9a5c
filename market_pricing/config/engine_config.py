"""
Constantes de conception du moteur d'analyse de prix.

Ce module regroupe les paramètres de politique utilisés par les composants
analytiques :
- seuil de classification de position (±10 %),
- pas de hausse et facteur de resserrement des recommandations,
- borne de clamp de l'ajustement de prix de base,
- pondération de l'estimation de hausse de revenu.

Ces valeurs sont des choix de politique ; elles peuvent être recalibrées
sur données réelles en fournissant une autre instance d'EngineConfig.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """
    Paramètres de haut niveau du moteur d'analyse.
    """

    # Écart relatif au-delà duquel un prix est au-dessus / en dessous du marché
    position_threshold: float = 0.10

    # Hausse appliquée à la borne basse (ex: 0.10 = +10 %)
    raise_step: float = 0.10

    # Part de l'écart au marché conservée lors d'un resserrement (0.5 = moitié)
    narrow_factor: float = 0.5

    # Clamp de base_price_adjustment_pct et des ajustements saisonniers (en %)
    max_base_adjustment_pct: float = 90.0

    # Estimation de hausse de revenu (en %)
    revenue_weight_per_service: float = 2.5
    revenue_volatility_weight: float = 10.0
    max_revenue_increase_pct: float = 25.0

    # Prix moyen au-delà duquel le marché est qualifié de "premium"
    premium_market_threshold: float = 50.0

    # Fenêtre d'historique utilisée pour l'analyse de tendance (jours)
    history_window_days: int = 30


def get_default_engine_config() -> EngineConfig:
    """Retourne une instance de configuration par défaut."""
    return EngineConfig()
