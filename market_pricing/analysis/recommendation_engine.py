"""
Moteur de recommandations de prix par ligne de service.

Ce module est responsable de :
- positionner chaque service par rapport à la moyenne du marché,
- appliquer une table de règles explicite (position x tendance du revenu),
- choisir la stratégie de prix de la fourchette recommandée,
- estimer la hausse de revenu attendue et le positionnement concurrentiel.

Chaque recommandation porte le nom de la règle appliquée dans son
`reasoning`, ce qui rend les recommandations auditables.
"""

import logging
import statistics
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..config.engine_config import EngineConfig, get_default_engine_config
from ..errors import InsufficientDataError
from ..models.entities import (
    CompetitivePositioning,
    CurrentPricing,
    MarketAverage,
    PositionIndicator,
    PriceRange,
    PriceTrend,
    PricingAnalysisResult,
    PricingStrategy,
    RevenueOptimization,
    ServiceRecommendation,
    Trend,
    round_currency,
)
from .position_classifier import PositionClassifier

logger = logging.getLogger(__name__)


class AdjustmentAction(Enum):
    HOLD = "hold"
    RAISE_LOW = "raise_low"
    RAISE_HIGH = "raise_high"
    NARROW = "narrow"


@dataclass(frozen=True)
class AdjustmentRule:
    """
    Entrée de la table de règles.

    Attributes:
        name: Identifiant de la règle (repris dans le reasoning)
        action: Ajustement appliqué à la fourchette courante
        strength: Fraction du pas de conception appliquée (1.0 = pas complet)
        toward_market: True si la règle rapproche le service de l'optimum marché
        strategy: Stratégie clé (revenue_optimization.key_strategies)
        rationale: Justification lisible
    """

    name: str
    action: AdjustmentAction
    strength: float
    toward_market: bool
    strategy: str
    rationale: str


RuleKey = Tuple[PositionIndicator, Optional[Trend]]

# Clé : (position du service, tendance du revenu) ; None = pas d'historique
RULE_TABLE: Dict[RuleKey, AdjustmentRule] = {
    (PositionIndicator.BELOW, Trend.INCREASING): AdjustmentRule(
        name="raise-low-bound",
        action=AdjustmentAction.RAISE_LOW,
        strength=1.0,
        toward_market=True,
        strategy="Raise entry prices on under-priced services with growing revenue",
        rationale="revenue is growing while priced below market, so the entry price can rise",
    ),
    (PositionIndicator.BELOW, Trend.DECREASING): AdjustmentRule(
        name="hold-below-market",
        action=AdjustmentAction.HOLD,
        strength=0.0,
        toward_market=False,
        strategy="Hold budget pricing while revenue recovers",
        rationale="revenue is declining, so raising prices now would add risk",
    ),
    (PositionIndicator.BELOW, None): AdjustmentRule(
        name="raise-toward-market",
        action=AdjustmentAction.RAISE_HIGH,
        strength=0.5,
        toward_market=True,
        strategy="Open a higher price tier toward the market average",
        rationale="no price history is available, so only the upper bound moves toward market",
    ),
    (PositionIndicator.AVERAGE, Trend.INCREASING): AdjustmentRule(
        name="test-upper-band",
        action=AdjustmentAction.RAISE_HIGH,
        strength=0.5,
        toward_market=False,
        strategy="Test a premium band on market-priced services",
        rationale="priced at market with growing revenue, a higher upper band can be tested",
    ),
    (PositionIndicator.AVERAGE, Trend.DECREASING): AdjustmentRule(
        name="hold-at-market",
        action=AdjustmentAction.HOLD,
        strength=0.0,
        toward_market=False,
        strategy="Keep market-aligned pricing",
        rationale="already priced at market; no change is recommended",
    ),
    (PositionIndicator.AVERAGE, None): AdjustmentRule(
        name="hold-at-market",
        action=AdjustmentAction.HOLD,
        strength=0.0,
        toward_market=False,
        strategy="Keep market-aligned pricing",
        rationale="already priced at market; no change is recommended",
    ),
    (PositionIndicator.ABOVE, Trend.INCREASING): AdjustmentRule(
        name="hold-premium",
        action=AdjustmentAction.HOLD,
        strength=0.0,
        toward_market=False,
        strategy="Maintain premium pricing backed by revenue growth",
        rationale="premium pricing is supported by growing revenue",
    ),
    (PositionIndicator.ABOVE, Trend.DECREASING): AdjustmentRule(
        name="narrow-toward-market",
        action=AdjustmentAction.NARROW,
        strength=1.0,
        toward_market=True,
        strategy="Narrow over-priced ranges toward the market average",
        rationale="priced above market with declining revenue, the range should narrow toward market",
    ),
    (PositionIndicator.ABOVE, None): AdjustmentRule(
        name="soften-toward-market",
        action=AdjustmentAction.NARROW,
        strength=0.5,
        toward_market=True,
        strategy="Soften premium ranges toward the market average",
        rationale="priced above market without history to support it, the range softens toward market",
    ),
}

_ADVANTAGE_BY_INDICATOR = {
    PositionIndicator.BELOW: "lower-priced",
    PositionIndicator.AVERAGE: "at-market",
    PositionIndicator.ABOVE: "higher-priced",
}

_VALUE_PROPOSITIONS = {
    PricingStrategy.PREMIUM: "Premium {category} experience that justifies above-market pricing",
    PricingStrategy.COMPETITIVE: "Quality {category} services at market-aligned prices",
    PricingStrategy.BUDGET: "Affordable {category} services with strong value for money",
}


def lookup_rule(indicator: PositionIndicator, revenue_trend: Optional[Trend]) -> AdjustmentRule:
    """Retourne l'entrée de la table de règles pour (position, tendance)."""
    return RULE_TABLE[(indicator, revenue_trend)]


class RecommendationEngine:
    """
    Combine tarifs actuels, moyenne du marché et tendances en recommandations.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        classifier: Optional[PositionClassifier] = None
    ):
        self.config = config or get_default_engine_config()
        self.classifier = classifier or PositionClassifier(self.config)

    def recommend(
        self,
        category: str,
        current_pricing: Union[CurrentPricing, Mapping[str, Any]],
        market_average: MarketAverage,
        history: Optional[PriceTrend] = None,
    ) -> PricingAnalysisResult:
        """
        Produit une recommandation par ligne de service.

        Args:
            category: Catégorie d'activité (ex: "salon")
            current_pricing: CurrentPricing ou {service_name: fourchette}
            market_average: Statistiques du marché
            history: Tendances de l'historique (optionnel)

        Returns:
            PricingAnalysisResult

        Raises:
            InsufficientDataError: Si aucun service n'est fourni
            DivisionByZeroError: Si la moyenne du marché est nulle
        """
        services = self._services(current_pricing)
        if not services:
            raise InsufficientDataError("No service pricing entries to analyze")

        average = market_average.average_price
        revenue_trend = history.revenue_trend if history else None

        recommendations: List[ServiceRecommendation] = []
        fired: List[AdjustmentRule] = []

        for service_name, current_range in services.items():
            position = self.classifier.classify(current_range.midpoint, average)
            rule = lookup_rule(position.indicator, revenue_trend)
            recommended_range = self._apply(rule, current_range, average)

            difference = self.classifier.difference(current_range.midpoint, average)
            reasoning = (
                f"[{rule.name}] {position.label} "
                f"({difference * 100:+.1f}% vs market average ${average:.2f}); "
                f"{self._trend_text(revenue_trend)}: {rule.rationale}."
            )

            recommendations.append(
                ServiceRecommendation(
                    service_name=service_name,
                    current_price_range=current_range,
                    recommended_price_range=recommended_range,
                    pricing_strategy=self.classifier.strategy_for(
                        recommended_range.midpoint, average
                    ),
                    reasoning=reasoning,
                    rule=rule.name,
                )
            )
            fired.append(rule)

        moved = sum(1 for rule in fired if rule.toward_market)
        volatility_ratio = history.price_volatility / average if history and average else 0.0

        revenue_optimization = RevenueOptimization(
            estimated_revenue_increase_pct=self.estimate_revenue_increase(moved, volatility_ratio),
            implementation_timeline=self._timeline(moved),
            key_strategies=self._key_strategies(fired),
        )

        positioning = self._positioning(category, services, recommendations, average)

        logger.info(
            f"Generated {len(recommendations)} recommendations for category '{category}' "
            f"({moved} moved toward market)"
        )

        return PricingAnalysisResult(
            service_recommendations=recommendations,
            revenue_optimization=revenue_optimization,
            competitive_positioning=positioning,
        )

    def estimate_revenue_increase(self, services_moved: int, volatility_ratio: float = 0.0) -> float:
        """
        Estimation (en %) de la hausse de revenu.

        Non décroissante en `services_moved` : la composante de volatilité ne
        s'ajoute qu'à partir d'un service ajusté, et le plafond est constant.
        """
        if services_moved <= 0:
            return 0.0

        estimate = (
            services_moved * self.config.revenue_weight_per_service
            + max(volatility_ratio, 0.0) * self.config.revenue_volatility_weight
        )
        return round(min(self.config.max_revenue_increase_pct, estimate), 1)

    # Helpers

    @staticmethod
    def _services(current_pricing: Union[CurrentPricing, Mapping[str, Any]]) -> Dict[str, PriceRange]:
        if isinstance(current_pricing, CurrentPricing):
            return dict(current_pricing.services)
        return {name: PriceRange.parse(value) for name, value in current_pricing.items()}

    def _apply(self, rule: AdjustmentRule, current: PriceRange, average: float) -> PriceRange:
        """Applique l'action de la règle à la fourchette courante."""
        step = self.config.raise_step * rule.strength

        if rule.action is AdjustmentAction.RAISE_LOW:
            low = round_currency(current.low * (1 + step))
            high = max(round_currency(current.high), low)
        elif rule.action is AdjustmentAction.RAISE_HIGH:
            low = round_currency(current.low)
            high = round_currency(current.high * (1 + step))
        elif rule.action is AdjustmentAction.NARROW:
            # Contraction affine vers la moyenne : l'ordre low <= high est conservé
            keep = 1 - self.config.narrow_factor * rule.strength
            low = round_currency(average + (current.low - average) * keep)
            high = round_currency(average + (current.high - average) * keep)
        else:
            low = round_currency(current.low)
            high = round_currency(current.high)

        return PriceRange(low, high)

    @staticmethod
    def _trend_text(revenue_trend: Optional[Trend]) -> str:
        if revenue_trend is None:
            return "no price history"
        return f"revenue trend {revenue_trend.value}"

    def _timeline(self, moved: int) -> str:
        if moved == 0:
            return "No changes required"
        if moved <= 2:
            return "1-2 weeks"
        return "2-4 weeks"

    @staticmethod
    def _key_strategies(fired: List[AdjustmentRule]) -> List[str]:
        strategies: List[str] = []
        for rule in fired:
            if rule.strategy not in strategies:
                strategies.append(rule.strategy)
        return strategies

    def _positioning(
        self,
        category: str,
        services: Dict[str, PriceRange],
        recommendations: List[ServiceRecommendation],
        average: float
    ) -> CompetitivePositioning:
        current_mid = statistics.mean(r.midpoint for r in services.values())
        recommended_mid = statistics.mean(
            r.recommended_price_range.midpoint for r in recommendations
        )

        target = self.classifier.strategy_for(recommended_mid, average)
        advantage = _ADVANTAGE_BY_INDICATOR[
            self.classifier.classify(current_mid, average).indicator
        ]

        return CompetitivePositioning(
            target_position=target,
            price_advantage=advantage,
            value_proposition=_VALUE_PROPOSITIONS[target].format(category=category),
        )
