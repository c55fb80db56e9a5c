"""
Objets valeur du moteur d'analyse de prix.

Toutes les entités sont calculées à chaque requête puis abandonnées,
à l'exception de DynamicPricingConfig qui est transmise à un ConfigStore.

Chaque entité expose `to_dict()` qui produit des valeurs sérialisables
en JSON :
- montants en nombres décimaux arrondis à 2 décimales,
- enums sous forme de chaînes fixes,
- dates au format ISO-8601.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class PricingStrategy(Enum):
    """Stratégie de prix qualitative."""
    PREMIUM = "premium"
    COMPETITIVE = "competitive"
    BUDGET = "budget"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "PricingStrategy":
        """Parse une chaîne libre ; toute valeur inconnue devient UNKNOWN."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class PositionIndicator(Enum):
    """Position d'un prix par rapport à la moyenne du marché."""
    ABOVE = "above"
    BELOW = "below"
    AVERAGE = "average"


class Trend(Enum):
    """Sens d'une tendance (prix ou revenu)."""
    INCREASING = "increasing"
    DECREASING = "decreasing"


class UpdateFrequency(Enum):
    """Fréquence de mise à jour du pricing dynamique."""
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"


class MarketPosition(Enum):
    """Position personnalisée d'une entreprise sur son marché."""
    PREMIUM = "premium"
    COMPETITIVE = "competitive"
    BUDGET = "budget"
    MARKET_WIDE = "market-wide"

    @classmethod
    def from_indicator(cls, indicator: PositionIndicator) -> "MarketPosition":
        return _POSITION_BY_INDICATOR[indicator]


_POSITION_BY_INDICATOR = {
    PositionIndicator.ABOVE: MarketPosition.PREMIUM,
    PositionIndicator.AVERAGE: MarketPosition.COMPETITIVE,
    PositionIndicator.BELOW: MarketPosition.BUDGET,
}

_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")


def round_currency(value: float) -> float:
    """Arrondit un montant à 2 décimales."""
    return round(float(value), 2)


def _bool_field(data: Mapping[str, Any], key: str, default: bool) -> bool:
    """Lit un booléen JSON strict : "false" ou 0 sont refusés."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean, got {value!r}")
    return value


def _float_field(key: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{key} must be a number, got {value!r}") from e



@dataclass(frozen=True)
class PriceRange:
    """
    Fourchette de prix (low, high) avec 0 <= low <= high.
    """

    low: float
    high: float

    def __post_init__(self):
        for bound in (self.low, self.high):
            if not isinstance(bound, (int, float)) or not math.isfinite(bound):
                raise ValueError(f"Invalid price bound: {bound!r}")
        if self.low < 0:
            raise ValueError(f"Price range cannot be negative: {self.low}")
        if self.low > self.high:
            raise ValueError(f"Invalid price range: low={self.low} > high={self.high}")

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2

    @classmethod
    def parse(cls, value: Any) -> "PriceRange":
        """
        Construit une fourchette depuis les formats rencontrés dans les payloads.

        Formats acceptés :
        - "$40 - $60", "40-60", "$1,200 - $1,500"
        - [40, 60] ou (40, 60)
        - {"min": 40, "max": 60} (ou "low" / "high")
        - un nombre seul (fourchette dégénérée)

        Raises:
            ValueError: Si aucune borne exploitable n'est trouvée
        """
        if isinstance(value, PriceRange):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Cannot parse price range from {value!r}")
        if isinstance(value, (int, float)):
            return cls(float(value), float(value))
        if isinstance(value, Mapping):
            low = value.get("min", value.get("low"))
            high = value.get("max", value.get("high", low))
            if low is None:
                raise ValueError(f"Cannot parse price range from {value!r}")
            return cls(float(low), float(high))
        if isinstance(value, (list, tuple)):
            if not value:
                raise ValueError("Cannot parse price range from an empty sequence")
            bounds = [float(v) for v in value[:2]]
            return cls(bounds[0], bounds[-1])
        if isinstance(value, str):
            numbers = _NUMBER_PATTERN.findall(value.replace(",", ""))
            if not numbers:
                raise ValueError(f"Cannot parse price range from {value!r}")
            bounds = [float(n) for n in numbers[:2]]
            return cls(min(bounds), max(bounds))
        raise ValueError(f"Cannot parse price range from {value!r}")

    def to_dict(self) -> Dict[str, float]:
        return {"min": round_currency(self.low), "max": round_currency(self.high)}

    def __str__(self) -> str:
        return f"${round_currency(self.low):g} - ${round_currency(self.high):g}"


@dataclass(frozen=True)
class PriceObservation:
    """Prix de base relevé chez un concurrent."""

    business_id: Optional[str]
    name: str
    location: str
    base_price: float
    pricing_strategy: PricingStrategy = PricingStrategy.UNKNOWN

    def __post_init__(self):
        if not math.isfinite(self.base_price) or self.base_price < 0:
            raise ValueError(f"Invalid base price for {self.name}: {self.base_price}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "business_id": self.business_id,
            "name": self.name,
            "location": self.location,
            "base_price": round_currency(self.base_price),
            "pricing_strategy": self.pricing_strategy.value,
        }


@dataclass(frozen=True)
class BusinessContext:
    """Contexte de l'entreprise analysée (comparaison personnalisée)."""

    business_id: Optional[str]
    business_name: Optional[str] = None
    business_rating: Optional[float] = None
    business_reviews: Optional[int] = None
    base_price: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "business_id": self.business_id,
            "business_name": self.business_name,
            "business_rating": self.business_rating,
            "business_reviews": self.business_reviews,
            "base_price": round_currency(self.base_price) if self.base_price is not None else None,
        }


@dataclass(frozen=True)
class MarketAverage:
    """
    Statistiques agrégées du marché.

    Construit uniquement par MarketAggregator ; invariant
    price_range.low <= average_price <= price_range.high.
    """

    average_price: float
    price_range: PriceRange
    market_position: MarketPosition
    sample_size: int
    median_price: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average_price": round_currency(self.average_price),
            "price_range": self.price_range.to_dict(),
            "market_position": self.market_position.value,
            "sample_size": self.sample_size,
            "median_price": round_currency(self.median_price),
        }


@dataclass(frozen=True)
class MarketInsights:
    """Repères marché : meilleur rapport prix, option premium, niveau du marché."""

    best_value: str
    premium_option: str
    market_tier: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "best_value": self.best_value,
            "premium_option": self.premium_option,
            "market_tier": self.market_tier,
        }


@dataclass(frozen=True)
class MarketComparison:
    """Payload normalisé de la source de comparaison marché."""

    category: str
    location: str
    observations: List[PriceObservation] = field(default_factory=list)
    business_context: Optional[BusinessContext] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "location": self.location,
            "observations": [o.to_dict() for o in self.observations],
            "business_context": self.business_context.to_dict() if self.business_context else None,
        }


@dataclass(frozen=True)
class PriceHistoryPoint:
    """Échantillon d'historique : prix, multiplicateur de demande, revenu."""

    date: date
    price: float
    demand_multiplier: float
    revenue: float

    def __post_init__(self):
        if self.demand_multiplier < 0:
            raise ValueError(f"demand_multiplier must be >= 0, got {self.demand_multiplier}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "price": round_currency(self.price),
            "demand_multiplier": self.demand_multiplier,
            "revenue": round_currency(self.revenue),
        }


@dataclass(frozen=True)
class PriceTrend:
    """Tendances dérivées d'un historique de prix."""

    price_trend: Trend
    revenue_trend: Trend
    price_volatility: float
    optimal_price_range: PriceRange
    sample_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price_trend": self.price_trend.value,
            "revenue_trend": self.revenue_trend.value,
            "price_volatility": round_currency(self.price_volatility),
            "optimal_price_range": self.optimal_price_range.to_dict(),
            "sample_size": self.sample_size,
        }


@dataclass(frozen=True)
class CurrentPricing:
    """Tarifs actuels de l'entreprise, par ligne de service (ordre conservé)."""

    business_id: str
    services: Dict[str, PriceRange] = field(default_factory=dict)
    business_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "business_id": self.business_id,
            "business_name": self.business_name,
            "services": {name: rng.to_dict() for name, rng in self.services.items()},
        }


@dataclass(frozen=True)
class PositionResult:
    """Résultat de classification d'un prix."""

    indicator: PositionIndicator
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"indicator": self.indicator.value, "label": self.label}


@dataclass(frozen=True)
class ServiceRecommendation:
    """Recommandation de prix pour une ligne de service."""

    service_name: str
    current_price_range: PriceRange
    recommended_price_range: PriceRange
    pricing_strategy: PricingStrategy
    reasoning: str
    rule: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service_name": self.service_name,
            "current_price_range": self.current_price_range.to_dict(),
            "recommended_price_range": self.recommended_price_range.to_dict(),
            "pricing_strategy": self.pricing_strategy.value,
            "reasoning": self.reasoning,
            "rule": self.rule,
        }


@dataclass(frozen=True)
class RevenueOptimization:
    estimated_revenue_increase_pct: float
    implementation_timeline: str
    key_strategies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "estimated_revenue_increase_pct": self.estimated_revenue_increase_pct,
            "implementation_timeline": self.implementation_timeline,
            "key_strategies": list(self.key_strategies),
        }


@dataclass(frozen=True)
class CompetitivePositioning:
    target_position: PricingStrategy
    price_advantage: str
    value_proposition: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_position": self.target_position.value,
            "price_advantage": self.price_advantage,
            "value_proposition": self.value_proposition,
        }


@dataclass(frozen=True)
class PricingAnalysisResult:
    """Analyse complète : recommandations, optimisation du revenu, positionnement."""

    service_recommendations: List[ServiceRecommendation]
    revenue_optimization: RevenueOptimization
    competitive_positioning: CompetitivePositioning

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service_recommendations": [r.to_dict() for r in self.service_recommendations],
            "revenue_optimization": self.revenue_optimization.to_dict(),
            "competitive_positioning": self.competitive_positioning.to_dict(),
        }


@dataclass(frozen=True)
class DynamicPricingConfig:
    """
    Politique de pricing dynamique d'une entreprise.

    Les valeurs par défaut reprennent celles du tableau de bord :
    désactivé, aucun ajustement, multiplicateur 1.0, bornes 0 - 1000.
    """

    enabled: bool = False
    base_price_adjustment_pct: float = 0.0
    demand_multiplier: float = 1.0
    seasonal_adjustments: Dict[str, float] = field(default_factory=dict)
    competitor_tracking: bool = True
    auto_adjust: bool = False
    min_price: float = 0.0
    max_price: float = 1000.0
    update_frequency: UpdateFrequency = UpdateFrequency.DAILY

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DynamicPricingConfig":
        """
        Construit une configuration depuis un dict JSON.

        Accepte `base_price_adjustment` comme alias de `base_price_adjustment_pct`.

        Raises:
            ValueError: Si un champ n'a pas le bon type ou une valeur inconnue
        """
        defaults = cls()
        adjustment = data.get(
            "base_price_adjustment_pct",
            data.get("base_price_adjustment", defaults.base_price_adjustment_pct),
        )
        seasonal = data.get("seasonal_adjustments") or {}
        if not isinstance(seasonal, Mapping):
            raise ValueError(f"seasonal_adjustments must be a mapping, got {type(seasonal).__name__}")

        return cls(
            enabled=_bool_field(data, "enabled", defaults.enabled),
            base_price_adjustment_pct=_float_field("base_price_adjustment_pct", adjustment),
            demand_multiplier=_float_field(
                "demand_multiplier", data.get("demand_multiplier", defaults.demand_multiplier)
            ),
            seasonal_adjustments={
                str(k): _float_field(f"seasonal_adjustments.{k}", v) for k, v in seasonal.items()
            },
            competitor_tracking=_bool_field(data, "competitor_tracking", defaults.competitor_tracking),
            auto_adjust=_bool_field(data, "auto_adjust", defaults.auto_adjust),
            min_price=_float_field("min_price", data.get("min_price", defaults.min_price)),
            max_price=_float_field("max_price", data.get("max_price", defaults.max_price)),
            update_frequency=UpdateFrequency(
                data.get("update_frequency", defaults.update_frequency.value)
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "base_price_adjustment_pct": self.base_price_adjustment_pct,
            "demand_multiplier": self.demand_multiplier,
            "seasonal_adjustments": dict(self.seasonal_adjustments),
            "competitor_tracking": self.competitor_tracking,
            "auto_adjust": self.auto_adjust,
            "min_price": round_currency(self.min_price),
            "max_price": round_currency(self.max_price),
            "update_frequency": self.update_frequency.value,
        }


@dataclass(frozen=True)
class ConfigValidationResult:
    """Configuration validée (éventuellement clampée) et avertissements associés."""

    config: DynamicPricingConfig
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"config": self.config.to_dict(), "warnings": list(self.warnings)}


@dataclass
class MergedAnalysis:
    """
    Vue fusionnée produite par l'orchestrateur.

    Les sections absentes valent None et sont listées dans `missing_sections` ;
    `failures` indique, par source ou section, le type et le message d'erreur.
    """

    business_id: str
    category: str
    location: str
    current_pricing: Optional[CurrentPricing] = None
    analysis: Optional[PricingAnalysisResult] = None
    price_trend: Optional[PriceTrend] = None
    price_history: Optional[List[PriceHistoryPoint]] = None
    market_average: Optional[MarketAverage] = None
    market_insights: Optional[MarketInsights] = None
    market_comparison: Optional[MarketComparison] = None
    missing_sections: List[str] = field(default_factory=list)
    failures: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @property
    def service_recommendations(self) -> Optional[List[ServiceRecommendation]]:
        return self.analysis.service_recommendations if self.analysis else None

    def to_dict(self) -> Dict[str, Any]:
        def _section(value):
            return value.to_dict() if value is not None else None

        return {
            "business_id": self.business_id,
            "category": self.category,
            "location": self.location,
            "current_pricing": _section(self.current_pricing),
            "pricing_analysis": _section(self.analysis),
            "price_trend": _section(self.price_trend),
            "price_history": (
                [p.to_dict() for p in self.price_history]
                if self.price_history is not None else None
            ),
            "market_average": _section(self.market_average),
            "market_insights": _section(self.market_insights),
            "market_comparison": _section(self.market_comparison),
            "missing_sections": list(self.missing_sections),
            "failures": {k: dict(v) for k, v in sorted(self.failures.items())},
        }
