"""
Orchestration d'une analyse de prix complète.

Ce module est responsable de :
- interroger en parallèle les trois sources (tarifs actuels, historique, marché),
- appliquer les composants d'analyse sur ce qui a été obtenu,
- fusionner le tout en une vue unique, même partielle,
- valider puis transmettre les configurations de pricing dynamique au ConfigStore.

Une analyse ne modifie aucun état : la relancer avec les mêmes entrées
donne le même résultat.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .analysis.config_validator import ConfigValidator
from .analysis.market_aggregator import MarketAggregator
from .analysis.position_classifier import PositionClassifier
from .analysis.recommendation_engine import RecommendationEngine
from .analysis.trend_analyzer import TrendAnalyzer
from .config.engine_config import EngineConfig, get_default_engine_config
from .config.settings import Settings
from .errors import AuthRequiredError, PartialDataError, PricingAnalysisError
from .interfaces.config_store import ConfigStore, SupabaseConfigStore
from .models.entities import (
    ConfigValidationResult,
    CurrentPricing,
    DynamicPricingConfig,
    MarketAverage,
    MergedAnalysis,
    PriceTrend,
    PricingAnalysisResult,
)
from .sources.current_analysis_source import CurrentAnalysisSource
from .sources.market_comparison_source import MarketComparisonSource
from .sources.price_history_source import PriceHistorySource

logger = logging.getLogger(__name__)

CURRENT_ANALYSIS = "current_analysis"
PRICE_HISTORY = "price_history"
MARKET_COMPARISON = "market_comparison"
SOURCE_NAMES = (CURRENT_ANALYSIS, PRICE_HISTORY, MARKET_COMPARISON)

# Clé de sortie (to_dict) -> attribut de MergedAnalysis
SECTIONS = (
    ("current_pricing", "current_pricing"),
    ("pricing_analysis", "analysis"),
    ("price_trend", "price_trend"),
    ("price_history", "price_history"),
    ("market_average", "market_average"),
    ("market_insights", "market_insights"),
    ("market_comparison", "market_comparison"),
)


def _failure(error: BaseException) -> Dict[str, str]:
    return {"type": type(error).__name__, "message": str(error)}


class PricingAnalysisOrchestrator:
    """
    Point d'entrée du moteur pour la couche de présentation.

    Expose `analyze`, `recommend` et `validate`, ainsi que
    `apply_dynamic_pricing` / `disable_dynamic_pricing` pour la
    persistance des configurations.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine_config: Optional[EngineConfig] = None,
        current_source: Optional[CurrentAnalysisSource] = None,
        history_source: Optional[PriceHistorySource] = None,
        market_source: Optional[MarketComparisonSource] = None,
        config_store: Optional[ConfigStore] = None
    ):
        """
        Initialise l'orchestrateur.

        Args:
            settings: Configuration globale (si None, charge depuis env)
            engine_config: Constantes du moteur (si None, valeurs par défaut)
            current_source: Source des tarifs actuels
            history_source: Source de l'historique
            market_source: Source de comparaison marché
            config_store: Stockage des configurations (si None, Supabase à la demande)
        """
        self.settings = settings or Settings.from_env()
        self.engine_config = engine_config or get_default_engine_config()

        self.current_source = current_source or CurrentAnalysisSource(settings=self.settings)
        self.history_source = history_source or PriceHistorySource(settings=self.settings)
        self.market_source = market_source or MarketComparisonSource(settings=self.settings)
        self._config_store = config_store

        classifier = PositionClassifier(self.engine_config)
        self.aggregator = MarketAggregator(self.engine_config, classifier)
        self.recommendation_engine = RecommendationEngine(self.engine_config, classifier)
        self.trend_analyzer = TrendAnalyzer(self.engine_config)
        self.validator = ConfigValidator(self.engine_config)

        logger.info("Initialized PricingAnalysisOrchestrator")

    @property
    def config_store(self) -> ConfigStore:
        if self._config_store is None:
            self._config_store = SupabaseConfigStore(settings=self.settings)
        return self._config_store

    async def analyze(
        self,
        business_id: str,
        category: str,
        location: str,
        token: Optional[str]
    ) -> MergedAnalysis:
        """
        Analyse complète d'une entreprise sur son marché.

        Les trois sources sont interrogées en parallèle, chacune bornée par
        `settings.source_timeout`. Une source en échec rend seulement ses
        sections absentes.

        Args:
            business_id: Identifiant de l'entreprise
            category: Catégorie d'activité
            location: Localisation du marché
            token: Jeton d'identité de l'appelant

        Returns:
            MergedAnalysis (sections absentes listées dans missing_sections)

        Raises:
            AuthRequiredError: Jeton absent ou refusé par une source
            PartialDataError: Les trois sources ont échoué
        """
        if not token:
            raise AuthRequiredError("Authentication required to analyze pricing")

        timeout = self.settings.source_timeout
        outcomes = await asyncio.gather(
            asyncio.wait_for(self.current_source.fetch(business_id, token=token), timeout),
            asyncio.wait_for(self.history_source.fetch(business_id), timeout),
            asyncio.wait_for(
                self.market_source.fetch(category, location, business_id=business_id),
                timeout,
            ),
            return_exceptions=True,
        )
        results = dict(zip(SOURCE_NAMES, outcomes))

        for name, outcome in results.items():
            if isinstance(outcome, AuthRequiredError):
                logger.error(f"Authentication failed on {name} for business {business_id}")
                raise outcome

        merged = MergedAnalysis(business_id=str(business_id), category=category, location=location)

        for name, outcome in results.items():
            if isinstance(outcome, asyncio.TimeoutError):
                merged.failures[name] = {
                    "type": type(outcome).__name__,
                    "message": f"{name} timed out after {timeout}s",
                }
                logger.warning(f"Source {name} timed out after {timeout}s for business {business_id}")
            elif isinstance(outcome, BaseException):
                merged.failures[name] = _failure(outcome)
                logger.warning(
                    f"Source {name} failed for business {business_id}: "
                    f"{type(outcome).__name__}: {outcome}"
                )

        if len(merged.failures) == len(SOURCE_NAMES):
            raise PartialDataError(dict(merged.failures))

        self._merge(merged, results)
        merged.missing_sections = [
            key for key, attribute in SECTIONS if getattr(merged, attribute) is None
        ]

        logger.info(
            f"Analysis for business {business_id} completed "
            f"({len(merged.missing_sections)} missing sections)"
        )
        return merged

    def _merge(self, merged: MergedAnalysis, results: Mapping[str, Any]) -> None:
        """Fusion best-effort des sources obtenues dans `merged`."""
        current = results[CURRENT_ANALYSIS]
        history = results[PRICE_HISTORY]
        market = results[MARKET_COMPARISON]

        if not isinstance(current, BaseException):
            merged.current_pricing = current

        if not isinstance(history, BaseException):
            merged.price_history = history
            merged.price_trend = self._section(
                merged, "price_trend",
                lambda: self.trend_analyzer.analyze(self.trend_analyzer.window(history)),
            )

        if not isinstance(market, BaseException):
            merged.market_comparison = market
            context = market.business_context
            business_price = context.base_price if context is not None else None

            merged.market_average = self._section(
                merged, "market_average",
                lambda: self.aggregator.aggregate(market.observations, business_price),
            )
            if merged.market_average is not None:
                merged.market_insights = self._section(
                    merged, "market_insights",
                    lambda: self.aggregator.insights(market.observations, merged.market_average),
                )

        if merged.current_pricing is not None and merged.market_average is not None:
            merged.analysis = self._section(
                merged, "pricing_analysis",
                lambda: self.recommendation_engine.recommend(
                    merged.category,
                    merged.current_pricing,
                    merged.market_average,
                    merged.price_trend,
                ),
            )

    @staticmethod
    def _section(merged: MergedAnalysis, name: str, compute: Callable[[], Any]) -> Any:
        try:
            return compute()
        except PricingAnalysisError as e:
            merged.failures[name] = _failure(e)
            logger.warning(f"Section {name} unavailable: {type(e).__name__}: {e}")
            return None

    def recommend(
        self,
        category: str,
        current_pricing: Union[CurrentPricing, Mapping[str, Any]],
        market_average: MarketAverage,
        history: Optional[PriceTrend] = None
    ) -> PricingAnalysisResult:
        return self.recommendation_engine.recommend(category, current_pricing, market_average, history)

    def validate(self, config: Union[DynamicPricingConfig, Mapping[str, Any]]) -> ConfigValidationResult:
        if not isinstance(config, DynamicPricingConfig):
            config = DynamicPricingConfig.from_dict(config)
        return self.validator.validate(config)

    async def apply_dynamic_pricing(
        self,
        business_id: str,
        config: Union[DynamicPricingConfig, Mapping[str, Any]]
    ) -> ConfigValidationResult:
        """
        Valide une configuration puis la transmet au ConfigStore.

        Rien n'est écrit si la validation échoue.

        Raises:
            ConfigError: Configuration rejetée
        """
        result = self.validate(config)
        await self.config_store.save(business_id, result.config)

        if result.warnings:
            logger.warning(
                f"Dynamic pricing config for business {business_id} saved with "
                f"{len(result.warnings)} warnings"
            )
        return result

    async def disable_dynamic_pricing(self, business_id: str) -> DynamicPricingConfig:
        config = await self.config_store.disable(business_id)
        logger.info(f"Disabled dynamic pricing for business {business_id}")
        return config

