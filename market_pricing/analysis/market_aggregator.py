"""
Agrégation des prix concurrents en statistiques de marché.
"""

import logging
import statistics
from typing import Optional, Sequence

from ..config.engine_config import EngineConfig, get_default_engine_config
from ..errors import EmptyMarketError
from ..models.entities import (
    MarketAverage,
    MarketInsights,
    MarketPosition,
    PriceObservation,
    PriceRange,
    round_currency,
)
from .position_classifier import PositionClassifier

logger = logging.getLogger(__name__)

PREMIUM_MARKET = "premium market"
COMPETITIVE_MARKET = "competitive market"


class MarketAggregator:
    """
    Réduit un ensemble d'observations de prix en MarketAverage.

    Seul point de construction d'un MarketAverage : la moyenne est
    toujours comprise dans la fourchette [min, max] des observations.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        classifier: Optional[PositionClassifier] = None
    ):
        self.config = config or get_default_engine_config()
        self.classifier = classifier or PositionClassifier(self.config)

    def aggregate(
        self,
        observations: Sequence[PriceObservation],
        business_price: Optional[float] = None
    ) -> MarketAverage:
        """
        Calcule moyenne, fourchette et position de marché.

        Args:
            observations: Observations de prix (non vide)
            business_price: Prix de l'entreprise appelante, pour personnaliser
                la position (None = "market-wide")

        Returns:
            MarketAverage

        Raises:
            EmptyMarketError: Si aucune observation n'est fournie
            DivisionByZeroError: Si business_price est fourni et la moyenne est nulle
        """
        if not observations:
            raise EmptyMarketError("Insufficient market data: no comparable prices")

        prices = [o.base_price for o in observations]
        low, high = min(prices), max(prices)

        # L'arrondi ne doit pas faire sortir la moyenne de la fourchette
        average = min(max(round_currency(statistics.mean(prices)), low), high)

        if business_price is None:
            position = MarketPosition.MARKET_WIDE
        else:
            indicator = self.classifier.classify(business_price, average).indicator
            position = MarketPosition.from_indicator(indicator)

        market_average = MarketAverage(
            average_price=average,
            price_range=PriceRange(low, high),
            market_position=position,
            sample_size=len(prices),
            median_price=round_currency(statistics.median(prices)),
        )

        logger.info(
            f"Aggregated {len(prices)} competitor prices: avg={average}, "
            f"range={low}-{high}, position={position.value}"
        )
        return market_average

    def insights(
        self,
        observations: Sequence[PriceObservation],
        market_average: MarketAverage
    ) -> MarketInsights:
        """
        Repères lisibles : concurrent le moins cher, le plus cher, niveau du marché.

        En cas d'égalité, la première observation rencontrée l'emporte.
        """
        if not observations:
            raise EmptyMarketError("Insufficient market data: no comparable prices")

        cheapest = min(observations, key=lambda o: o.base_price)
        priciest = max(observations, key=lambda o: o.base_price)

        if market_average.average_price > self.config.premium_market_threshold:
            tier = PREMIUM_MARKET
        else:
            tier = COMPETITIVE_MARKET

        return MarketInsights(
            best_value=cheapest.name,
            premium_option=priciest.name,
            market_tier=tier,
        )
