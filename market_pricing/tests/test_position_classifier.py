"""
Tests unitaires pour PositionClassifier.
"""

import pytest

from market_pricing.analysis.market_aggregator import MarketAggregator
from market_pricing.analysis.position_classifier import PositionClassifier
from market_pricing.config.engine_config import EngineConfig
from market_pricing.errors import DivisionByZeroError
from market_pricing.models.entities import MarketPosition, PositionIndicator, PriceRange, PricingStrategy

_ORDER = {PositionIndicator.BELOW: 0, PositionIndicator.AVERAGE: 1, PositionIndicator.ABOVE: 2}


class TestPositionClassifier:
    """Tests pour PositionClassifier."""

    def test_above_average(self):
        """Un prix 16,7 % au-dessus de la moyenne est 'above'."""
        result = PositionClassifier().classify(70.0, 60.0)
        assert result.indicator == PositionIndicator.ABOVE
        assert result.label == "Higher than average"

    def test_below_average(self):
        result = PositionClassifier().classify(45.0, 60.0)
        assert result.indicator == PositionIndicator.BELOW
        assert result.label == "Lower than average"

    def test_within_threshold_is_average(self):
        result = PositionClassifier().classify(55.0, 60.0)
        assert result.indicator == PositionIndicator.AVERAGE
        assert result.label == "Average price"

    def test_threshold_is_strict(self):
        """Un écart exactement égal au seuil reste 'average'."""
        classifier = PositionClassifier()
        assert classifier.classify(125.0, 100.0).indicator == PositionIndicator.ABOVE
        assert classifier.classify(100.0, 100.0).indicator == PositionIndicator.AVERAGE
        assert classifier.classify(75.0, 100.0).indicator == PositionIndicator.BELOW
        # 0.5 est exactement représentable : écart = 0.5 = seuil
        wide = PositionClassifier(EngineConfig(position_threshold=0.5))
        assert wide.classify(150.0, 100.0).indicator == PositionIndicator.AVERAGE
        assert wide.classify(50.0, 100.0).indicator == PositionIndicator.AVERAGE

    def test_zero_average_raises(self):
        with pytest.raises(DivisionByZeroError):
            PositionClassifier().classify(50.0, 0.0)

    def test_negative_average_raises(self):
        with pytest.raises(ValueError):
            PositionClassifier().classify(50.0, -10.0)

    def test_strategy_for(self):
        """Les stratégies suivent la position : premium / competitive / budget."""
        classifier = PositionClassifier()
        assert classifier.strategy_for(80.0, 60.0) == PricingStrategy.PREMIUM
        assert classifier.strategy_for(60.0, 60.0) == PricingStrategy.COMPETITIVE
        assert classifier.strategy_for(40.0, 60.0) == PricingStrategy.BUDGET

    def test_custom_threshold(self):
        classifier = PositionClassifier(EngineConfig(position_threshold=0.2))
        assert classifier.classify(70.0, 60.0).indicator == PositionIndicator.AVERAGE

    @pytest.mark.parametrize("price, expected", [
        (110.0, PositionIndicator.AVERAGE),
        (90.0, PositionIndicator.AVERAGE),
        (110.01, PositionIndicator.ABOVE),
        (89.99, PositionIndicator.BELOW),
    ])
    def test_default_threshold_boundaries(self, price, expected):
        """Avec le seuil de 10 %, 110 et 90 face à 100 restent 'average'."""
        assert PositionClassifier().classify(price, 100.0).indicator == expected

    @pytest.mark.parametrize("average", [60.0, 100.0, 37.5])
    def test_indicator_monotonic_in_price(self, average):
        """En montant le prix, l'indicateur ne redescend jamais."""
        classifier = PositionClassifier()
        prices = [average * step / 100 for step in range(0, 301)]
        ranks = [_ORDER[classifier.classify(price, average).indicator] for price in prices]

        assert ranks == sorted(ranks)
        assert ranks[0] == _ORDER[PositionIndicator.BELOW]
        assert ranks[-1] == _ORDER[PositionIndicator.ABOVE]


class TestPositionInMarket:
    """Scénario complet : agrégation du marché puis classement d'un prix."""

    def test_market_40_60_80(self, sample_observations):
        market = MarketAggregator().aggregate(sample_observations)
        assert market.average_price == 60.0
        assert market.price_range == PriceRange(40.0, 80.0)

        classifier = PositionClassifier()
        assert classifier.classify(70.0, market.average_price).indicator == PositionIndicator.ABOVE
        assert classifier.classify(55.0, market.average_price).indicator == PositionIndicator.AVERAGE

    def test_business_price_sets_market_position(self, sample_observations):
        aggregator = MarketAggregator()
        assert aggregator.aggregate(sample_observations, business_price=70.0).market_position == (
            MarketPosition.PREMIUM
        )
        assert aggregator.aggregate(sample_observations, business_price=55.0).market_position == (
            MarketPosition.COMPETITIVE
        )
