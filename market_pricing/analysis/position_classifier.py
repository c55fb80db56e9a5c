"""
Classification d'un prix par rapport à la moyenne du marché.
"""

import logging
from typing import Optional

from ..config.engine_config import EngineConfig, get_default_engine_config
from ..errors import DivisionByZeroError
from ..models.entities import PositionIndicator, PositionResult, PricingStrategy

logger = logging.getLogger(__name__)

ABOVE_LABEL = "Higher than average"
BELOW_LABEL = "Lower than average"
AVERAGE_LABEL = "Average price"

_STRATEGY_BY_INDICATOR = {
    PositionIndicator.ABOVE: PricingStrategy.PREMIUM,
    PositionIndicator.AVERAGE: PricingStrategy.COMPETITIVE,
    PositionIndicator.BELOW: PricingStrategy.BUDGET,
}


class PositionClassifier:
    """
    Seuillage déterministe : difference = (price - average) / average.

    - difference >  seuil -> above ("Higher than average")
    - difference < -seuil -> below ("Lower than average")
    - sinon               -> average ("Average price")

    Le seuil (±10 % par défaut) vient de EngineConfig.position_threshold.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or get_default_engine_config()

    def difference(self, price: float, average: float) -> float:
        """
        Écart relatif du prix à la moyenne.

        Raises:
            DivisionByZeroError: Si la moyenne est nulle (données amont invalides)
            ValueError: Si la moyenne est négative
        """
        if average == 0:
            raise DivisionByZeroError(
                f"Cannot classify price {price} against a zero market average"
            )
        if average < 0:
            raise ValueError(f"Market average cannot be negative: {average}")
        return (price - average) / average

    def classify(self, price: float, average: float) -> PositionResult:
        difference = self.difference(price, average)
        threshold = self.config.position_threshold

        if difference > threshold:
            result = PositionResult(PositionIndicator.ABOVE, ABOVE_LABEL)
        elif difference < -threshold:
            result = PositionResult(PositionIndicator.BELOW, BELOW_LABEL)
        else:
            result = PositionResult(PositionIndicator.AVERAGE, AVERAGE_LABEL)

        logger.debug(
            f"Classified price {price} vs average {average}: "
            f"difference={difference:.4f} -> {result.indicator.value}"
        )
        return result

    def strategy_for(self, price: float, average: float) -> PricingStrategy:
        """Stratégie de prix (premium / competitive / budget) d'un prix donné."""
        return _STRATEGY_BY_INDICATOR[self.classify(price, average).indicator]
