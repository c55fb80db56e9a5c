"""
Validation des configurations de pricing dynamique.

Validation pure (aucune I/O) appliquée avant toute écriture de configuration :
- rejet si min_price > max_price ou min_price < 0 (RangeInvalidError),
- rejet si demand_multiplier <= 0 (InvalidMultiplierError),
- rejet si auto_adjust est activé sans pricing dynamique (InconsistentAutoAdjustError),
- clamp de base_price_adjustment_pct (et des ajustements saisonniers)
  dans ±max_base_adjustment_pct, avec avertissement.
"""

import dataclasses
import logging
import math
from typing import Dict, List, Optional

from ..config.engine_config import EngineConfig, get_default_engine_config
from ..errors import (
    InconsistentAutoAdjustError,
    InvalidMultiplierError,
    RangeInvalidError,
)
from ..models.entities import ConfigValidationResult, DynamicPricingConfig

logger = logging.getLogger(__name__)


class ConfigValidator:
    """
    Valide une DynamicPricingConfig candidate.

    Les contrôles sont effectués dans l'ordre : fourchette de prix,
    multiplicateur de demande, cohérence auto-ajustement. Le premier
    contrôle en échec est levé.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or get_default_engine_config()

    def validate(self, candidate: DynamicPricingConfig) -> ConfigValidationResult:
        """
        Valide (et clampe si nécessaire) une configuration.

        Args:
            candidate: Configuration proposée

        Returns:
            ConfigValidationResult avec la configuration acceptée et les avertissements

        Raises:
            RangeInvalidError, InvalidMultiplierError, InconsistentAutoAdjustError
        """
        if not math.isfinite(candidate.min_price) or not math.isfinite(candidate.max_price):
            raise RangeInvalidError(
                f"price bounds must be finite, got {candidate.min_price} - {candidate.max_price}"
            )
        if candidate.min_price < 0:
            raise RangeInvalidError(f"min_price must be >= 0, got {candidate.min_price}")
        if candidate.min_price > candidate.max_price:
            raise RangeInvalidError(
                f"min_price ({candidate.min_price}) must not exceed max_price ({candidate.max_price})"
            )

        multiplier = candidate.demand_multiplier
        if not math.isfinite(multiplier) or multiplier <= 0:
            raise InvalidMultiplierError(f"demand_multiplier must be > 0, got {multiplier}")

        if candidate.auto_adjust and not candidate.enabled:
            raise InconsistentAutoAdjustError(
                "auto_adjust requires dynamic pricing to be enabled"
            )

        warnings: List[str] = []
        bound = self.config.max_base_adjustment_pct

        adjustment = self._clamp(candidate.base_price_adjustment_pct, bound)
        if adjustment != candidate.base_price_adjustment_pct:
            warnings.append(
                f"base_price_adjustment_pct {candidate.base_price_adjustment_pct} "
                f"clamped to {adjustment}"
            )

        seasonal: Dict[str, float] = {}
        for period, value in candidate.seasonal_adjustments.items():
            clamped = self._clamp(value, bound)
            if clamped != value:
                warnings.append(f"seasonal adjustment '{period}' {value} clamped to {clamped}")
            seasonal[period] = clamped

        if not warnings:
            return ConfigValidationResult(config=candidate)

        for warning in warnings:
            logger.warning(f"Dynamic pricing config: {warning}")

        accepted = dataclasses.replace(
            candidate,
            base_price_adjustment_pct=adjustment,
            seasonal_adjustments=seasonal,
        )
        return ConfigValidationResult(config=accepted, warnings=warnings)

    @staticmethod
    def _clamp(value: float, bound: float) -> float:
        if math.isnan(value):
            # Une valeur non numérique n'applique aucun ajustement
            return 0.0
        return max(-bound, min(bound, value))
