"""
Normaliseur des payloads de comparaison marché (prix concurrents).
"""

import logging
import math
from typing import Any, Dict, List, Optional

from ..models.entities import (
    BusinessContext,
    MarketComparison,
    PriceObservation,
    PricingStrategy,
)

logger = logging.getLogger(__name__)


class MarketNormalizer:
    """
    Normalise une réponse de comparaison marché vers MarketComparison.

    Format attendu :
    {
        'comparison_data': [
            {
                'business_id': 12,
                'name': 'Studio Nova',
                'location': 'Austin, TX',
                'current_pricing': {'base_price': 45.0},
                'pricing_strategy': 'competitive'
            },
            ...
        ],
        'business_context': {           # optionnel (analyse personnalisée)
            'business_name': 'My Salon',
            'business_rating': 4.7,
            'business_reviews': 120,
            'base_price': 55.0
        }
    }

    Les entrées sans prix exploitable sont ignorées avec un avertissement.
    Le bloc 'market_average' éventuellement présent est ignoré : les
    statistiques sont recalculées par MarketAggregator.
    """

    def normalize(
        self,
        raw_response: Dict[str, Any],
        category: str,
        location: str,
        business_id: Optional[str] = None
    ) -> MarketComparison:
        """
        Args:
            raw_response: Payload brut de la source
            category: Catégorie demandée
            location: Localisation demandée
            business_id: Entreprise pour l'analyse personnalisée (optionnel)

        Returns:
            MarketComparison

        Raises:
            ValueError: Si le payload n'a pas la structure attendue
        """
        if not isinstance(raw_response, dict):
            raise ValueError(f"Market comparison payload must be an object, got {type(raw_response).__name__}")

        items = raw_response.get("comparison_data", raw_response.get("competitors", []))
        if not isinstance(items, list):
            raise ValueError("'comparison_data' must be a list")

        observations: List[PriceObservation] = []
        for item in items:
            observation = self._normalize_observation(item, location)
            if observation is not None:
                observations.append(observation)

        context = self._normalize_context(
            raw_response.get("business_context"), business_id, observations
        )

        logger.debug(
            f"Normalized {len(observations)}/{len(items)} competitor prices "
            f"for {category} in {location}"
        )

        return MarketComparison(
            category=category,
            location=location,
            observations=observations,
            business_context=context,
        )

    def _normalize_observation(self, item: Any, default_location: str) -> Optional[PriceObservation]:
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-object competitor entry: {item!r}")
            return None

        pricing = item.get("current_pricing")
        if not isinstance(pricing, dict):
            pricing = {}
        price = self._extract_price(pricing, ["base_price", "price"])
        if price is None:
            price = self._extract_price(item, ["base_price", "price"])

        if price is None or not math.isfinite(price) or price < 0:
            logger.warning(f"Skipping competitor without valid base price: {item.get('name')}")
            return None

        business_id = item.get("business_id", item.get("id"))
        return PriceObservation(
            business_id=str(business_id) if business_id is not None else None,
            name=str(item.get("name") or "Unknown business"),
            location=str(item.get("location") or default_location),
            base_price=price,
            pricing_strategy=PricingStrategy.parse(item.get("pricing_strategy")),
        )

    def _normalize_context(
        self,
        raw_context: Any,
        business_id: Optional[str],
        observations: List[PriceObservation]
    ) -> Optional[BusinessContext]:
        if not isinstance(raw_context, dict):
            if business_id is None:
                return None
            raw_context = {}

        base_price = self._extract_price(raw_context, ["base_price", "current_price"])
        if base_price is None and business_id is not None:
            # L'entreprise peut figurer parmi les prix comparés
            for observation in observations:
                if observation.business_id == str(business_id):
                    base_price = observation.base_price
                    break

        return BusinessContext(
            business_id=str(business_id) if business_id is not None else None,
            business_name=raw_context.get("business_name"),
            business_rating=self._extract_price(raw_context, ["business_rating"]),
            business_reviews=self._parse_int(raw_context.get("business_reviews")),
            base_price=base_price,
        )

    # Helper methods

    def _extract_price(self, data: Dict[str, Any], keys: List[str]) -> Optional[float]:
        """Extrait un prix depuis plusieurs clés possibles."""
        for key in keys:
            value = data.get(key)
            if value is not None and not isinstance(value, bool):
                try:
                    return float(value)
                except (ValueError, TypeError):
                    continue
        return None

    def _parse_int(self, value: Any) -> Optional[int]:
        """Parse un int."""
        if value is None or value == '':
            return None
        try:
            return int(float(str(value).strip()))
        except (ValueError, TypeError):
            return None
