"""
Normaliseur des tarifs actuels d'une entreprise (source authentifiée).
"""

import logging
from typing import Any, Dict, Iterable, Tuple

from ..models.entities import CurrentPricing, PriceRange

logger = logging.getLogger(__name__)


class PricingNormalizer:
    """
    Normalise la réponse d'analyse courante vers CurrentPricing.

    Formats supportés pour les lignes de service :
    - {'services': {'Haircut': '$40 - $60', ...}}
    - {'services': [{'service_name': 'Haircut', 'current_price_range': '$40-$60'}, ...]}
    - {'pricing_analysis': {'service_pricing': [...]}} (format du tableau de bord)

    Les fourchettes sont parsées par PriceRange.parse ; une ligne illisible
    est ignorée avec un avertissement. Un doublon de nom garde la première ligne.
    """

    def normalize(self, raw_response: Dict[str, Any], business_id: str) -> CurrentPricing:
        """
        Args:
            raw_response: Payload brut de la source
            business_id: Entreprise demandée

        Returns:
            CurrentPricing (services éventuellement vides)

        Raises:
            ValueError: Si le payload n'a pas la structure attendue
        """
        if not isinstance(raw_response, dict):
            raise ValueError(f"Current pricing payload must be an object, got {type(raw_response).__name__}")

        services: Dict[str, PriceRange] = {}
        for name, raw_range in self._iter_service_entries(raw_response):
            if name in services:
                logger.warning(f"Duplicate service '{name}' in current pricing, keeping first entry")
                continue
            try:
                services[name] = PriceRange.parse(raw_range)
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping service '{name}' with unreadable price range: {e}")

        business_name = raw_response.get("business_name")
        logger.debug(f"Normalized {len(services)} services for business {business_id}")

        return CurrentPricing(
            business_id=str(raw_response.get("business_id", business_id)),
            services=services,
            business_name=str(business_name) if business_name else None,
        )

    def _iter_service_entries(self, raw_response: Dict[str, Any]) -> Iterable[Tuple[str, Any]]:
        services = raw_response.get("services")
        if services is None:
            analysis = raw_response.get("pricing_analysis") or {}
            services = analysis.get("service_pricing", []) if isinstance(analysis, dict) else []

        if isinstance(services, dict):
            for name, raw_range in services.items():
                yield str(name), raw_range
            return

        if not isinstance(services, list):
            raise ValueError("'services' must be a mapping or a list")

        for entry in services:
            if not isinstance(entry, dict) or not entry.get("service_name"):
                logger.warning(f"Skipping service entry without name: {entry!r}")
                continue
            raw_range = entry.get(
                "current_price_range",
                entry.get("price_range", entry.get("price")),
            )
            yield str(entry["service_name"]), raw_range
