"""
Source (non authentifiée) de comparaison des prix du marché.
"""

import logging
from typing import Any, Optional

import aiohttp

from ..models.entities import MarketComparison
from ..normalizers.market_normalizer import MarketNormalizer
from .base_source import BaseSource

logger = logging.getLogger(__name__)


class MarketComparisonSource(BaseSource):
    """
    Récupère les prix concurrents pour une catégorie et une localisation.

    `business_id` (optionnel) personnalise la réponse avec le contexte
    de l'entreprise analysée.
    """

    def __init__(self, normalizer: Optional[MarketNormalizer] = None, **kwargs):
        super().__init__(source_name="market_comparison", **kwargs)
        self.normalizer = normalizer or MarketNormalizer()

    async def fetch(
        self,
        category: str,
        location: str,
        business_id: Optional[str] = None
    ) -> MarketComparison:
        return await super().fetch(category=category, location=location, business_id=business_id)

    async def _fetch_data(
        self,
        session: aiohttp.ClientSession,
        category: str,
        location: str,
        business_id: Optional[str]
    ) -> Any:
        return await self._make_request(
            session,
            "GET",
            "pricing/comparison",
            params={"category": category, "location": location, "business_id": business_id},
        )

    def _normalize(
        self,
        raw_response: Any,
        category: str,
        location: str,
        business_id: Optional[str]
    ) -> MarketComparison:
        return self.normalizer.normalize(
            raw_response,
            category=category,
            location=location,
            business_id=business_id,
        )
