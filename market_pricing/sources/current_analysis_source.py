"""
Source authentifiée des tarifs actuels d'une entreprise.
"""

import logging
from typing import Any, Optional

import aiohttp

from ..errors import AuthRequiredError
from ..models.entities import CurrentPricing
from ..normalizers.pricing_normalizer import PricingNormalizer
from .base_source import BaseSource

logger = logging.getLogger(__name__)


class CurrentAnalysisSource(BaseSource):
    """
    Récupère les tarifs actuels par ligne de service.

    Nécessite un jeton d'identité de l'appelant (Bearer). Sans jeton,
    AuthRequiredError est levée sans effectuer de requête.
    """

    def __init__(self, normalizer: Optional[PricingNormalizer] = None, **kwargs):
        super().__init__(source_name="current_analysis", **kwargs)
        self.normalizer = normalizer or PricingNormalizer()

    async def fetch(self, business_id: str, token: Optional[str] = None) -> CurrentPricing:
        if not token:
            raise AuthRequiredError("Authentication required to fetch current pricing analysis")
        return await super().fetch(business_id=business_id, token=token)

    async def _fetch_data(self, session: aiohttp.ClientSession, business_id: str, token: str) -> Any:
        return await self._make_request(
            session,
            "GET",
            f"pricing/analysis/{business_id}",
            headers={"Authorization": f"Bearer {token}"},
        )

    def _normalize(self, raw_response: Any, business_id: str, token: str) -> CurrentPricing:
        return self.normalizer.normalize(raw_response, business_id=str(business_id))
