"""
Source (non authentifiée) de l'historique prix / demande / revenu.
"""

import logging
from typing import Any, List, Optional

import aiohttp

from ..models.entities import PriceHistoryPoint
from ..normalizers.history_normalizer import HistoryNormalizer
from .base_source import BaseSource

logger = logging.getLogger(__name__)


class PriceHistorySource(BaseSource):
    """Récupère l'historique de prix d'une entreprise sur `days` jours."""

    def __init__(self, normalizer: Optional[HistoryNormalizer] = None, **kwargs):
        super().__init__(source_name="price_history", **kwargs)
        self.normalizer = normalizer or HistoryNormalizer(timezone=self.settings.default_timezone)

    async def fetch(self, business_id: str, days: Optional[int] = None) -> List[PriceHistoryPoint]:
        days = days if days is not None else self.settings.history_days
        return await super().fetch(business_id=business_id, days=days)

    async def _fetch_data(self, session: aiohttp.ClientSession, business_id: str, days: int) -> Any:
        return await self._make_request(
            session,
            "GET",
            f"pricing/history/{business_id}",
            params={"days": days},
        )

    def _normalize(self, raw_response: Any, **kwargs) -> List[PriceHistoryPoint]:
        return self.normalizer.normalize(raw_response)
