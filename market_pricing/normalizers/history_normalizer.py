"""
Normaliseur de l'historique prix / demande / revenu.
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pytz
from dateutil import parser as date_parser

from ..models.entities import PriceHistoryPoint

logger = logging.getLogger(__name__)


class HistoryNormalizer:
    """
    Normalise une réponse d'historique de prix vers une liste de PriceHistoryPoint.

    Format attendu :
    {
        'price_history': [
            {'date': '2024-05-01', 'price': 45.0, 'demand': 1.2, 'revenue': 540.0},
            ...
        ]
    }

    - `demand_multiplier` est accepté à la place de `demand`,
    - les horodatages avec fuseau sont ramenés au jour calendaire de `timezone`,
    - les entrées invalides sont ignorées avec un avertissement,
    - le résultat est trié par date.
    """

    def __init__(self, timezone: str = "UTC"):
        self.timezone = pytz.timezone(timezone)

    def normalize(self, raw_response: Any) -> List[PriceHistoryPoint]:
        """
        Args:
            raw_response: Payload brut (dict avec 'price_history' ou liste directe)

        Returns:
            Liste de PriceHistoryPoint triée par date

        Raises:
            ValueError: Si le payload n'a pas la structure attendue
        """
        if isinstance(raw_response, dict):
            entries = raw_response.get("price_history", raw_response.get("history", []))
        else:
            entries = raw_response

        if not isinstance(entries, list):
            raise ValueError("'price_history' must be a list")

        points: List[PriceHistoryPoint] = []
        for entry in entries:
            point = self._normalize_entry(entry)
            if point is not None:
                points.append(point)

        points.sort(key=lambda p: p.date)
        logger.debug(f"Normalized {len(points)}/{len(entries)} price history entries")
        return points

    def _normalize_entry(self, entry: Any) -> Optional[PriceHistoryPoint]:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping non-object history entry: {entry!r}")
            return None

        day = self._parse_date(entry.get("date"))
        price = self._parse_float(entry.get("price"))
        demand = self._parse_float(entry.get("demand_multiplier", entry.get("demand")))
        revenue = self._parse_float(entry.get("revenue"))

        if day is None or price is None or price < 0:
            logger.warning(f"Skipping invalid history entry: {entry}")
            return None

        if demand is None or demand < 0:
            logger.warning(f"Invalid demand multiplier in history entry, skipping: {entry}")
            return None

        if revenue is None:
            # Revenu absent : estimation prix x demande
            revenue = price * demand

        return PriceHistoryPoint(
            date=day,
            price=price,
            demand_multiplier=demand,
            revenue=revenue,
        )

    def _parse_date(self, value: Any) -> Optional[date]:
        if value is None:
            return None
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            return value
        else:
            try:
                parsed = date_parser.isoparse(str(value))
            except (ValueError, OverflowError):
                try:
                    parsed = date_parser.parse(str(value))
                except (ValueError, OverflowError):
                    return None

        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(self.timezone)
        return parsed.date()

    def _parse_float(self, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            result = float(value)
        except (TypeError, ValueError):
            return None
        return result if math.isfinite(result) else None
