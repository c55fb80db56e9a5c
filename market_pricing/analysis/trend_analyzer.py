"""
Analyseur de tendances d'historique de prix.

Dérive un PriceTrend depuis une séquence de PriceHistoryPoint :
- tendance prix / revenu par pente des moindres carrés,
- volatilité = écart-type (population) des prix,
- fourchette optimale = prix des points dont le revenu est dans le quartile supérieur.
"""

import logging
from datetime import timedelta
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from ..config.engine_config import EngineConfig, get_default_engine_config
from ..errors import InsufficientDataError
from ..models.entities import PriceHistoryPoint, PriceRange, PriceTrend, Trend, round_currency

logger = logging.getLogger(__name__)

MIN_POINTS = 2


class TrendAnalyzer:
    """
    Analyseur de tendances pour l'historique prix / demande / revenu d'une entreprise.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or get_default_engine_config()

    def window(
        self,
        points: Sequence[PriceHistoryPoint],
        days: Optional[int] = None
    ) -> List[PriceHistoryPoint]:
        """
        Garde la fenêtre glissante des `days` derniers jours, relative au point le plus récent.

        La référence est la dernière date de l'historique (et non la date du jour)
        afin que le résultat ne dépende que des données.
        """
        if not points:
            return []

        days = days if days is not None else self.config.history_window_days
        ordered = sorted(points, key=lambda p: p.date)
        cutoff = ordered[-1].date - timedelta(days=days - 1)
        return [p for p in ordered if p.date >= cutoff]

    def analyze(self, points: Sequence[PriceHistoryPoint]) -> PriceTrend:
        """
        Calcule les tendances d'un historique.

        Args:
            points: Historique (ordre quelconque)

        Returns:
            PriceTrend

        Raises:
            InsufficientDataError: Si moins de 2 points sont disponibles
        """
        if len(points) < MIN_POINTS:
            raise InsufficientDataError(
                f"At least {MIN_POINTS} price history points are required, got {len(points)}"
            )

        df = pd.DataFrame(
            {
                "date": [p.date for p in points],
                "price": [float(p.price) for p in points],
                "revenue": [float(p.revenue) for p in points],
            }
        )
        df = df.sort_values("date", kind="mergesort").reset_index(drop=True)

        price_trend = self._direction(df["price"])
        revenue_trend = self._direction(df["revenue"])
        volatility = round_currency(float(np.std(df["price"].to_numpy())))

        # Points à revenu élevé : quartile supérieur
        threshold = df["revenue"].quantile(0.75)
        best = df[df["revenue"] >= threshold]["price"]
        optimal = PriceRange(round_currency(best.min()), round_currency(best.max()))

        trend = PriceTrend(
            price_trend=price_trend,
            revenue_trend=revenue_trend,
            price_volatility=volatility,
            optimal_price_range=optimal,
            sample_size=len(df),
        )

        logger.info(
            f"Analyzed {len(df)} history points: price {price_trend.value}, "
            f"revenue {revenue_trend.value}, volatility={volatility}"
        )
        return trend

    @staticmethod
    def _direction(series: pd.Series) -> Trend:
        """Pente strictement positive -> increasing ; plate ou négative -> decreasing."""
        x = np.arange(len(series), dtype=float)
        slope = np.polyfit(x, series.to_numpy(dtype=float), 1)[0]
        # Bruit numérique de polyfit sur une série constante
        if slope > 1e-9:
            return Trend.INCREASING
        return Trend.DECREASING
