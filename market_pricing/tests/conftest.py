"""
Fixtures partagées pour les tests.
"""

import pytest
from unittest.mock import Mock
from datetime import date, timedelta
from typing import Dict, Any, List

from market_pricing.config.settings import Settings
from market_pricing.models.entities import (
    MarketPosition,
    MarketAverage,
    PriceHistoryPoint,
    PriceObservation,
    PriceRange,
)


# Settings de test (pas de lecture d'environnement)
@pytest.fixture
def test_settings():
    """Settings de test."""
    return Settings(
        api_base_url="http://pricing.test/api",
        source_timeout=1.0,
        max_retries=3,
        retry_backoff_factor=2.0,
        history_days=30,
        supabase_url="https://mock.supabase.co",
        supabase_key="mock_key",
        default_timezone="UTC",
        log_level="DEBUG",
    )

# Mock Supabase client
@pytest.fixture
def mock_supabase_client():
    """Mock du client Supabase."""
    client = Mock()
    client.table.return_value = Mock()
    return client

# Sample data fixtures
@pytest.fixture
def sample_observations() -> List[PriceObservation]:
    """Trois concurrents à 40, 60 et 80."""
    return [
        PriceObservation(business_id="1", name="Budget Cuts", location="Austin, TX", base_price=40.0),
        PriceObservation(business_id="2", name="Studio Nova", location="Austin, TX", base_price=60.0),
        PriceObservation(business_id="3", name="Maison Luxe", location="Austin, TX", base_price=80.0),
    ]

@pytest.fixture
def market_average_60() -> MarketAverage:
    """Marché de moyenne 60 sur la fourchette 40 - 80."""
    return MarketAverage(
        average_price=60.0,
        price_range=PriceRange(40.0, 80.0),
        market_position=MarketPosition.MARKET_WIDE,
        sample_size=3,
        median_price=60.0,
    )

def make_history(prices: List[float], revenues: List[float], start: date = date(2024, 5, 1)) -> List[PriceHistoryPoint]:
    """Historique quotidien à partir de listes de prix et de revenus."""
    return [
        PriceHistoryPoint(
            date=start + timedelta(days=i),
            price=price,
            demand_multiplier=1.0,
            revenue=revenue,
        )
        for i, (price, revenue) in enumerate(zip(prices, revenues))
    ]

@pytest.fixture
def history_factory():
    """Fabrique d'historiques (prix, revenus)."""
    return make_history

@pytest.fixture
def increasing_history() -> List[PriceHistoryPoint]:
    """Historique à revenu croissant."""
    return make_history([50, 52, 54, 56], [500, 550, 600, 650])

@pytest.fixture
def decreasing_history() -> List[PriceHistoryPoint]:
    """Historique à revenu décroissant."""
    return make_history([56, 54, 52, 50], [650, 600, 550, 500])

@pytest.fixture
def sample_current_pricing_response() -> Dict[str, Any]:
    """Réponse mockée de la source des tarifs actuels."""
    return {
        "business_id": "42",
        "business_name": "My Salon",
        "services": [
            {"service_name": "Haircut", "current_price_range": "$40 - $60"},
            {"service_name": "Coloring", "current_price_range": "$90 - $110"},
        ],
    }

@pytest.fixture
def sample_history_response() -> Dict[str, Any]:
    """Réponse mockée de la source d'historique."""
    return {
        "price_history": [
            {"date": "2024-05-01", "price": 50.0, "demand": 1.0, "revenue": 500.0},
            {"date": "2024-05-02", "price": 52.0, "demand": 1.1, "revenue": 550.0},
            {"date": "2024-05-03", "price": 54.0, "demand": 1.2, "revenue": 600.0},
        ]
    }

@pytest.fixture
def sample_comparison_response() -> Dict[str, Any]:
    """Réponse mockée de la source de comparaison marché."""
    return {
        "comparison_data": [
            {"business_id": 1, "name": "Budget Cuts", "current_pricing": {"base_price": 40.0}},
            {"business_id": 2, "name": "Studio Nova", "current_pricing": {"base_price": 60.0}},
            {"business_id": 3, "name": "Maison Luxe", "current_pricing": {"base_price": 80.0}},
        ],
        "business_context": {
            "business_name": "My Salon",
            "business_rating": 4.7,
            "business_reviews": 120,
            "base_price": 70.0,
        },
    }
