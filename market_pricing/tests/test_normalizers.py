"""
Tests unitaires pour les normaliseurs.
"""

from datetime import date

import pytest

from market_pricing.models.entities import PriceRange, PricingStrategy
from market_pricing.normalizers.history_normalizer import HistoryNormalizer
from market_pricing.normalizers.market_normalizer import MarketNormalizer
from market_pricing.normalizers.pricing_normalizer import PricingNormalizer


class TestPriceRangeParsing:
    """Tests pour PriceRange.parse."""

    @pytest.mark.parametrize("raw, expected", [
        ("$40 - $60", (40.0, 60.0)),
        ("40-60", (40.0, 60.0)),
        ("$1,200 - $1,500", (1200.0, 1500.0)),
        ("$60 - $40", (40.0, 60.0)),
        ("$45", (45.0, 45.0)),
        ([40, 60], (40.0, 60.0)),
        ({"min": 40, "max": 60}, (40.0, 60.0)),
        ({"low": 40.5, "high": 60}, (40.5, 60.0)),
        (50, (50.0, 50.0)),
    ])
    def test_parse(self, raw, expected):
        parsed = PriceRange.parse(raw)
        assert (parsed.low, parsed.high) == expected

    @pytest.mark.parametrize("raw", ["call us", None, True, [], {"max": 10}])
    def test_parse_invalid(self, raw):
        with pytest.raises(ValueError):
            PriceRange.parse(raw)

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            PriceRange(60.0, 40.0)
        with pytest.raises(ValueError):
            PriceRange(-1.0, 10.0)

    def test_to_dict_and_str(self):
        price_range = PriceRange(40.0, 60.5)
        assert price_range.to_dict() == {"min": 40.0, "max": 60.5}
        assert str(price_range) == "$40 - $60.5"


class TestPricingNormalizer:
    """Tests pour PricingNormalizer."""

    def test_normalize_service_list(self, sample_current_pricing_response):
        pricing = PricingNormalizer().normalize(sample_current_pricing_response, business_id="42")

        assert pricing.business_id == "42"
        assert pricing.business_name == "My Salon"
        assert list(pricing.services) == ["Haircut", "Coloring"]
        assert pricing.services["Coloring"] == PriceRange(90.0, 110.0)

    def test_normalize_service_mapping(self):
        pricing = PricingNormalizer().normalize({"services": {"Haircut": [30, 45]}}, business_id="7")
        assert pricing.business_id == "7"
        assert pricing.services == {"Haircut": PriceRange(30.0, 45.0)}

    def test_dashboard_format(self):
        raw = {
            "pricing_analysis": {
                "service_pricing": [
                    {"service_name": "Massage", "current_price_range": "$80 - $120"},
                ]
            }
        }
        pricing = PricingNormalizer().normalize(raw, business_id="7")
        assert pricing.services["Massage"] == PriceRange(80.0, 120.0)

    def test_skips_invalid_and_duplicate_entries(self):
        raw = {
            "services": [
                {"service_name": "Haircut", "price_range": "$40 - $60"},
                {"service_name": "Haircut", "price_range": "$10 - $20"},
                {"service_name": "Consultation", "price_range": "on request"},
                {"price_range": "$10 - $20"},
            ]
        }
        pricing = PricingNormalizer().normalize(raw, business_id="7")
        assert pricing.services == {"Haircut": PriceRange(40.0, 60.0)}

    def test_invalid_payload(self):
        with pytest.raises(ValueError):
            PricingNormalizer().normalize(["not", "an", "object"], business_id="7")


class TestHistoryNormalizer:
    """Tests pour HistoryNormalizer."""

    def test_normalize(self, sample_history_response):
        points = HistoryNormalizer().normalize(sample_history_response)

        assert len(points) == 3
        assert points[0].date == date(2024, 5, 1)
        assert points[1].demand_multiplier == 1.1
        assert points[2].revenue == 600.0

    def test_sorted_by_date(self):
        raw = [
            {"date": "2024-05-03", "price": 54, "demand": 1.0, "revenue": 54},
            {"date": "2024-05-01", "price": 50, "demand": 1.0, "revenue": 50},
        ]
        points = HistoryNormalizer().normalize(raw)
        assert [p.date.day for p in points] == [1, 3]

    def test_timezone_conversion(self):
        """Un horodatage UTC tardif tombe la veille à Chicago."""
        raw = [{"date": "2024-05-02T03:00:00Z", "price": 50, "demand": 1.0, "revenue": 50}]
        assert HistoryNormalizer().normalize(raw)[0].date == date(2024, 5, 2)
        assert HistoryNormalizer(timezone="America/Chicago").normalize(raw)[0].date == date(2024, 5, 1)

    def test_missing_revenue_is_estimated(self):
        raw = [{"date": "2024-05-01", "price": 50, "demand_multiplier": 1.5}]
        assert HistoryNormalizer().normalize(raw)[0].revenue == 75.0

    def test_skips_invalid_entries(self):
        raw = [
            {"date": "not a date", "price": 50, "demand": 1.0},
            {"date": "2024-05-01", "price": -5, "demand": 1.0},
            {"date": "2024-05-02", "price": 50, "demand": -1.0},
            {"date": "2024-05-03", "price": "abc", "demand": 1.0},
            "garbage",
            {"date": "2024-05-04", "price": 50, "demand": 1.0, "revenue": 50},
        ]
        points = HistoryNormalizer().normalize(raw)
        assert len(points) == 1
        assert points[0].date == date(2024, 5, 4)

    def test_invalid_payload(self):
        with pytest.raises(ValueError):
            HistoryNormalizer().normalize({"price_history": "nope"})


class TestMarketNormalizer:
    """Tests pour MarketNormalizer."""

    def test_normalize(self, sample_comparison_response):
        comparison = MarketNormalizer().normalize(
            sample_comparison_response, category="salon", location="Austin, TX", business_id="42"
        )

        assert comparison.category == "salon"
        assert [o.base_price for o in comparison.observations] == [40.0, 60.0, 80.0]
        assert comparison.observations[0].business_id == "1"
        assert comparison.observations[0].location == "Austin, TX"
        assert comparison.business_context.base_price == 70.0
        assert comparison.business_context.business_reviews == 120

    def test_skips_entries_without_price(self):
        raw = {
            "comparison_data": [
                {"name": "No price"},
                {"name": "Bad price", "current_pricing": {"base_price": "n/a"}},
                {"name": "Negative", "base_price": -3},
                {"name": "Flat price", "price": 55, "pricing_strategy": "Premium"},
            ]
        }
        comparison = MarketNormalizer().normalize(raw, category="salon", location="Austin, TX")

        assert len(comparison.observations) == 1
        assert comparison.observations[0].name == "Flat price"
        assert comparison.observations[0].pricing_strategy == PricingStrategy.PREMIUM
        assert comparison.business_context is None

    def test_context_price_from_observations(self):
        raw = {
            "comparison_data": [
                {"business_id": 42, "name": "My Salon", "current_pricing": {"base_price": 65}},
                {"business_id": 3, "name": "Other", "current_pricing": {"base_price": 55}},
            ]
        }
        comparison = MarketNormalizer().normalize(raw, category="salon", location="Austin", business_id="42")
        assert comparison.business_context.base_price == 65.0

    def test_unknown_strategy(self):
        raw = {"comparison_data": [{"name": "A", "price": 10, "pricing_strategy": "luxury"}]}
        comparison = MarketNormalizer().normalize(raw, category="salon", location="Austin")
        assert comparison.observations[0].pricing_strategy == PricingStrategy.UNKNOWN

    def test_invalid_payload(self):
        with pytest.raises(ValueError):
            MarketNormalizer().normalize({"comparison_data": {}}, category="salon", location="Austin")
