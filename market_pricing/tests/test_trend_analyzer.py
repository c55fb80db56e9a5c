"""
Tests unitaires pour TrendAnalyzer.
"""

from datetime import date

import pytest

from market_pricing.analysis.trend_analyzer import TrendAnalyzer
from market_pricing.errors import InsufficientDataError
from market_pricing.models.entities import Trend


class TestTrendAnalyzer:
    """Tests pour TrendAnalyzer.analyze."""

    def test_increasing_trends(self, increasing_history):
        trend = TrendAnalyzer().analyze(increasing_history)
        assert trend.price_trend == Trend.INCREASING
        assert trend.revenue_trend == Trend.INCREASING
        assert trend.sample_size == 4

    def test_decreasing_trends(self, decreasing_history):
        trend = TrendAnalyzer().analyze(decreasing_history)
        assert trend.price_trend == Trend.DECREASING
        assert trend.revenue_trend == Trend.DECREASING

    def test_flat_series_is_decreasing(self, history_factory):
        trend = TrendAnalyzer().analyze(history_factory([50, 50, 50], [500, 500, 500]))
        assert trend.price_trend == Trend.DECREASING
        assert trend.price_volatility == 0.0

    def test_order_independent(self, increasing_history):
        reversed_trend = TrendAnalyzer().analyze(list(reversed(increasing_history)))
        assert reversed_trend == TrendAnalyzer().analyze(increasing_history)

    def test_volatility_is_population_std(self, history_factory):
        """Écart type de population de (50, 52, 54, 56) = sqrt(5)."""
        trend = TrendAnalyzer().analyze(history_factory([50, 52, 54, 56], [1, 1, 1, 1]))
        assert trend.price_volatility == pytest.approx(2.24, abs=0.01)

    def test_optimal_range_from_top_revenue(self, history_factory):
        """La fourchette optimale couvre les prix du quartile de revenu supérieur."""
        history = history_factory(
            [40, 45, 50, 55, 60, 65, 70, 75],
            [400, 420, 450, 700, 720, 460, 430, 410],
        )
        trend = TrendAnalyzer().analyze(history)
        assert trend.optimal_price_range.low == 55.0
        assert trend.optimal_price_range.high == 60.0

    def test_insufficient_points(self, history_factory):
        with pytest.raises(InsufficientDataError):
            TrendAnalyzer().analyze(history_factory([50], [500]))
        with pytest.raises(InsufficientDataError):
            TrendAnalyzer().analyze([])


class TestTrendWindow:
    """Tests pour TrendAnalyzer.window."""

    def test_window_relative_to_latest_point(self, history_factory):
        history = history_factory(list(range(1, 41)), list(range(1, 41)), start=date(2024, 1, 1))
        window = TrendAnalyzer().window(history)

        assert len(window) == 30
        assert window[0].date == date(2024, 1, 11)
        assert window[-1].date == date(2024, 2, 9)

    def test_custom_window(self, history_factory):
        history = history_factory([1, 2, 3, 4, 5], [1, 2, 3, 4, 5])
        assert [p.price for p in TrendAnalyzer().window(history, days=2)] == [4, 5]

    def test_empty_window(self):
        assert TrendAnalyzer().window([]) == []
