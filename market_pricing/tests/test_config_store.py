"""
Tests unitaires pour SupabaseConfigStore.
"""

import dataclasses

import pytest
from unittest.mock import Mock

from market_pricing.interfaces.config_store import SupabaseConfigStore
from market_pricing.models.entities import DynamicPricingConfig, UpdateFrequency


def _stored_row(**overrides):
    row = {"business_id": "42", **DynamicPricingConfig(enabled=True, auto_adjust=True).to_dict()}
    row.update(overrides)
    return row


class TestSupabaseConfigStore:
    """Tests pour SupabaseConfigStore."""

    @pytest.mark.asyncio
    async def test_save_upserts_on_business_id(self, test_settings, mock_supabase_client):
        store = SupabaseConfigStore(settings=test_settings, client=mock_supabase_client)
        config = DynamicPricingConfig(enabled=True, demand_multiplier=1.5)

        saved = await store.save("42", config)

        assert saved == config
        mock_supabase_client.table.assert_called_with("dynamic_pricing_configs")
        upsert = mock_supabase_client.table.return_value.upsert
        row, = upsert.call_args.args
        assert row["business_id"] == "42"
        assert row["demand_multiplier"] == 1.5
        assert upsert.call_args.kwargs == {"on_conflict": "business_id"}
        upsert.return_value.execute.assert_called_once()

    @pytest.mark.asyncio
    async def test_load(self, test_settings, mock_supabase_client):
        query = mock_supabase_client.table.return_value.select.return_value.eq.return_value
        query.limit.return_value.execute.return_value = Mock(
            data=[_stored_row(update_frequency="hourly")]
        )
        store = SupabaseConfigStore(settings=test_settings, client=mock_supabase_client)

        config = await store.load("42")

        assert config.enabled is True
        assert config.update_frequency == UpdateFrequency.HOURLY
        mock_supabase_client.table.return_value.select.return_value.eq.assert_called_with(
            "business_id", "42"
        )

    @pytest.mark.asyncio
    async def test_load_missing(self, test_settings, mock_supabase_client):
        query = mock_supabase_client.table.return_value.select.return_value.eq.return_value
        query.limit.return_value.execute.return_value = Mock(data=[])
        store = SupabaseConfigStore(settings=test_settings, client=mock_supabase_client)

        assert await store.load("42") is None

    @pytest.mark.asyncio
    async def test_disable_keeps_other_settings(self, test_settings, mock_supabase_client):
        query = mock_supabase_client.table.return_value.select.return_value.eq.return_value
        query.limit.return_value.execute.return_value = Mock(
            data=[_stored_row(demand_multiplier=1.8)]
        )
        store = SupabaseConfigStore(settings=test_settings, client=mock_supabase_client)

        config = await store.disable("42")

        assert config.enabled is False
        assert config.auto_adjust is False
        assert config.demand_multiplier == 1.8
        row, = mock_supabase_client.table.return_value.upsert.call_args.args
        assert row["enabled"] is False

    def test_missing_credentials(self, test_settings):
        settings = dataclasses.replace(test_settings, supabase_url="", supabase_key="")
        store = SupabaseConfigStore(settings=settings)

        with pytest.raises(RuntimeError):
            store._get_supabase_client()
