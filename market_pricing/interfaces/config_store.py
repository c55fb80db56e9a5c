"""
Persistance des configurations de pricing dynamique.

Le moteur ne persiste rien lui-même : une configuration validée est
transmise à un `ConfigStore`. L'implémentation Supabase écrit dans la
table `dynamic_pricing_configs` (une ligne par entreprise, upsert sur
`business_id`, le dernier écrivain gagne).
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict, Optional

from supabase import Client, create_client

from ..config.settings import Settings
from ..models.entities import DynamicPricingConfig

logger = logging.getLogger(__name__)

CONFIG_TABLE = "dynamic_pricing_configs"


class ConfigStore(ABC):
    """Interface de stockage des configurations de pricing dynamique."""

    @abstractmethod
    async def save(self, business_id: str, config: DynamicPricingConfig) -> DynamicPricingConfig:
        """Enregistre (ou remplace) la configuration d'une entreprise."""
        pass

    @abstractmethod
    async def load(self, business_id: str) -> Optional[DynamicPricingConfig]:
        """Retourne la configuration enregistrée, ou None."""
        pass

    async def disable(self, business_id: str) -> DynamicPricingConfig:
        """
        Désactive le pricing dynamique d'une entreprise.

        Les autres réglages sont conservés ; `enabled` et `auto_adjust`
        passent à False.
        """
        current = await self.load(business_id) or DynamicPricingConfig()
        disabled = replace(current, enabled=False, auto_adjust=False)
        return await self.save(business_id, disabled)


class SupabaseConfigStore(ConfigStore):
    """ConfigStore adossé à Supabase (client synchrone exécuté dans l'executor)."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[Client] = None,
        table_name: str = CONFIG_TABLE
    ):
        self.settings = settings or Settings.from_env()
        self._supabase_client = client
        self.table_name = table_name

        logger.info(f"Initialized SupabaseConfigStore on table {table_name}")

    def _get_supabase_client(self) -> Client:
        """Récupère le client Supabase (lazy init)."""
        if self._supabase_client is not None:
            return self._supabase_client

        if not self.settings.supabase_url or not self.settings.supabase_key:
            raise RuntimeError(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY/SUPABASE_KEY must be set "
                "to persist dynamic pricing configs"
            )

        self._supabase_client = create_client(
            self.settings.supabase_url,
            self.settings.supabase_key
        )
        return self._supabase_client

    async def save(self, business_id: str, config: DynamicPricingConfig) -> DynamicPricingConfig:
        client = self._get_supabase_client()
        row: Dict[str, Any] = {"business_id": str(business_id), **config.to_dict()}

        loop = asyncio.get_event_loop()
        await loop.run_in_executor(
            None,
            lambda: client.table(self.table_name)
                .upsert(row, on_conflict="business_id")
                .execute()
        )

        logger.info(
            f"Saved dynamic pricing config for business {business_id} "
            f"(enabled={config.enabled}, auto_adjust={config.auto_adjust})"
        )
        return config

    async def load(self, business_id: str) -> Optional[DynamicPricingConfig]:
        client = self._get_supabase_client()

        loop = asyncio.get_event_loop()
        response = await loop.run_in_executor(
            None,
            lambda: client.table(self.table_name)
                .select("*")
                .eq("business_id", str(business_id))
                .limit(1)
                .execute()
        )

        rows = response.data or []
        if not rows:
            logger.debug(f"No dynamic pricing config stored for business {business_id}")
            return None

        return DynamicPricingConfig.from_dict(rows[0])
