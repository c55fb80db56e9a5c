"""
Interfaces externes du moteur d'analyse de prix.
"""

from .config_store import CONFIG_TABLE, ConfigStore, SupabaseConfigStore

__all__ = ["CONFIG_TABLE", "ConfigStore", "SupabaseConfigStore"]
