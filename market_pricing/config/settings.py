"""
Configuration générale du moteur d'analyse de prix.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Charger .env depuis la racine du projet
project_root = Path(__file__).parent.parent.parent
load_dotenv(dotenv_path=project_root / ".env")


@dataclass
class Settings:
    """Configuration globale du moteur."""

    # API de données pricing (analyse courante, historique, comparaison marché)
    api_base_url: str = "http://localhost:8000/api"

    # Timeout par source (secondes) ; au-delà la source est considérée en échec
    source_timeout: float = 10.0

    # Retry configuration
    max_retries: int = 3
    retry_backoff_factor: float = 2.0

    # Fenêtre d'historique de prix (jours)
    history_days: int = 30

    # Base de données (stockage des configurations de pricing dynamique)
    supabase_url: str = ""
    supabase_key: str = ""

    # Timezone utilisée pour ramener les dates d'historique à un jour calendaire
    default_timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Crée une instance Settings depuis les variables d'environnement."""
        return cls(
            api_base_url=os.getenv("PRICING_API_BASE_URL", "http://localhost:8000/api"),
            source_timeout=float(os.getenv("PRICING_SOURCE_TIMEOUT", "10")),
            max_retries=int(os.getenv("PRICING_MAX_RETRIES", "3")),
            retry_backoff_factor=float(os.getenv("PRICING_RETRY_BACKOFF", "2.0")),
            history_days=int(os.getenv("PRICING_HISTORY_DAYS", "30")),
            supabase_url=os.getenv("SUPABASE_URL", ""),
            supabase_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", os.getenv("SUPABASE_KEY", "")),
            default_timezone=os.getenv("DEFAULT_TIMEZONE", "UTC"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
