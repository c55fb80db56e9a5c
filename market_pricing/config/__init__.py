"""Configuration module for the pricing analysis engine."""

from .settings import Settings
from .engine_config import EngineConfig, get_default_engine_config

__all__ = [
    "Settings",
    "EngineConfig",
    "get_default_engine_config",
]
