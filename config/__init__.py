"""SuiBets configuration."""
from .settings import ChainConfig, Settings, settings

__all__ = ["ChainConfig", "Settings", "settings"]
