"""Configuration module for scorecfg."""

from .loader import ConfigLoader, load_config
from .models import RefreshSettings, ScorecfgConfig, ScorecfgSettings

__all__ = [
    "ConfigLoader",
    "RefreshSettings",
    "ScorecfgConfig",
    "ScorecfgSettings",
    "load_config",
]
