"""Fudge configuration system.

Usage:
    from fudge.core.config import ConfigManager
    from fudge.core.config.domains import BackendConfig

    config = ConfigManager().load_config()
    choco = BackendConfig().executable
"""
from __future__ import annotations

from .manager import ConfigManager, get_user_config_dir
from .cache import get_cached_config, clear_all_caches
from .base import BaseDomainConfig
from .domains import BackendConfig, LoggingConfig, TimeoutsConfig

__all__ = [
    "ConfigManager",
    "get_user_config_dir",
    "get_cached_config",
    "clear_all_caches",
    "BaseDomainConfig",
    "BackendConfig",
    "LoggingConfig",
    "TimeoutsConfig",
]
