"""Centralized configuration caching.

Provides a single loaded configuration shared by all domain configs.
"""
from __future__ import annotations

import hashlib
import os
from typing import Any, Dict

_config_cache: Dict[str, Dict[str, Any]] = {}


def _cache_key() -> str:
    """Fingerprint the environment overrides and user config file.

    Tests mutate FUDGE_* env vars and write user config files after an
    initial load; without the fingerprint, cache hits would return stale config.
    """
    from .manager import ENV_PREFIX, get_user_config_dir

    env_items = sorted(
        (k, os.environ.get(k, ""))
        for k in os.environ.keys()
        if k.startswith(ENV_PREFIX)
    )
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]

    user_cfg = get_user_config_dir() / "config.yaml"
    try:
        st = user_cfg.stat()
        cfg_fp = f"{st.st_mtime_ns}:{st.st_size}"
    except OSError:
        cfg_fp = "none"

    return f"env={env_fp}:cfg={user_cfg}:{cfg_fp}"


def get_cached_config() -> Dict[str, Any]:
    """Get configuration with caching.

    Returns the same config dict instance while the environment and user
    config file are unchanged (treat it as immutable).
    """
    from .manager import ConfigManager

    key = _cache_key()
    if key not in _config_cache:
        _config_cache[key] = ConfigManager().load_config()
    return _config_cache[key]


def clear_all_caches() -> None:
    """Clear the configuration cache so the next access reloads from disk."""
    _config_cache.clear()


__all__ = ["get_cached_config", "clear_all_caches"]
