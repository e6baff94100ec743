"""Domain-specific configuration accessors."""
from __future__ import annotations

from .backend import BackendConfig
from .logging import LoggingConfig
from .timeouts import TimeoutsConfig

__all__ = [
    "BackendConfig",
    "LoggingConfig",
    "TimeoutsConfig",
]
