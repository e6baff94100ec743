"""Domain-specific configuration for backend command timeouts."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig

_REQUIRED_TIMEOUT_KEYS = (
    "default_seconds",
    "install_seconds",
    "query_seconds",
)


class TimeoutsConfig(BaseDomainConfig):
    """Typed, cached access to the ``timeouts`` section."""

    def _config_section(self) -> str:
        return "timeouts"

    def _validate_required_keys(self) -> None:
        if not self.section:
            raise RuntimeError("timeouts section missing from configuration")

        for key in _REQUIRED_TIMEOUT_KEYS:
            if key not in self.section:
                raise RuntimeError(f"timeouts.{key} missing from configuration")

    @cached_property
    def default_seconds(self) -> float:
        """Timeout for backend calls without a dedicated bucket (pack, bootstrap)."""
        self._validate_required_keys()
        return float(self.section["default_seconds"])

    @cached_property
    def install_seconds(self) -> float:
        """Timeout for install/upgrade/uninstall of a single package."""
        self._validate_required_keys()
        return float(self.section["install_seconds"])

    @cached_property
    def query_seconds(self) -> float:
        """Timeout for list and search queries."""
        self._validate_required_keys()
        return float(self.section["query_seconds"])


__all__ = ["TimeoutsConfig"]
