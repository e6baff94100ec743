"""Domain-specific configuration for the package manager backend."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class BackendConfig(BaseDomainConfig):
    """Typed access to the ``backend`` section (executable, bootstrap)."""

    def _config_section(self) -> str:
        return "backend"

    @cached_property
    def executable(self) -> str:
        value = str(self.section.get("executable") or "").strip()
        if not value:
            raise RuntimeError("backend.executable missing from configuration")
        return value

    @cached_property
    def confirm_flag(self) -> str:
        return str(self.section.get("confirm_flag") or "-y")

    @cached_property
    def bootstrap_command(self) -> str:
        value = str(self.section.get("bootstrap_command") or "").strip()
        if not value:
            raise RuntimeError("backend.bootstrap_command missing from configuration")
        return value


__all__ = ["BackendConfig"]
