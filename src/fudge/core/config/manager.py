"""
Fudge configuration management (YAML layers + FUDGE_* environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from fudge.core.utils.io import read_yaml
from fudge.core.utils.merge import deep_merge
from fudge.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "FUDGE_"
# Environment variables under the prefix that locate config rather than set it.
RESERVED_ENV_KEYS = frozenset({"FUDGE_HOME"})


def get_user_config_dir() -> Path:
    """Return the per-user config directory (``$FUDGE_HOME`` or ``~/.fudge``)."""
    override = os.environ.get("FUDGE_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".fudge"


class ConfigManager:
    """Load and merge Fudge configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: FUDGE_<section>__<key>
    2. User config: <user-config-dir>/config.yaml
    3. Bundled defaults: fudge.data/config/defaults.yaml
    """

    def __init__(self, user_config_dir: Optional[Path] = None) -> None:
        self.core_config_path = get_data_path("config", "defaults.yaml")
        self.user_config_dir = user_config_dir or get_user_config_dir()

    @property
    def user_config_path(self) -> Path:
        return self.user_config_dir / "config.yaml"

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        data = read_yaml(path, default={}, raise_on_error=True)
        if not isinstance(data, dict):
            raise ValueError(f"Config file must be a YAML mapping: {path}")
        return data

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        if value.strip().lower() in {"null", "none"}:
            return None
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[str]:
        if not raw:
            return []
        segs = raw.split("__")
        if any(seg == "" for seg in segs):
            raise ValueError(f"Malformed FUDGE_* key: empty segment in '{raw}'.")
        # Normalize to lowercase so env overrides match canonical keys.
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key in RESERVED_ENV_KEYS:
                continue
            path = self._parse_env_key(key[len(ENV_PREFIX):])
            if not path:
                continue
            yield path, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Dict[str, Any] = root
        for part in path[:-1]:
            nxt = cur.get(part)
            if nxt is None:
                nxt = {}
                cur[part] = nxt
            if not isinstance(nxt, dict):
                raise ValueError(f"Path traverses non-dict config value at '{part}'")
            cur = nxt
        cur[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, value in self._iter_env_overrides():
            logger.debug("config env override %s=%r", ".".join(path), value)
            self._set_nested(cfg, path, value)

    def load_config(self) -> Dict[str, Any]:
        """Load and merge configuration from all sources (uncached)."""
        cfg = self.load_yaml(self.core_config_path)
        if self.user_config_path.exists():
            cfg = deep_merge(cfg, self.load_yaml(self.user_config_path))
        self.apply_env_overrides(cfg)
        return cfg


__all__ = ["ConfigManager", "get_user_config_dir", "ENV_PREFIX"]
