"""YAML loading for config files, schemas and Fudgefiles."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def read_yaml(path: Path, default: Any = None, raise_on_error: bool = False) -> Any:
    """Load ``path`` with ``yaml.safe_load``.

    A missing file, unreadable file, invalid YAML or an empty document gives
    ``default``. With ``raise_on_error`` the first three raise instead
    (FileNotFoundError, OSError, yaml.YAMLError).
    """
    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default

    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default
    return default if data is None else data


def parse_yaml_string(content: str, default: Any = None) -> Any:
    """Parse YAML (or JSON, a YAML subset) from a string.

    Raises:
        yaml.YAMLError: If the content is not valid YAML
    """
    data = yaml.safe_load(content)
    return default if data is None else data


__all__ = ["read_yaml", "parse_yaml_string"]
