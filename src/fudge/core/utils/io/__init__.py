"""I/O utilities for Fudge.

- Core: atomic writes, text I/O
- YAML: read/parse
"""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_parent_dir,
    read_text,
    write_text,
)
from .yaml import (
    parse_yaml_string,
    read_yaml,
)

__all__ = [
    # core
    "PathLike",
    "ensure_parent_dir",
    "atomic_write",
    "read_text",
    "write_text",
    # yaml
    "read_yaml",
    "parse_yaml_string",
]
