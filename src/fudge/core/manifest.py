"""Fudgefile model and loading.

A Fudgefile is a JSON document (YAML is accepted too, JSON being a subset)::

    {
        "scripts": {"pre": {"install": "..."}, "post": {}},
        "packages": {"git": "2.14.1", "nodejs": {"version": "latest", "args": "--x86"}},
        "devPackages": {"fiddler": "4.6.2.3"},
        "pack": {"website": "./nuspecs/website.nuspec"}
    }

Loading validates the document against ``fudgefile.schema.yaml`` and returns an
immutable :class:`Manifest`.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml

from fudge.core.actions import SCRIPTED_ACTIONS
from fudge.core.exceptions import AlreadyExistsError, NotFoundError, ParseError
from fudge.core.schemas import SchemaValidationError, validate_payload
from fudge.core.utils.io import parse_yaml_string, read_text, write_text

logger = logging.getLogger(__name__)

SCHEMA_NAME = "fudgefile.schema.yaml"
LATEST = "latest"
SCRIPT_STAGES = ("pre", "post")


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class PackageSpec:
    """One package entry; ``version`` of None means unpinned ("latest")."""

    name: str
    version: Optional[str] = None
    source: Optional[str] = None
    args: Optional[str] = None

    @property
    def display_version(self) -> str:
        return self.version or LATEST

    @classmethod
    def from_raw(cls, name: str, raw: Any) -> "PackageSpec":
        if isinstance(raw, dict):
            return cls(
                name=name,
                version=_normalize_version(raw.get("version")),
                source=_optional_str(raw.get("source")),
                args=_optional_str(raw.get("args")),
            )
        return cls(name=name, version=_normalize_version(raw))


def _optional_str(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    return str(raw).strip() or None


def _normalize_version(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    value = str(raw).strip()
    if not value or value.lower() == LATEST:
        return None
    return value


@dataclass(frozen=True)
class Manifest:
    path: Path
    packages: Mapping[str, PackageSpec] = field(default_factory=lambda: _frozen({}))
    dev_packages: Mapping[str, PackageSpec] = field(default_factory=lambda: _frozen({}))
    pack: Mapping[str, str] = field(default_factory=lambda: _frozen({}))
    scripts: Mapping[str, Mapping[str, str]] = field(default_factory=lambda: _frozen({}))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: Path) -> "Manifest":
        def _packages(section: str) -> Mapping[str, PackageSpec]:
            raw = data.get(section) or {}
            return _frozen({str(name): PackageSpec.from_raw(str(name), value) for name, value in raw.items()})

        raw_scripts = data.get("scripts") or {}
        scripts = {
            stage: _frozen({k: v for k, v in (raw_scripts.get(stage) or {}).items() if v})
            for stage in SCRIPT_STAGES
        }

        return cls(
            path=Path(path),
            packages=_packages("packages"),
            dev_packages=_packages("devPackages"),
            pack=_frozen({str(k): str(v) for k, v in (data.get("pack") or {}).items()}),
            scripts=_frozen(scripts),
        )

    @property
    def directory(self) -> Path:
        return self.path.resolve().parent

    def select_packages(
        self, key: Optional[str] = None, *, dev: bool = False, dev_only: bool = False
    ) -> List[PackageSpec]:
        """Return the entries an action applies to, in manifest order.

        ``packages`` come first (skipped when ``dev_only``), then ``devPackages``
        when ``dev`` (or ``dev_only``) is set. ``key`` narrows to one name.
        Names compare case-insensitively, like Chocolatey package ids, and a
        name in both sections is selected once (the ``packages`` entry wins).
        """
        candidates: List[PackageSpec] = []
        if not dev_only:
            candidates.extend(self.packages.values())
        if dev or dev_only:
            candidates.extend(self.dev_packages.values())

        wanted = key.lower() if key else None
        selected: Dict[str, PackageSpec] = {}
        for spec in candidates:
            name = spec.name.lower()
            if name in selected or (wanted and name != wanted):
                continue
            selected[name] = spec
        return list(selected.values())

    def select_pack(self, key: Optional[str] = None) -> Dict[str, Path]:
        """Return pack specs (resolved against the Fudgefile directory) to build."""
        entries = {k: v for k, v in self.pack.items() if not key or k == key}
        return {name: (self.directory / spec).resolve() for name, spec in entries.items()}

    def script(self, stage: str, action: str) -> Optional[str]:
        return (self.scripts.get(stage) or {}).get(action)


def ensure_manifest_exists(path: Path) -> None:
    if not Path(path).is_file():
        raise NotFoundError(f"Path to Fudgefile does not exist: {path}", context={"path": str(path)})


def ensure_manifest_absent(path: Path) -> None:
    if Path(path).exists():
        raise AlreadyExistsError(f"Path to Fudgefile already exists: {path}", context={"path": str(path)})


def load_manifest(path: Path) -> Manifest:
    """Read, parse and validate the Fudgefile at ``path``.

    Raises:
        NotFoundError: If the file does not exist.
        ParseError: If the content is not a valid Fudgefile.
    """
    path = Path(path)
    ensure_manifest_exists(path)

    try:
        data = parse_yaml_string(read_text(path), default={})
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ParseError(f"Failed to parse Fudgefile {path}: {exc}", context={"path": str(path)}) from exc

    if not isinstance(data, dict):
        raise ParseError(
            f"Fudgefile {path} must contain a mapping, got {type(data).__name__}",
            context={"path": str(path)},
        )

    try:
        validate_payload(data, SCHEMA_NAME)
    except SchemaValidationError as exc:
        raise ParseError(
            f"Invalid Fudgefile {path}: {exc.errors[0]}",
            context={"path": str(path), "errors": exc.errors},
        ) from exc

    manifest = Manifest.from_dict(data, path)
    logger.debug(
        "Loaded Fudgefile %s: %d packages, %d dev packages, %d pack specs",
        path,
        len(manifest.packages),
        len(manifest.dev_packages),
        len(manifest.pack),
    )
    return manifest


def manifest_skeleton(key: Optional[str] = None) -> Dict[str, Any]:
    """Return the document written by ``fudge -a new``."""
    hooks = {action.value: None for action in sorted(SCRIPTED_ACTIONS, key=lambda a: a.value)}
    return {
        "scripts": {"pre": dict(hooks), "post": dict(hooks)},
        "packages": {key: LATEST} if key else {},
        "devPackages": {},
        "pack": {},
    }


def create_manifest(path: Path, key: Optional[str] = None) -> Path:
    """Write a new Fudgefile skeleton at ``path``.

    Raises:
        AlreadyExistsError: If ``path`` already exists.
    """
    path = Path(path)
    ensure_manifest_absent(path)
    write_text(path, json.dumps(manifest_skeleton(key), indent=4) + "\n")
    logger.info("Created Fudgefile at %s", path)
    return path


def delete_manifest(path: Path) -> None:
    """Remove the Fudgefile at ``path``.

    Raises:
        NotFoundError: If ``path`` does not exist.
    """
    path = Path(path)
    ensure_manifest_exists(path)
    path.unlink()
    logger.info("Deleted Fudgefile at %s", path)


__all__ = [
    "LATEST",
    "Manifest",
    "PackageSpec",
    "create_manifest",
    "delete_manifest",
    "ensure_manifest_absent",
    "ensure_manifest_exists",
    "load_manifest",
    "manifest_skeleton",
]
