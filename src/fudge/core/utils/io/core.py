"""File helpers used for Fudgefiles and log paths.

Writes go through a temp file in the target directory followed by
``os.replace`` so a Fudgefile is never left half-written.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, TextIO, Union

PathLike = Union[str, Path]


def ensure_parent_dir(path: PathLike) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def atomic_write(
    path: PathLike,
    write_fn: Callable[[TextIO], None],
    *,
    encoding: str = "utf-8",
) -> None:
    """Call ``write_fn`` on a temp file, fsync it, then move it over ``path``."""
    target = Path(path)
    ensure_parent_dir(target)

    fd, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            write_fn(handle)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp, target)
    finally:
        if tmp.exists():
            try:
                tmp.unlink()
            except OSError:
                pass


def read_text(path: PathLike) -> str:
    """Read a UTF-8 file.

    Raises:
        FileNotFoundError: If ``path`` does not exist
    """
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Text file not found: {source}")
    return source.read_text(encoding="utf-8")


def write_text(path: PathLike, content: str) -> None:
    atomic_write(path, lambda handle: handle.write(content))


__all__ = [
    "PathLike",
    "ensure_parent_dir",
    "atomic_write",
    "read_text",
    "write_text",
]
