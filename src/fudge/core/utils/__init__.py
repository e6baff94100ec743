"""Utility helpers for Fudge core.

- io/: File I/O operations (atomic writes, YAML)
- subprocess: Subprocess execution with configured timeouts
- merge: Config layering
"""
