"""Cache utilities for test isolation."""
from __future__ import annotations


def reset_fudge_caches() -> None:
    """Reset module-level caches and logging so state never leaks between tests."""
    from fudge.core.config.cache import clear_all_caches
    from fudge.core.schemas.validation import load_schema
    from fudge.core.stdlib_logging import reset_stdlib_logging_for_tests

    clear_all_caches()
    load_schema.cache_clear()
    reset_stdlib_logging_for_tests()
