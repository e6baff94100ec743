"""Shared test helpers for Fudge tests."""
