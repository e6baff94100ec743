"""Fudge core library: Fudgefile model, request validation and the Chocolatey backend."""

from . import exceptions  # noqa: F401
