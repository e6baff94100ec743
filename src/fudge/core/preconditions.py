"""Soft preconditions: conditions under which an action has nothing to do.

These never raise. A returned message is reported as a notice and the run
ends successfully without touching the backend.
"""
from __future__ import annotations

from typing import Optional

from fudge.core.actions import Action, InvocationRequest
from fudge.core.manifest import Manifest


def check_package_preconditions(request: InvocationRequest, manifest: Manifest) -> Optional[str]:
    if not manifest.packages and (not request.dev or not manifest.dev_packages):
        return "There are no packages within the Fudgefile"

    if request.dev_only and not manifest.dev_packages:
        return "There are no devPackages within the Fudgefile"

    if request.key and not manifest.select_packages(
        request.key, dev=request.dev, dev_only=request.dev_only
    ):
        section = "devPackages" if request.dev_only else "packages"
        return f"Package '{request.key}' not found in the Fudgefile {section}"

    return None


def check_pack_preconditions(request: InvocationRequest, manifest: Manifest) -> Optional[str]:
    if not manifest.pack:
        return "There are no nuspecs to pack within the Fudgefile"

    if request.key and request.key not in manifest.pack:
        return f"Fudgefile does not contain a nuspec pack file for '{request.key}'"

    return None


def check_preconditions(request: InvocationRequest, manifest: Manifest) -> Optional[str]:
    """Return a notice message when ``request`` has nothing to do, else None."""
    if request.is_package_action:
        return check_package_preconditions(request, manifest)
    if request.action is Action.PACK:
        return check_pack_preconditions(request, manifest)
    return None


__all__ = [
    "check_preconditions",
    "check_package_preconditions",
    "check_pack_preconditions",
]
