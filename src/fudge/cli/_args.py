"""CLI argument registration for the ``fudge`` command.

Flags accept both the kebab-case spelling and the camelCase one used in
existing Fudge documentation (``--fudgefilePath``, ``--devOnly``).
"""
from __future__ import annotations

import argparse

from fudge.core.actions import DEFAULT_FUDGEFILE, DEFAULT_SEARCH_LIMIT, Action


def add_action_arg(parser: argparse.ArgumentParser) -> None:
    """Add -a/--action.

    Not restricted with ``choices`` so an unknown action is reported through
    the normal failure path instead of argparse's usage error.
    """
    parser.add_argument(
        "-a",
        "--action",
        help=f"Action to run: {', '.join(a.value for a in Action)}",
    )


def add_scope_args(parser: argparse.ArgumentParser) -> None:
    """Add the flags that narrow which Fudgefile entries an action touches."""
    parser.add_argument(
        "-k",
        "--key",
        help="Restrict the action to one package (or pack entry); the search term for search",
    )
    parser.add_argument(
        "-d",
        "--dev",
        action="store_true",
        help="Include devPackages",
    )
    parser.add_argument(
        "-do",
        "--dev-only",
        "--devOnly",
        dest="dev_only",
        action="store_true",
        help="Only use devPackages (implies --dev)",
    )


def add_fudgefile_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-fp",
        "--fudgefile-path",
        "--fudgefilePath",
        dest="fudgefile_path",
        default=DEFAULT_FUDGEFILE,
        help=f"Path to the Fudgefile (default: ./{DEFAULT_FUDGEFILE})",
    )


def add_search_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-l",
        "--limit",
        type=int,
        default=DEFAULT_SEARCH_LIMIT,
        help=f"Maximum search results, 0 for no limit (default: {DEFAULT_SEARCH_LIMIT})",
    )


def add_switch_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i",
        "--install",
        action="store_true",
        help="With new: install the packages once the Fudgefile is created",
    )
    parser.add_argument(
        "-u",
        "--uninstall",
        action="store_true",
        help="With delete: uninstall the packages before removing the Fudgefile",
    )


def add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="store_true",
        help="Print the version and exit",
    )


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """Register every ``fudge`` flag on ``parser``."""
    add_action_arg(parser)
    add_scope_args(parser)
    add_fudgefile_arg(parser)
    add_search_args(parser)
    add_switch_args(parser)
    add_version_flag(parser)


__all__ = [
    "add_action_arg",
    "add_fudgefile_arg",
    "add_scope_args",
    "add_search_args",
    "add_standard_flags",
    "add_switch_args",
    "add_version_flag",
]
