"""
Entry point for the ``fudge`` CLI.

Run flow::

    banner -> (--version: exit) -> logging config -> validate flags
        -> timed { execute(request) } -> exit code

Exit codes: 0 on success or a notice, 1 on a hard error, 2 on a usage error
(printed before the timer starts, so no duration line), 130 when interrupted.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Optional

import yaml

from fudge import __version__
from fudge.cli._args import add_standard_flags
from fudge.cli._handlers import execute
from fudge.cli._output import Reporter
from fudge.core.actions import validate_request
from fudge.core.backend import ChocolateyBackend
from fudge.core.config.domains import LoggingConfig
from fudge.core.exceptions import FudgeError, InvalidActionError
from fudge.core.stdlib_logging import configure_stdlib_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fudge",
        description="Fudge - install, upgrade and pack Chocolatey packages from a Fudgefile",
        allow_abbrev=False,
    )
    add_standard_flags(parser)
    return parser


def _configure_logging(reporter: Reporter) -> bool:
    try:
        cfg = LoggingConfig()
        configure_stdlib_logging(log_path=cfg.path, level=cfg.level)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        reporter.failure(f"Invalid Fudge configuration: {exc}")
        return False
    return True


def _report_error(reporter: Reporter, exc: FudgeError) -> None:
    reporter.failure(str(exc))
    output = exc.context.get("output")
    if output:
        reporter.output(str(output))


def main(
    argv: Optional[list[str]] = None,
    *,
    reporter: Optional[Reporter] = None,
    backend_factory: Callable[[], ChocolateyBackend] = ChocolateyBackend,
) -> int:
    """
    Main entry point for the Fudge CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])
        reporter: Output sink (defaults to stdout/stderr)
        backend_factory: Builds the backend; tests pass a fake

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    args = build_parser().parse_args(argv)
    reporter = reporter or Reporter()
    reporter.banner(__version__)

    if args.version:
        return EXIT_OK

    if not _configure_logging(reporter):
        return EXIT_ERROR

    try:
        request = validate_request(args)
    except InvalidActionError as exc:
        reporter.failure(str(exc))
        return EXIT_USAGE

    result = EXIT_OK
    with reporter.timed():
        try:
            execute(request, reporter, backend_factory=backend_factory)
        except KeyboardInterrupt:
            reporter.failure("Interrupted")
            result = EXIT_INTERRUPTED
        except FudgeError as exc:
            logger.error("%s failed: %s", request.action.value, exc.to_json_error())
            _report_error(reporter, exc)
            result = EXIT_ERROR
        except Exception as exc:
            logger.exception("Unexpected error running %s", request.action.value)
            reporter.failure(f"Unexpected error: {exc}")
            result = EXIT_ERROR
    return result


if __name__ == "__main__":
    sys.exit(main())
