"""
Fudge CLI package.

- _args: flag registration
- _output: Reporter (user-facing messages and the duration line)
- _handlers: one handler per action and the run flow
- _dispatcher: argument parsing and main()
"""
from ._output import Reporter, format_duration
from ._args import add_standard_flags

__all__ = [
    "Reporter",
    "format_duration",
    "add_standard_flags",
]
