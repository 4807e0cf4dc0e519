"""Command-line option scanning for the benchmark programs."""

from __future__ import annotations

import enum
import re
from collections.abc import Mapping, Sequence
from typing import Any, Optional

_INT_RE = re.compile(r"\s*([+-]?\d+)")
_FLOAT_RE = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)

_BENCHMARK_LEVELS = {"short": 1, "medium": 2, "long": 3}


class OptType(enum.IntEnum):
    """How an option's value is read."""

    INT = 1
    DOUBLE = 2
    LONG = 3
    BOOL = 4
    STRING = 5
    BENCHMARK = 6


def _parse_int(text: str) -> int:
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else 0


def _parse_float(text: str) -> float:
    match = _FLOAT_RE.match(text)
    return float(match.group(1)) if match else 0.0


_VALUE_PARSERS = {
    OptType.INT: _parse_int,
    OptType.LONG: _parse_int,
    OptType.DOUBLE: _parse_float,
    OptType.STRING: str,
}


def get_options(
    argv: Sequence[str],
    specs: Sequence[tuple[str, OptType]],
    defaults: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Scan argv (program name first) for the given options.

    Value options keep their default unless given; a value option given more
    than once takes its last value.  Boolean options are False unless present.
    A benchmark option is 0 when absent, 2 when present, or 1/2/3 when followed
    by short/medium/long.  Arguments left unused are reported on stdout.
    """
    defaults = defaults or {}
    args = list(argv)
    result: dict[str, Any] = {}

    for spec, opt_type in specs:
        opt_type = OptType(opt_type)
        if opt_type is OptType.BOOL:
            result[spec] = False
            for i in range(1, len(args)):
                if args[i] == spec:
                    result[spec] = True
                    args[i] = ""
        elif opt_type is OptType.BENCHMARK:
            result[spec] = 0
            for i in range(1, len(args)):
                if args[i] == spec:
                    result[spec] = 2
                    if i + 1 < len(args):
                        result[spec] = _BENCHMARK_LEVELS.get(args[i + 1], result[spec])
                        args[i + 1] = ""
                    args[i] = ""
        else:
            parse = _VALUE_PARSERS[opt_type]
            result[spec] = defaults.get(spec)
            for i in range(1, len(args) - 1):
                if args[i] == spec:
                    result[spec] = parse(args[i + 1])
                    args[i] = ""
                    args[i + 1] = ""

    for arg in args[1:]:
        if arg:
            print(f"\nInvalid option: {arg}")

    return result