"""Flag parsing for `fivem-utility docker` (the argv argparse hands over untouched)."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

HELP_FLAGS = ("-h", "--help")

# (key, flag, default or zero-arg factory, converter or None for str)
FlagSpec = tuple[str, str, Any, Callable[[str], Any] | None]


class FlagError(ValueError):
    """A value-taking flag was given without its value."""


def parse_flags(argv: list[str], *specs: FlagSpec) -> tuple[dict[str, Any], list[str]]:
    """Pull `--flag value` and `--flag=value` out of argv; the last occurrence wins.

    Returns (key -> value with defaults filled, everything else in order).
    Raises FlagError when a flag is the last word with no value after it.
    """
    by_flag = {flag: (key, conv) for key, flag, _default, conv in specs}
    values = {key: default() if callable(default) else default for key, _flag, default, _conv in specs}
    rest: list[str] = []

    words = iter(argv)
    for word in words:
        flag, eq, inline = word.partition("=")
        if flag not in by_flag:
            rest.append(word)
            continue
        key, conv = by_flag[flag]
        raw = inline if eq else next(words, None)
        if raw is None:
            msg = f"{flag} needs a value"
            raise FlagError(msg)
        values[key] = conv(raw) if conv else raw
    return values, rest


def pop_switch(argv: list[str], flag: str) -> tuple[bool, list[str]]:
    """Remove every occurrence of a boolean flag. Returns (present, remaining argv)."""
    rest = [a for a in argv if a != flag]
    return len(rest) != len(argv), rest


def wants_help(argv: list[str]) -> bool:
    return any(a in HELP_FLAGS for a in argv)


def resolve_path(s: str) -> Path:
    return Path(s).expanduser().resolve()
