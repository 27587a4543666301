"""Content line splitting helpers for iCalendar property lines.

A property line has the shape ``NAME[;PARAM=VALUE...]:VALUE``. Parameter
values may be double-quoted and then contain ``;`` and ``:`` (Outlook puts
things like ``TZID="(UTC+01:00) Amsterdam, Berlin"`` in feeds), so splitting
has to skip over quoted sections.
"""

from __future__ import annotations

from typing import NamedTuple, Optional


class ContentLine(NamedTuple):
    """A property line split into its three parts.

    ``params`` keeps the raw ``KEY=VALUE`` strings in their original order
    and spelling so that untouched parameters round-trip byte for byte.
    """

    name: str
    params: list[str]
    value: str

    def render(self) -> str:
        """Serialize back to ``NAME;P1;P2:VALUE``."""
        head = ";".join([self.name, *self.params])
        return f"{head}:{self.value}"


def find_value_separator(line: str) -> int:
    """Return the index of the first ``:`` outside double quotes, or -1."""
    in_quotes = False
    for idx, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif char == ":" and not in_quotes:
            return idx
    return -1


def _split_params(head: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in head:
        if char == '"':
            in_quotes = not in_quotes
        if char == ";" and not in_quotes:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def parse_content_line(line: str) -> Optional[ContentLine]:
    """Split a property line into name, parameters and value.

    Returns None for lines without a value separator (continuations, garbage).
    """
    sep = find_value_separator(line)
    if sep == -1:
        return None
    name, *params = _split_params(line[:sep])
    return ContentLine(name=name, params=[p for p in params if p], value=line[sep + 1 :])


def field_name(line: str) -> str:
    """Return the uppercased property name of ``line`` or ``""`` if it has none."""
    sep = find_value_separator(line)
    if sep == -1:
        return ""
    head = line[:sep]
    semi = head.find(";")
    name = head if semi == -1 else head[:semi]
    return name.upper()


def param_key(param: str) -> str:
    """Return the uppercased key of a ``KEY=VALUE`` parameter."""
    return param.split("=", 1)[0].strip().upper()


def param_value(param: str) -> str:
    """Return the value of a ``KEY=VALUE`` parameter with surrounding quotes removed."""
    _, _, value = param.partition("=")
    value = value.strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        value = value[1:-1]
    return value


def get_param(params: list[str], key: str) -> Optional[str]:
    """Return the value of the first parameter named ``key`` (case-insensitive)."""
    wanted = key.upper()
    for param in params:
        if param_key(param) == wanted:
            return param_value(param)
    return None
