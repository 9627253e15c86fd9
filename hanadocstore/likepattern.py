"""Translation of simple regular expressions into SQL LIKE patterns."""

from __future__ import annotations

from typing import Any, Iterator

from hanadocstore.errors import CommandError, ErrorCode
from hanadocstore.values import Regex


def _byte_offsets(text: str) -> Iterator[tuple[int, str]]:
    """Yield each character with its UTF-8 byte offset."""
    offset = 0
    for ch in text:
        yield offset, ch
        offset += len(ch.encode("utf-8"))


def regex_to_like(value: Any) -> str:
    """Convert a Regex or pattern string into a quoted LIKE pattern.

    '^' and '$' anchor the pattern, '.' becomes '_' and '.*' becomes '%';
    literal '%' and '_' are escaped with '^', adding an ESCAPE clause.
    """
    if isinstance(value, Regex):
        if value.options:
            raise CommandError(
                ErrorCode.NOT_IMPLEMENTED,
                "The use of $options with regular expressions is not supported",
            )
        value = value.pattern

    if not isinstance(value, str):
        raise CommandError(
            ErrorCode.BAD_VALUE,
            "Expected either a JavaScript regular expression objects (i.e. /pattern/) "
            f"or string containing a pattern. Got instead type {type(value).__name__}",
        )

    if "(?i)" in value or "(?-i)" in value:
        raise CommandError(
            ErrorCode.NOT_IMPLEMENTED,
            "The use of (?i) and (?-i) with regular expressions is not supported",
        )

    out: list[str] = []
    escape = False
    dot = False
    last = len(value.encode("utf-8")) - 1

    for i, s in _byte_offsets(value):
        if i == 0:
            if s == "^":
                continue
            if s == ".":
                dot = True
                continue
            if s in "%_":
                out.append("%^" + s)
                escape = True
                continue
            out.append("%" + s)
            continue

        if dot and s != "*" and i == 1:
            out.append("%_")
            if s == ".":
                continue
            dot = False

        if i == last:
            if dot and s != "*":
                out.append("_")
                if s == ".":
                    out.append("_%")
                    continue
                dot = False
            if s == "$":
                continue
            if s == "*" and dot:
                out.append("%%")
                continue
            if s == ".":
                out.append("_%")
                continue
            if s in "%_":
                out.append("^" + s + "%")
                escape = True
                continue
            out.append(s + "%")
            continue

        if dot and s != "*":
            out.append("_")
            if s == ".":
                continue
            dot = False

        if s == ".":
            dot = True
        elif s == "*" and dot:
            out.append("%")
            dot = False
        elif s in "%_":
            out.append("^" + s)
            escape = True
        else:
            out.append(s)

    sql = "'" + "".join(out) + "'"
    if escape:
        sql += " ESCAPE '^' "
    return sql