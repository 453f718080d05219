"""SQL placeholder translation.

Statements are written with ``?`` positional placeholders for every
dialect. Drivers that bind differently get the text rewritten here:

    qmark           ?        (SQLite, no conversion)
    numeric_dollar  $1, $2   (PostgreSQL)
    format          %s       (aiomysql; literal % doubled)

A ``?`` inside a single-quoted string literal is never rewritten.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache
from typing import Any

PARAMSTYLES = ("qmark", "numeric_dollar", "format")


def replace_placeholders(sql: str, paramstyle: str) -> str:
    """Rewrite ``?`` placeholders in *sql* to *paramstyle*.

    Args:
        sql: SQL text using ``?`` placeholders.
        paramstyle: One of ``qmark``, ``numeric_dollar`` or ``format``.

    Returns:
        SQL with placeholders converted to the target style.
    """
    if paramstyle == "qmark":
        return sql
    if paramstyle not in PARAMSTYLES:
        raise ValueError(f"Unknown paramstyle: {paramstyle}")
    if paramstyle == "numeric_dollar" and "?" not in sql:
        return sql
    return _rewrite(sql, paramstyle)


@lru_cache(maxsize=256)
def _rewrite(sql: str, paramstyle: str) -> str:
    """Scan *sql* char by char, toggling a quote flag on unescaped ``'``."""
    counter = 0
    quoted = False
    previous = ""
    replaced: list[str] = []

    for char in sql:
        if char == "'" and previous != "\\":
            quoted = not quoted

        if char == "?" and not quoted:
            counter += 1
            replaced.append(f"${counter}" if paramstyle == "numeric_dollar" else "%s")
        elif char == "%" and paramstyle == "format":
            # aiomysql interpolates the whole statement with the % operator
            replaced.append("%%")
        else:
            replaced.append(char)

        previous = char

    return "".join(replaced)


def coerce_params(params: Sequence[Any] | Any | None) -> list[Any]:
    """Normalize *params* to a positional list.

    * ``None`` → empty list.
    * ``tuple`` / ``list`` → list.
    * Any other scalar → wrapped in a single-element list.
    """
    if params is None:
        return []
    if isinstance(params, dict):
        raise TypeError("Only positional parameters are supported, got a mapping")
    if isinstance(params, (tuple, list)):
        return list(params)
    return [params]
