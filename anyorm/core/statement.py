"""Statement and result value types shared by adapters and drivers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class Expr:
    """Raw SQL fragment, inlined into statements without quoting or binding.

    >>> adapter.update("users", {"visits": Expr("visits + 1")}, "id = ?", [1])
    """

    __slots__ = ("_text",)

    def __init__(self, text: str) -> None:
        self._text = text

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Expr({self._text!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Expr) and other._text == self._text

    def __hash__(self) -> int:
        return hash(("Expr", self._text))


@dataclass(frozen=True)
class Statement:
    """A pre-built statement: SQL text with ``?`` placeholders plus parameters."""

    text: str
    params: tuple[Any, ...] = ()


@dataclass
class QueryResult:
    """What a driver hands back for one executed statement.

    Rows are fetched before the connection goes back to the pool, so the
    result stays valid after release.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
    last_row_id: Any = None


@dataclass
class InsertResult:
    """Outcome of DBAdapter.insert()."""

    affected_row_count: int
    returning_values: dict[str, Any] = field(default_factory=dict)
    raw_result: QueryResult | None = None
