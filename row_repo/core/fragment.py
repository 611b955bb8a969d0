"""SQL fragments: the unit every builder produces and consumes."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from row_repo.core.parameters import Parameter, to_parameters


@dataclass(frozen=True)
class SqlFragment:
    """SQL text with ``?`` markers and the parameters they stand for.

    Markers appear left to right in the same order as *params*. They are
    numbered only once, when the enclosing statement is compiled.
    """

    text: str
    params: tuple[Parameter, ...] = field(default_factory=tuple)

    @classmethod
    def raw(cls, text: str, params: Iterable[Any] = ()) -> SqlFragment:
        """Build a fragment from text and plain values."""
        return cls(text, to_parameters(params))

    @classmethod
    def concat(cls, fragments: Sequence[SqlFragment], separator: str = " ") -> SqlFragment:
        """Join fragment texts with *separator* and chain their params."""
        return cls(
            separator.join(f.text for f in fragments),
            tuple(p for f in fragments for p in f.params),
        )


def placeholders(count: int) -> str:
    """Render ``count`` comma-separated ``?`` markers."""
    return ",".join("?" * count)


def quote_identifier(name: str) -> str:
    """Double-quote an identifier, escaping embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


def qualified(table: str, column: str) -> str:
    """Render ``"table"."column"``."""
    return f"{quote_identifier(table)}.{quote_identifier(column)}"


def columns_list(columns: Sequence[str]) -> SqlFragment:
    """Render a parameterless ``a, b, c`` column list."""
    return SqlFragment(", ".join(columns))
