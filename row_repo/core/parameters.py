"""Query parameters and placeholder numbering.

Fragments carry ``?`` markers. At compile time the markers are numbered
once into ``$1, $2, …``; adapters then rewrite the numbered markers into
their driver's binding style. String literals and quoted identifiers are
never touched.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from row_repo.core.enums import ParameterKind
from row_repo.core.exceptions import ParameterBindingError, UnsupportedValueTypeError

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

# Matches a numbered marker produced by number_placeholders
_NUMBERED_PATTERN = re.compile(r"\$(\d+)")


@dataclass(frozen=True)
class Parameter:
    """A single bound value, tagged with its SQL-side kind."""

    kind: ParameterKind
    value: str | int | float | bool | None = None

    @classmethod
    def from_value(cls, value: Any) -> Parameter:
        """Convert an arbitrary Python value to a query parameter.

        Enum members convert to their symbolic name. ``None`` stands for an
        absent optional value and converts to NULL.

        Raises:
            UnsupportedValueTypeError: For composite values (lists, dicts,
                arbitrary objects) and integers outside the signed 64-bit range.
        """
        if isinstance(value, Parameter):
            return value
        if value is None:
            return cls(ParameterKind.NULL)
        # bool is a subclass of int and must be checked first
        if isinstance(value, bool):
            return cls(ParameterKind.BOOLEAN, value)
        if isinstance(value, enum.Enum):
            return cls(ParameterKind.STRING, value.name)
        if isinstance(value, int):
            if not _INT64_MIN <= value <= _INT64_MAX:
                raise UnsupportedValueTypeError(value, "integer out of 64-bit range")
            return cls(ParameterKind.INTEGER, int(value))
        if isinstance(value, float):
            return cls(ParameterKind.FLOAT, value)
        if isinstance(value, str):
            return cls(ParameterKind.STRING, value)
        if isinstance(value, (bytes, bytearray)):
            try:
                return cls(ParameterKind.STRING, bytes(value).decode("utf-8"))
            except UnicodeDecodeError as e:
                raise UnsupportedValueTypeError(value, "bytes are not valid UTF-8") from e
        raise UnsupportedValueTypeError(value)

    def __repr__(self) -> str:
        if self.kind is ParameterKind.NULL:
            return "Parameter(null)"
        return f"Parameter({self.kind.value}={self.value!r})"


def to_parameters(values: Any) -> tuple[Parameter, ...]:
    """Convert an iterable of values to a tuple of parameters."""
    return tuple(Parameter.from_value(v) for v in values)


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


def _scan_quoted(sql: str, start: int, quote: str) -> int:
    """Return the index just past the quoted section opening at *start*.

    Doubled quotes inside the section are escapes.

    Raises:
        ParameterBindingError: If the section is never closed.
    """
    n = len(sql)
    j = start + 1
    while j < n:
        if sql[j] == quote:
            j += 1
            if j >= n or sql[j] != quote:
                return j
        j += 1
    raise ParameterBindingError(sql, f"unterminated {quote} quoted section")


def _tokenize(sql: str) -> list[tuple[str, str]]:
    """Split *sql* into ``('string', …)``, ``('identifier', …)`` and ``('code', …)`` tokens."""
    tokens: list[tuple[str, str]] = []
    i = 0
    n = len(sql)
    last = 0

    while i < n:
        ch = sql[i]
        if ch in ("'", '"'):
            if i > last:
                tokens.append(("code", sql[last:i]))
            j = _scan_quoted(sql, i, ch)
            tokens.append(("string" if ch == "'" else "identifier", sql[i:j]))
            last = i = j
        else:
            i += 1

    if last < n:
        tokens.append(("code", sql[last:]))

    return tokens


# ---------------------------------------------------------------------------
# Numbering and normalization
# ---------------------------------------------------------------------------


def number_placeholders(sql: str, start: int = 1) -> tuple[str, int]:
    """Replace each ``?`` marker by ``$n``, counting up from *start*.

    Returns:
        The numbered SQL and the count of markers replaced.
    """
    counter = start
    parts: list[str] = []
    for kind, content in _tokenize(sql):
        if kind != "code" or "?" not in content:
            parts.append(content)
            continue
        for ch in content:
            if ch == "?":
                parts.append(f"${counter}")
                counter += 1
            else:
                parts.append(ch)
    return "".join(parts), counter - start


def normalize_params(sql: str, paramstyle: str) -> str:
    """Convert ``$n`` markers to the target param style.

    Args:
        sql: SQL string with numbered ``$n`` markers.
        paramstyle: ``numeric`` (no conversion), ``qmark`` (``?``) or
            ``format`` (``%s``, with literal ``%`` doubled).

    Returns:
        SQL with markers converted to the target style.
    """
    if paramstyle == "numeric":
        return sql
    if paramstyle not in ("qmark", "format"):
        raise ValueError(f"Unknown paramstyle: {paramstyle}")
    return _convert(sql, paramstyle)


@lru_cache(maxsize=256)
def _convert(sql: str, paramstyle: str) -> str:
    """Rewrite numbered markers, preserving string literals and identifiers."""
    marker = "?" if paramstyle == "qmark" else "%s"
    parts: list[str] = []
    for kind, content in _tokenize(sql):
        if paramstyle == "format":
            content = content.replace("%", "%%")
        if kind == "code":
            content = _NUMBERED_PATTERN.sub(marker, content)
        parts.append(content)
    return "".join(parts)
