"""Repository results."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class RepositoryResult(Generic[T]):
    """Records returned by a repository operation.

    The raw rows the records were mapped from stay available through
    ``rows`` until ``dispose()`` is called or the ``with`` block ends. The
    records themselves are never affected.
    """

    def __init__(self, models: list[T], rows: list[dict[str, Any]] | None = None) -> None:
        self.models = models
        self._rows: list[dict[str, Any]] = rows if rows is not None else []

    @property
    def rows(self) -> list[dict[str, Any]]:
        return self._rows

    def first(self) -> T | None:
        """First record, or None for an empty result."""
        return self.models[0] if self.models else None

    def dispose(self) -> None:
        """Release the raw rows."""
        self._rows = []

    def __enter__(self) -> RepositoryResult[T]:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.dispose()

    def __iter__(self) -> Iterator[T]:
        return iter(self.models)

    def __len__(self) -> int:
        return len(self.models)

    def __repr__(self) -> str:
        return f"RepositoryResult({len(self.models)} models)"
