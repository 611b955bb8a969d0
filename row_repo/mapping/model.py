"""Simple row-to-model mapper.

Supports dataclasses, Pydantic models, and plain classes.
"""

from __future__ import annotations

import dataclasses
import inspect
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from row_repo.core.exceptions import FieldColumnMismatchError, TypeMismatchError

T = TypeVar("T")


def _is_pydantic_model(cls: type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def _signature_fields(cls: type) -> tuple[list[str] | None, set[str]]:
    """Return (accepted keyword names or None for **kwargs, required names)."""
    accepted: list[str] = []
    required: set[str] = set()
    for name, param in inspect.signature(cls).parameters.items():
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            return None, required
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.POSITIONAL_ONLY):
            continue
        accepted.append(name)
        if param.default is inspect.Parameter.empty:
            required.add(name)
    return accepted, required


def model_fields(cls: type) -> list[str]:
    """List the field names a model class is built from, in declaration order."""
    if _is_pydantic_model(cls):
        return list(cls.model_fields)  # type: ignore[attr-defined]
    if dataclasses.is_dataclass(cls):
        return [f.name for f in dataclasses.fields(cls) if f.init]
    accepted, _ = _signature_fields(cls)
    if accepted is None:
        raise TypeError(f"Cannot infer fields of {cls.__name__} from a **kwargs constructor")
    return list(accepted)


class ModelMapper(Generic[T]):
    """Simple row-to-model mapper.

    Detection order:
    1. Pydantic BaseModel -> model_validate(row)
    2. dataclass -> target_class(**row), restricted to init fields
    3. Plain class -> target_class(**row), restricted to constructor parameters

    Columns without a matching field are ignored; fields without a matching
    column raise FieldColumnMismatchError unless they have a default.

    Args:
        target_class: The class to construct from row data.
        aliases: Optional column-name to field-name mapping.
    """

    def __init__(
        self,
        target_class: type[T],
        aliases: dict[str, str] | None = None,
    ) -> None:
        self._target_class = target_class
        self._aliases = aliases
        self._is_pydantic = _is_pydantic_model(target_class)
        self._accepted: set[str] | None = None
        self._required: set[str] = set()
        if not self._is_pydantic:
            if dataclasses.is_dataclass(target_class):
                init_fields = [f for f in dataclasses.fields(target_class) if f.init]
                self._accepted = {f.name for f in init_fields}
                self._required = {
                    f.name
                    for f in init_fields
                    if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
                }
            else:
                accepted, self._required = _signature_fields(target_class)
                self._accepted = set(accepted) if accepted is not None else None

    def _apply_aliases(self, row: dict[str, Any]) -> dict[str, Any]:
        """Apply column aliases to the row."""
        if not self._aliases:
            return row
        result = {}
        for key, value in row.items():
            mapped_key = self._aliases.get(key, key)
            result[mapped_key] = value
        return result

    def map_one(self, row: dict[str, Any]) -> T:
        """Map a single row to target_class instance."""
        row = self._apply_aliases(row)
        name = self._target_class.__name__

        if self._is_pydantic:
            try:
                return self._target_class.model_validate(row)  # type: ignore[attr-defined, no-any-return]
            except ValidationError as e:
                errors = e.errors()
                missing = [".".join(str(p) for p in err["loc"]) for err in errors if err["type"] == "missing"]
                if missing and len(missing) == len(errors):
                    raise FieldColumnMismatchError(name, missing) from e
                raise TypeMismatchError(name, str(e)) from e

        missing = sorted(self._required - row.keys())
        if missing:
            raise FieldColumnMismatchError(name, missing)

        if self._accepted is not None:
            row = {k: v for k, v in row.items() if k in self._accepted}
        try:
            return self._target_class(**row)
        except (TypeError, ValueError) as e:
            raise TypeMismatchError(name, str(e)) from e

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Map all rows via map_one."""
        return [self.map_one(row) for row in rows]
