"""Typed reads and writes over raw cell values.

A value that cannot be converted to the requested type yields that type's
default instead of raising. Callers that need to tell "zero" from
"missing" use the ``ReadResult`` returned by the views.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, TypeVar, cast

from recipe_workbook.services.cell_store import CellStore
from recipe_workbook.utils.exceptions import UnsupportedCellTypeError

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

_TRUE_LABELS = frozenset({"true", "1"})

DEFAULTS: dict[type, Any] = {
    int: 0,
    float: 0.0,
    str: "",
    bool: False,
    object: None,
}


def is_enum_type(target: Any) -> bool:
    return isinstance(target, type) and issubclass(target, Enum)


def zero_member(enum_type: type[E]) -> E:
    """First declared member, used as the enum's default value."""
    return next(iter(enum_type))


def default_for(target: type[T]) -> T:
    """Default value substituted when a typed read fails."""
    if is_enum_type(target):
        return cast(T, zero_member(cast(type[Enum], target)))
    if target not in DEFAULTS:
        raise UnsupportedCellTypeError(target)
    return cast(T, DEFAULTS[target])


def _to_number(raw: Any) -> float | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, (int, float, Decimal)):
        value = float(raw)
        return value if math.isfinite(value) else None
    if isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
        return value if math.isfinite(value) else None
    return None


def _to_int(raw: Any) -> int:
    if isinstance(raw, int):
        return int(raw)
    number = _to_number(raw)
    return 0 if number is None else int(round(number))


def _to_float(raw: Any) -> float:
    number = _to_number(raw)
    return 0.0 if number is None else number


def _to_str(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, Enum):
        return raw.name
    return str(raw)


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.strip().lower() in _TRUE_LABELS
    number = _to_number(raw)
    return bool(number) if number is not None else False


def coerce(raw: Any, target: type[T]) -> T:
    """Convert a raw cell value to ``target``.

    Supported targets are ``int``, ``float``, ``str``, ``bool``, ``object``
    (no conversion) and Enum subclasses (parsed by member name).

    Raises:
        UnsupportedCellTypeError: For any other target type.
    """
    if target is object:
        return cast(T, raw)
    if is_enum_type(target):
        return cast(T, parse_enum(raw, cast(type[Enum], target)).value)
    if target is bool:
        return cast(T, _to_bool(raw))
    if target is int:
        return cast(T, _to_int(raw))
    if target is float:
        return cast(T, _to_float(raw))
    if target is str:
        return cast(T, _to_str(raw))
    raise UnsupportedCellTypeError(target)


def to_cell_value(value: Any) -> Any:
    """Representation written to the store for ``value``."""
    if isinstance(value, Enum):
        return value.name
    return value


@dataclass(frozen=True)
class EnumLabel(Generic[E]):
    """Result of matching a cell label against enum member names."""

    value: E
    label: str
    matched: bool

    @property
    def blank(self) -> bool:
        return not self.label


def parse_enum(raw: Any, enum_type: type[E]) -> EnumLabel[E]:
    """Match a cell's text case-sensitively against ``enum_type`` member names.

    Outer whitespace is ignored. Blank cells and unknown labels both come
    back unmatched with the zero member; ``blank`` tells them apart.
    """
    label = _to_str(raw).strip()
    member = enum_type.__members__.get(label) if label else None
    if member is None:
        return EnumLabel(value=zero_member(enum_type), label=label, matched=False)
    return EnumLabel(value=member, label=label, matched=True)


class TypedCellAccessor:
    """Typed get/set over absolute coordinates of a ``CellStore``."""

    def __init__(self, store: CellStore) -> None:
        self._store = store

    @property
    def store(self) -> CellStore:
        return self._store

    def get_raw(self, row: int, col: int) -> Any:
        return self._store.get_cell(row, col)

    def get(self, row: int, col: int, as_type: type[T]) -> T:
        return coerce(self._store.get_cell(row, col), as_type)

    def get_enum(self, row: int, col: int, enum_type: type[E]) -> EnumLabel[E]:
        return parse_enum(self._store.get_cell(row, col), enum_type)

    def set(self, row: int, col: int, value: Any) -> None:
        self._store.set_cell(row, col, to_cell_value(value))
