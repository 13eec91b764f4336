"""Column-name to position lookup for a table header."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class ColumnIndex:
    """Maps header labels to zero-based column positions.

    Labels are trimmed once, when the index is built; lookups are exact and
    case-sensitive. Duplicate labels are not deduplicated: the later
    position wins in the mapping while ``names`` keeps every label.
    """

    def __init__(self, names: Iterable[str]) -> None:
        self._names: list[str] = []
        self._positions: dict[str, int] = {}
        for name in names:
            self._register(name.strip())

    def _register(self, name: str) -> int:
        position = len(self._names)
        self._names.append(name)
        self._positions[name] = position
        return position

    def resolve(self, name: str) -> int | None:
        """Position of ``name``, or None when the header has no such label."""
        return self._positions.get(name)

    def near_matches(self, name: str) -> list[str]:
        """Known labels equal to ``name`` ignoring case and outer whitespace."""
        wanted = name.strip().casefold()
        return [known for known in self._names if known.strip().casefold() == wanted]

    def append(self, name: str) -> int:
        """Register a new trailing column and return its position."""
        return self._register(name.strip())

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._positions

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)
