"""Rectangular cell regions and qualified range addresses."""

from __future__ import annotations

from dataclasses import dataclass, replace

from openpyxl.utils import quote_sheetname
from openpyxl.utils.cell import (
    absolute_coordinate,
    get_column_letter,
    range_boundaries,
)


@dataclass(frozen=True)
class CellRegion:
    """A 1-based, inclusive rectangle of worksheet cells."""

    min_row: int
    min_col: int
    max_row: int
    max_col: int

    def __post_init__(self) -> None:
        if self.min_row < 1 or self.min_col < 1:
            raise ValueError(f"Region must start at row/column >= 1: {self}")
        if self.max_row < self.min_row or self.max_col < self.min_col:
            raise ValueError(f"Region bounds are inverted: {self}")

    @classmethod
    def from_ref(cls, ref: str) -> CellRegion:
        """Parse an A1 reference such as ``A1:C4`` or ``$B$2``.

        Raises:
            ValueError: If the reference is not a bounded cell range.
        """
        min_col, min_row, max_col, max_row = range_boundaries(ref.replace("$", ""))
        if None in (min_col, min_row, max_col, max_row):
            raise ValueError(f"Reference '{ref}' is not a bounded cell range")
        return cls(min_row=min_row, min_col=min_col, max_row=max_row, max_col=max_col)

    @property
    def rows(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def columns(self) -> int:
        return self.max_col - self.min_col + 1

    @property
    def ref(self) -> str:
        start = f"{get_column_letter(self.min_col)}{self.min_row}"
        end = f"{get_column_letter(self.max_col)}{self.max_row}"
        return start if start == end else f"{start}:{end}"

    @property
    def absolute_ref(self) -> str:
        return absolute_coordinate(self.ref)

    def resized(self, rows: int | None = None, columns: int | None = None) -> CellRegion:
        """Return a region with the same anchor and a new extent."""
        return replace(
            self,
            max_row=self.max_row if rows is None else self.min_row + rows - 1,
            max_col=self.max_col if columns is None else self.min_col + columns - 1,
        )

    def after_row_insert(self, at: int, count: int) -> CellRegion:
        """Where this region ends up after ``count`` rows are inserted before ``at``.

        Regions at or below the insertion point move down; regions that
        straddle it stretch.
        """
        if at <= self.min_row:
            return replace(
                self, min_row=self.min_row + count, max_row=self.max_row + count
            )
        if at <= self.max_row:
            return replace(self, max_row=self.max_row + count)
        return self

    def after_column_insert(self, at: int, count: int) -> CellRegion:
        """Column counterpart of :meth:`after_row_insert`."""
        if at <= self.min_col:
            return replace(
                self, min_col=self.min_col + count, max_col=self.max_col + count
            )
        if at <= self.max_col:
            return replace(self, max_col=self.max_col + count)
        return self


def split_qualified_address(address: str) -> tuple[str | None, str]:
    """Split ``'Sheet Name'!$A$1:$B$2`` into the sheet title and cell part.

    Surrounding quotes are stripped from the sheet title and doubled quotes
    inside it are unescaped. ``$`` markers are removed from the cell part.
    An address without ``!`` returns ``None`` for the sheet.
    """
    text = address.strip().lstrip("=")
    if text.startswith("'"):
        # Quoted titles may themselves contain "!" and escaped "''".
        index = 1
        while index < len(text):
            if text[index] == "'":
                if text[index + 1 : index + 2] == "'":
                    index += 2
                    continue
                break
            index += 1
        sheet = text[1:index].replace("''", "'")
        rest = text[index + 1 :]
        if not rest.startswith("!"):
            raise ValueError(f"Address '{address}' has no cell reference")
        return sheet, rest[1:].replace("$", "")

    if "!" not in text:
        return None, text.replace("$", "")
    sheet, cells = text.split("!", 1)
    return sheet, cells.replace("$", "")


def qualify_address(sheet: str, region: CellRegion) -> str:
    """Render a sheet-qualified absolute address for a defined name."""
    return f"{quote_sheetname(sheet)}!{region.absolute_ref}"
