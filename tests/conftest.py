from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook
from openpyxl.workbook.defined_name import DefinedName
from openpyxl.worksheet.table import Table
from openpyxl.worksheet.worksheet import Worksheet

from recipe_workbook.config import Settings
from recipe_workbook.models import InventoryItem, MappingLookup, Rarity
from recipe_workbook.services.workbook_index import WorkbookIndex
from recipe_workbook.utils.diagnostics import DiagnosticLog

AddTable = Callable[..., Table]


def add_table(
    ws: Worksheet,
    name: str,
    top: int,
    left: int,
    header: Sequence[str],
    rows: Sequence[Sequence[Any]],
    totals: Sequence[Any] | None = None,
) -> Table:
    """Write a header, data rows and optional totals row, and register a table."""
    for offset, label in enumerate(header):
        ws.cell(row=top, column=left + offset).value = label
    for row_offset, values in enumerate(rows, start=1):
        for offset, value in enumerate(values):
            ws.cell(row=top + row_offset, column=left + offset).value = value
    bottom = top + len(rows)
    if totals is not None:
        bottom += 1
        for offset, value in enumerate(totals):
            ws.cell(row=bottom, column=left + offset).value = value

    start = ws.cell(row=top, column=left).coordinate
    end = ws.cell(row=bottom, column=left + len(header) - 1).coordinate
    table = Table(displayName=name, ref=f"{start}:{end}")
    if totals is not None:
        table.totalsRowCount = 1
    ws.add_table(table)
    return table


def add_range(wb: Workbook, name: str, destination: str) -> DefinedName:
    defined_name = DefinedName(name, attr_text=destination)
    wb.defined_names[name] = defined_name
    return defined_name


@pytest.fixture
def make_table() -> AddTable:
    return add_table


@pytest.fixture
def make_range() -> Callable[[Workbook, str, str], DefinedName]:
    return add_range


@pytest.fixture
def diagnostics() -> DiagnosticLog:
    return DiagnosticLog()


@pytest.fixture
def grid_workbook() -> Workbook:
    """One sheet of small tables plus a sheet of named ranges."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Sheet"
    add_table(
        ws,
        "Stock",
        top=2,
        left=2,
        header=["Name", " Count ", "Rarity"],
        rows=[
            ["Herb", 3, "Common"],
            ["Water", "7", "  Rare "],
            ["Ember", None, None],
        ],
    )
    add_table(ws, "Below", top=8, left=2, header=["Key", "Value"], rows=[["k", 1]])
    add_table(ws, "Empty", top=2, left=8, header=["Label", "Amount"], rows=[])

    totals = wb.create_sheet("Totals")
    add_table(
        totals,
        "Tally",
        top=1,
        left=1,
        header=["Item", "Qty"],
        rows=[["a", 1], ["b", 2]],
        totals=["Total", 3],
    )

    ranges = wb.create_sheet("Ranges")
    ranges["F2"], ranges["G2"] = 1, 2
    ranges["F3"], ranges["G3"] = 3, 4
    ranges["F6"] = "start"
    ranges["J2"] = "Rare"
    ranges["J3"] = "Mythic"
    add_range(wb, "Prices", "Ranges!$F$2:$G$3")
    add_range(wb, "Anchor", "Ranges!$F$6")
    add_range(wb, "Labels", "Ranges!$J$2:$J$4")
    return wb


@pytest.fixture
def grid_index(grid_workbook: Workbook, diagnostics: DiagnosticLog) -> WorkbookIndex:
    return WorkbookIndex.from_workbook(grid_workbook, diagnostics=diagnostics)


@pytest.fixture
def potion_workbook() -> Workbook:
    """Ingredients, potions and recipes laid out like the crafting workbook."""
    wb = Workbook()
    items = wb.active
    items.title = "Ingredients"
    add_table(
        items,
        "Ingredients",
        top=1,
        left=1,
        header=["Name", "Display Name", "Rarity", "Cost", "Uses"],
        rows=[
            ["Herb", None, "Common", 5, 3],
            ["Water", "Pure Water", "Uncommon", 2, 1],
            ["Ember", None, "Rare", 12, 2],
            [None, None, None, None, None],
        ],
    )

    potions = wb.create_sheet("Potions")
    add_table(
        potions,
        "Potions",
        top=1,
        left=1,
        header=["ID", "Name", "Rarity", "Cost", "Max Profit"],
        rows=[
            [1, "Potion A", "Rare", 40, 25],
            [2, "Potion B", "Epic", 90, 60],
        ],
    )

    recipes = wb.create_sheet("Recipes")
    add_table(
        recipes,
        "Recipes",
        top=1,
        left=1,
        header=["Potion", "Item 1", "Item 2", "Item 3"],
        rows=[
            ["Potion A", "Herb", "Water", None],
            ["Potion B", "Water", "Ember", "Herb"],
        ],
    )
    return wb


@pytest.fixture
def potion_index(potion_workbook: Workbook, diagnostics: DiagnosticLog) -> WorkbookIndex:
    return WorkbookIndex.from_workbook(potion_workbook, diagnostics=diagnostics)


@pytest.fixture
def potion_workbook_path(potion_workbook: Workbook, tmp_path: Path) -> Path:
    path = tmp_path / "PotionCrafting.xlsx"
    potion_workbook.save(path)
    return path


@pytest.fixture
def test_settings(potion_workbook_path: Path, tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        workbook_path=str(potion_workbook_path),
        catalog_path=str(tmp_path / "catalog.json"),
    )


@pytest.fixture
def items() -> dict[str, InventoryItem]:
    return {
        "Herb": InventoryItem(name="Herb", category="Ingredients", rarity=Rarity.Common),
        "Water": InventoryItem(name="Water", category="Ingredients"),
        "Ember": InventoryItem(name="Ember", category="Ingredients"),
        "Salt": InventoryItem(name="Salt", category="Ingredients"),
        "Potion A": InventoryItem(name="Potion A", category="Potions"),
        "Potion B": InventoryItem(name="Potion B", category="Potions"),
        "Sludge": InventoryItem(name="Sludge", category="Potions"),
    }


@pytest.fixture
def lookup(items: dict[str, InventoryItem]) -> MappingLookup:
    return MappingLookup(items)
