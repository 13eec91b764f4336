"""Tests for RangeView."""

from openpyxl import Workbook

from recipe_workbook.models import Rarity
from recipe_workbook.services.cell_store import defined_name_region
from recipe_workbook.services.workbook_index import WorkbookIndex
from recipe_workbook.utils.diagnostics import DiagnosticLog
from recipe_workbook.utils.exceptions import ErrorCode


class TestReads:
    """Tests for positional reads."""

    def test_shape(self, grid_index: WorkbookIndex) -> None:
        """Extent comes from the destination."""
        prices = grid_index.require_range("Prices")
        assert (prices.row_count, prices.column_count) == (2, 2)
        assert prices.sheet_title == "Ranges"

    def test_get_values(self, grid_index: WorkbookIndex) -> None:
        """The whole range reads row by row."""
        assert grid_index.require_range("Prices").get_values(int) == [[1, 2], [3, 4]]

    def test_get_value_defaults_to_anchor(self, grid_index: WorkbookIndex) -> None:
        """(1, 1) is the anchor cell."""
        assert grid_index.require_range("Anchor").get_value() == "start"
        assert grid_index.require_range("Prices").get_value(2, 2, float) == 4.0

    def test_row_out_of_range(
        self, grid_index: WorkbookIndex, diagnostics: DiagnosticLog
    ) -> None:
        """Rows past the extent report and default."""
        result = grid_index.require_range("Prices").read_value(3, 1, int)
        assert result.found is False
        assert result.value == 0
        assert diagnostics.entries[0].code == ErrorCode.ROW_OUT_OF_RANGE

    def test_column_out_of_range(
        self, grid_index: WorkbookIndex, diagnostics: DiagnosticLog
    ) -> None:
        """Columns past the extent report their own code."""
        assert grid_index.require_range("Prices").get_value(1, 3, int) == 0
        assert diagnostics.entries[0].code == ErrorCode.COLUMN_OUT_OF_RANGE
        assert "Valid columns are 1 - 2" in diagnostics.entries[0].message

    def test_get_enum(
        self, grid_index: WorkbookIndex, diagnostics: DiagnosticLog
    ) -> None:
        """Known, unknown and blank labels."""
        labels = grid_index.require_range("Labels")

        assert labels.get_enum(Rarity, row=1).value is Rarity.Rare
        assert labels.get_enum(Rarity, row=2).value is Rarity.Unset
        assert len(diagnostics) == 1
        assert diagnostics.entries[0].code == ErrorCode.ENUM_LABEL_NOT_FOUND

        assert labels.get_enum(Rarity, row=3).found is False
        assert len(diagnostics) == 1


class TestWrites:
    """Tests for writes and growth."""

    def test_set_value(self, grid_index: WorkbookIndex, grid_workbook: Workbook) -> None:
        """Writes land at the offset from the anchor."""
        prices = grid_index.require_range("Prices")
        assert prices.set_value(9, row=2, col=1) is True
        assert grid_workbook["Ranges"]["F3"].value == 9
        assert prices.set_value(9, row=5) is False

    def test_set_values_grows(
        self, grid_index: WorkbookIndex, grid_workbook: Workbook
    ) -> None:
        """A larger grid grows the range and moves names below it."""
        prices = grid_index.require_range("Prices")
        anchor = grid_index.require_range("Anchor")

        prices.set_values([[1, 2, 3], [4, 5, 6], [7, 8, 9]])

        sheet, region = defined_name_region(grid_workbook.defined_names["Prices"])
        assert (sheet, region.ref) == ("Ranges", "F2:H4")
        assert prices.get_values(int) == [[1, 2, 3], [4, 5, 6], [7, 8, 9]]
        assert anchor.region.ref == "F7"
        assert anchor.get_value() == "start"

    def test_set_values_ragged(self, grid_index: WorkbookIndex) -> None:
        """Ragged rows grow the range to the widest row."""
        prices = grid_index.require_range("Prices")
        prices.set_values([[1], [2, 3, 4]])
        assert (prices.row_count, prices.column_count) == (2, 3)
        assert prices.get_values()[1] == [2, 3, 4]

    def test_expand_single_cell(self, grid_index: WorkbookIndex) -> None:
        """A single-cell name stretches from its anchor."""
        anchor = grid_index.require_range("Anchor")

        anchor.expand_to_fit(3, 2)

        assert anchor.region.ref == "F6:G8"
        assert anchor.get_value() == "start"
        assert anchor.get_value(3, 2) is None

    def test_expand_smaller_is_noop(self, grid_index: WorkbookIndex) -> None:
        """Ranges never shrink."""
        prices = grid_index.require_range("Prices")
        prices.expand_to_fit(1, 1)
        assert prices.region.ref == "F2:G3"

    def test_number_rows_and_columns(self, grid_index: WorkbookIndex) -> None:
        """Numbering fills the first column or row."""
        prices = grid_index.require_range("Prices")
        prices.number_rows()
        assert prices.get_values(int) == [[1, 2], [2, 4]]
        prices.number_columns()
        assert prices.get_values(int)[0] == [1, 2]
