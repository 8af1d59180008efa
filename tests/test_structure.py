"""Tests for structural edits: rows/columns, duplicate removal, find/replace."""

from __future__ import annotations

import pytest
from sheetcalc import InvalidAddress, Spreadsheet
from sheetcalc._state import SheetState
from sheetcalc._structure import delete_row, find_cells, insert_row


def _values(sheet: Spreadsheet) -> dict[str, str]:
    """Non-empty raw values by address."""
    return {k: c.value for k, c in sheet.cells.items() if c.value}


@pytest.fixture
def sheet() -> Spreadsheet:
    return Spreadsheet()


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


class TestInsertRow:
    def test_shifts_cells_at_and_below(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "top", "A2": "mid", "B3": "low"})
        sheet.insert_row(2)
        assert _values(sheet) == {"A1": "top", "A3": "mid", "B4": "low"}
        assert sheet["A3"].id == "A3"

    def test_cells_above_untouched(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "top")
        before = sheet.state
        sheet.insert_row(5)
        assert sheet["A1"] is before.cells["A1"]

    def test_formula_text_kept(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "1", "A2": "2", "A3": "3"})
        sheet.set_cell_value("B5", "=SUM(A1:A3)")
        sheet.insert_row(2)
        assert "B5" not in sheet
        moved = sheet["B6"]
        assert moved.value == "=SUM(A1:A3)"
        assert moved.display_value == "6"
        assert moved.formula is not None
        assert moved.formula.expression == "SUM(A1:A3)"

    def test_graph_rebuilt_from_text(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "1")
        sheet.set_cell_value("B1", "=SUM(A1)")
        sheet.insert_row(1)
        # B2 still reads A1 (now empty); A2 holds the moved value
        assert sheet.graph.get_dependencies("B2") == {"A1"}
        assert sheet.graph.get_dependents("A1") == {"B2"}
        assert "B1" not in sheet.graph.dependencies
        sheet.set_cell_value("A1", "7")
        assert sheet.display_value("B2") == "7"

    def test_row_metadata(self, sheet: Spreadsheet) -> None:
        sheet.resize_row(1, 40)
        sheet.insert_row(1)
        assert len(sheet.rows) == 101
        assert sheet.rows[1].height == 25
        assert sheet.rows[2].height == 40

    def test_past_grid_adds_no_metadata(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A600", "far")
        sheet.insert_row(500)
        assert len(sheet.rows) == 100
        assert 500 not in sheet.rows
        assert _values(sheet) == {"A601": "far"}

    def test_directly_after_grid(self, sheet: Spreadsheet) -> None:
        sheet.insert_row(101)
        assert len(sheet.rows) == 101
        assert sheet.rows[101].height == 25

    def test_invalid_row(self, sheet: Spreadsheet) -> None:
        with pytest.raises(InvalidAddress, match="Invalid row number"):
            sheet.insert_row(0)

    def test_input_state_untouched(self) -> None:
        state = Spreadsheet().state
        new_state = insert_row(state, 1)
        assert len(state.rows) == 100
        assert len(new_state.rows) == 101


class TestDeleteRow:
    def test_drops_and_shifts(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "1", "A2": "2", "A3": "3", "C2": "x"})
        sheet.delete_row(2)
        assert _values(sheet) == {"A1": "1", "A2": "3"}
        assert "A3" not in sheet
        assert "C2" not in sheet

    def test_row_metadata(self, sheet: Spreadsheet) -> None:
        sheet.resize_row(3, 50)
        sheet.delete_row(2)
        assert len(sheet.rows) == 99
        assert sheet.rows[2].height == 50
        assert 100 not in sheet.rows

    def test_deleting_dependency_keeps_reference(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "4")
        sheet.set_cell_value("B3", "=SUM(A1)")
        sheet.delete_row(1)
        assert sheet["B2"].value == "=SUM(A1)"
        assert sheet.graph.get_dependencies("B2") == {"A1"}

    def test_invalid_row(self) -> None:
        with pytest.raises(InvalidAddress):
            delete_row(SheetState(), -1)


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------


class TestColumns:
    def test_insert_column_by_letter(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "x", "B1": "=UPPER(A1)", "C2": "y"})
        sheet.insert_column("B")
        assert _values(sheet) == {"A1": "x", "C1": "=UPPER(A1)", "D2": "y"}
        assert sheet.graph.get_dependents("A1") == {"C1"}

    def test_insert_column_by_index(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("B1", "b")
        sheet.insert_column(1)
        assert _values(sheet) == {"C1": "b"}

    def test_insert_column_metadata(self, sheet: Spreadsheet) -> None:
        sheet.resize_column("A", 50)
        sheet.insert_column("A")
        assert len(sheet.columns) == 27
        assert sheet.columns["A"].width == 100
        assert sheet.columns["B"].width == 50
        assert "AA" in sheet.columns

    def test_insert_column_past_grid(self, sheet: Spreadsheet) -> None:
        sheet.insert_column("AD")
        assert len(sheet.columns) == 26
        assert "AD" not in sheet.columns
        sheet.insert_column("AA")
        assert len(sheet.columns) == 27
        assert sheet.columns["AA"].width == 100

    def test_insert_past_z(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("Z1", "z")
        sheet.insert_column("Z")
        assert _values(sheet) == {"AA1": "z"}

    def test_delete_column(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "a", "B1": "b", "C1": "c", "C9": "c9"})
        sheet.resize_column("C", 70)
        sheet.delete_column("B")
        assert _values(sheet) == {"A1": "a", "B1": "c", "B9": "c9"}
        assert sheet["B1"].id == "B1"
        assert len(sheet.columns) == 25
        assert sheet.columns["B"].width == 70
        assert "Z" not in sheet.columns

    def test_invalid_column(self, sheet: Spreadsheet) -> None:
        with pytest.raises(InvalidAddress):
            sheet.insert_column("1")
        with pytest.raises(InvalidAddress):
            sheet.delete_column(-1)


# ---------------------------------------------------------------------------
# Remove duplicates
# ---------------------------------------------------------------------------


class TestRemoveDuplicateRows:
    def test_header_and_first_occurrence_kept(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({
            "A1": "Name", "B1": "Score",
            "A2": "x", "B2": "1",
            "A3": "x", "B3": "2",
        })
        sheet.remove_duplicate_rows("A1:B3", ["A"], has_header_row=True)
        assert _values(sheet) == {"A1": "Name", "B1": "Score", "A2": "x", "B2": "1"}
        # The vacated row is cleared, not removed
        assert sheet["A3"].value == ""
        assert sheet["B3"].type == "text"

    def test_survivors_packed(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "a", "A2": "b", "A3": "a", "A4": "c"})
        sheet.set_cell_format("A4", bold=True)
        sheet.remove_duplicate_rows("A1:A4", ["A"])
        assert _values(sheet) == {"A1": "a", "A2": "b", "A3": "c"}
        assert sheet["A3"].format.bold
        assert sheet["A3"].id == "A3"

    def test_composite_key(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({
            "A1": "x", "B1": "1", "C1": "first",
            "A2": "x", "B2": "2", "C2": "second",
            "A3": "x", "B3": "1", "C3": "third",
        })
        sheet.remove_duplicate_rows("A1:C3", ["A", "B"])
        assert _values(sheet) == {
            "A1": "x", "B1": "1", "C1": "first",
            "A2": "x", "B2": "2", "C2": "second",
        }

    def test_exact_match_only(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "x", "A2": "X", "A3": "x "})
        before = sheet.state
        sheet.remove_duplicate_rows("A1:A3", ["A"])
        assert sheet.state is before

    def test_empty_cells_form_keys(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"B1": "one", "B2": "two"})
        sheet.remove_duplicate_rows("A1:B2", [0])
        assert _values(sheet) == {"B1": "one"}

    def test_columns_outside_range_give_empty_key(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "x", "A2": "y", "A3": "z"})
        sheet.remove_duplicate_rows("A1:A3", ["D"])
        assert _values(sheet) == {"A1": "x"}

    def test_columns_outside_range_with_header(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "h", "A2": "x", "A3": "y"})
        sheet.remove_duplicate_rows("A1:A3", ["C"], has_header_row=True)
        assert _values(sheet) == {"A1": "h", "A2": "x"}

    def test_no_columns_is_noop(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "x", "A2": "x"})
        before = sheet.state
        sheet.remove_duplicate_rows("A1:A2", [])
        assert sheet.state is before

    def test_formula_rows_move_with_text(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "1", "A2": "1", "A3": "5"})
        sheet.set_cell_value("B3", "=SUM(A3)")
        sheet.remove_duplicate_rows("A1:B3", ["A"])
        assert sheet["B2"].value == "=SUM(A3)"
        assert sheet["B2"].display_value == "5"
        assert sheet.graph.get_dependencies("B2") == {"A3"}
        assert "B3" not in sheet.graph.dependencies

    def test_cells_outside_range_untouched(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "x", "A2": "x", "B2": "keep", "A5": "below"})
        sheet.remove_duplicate_rows("A1:A2", ["A"])
        assert _values(sheet) == {"A1": "x", "B2": "keep", "A5": "below"}


# ---------------------------------------------------------------------------
# Find / replace
# ---------------------------------------------------------------------------


class TestFindAndReplace:
    def test_case_insensitive_replace_all(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "Apple pie APPLE", "A2": "banana"})
        sheet.find_and_replace("apple", "pear")
        assert sheet["A1"].value == "pear pie pear"
        assert sheet["A1"].display_value == "pear pie pear"
        assert sheet["A2"].value == "banana"

    def test_match_case(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "apple", "A2": "Apple"})
        sheet.find_and_replace("apple", "pear", match_case=True)
        assert _values(sheet) == {"A1": "pear", "A2": "Apple"}

    def test_match_entire_cell(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "apple pie", "A2": "APPLE"})
        sheet.find_and_replace("apple", "pear", match_entire_cell=True)
        assert _values(sheet) == {"A1": "apple pie", "A2": "pear"}

    def test_metacharacters_literal(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "a.b", "A2": "axb", "A3": "(1)"})
        sheet.find_and_replace(".", "!")
        sheet.find_and_replace("(1)", r"\1")
        assert _values(sheet) == {"A1": "a!b", "A2": "axb", "A3": r"\1"}

    def test_formula_cells_excluded(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "=UPPER(B1)")
        before = sheet.state
        sheet.find_and_replace("UPPER", "LOWER")
        assert sheet.state is before
        assert sheet["A1"].value == "=UPPER(B1)"

    def test_retyped(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "abc", "A2": "text"})
        sheet.find_and_replace("abc", "42")
        sheet.find_and_replace("text", "=SUM(A1)")
        assert sheet["A1"].type == "number"
        assert sheet["A2"].type == "text"
        assert sheet["A2"].formula is None
        assert sheet["A2"].display_value == "=SUM(A1)"

    def test_dependents_recalculated(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "100")
        sheet.set_cell_value("B1", "=SUM(A1)")
        sheet.find_and_replace("1", "2")
        assert sheet["A1"].value == "200"
        assert sheet.display_value("B1") == "200"

    def test_range_limited(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "x", "A2": "x", "B1": "x"})
        sheet.find_and_replace("x", "y", range_text="A1:A2")
        assert _values(sheet) == {"A1": "y", "A2": "y", "B1": "x"}

    def test_range_with_missing_cells(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("C3", "x")
        sheet.find_and_replace("x", "y", range_text="A1:C3")
        assert sheet["C3"].value == "y"
        assert "A1" not in sheet

    def test_empty_find_is_noop(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "x")
        before = sheet.state
        sheet.find_and_replace("", "y")
        assert sheet.state is before

    def test_no_match_is_noop(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "x")
        before = sheet.state
        assert sheet.find_and_replace("zzz", "y") is before

    def test_format_kept(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "x")
        sheet.set_cell_format("A1", italic=True)
        sheet.find_and_replace("x", "y")
        assert sheet["A1"].format.italic


class TestFindCells:
    def test_matches(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "Cat", "A2": "dog", "A3": "cats", "B1": "=LOWER(A1)"})
        assert sorted(sheet.find_cells("cat")) == ["A1", "A3"]
        assert sheet.find_cells("cat", match_case=True) == ["A3"]
        assert sheet.find_cells("cat", match_entire_cell=True) == ["A1"]

    def test_range(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_values({"A1": "x", "B2": "x", "C3": "x"})
        assert find_cells(sheet.state, "x", "A1:B2") == ["A1", "B2"]

    def test_empty_find(self, sheet: Spreadsheet) -> None:
        sheet.set_cell_value("A1", "x")
        assert sheet.find_cells("") == []
