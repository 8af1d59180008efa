"""Spreadsheet: the engine object the view/state layer talks to.

Owns one :class:`SheetState` and replaces it wholesale after each operation.
Collaborators read ``state`` (or ``cells``/``rows``/``columns``) between
operations; those snapshots are read-only and never change afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sheetcalc import _edits, _structure
from sheetcalc._address import expand_range
from sheetcalc._cell import Cell, ColumnConfig, RowConfig
from sheetcalc._state import (
    DEFAULT_COLUMN_COUNT,
    DEFAULT_ROW_COUNT,
    SheetState,
    initial_columns,
    initial_rows,
)
from sheetcalc.calc._evaluator import FormulaEvaluator
from sheetcalc.calc._functions import FunctionRegistry
from sheetcalc.calc._graph import DependencyGraph
from sheetcalc.calc._protocol import EditResult


class Spreadsheet:
    """A single sheet: cell store, grid metadata and dependency graph.

    Usage::

        sheet = Spreadsheet()
        sheet.set_cell_value("A1", "5")
        result = sheet.set_cell_value("B1", "=SUM(A1)")
        sheet.set_cell_value("A1", "10").recalculated  # ["B1"]
    """

    __slots__ = ("_state", "_evaluator")

    def __init__(
        self,
        n_rows: int = DEFAULT_ROW_COUNT,
        n_columns: int = DEFAULT_COLUMN_COUNT,
        functions: FunctionRegistry | None = None,
    ) -> None:
        self._evaluator = FormulaEvaluator(functions)
        self._state = SheetState(
            rows=initial_rows(n_rows),
            columns=initial_columns(n_columns),
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def state(self) -> SheetState:
        return self._state

    @property
    def cells(self) -> Mapping[str, Cell]:
        return self._state.cells

    @property
    def rows(self) -> Mapping[int, RowConfig]:
        return self._state.rows

    @property
    def columns(self) -> Mapping[str, ColumnConfig]:
        return self._state.columns

    @property
    def graph(self) -> DependencyGraph:
        """A copy of the current graph; snapshots may share the original."""
        return self._state.graph.copy()

    @property
    def functions(self) -> FunctionRegistry:
        return self._evaluator.functions

    def __getitem__(self, cell_id: str) -> Cell:
        return self._state.cells[cell_id]

    def __contains__(self, cell_id: object) -> bool:
        return cell_id in self._state.cells

    def display_value(self, cell_id: str) -> str:
        return self._state.display_value(cell_id)

    def load_state(
        self,
        cells: Mapping[str, Cell],
        rows: Mapping[int, RowConfig] | None = None,
        columns: Mapping[str, ColumnConfig] | None = None,
    ) -> SheetState:
        """Replace everything with collaborator data (e.g. a loaded file)."""
        self._state = _edits.load_state(cells, rows, columns)
        return self._state

    # ------------------------------------------------------------------
    # Cell edits
    # ------------------------------------------------------------------

    def set_cell_value(self, cell_id: str, value: str) -> EditResult:
        self._state, result = _edits.set_cell_value(self._state, cell_id, value, self._evaluator)
        return result

    def set_cell_values(self, updates: Mapping[str, str]) -> EditResult:
        """Write several cells (e.g. a drag-fill) as one recalculation batch."""
        self._state, result = _edits.set_cell_values(self._state, updates, self._evaluator)
        return result

    def set_cell_format(self, cell_id: str, **changes: Any) -> Cell:
        self._state = _edits.set_cell_format(self._state, cell_id, **changes)
        return self._state.cells[cell_id]

    def resize_row(self, row: int, height: int) -> SheetState:
        self._state = _edits.resize_row(self._state, row, height)
        return self._state

    def resize_column(self, column: str, width: int) -> SheetState:
        self._state = _edits.resize_column(self._state, column, width)
        return self._state

    # ------------------------------------------------------------------
    # Read-only helpers
    # ------------------------------------------------------------------

    def evaluate(self, formula: str) -> Any:
        """Preview *formula* against the current cells; nothing is stored."""
        return self._evaluator.evaluate(formula, self._state.cells)

    def expand_range(self, range_text: str) -> list[str]:
        return expand_range(range_text)

    def find_cells(
        self,
        find: str,
        range_text: str | None = None,
        match_case: bool = False,
        match_entire_cell: bool = False,
    ) -> list[str]:
        return _structure.find_cells(self._state, find, range_text, match_case, match_entire_cell)

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def insert_row(self, row: int) -> SheetState:
        self._state = _structure.insert_row(self._state, row)
        return self._state

    def delete_row(self, row: int) -> SheetState:
        self._state = _structure.delete_row(self._state, row)
        return self._state

    def insert_column(self, column: str | int) -> SheetState:
        self._state = _structure.insert_column(self._state, column)
        return self._state

    def delete_column(self, column: str | int) -> SheetState:
        self._state = _structure.delete_column(self._state, column)
        return self._state

    def remove_duplicate_rows(
        self,
        range_text: str,
        columns_to_check: Iterable[str | int],
        has_header_row: bool = False,
    ) -> SheetState:
        self._state = _structure.remove_duplicate_rows(
            self._state, range_text, columns_to_check, has_header_row,
        )
        return self._state

    def find_and_replace(
        self,
        find: str,
        replace_with: str,
        range_text: str | None = None,
        match_case: bool = False,
        match_entire_cell: bool = False,
    ) -> SheetState:
        self._state = _structure.find_and_replace(
            self._state, find, replace_with, range_text,
            match_case, match_entire_cell, self._evaluator,
        )
        return self._state

    def __repr__(self) -> str:
        return f"<Spreadsheet cells={len(self._state.cells)} formulas={len(self._state.graph.dependencies)}>"
