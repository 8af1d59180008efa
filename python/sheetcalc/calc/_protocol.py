"""CalcEngine protocol and result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sheetcalc._cell import Cell
    from sheetcalc._state import SheetState


@dataclass(frozen=True)
class CellDelta:
    """A single cell's display change from recalculation."""

    cell_ref: str
    old_value: str | None  # None when the cell did not exist
    new_value: str
    formula: str | None = None  # the formula that produced new_value

    @property
    def changed(self) -> bool:
        return self.old_value != self.new_value


@dataclass(frozen=True)
class EditResult:
    """Outcome of one edit: the written cells and the recalculation batch."""

    cells: tuple[Cell, ...]  # cells written by the edit itself
    deltas: tuple[CellDelta, ...] = ()  # dependents re-evaluated, in order

    @property
    def cell(self) -> Cell:
        """The edited cell, for single-cell edits."""
        return self.cells[0]

    @property
    def recalculated(self) -> list[str]:
        return [d.cell_ref for d in self.deltas]


@runtime_checkable
class CalcEngine(Protocol):
    """Operations the view/state layer calls on a spreadsheet engine."""

    def set_cell_value(self, cell_id: str, value: str) -> EditResult:
        """Write raw text to a cell and recalculate its dependents."""
        ...

    def evaluate(self, formula: str) -> Any:
        """Evaluate *formula* against the current cells without storing it."""
        ...

    def expand_range(self, range_text: str) -> list[str]:
        """Expand a range into its addresses, row-major."""
        ...

    def insert_row(self, row: int) -> SheetState:
        ...

    def delete_row(self, row: int) -> SheetState:
        ...

    def insert_column(self, column: str | int) -> SheetState:
        ...

    def delete_column(self, column: str | int) -> SheetState:
        ...
