"""SheetState: an immutable snapshot of cells, grid metadata and the graph."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from sheetcalc._address import letters_from_index
from sheetcalc._cell import Cell, ColumnConfig, RowConfig
from sheetcalc.calc._graph import DependencyGraph

DEFAULT_ROW_COUNT = 100
DEFAULT_COLUMN_COUNT = 26


def initial_rows(count: int = DEFAULT_ROW_COUNT) -> dict[int, RowConfig]:
    return {r: RowConfig() for r in range(1, count + 1)}


def initial_columns(count: int = DEFAULT_COLUMN_COUNT) -> dict[str, ColumnConfig]:
    return {letters_from_index(c): ColumnConfig() for c in range(count)}


@dataclass(frozen=True)
class SheetState:
    """Everything one spreadsheet knows, frozen at a point in time.

    Operations take a state and return a new one. ``graph`` is never mutated
    once the state is built and is read-only for callers: states that only
    change formats or sizes share it. Edits work on ``graph.copy()``.
    """

    cells: Mapping[str, Cell] = field(default_factory=dict)
    rows: Mapping[int, RowConfig] = field(default_factory=initial_rows)
    columns: Mapping[str, ColumnConfig] = field(default_factory=initial_columns)
    graph: DependencyGraph = field(default_factory=DependencyGraph)

    def __post_init__(self) -> None:
        # Read-only views over private copies
        object.__setattr__(self, "cells", MappingProxyType(dict(self.cells)))
        object.__setattr__(self, "rows", MappingProxyType(dict(self.rows)))
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    @classmethod
    def create(
        cls,
        cells: Mapping[str, Cell] | None = None,
        rows: Mapping[int, RowConfig] | None = None,
        columns: Mapping[str, ColumnConfig] | None = None,
    ) -> SheetState:
        """Build a state from collaborator data, rebuilding the graph."""
        cells = dict(cells or {})
        return cls(
            cells=cells,
            rows=dict(rows) if rows is not None else initial_rows(),
            columns=dict(columns) if columns is not None else initial_columns(),
            graph=DependencyGraph.from_cells(cells),
        )

    def display_value(self, cell_id: str) -> str:
        """Display text of a cell, ``""`` when it does not exist."""
        cell = self.cells.get(cell_id)
        return cell.display_value if cell is not None else ""
