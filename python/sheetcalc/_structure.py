"""Structural edits: row/column insert and delete, duplicate removal, find/replace.

All operations are pure: they read a SheetState and return a new one. Row and
column shifts re-key cells and grid metadata, then rebuild the dependency
graph from scratch. Formula text is left as written; only the cell's own
address moves.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import replace

from sheetcalc._address import (
    InvalidAddress,
    address_to_colrow,
    column_index,
    expand_range,
    index_from_letters,
    letters_from_index,
    make_address,
    range_bounds,
)
from sheetcalc._cell import Cell, ColumnConfig, RowConfig, detect_cell_type
from sheetcalc._edits import recalculate
from sheetcalc._state import SheetState
from sheetcalc.calc._evaluator import FormulaEvaluator
from sheetcalc.calc._graph import DependencyGraph

logger = logging.getLogger(__name__)


def rebuild_graph(cells: Mapping[str, Cell]) -> DependencyGraph:
    """Fresh graph over *cells*, from each formula's stored text."""
    return DependencyGraph.from_cells(cells)


def _shift_index(index: int, at: int, delta: int) -> int | None:
    """New position of *index* when a line is inserted (+1) or deleted (-1) at *at*.

    None means the line was deleted.
    """
    if index < at:
        return index
    if delta < 0 and index == at:
        return None
    return index + delta


def _shift_cells(
    cells: Mapping[str, Cell], axis: str, at: int, delta: int,
) -> dict[str, Cell]:
    moved: dict[str, Cell] = {}
    dropped = 0
    for cell_id, cell in cells.items():
        col, row = address_to_colrow(cell_id)
        if axis == "row":
            new_row, new_col = _shift_index(row, at, delta), col
        else:
            new_row, new_col = row, _shift_index(col, at, delta)
        if new_row is None or new_col is None:
            dropped += 1
            continue
        new_id = make_address(new_col, new_row)
        moved[new_id] = cell if new_id == cell_id else cell.moved(new_id)
    logger.debug("Shifted %s at %d by %d: kept %d cells, dropped %d",
                 axis, at, delta, len(moved), dropped)
    return moved


def _shift_rows(
    rows: Mapping[int, RowConfig], at: int, delta: int,
) -> dict[int, RowConfig]:
    shifted: dict[int, RowConfig] = {}
    for row, cfg in rows.items():
        new_row = _shift_index(row, at, delta)
        if new_row is not None:
            shifted[new_row] = cfg
    return shifted


def _shift_columns(
    columns: Mapping[str, ColumnConfig], at: int, delta: int,
) -> dict[str, ColumnConfig]:
    shifted: dict[str, ColumnConfig] = {}
    for letters, cfg in columns.items():
        new_col = _shift_index(index_from_letters(letters), at, delta)
        if new_col is not None:
            shifted[letters_from_index(new_col)] = cfg
    return shifted


def _check_row(row: int) -> None:
    if row < 1:
        raise InvalidAddress(f"Invalid row number: {row}")


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


def insert_row(state: SheetState, row: int) -> SheetState:
    """Insert an empty row at *row*; that row and everything below move down."""
    _check_row(row)
    cells = _shift_cells(state.cells, "row", row, 1)
    rows = _shift_rows(state.rows, row, 1)
    # New metadata only inside the grid or directly after it
    if row <= max(state.rows, default=0) + 1:
        rows[row] = RowConfig()
    return SheetState(cells=cells, rows=rows, columns=state.columns, graph=rebuild_graph(cells))


def delete_row(state: SheetState, row: int) -> SheetState:
    """Remove *row* and its cells; rows below move up by one."""
    _check_row(row)
    cells = _shift_cells(state.cells, "row", row, -1)
    rows = _shift_rows(state.rows, row, -1)
    return SheetState(cells=cells, rows=rows, columns=state.columns, graph=rebuild_graph(cells))


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------


def insert_column(state: SheetState, column: str | int) -> SheetState:
    """Insert an empty column at *column* (letters or 0-based index)."""
    at = column_index(column)
    cells = _shift_cells(state.cells, "column", at, 1)
    columns = _shift_columns(state.columns, at, 1)
    if at <= max(map(index_from_letters, state.columns), default=-1) + 1:
        columns[letters_from_index(at)] = ColumnConfig()
    return SheetState(cells=cells, rows=state.rows, columns=columns, graph=rebuild_graph(cells))


def delete_column(state: SheetState, column: str | int) -> SheetState:
    """Remove *column* and its cells; columns to the right move left."""
    at = column_index(column)
    cells = _shift_cells(state.cells, "column", at, -1)
    columns = _shift_columns(state.columns, at, -1)
    return SheetState(cells=cells, rows=state.rows, columns=columns, graph=rebuild_graph(cells))


# ---------------------------------------------------------------------------
# Remove duplicates
# ---------------------------------------------------------------------------


def remove_duplicate_rows(
    state: SheetState,
    range_text: str,
    columns_to_check: Iterable[str | int],
    has_header_row: bool = False,
) -> SheetState:
    """Keep the first row for each key built from *columns_to_check*.

    Keys compare display values exactly. Checked columns outside the range
    contribute nothing to the key, so when none is inside it every data row
    after the first is a duplicate. Survivors are packed together below the
    header (or from the top of the range) with all of their cell data; the
    header row is left where it was. Returns *state* itself when nothing is
    removed or no column is given.
    """
    requested = [column_index(c) for c in columns_to_check]
    if not requested:
        return state
    c_min, r_min, c_max, r_max = range_bounds(range_text)
    checked = sorted({idx for idx in requested if c_min <= idx <= c_max})

    data_start = r_min + 1 if has_header_row else r_min
    seen: set[tuple[str, ...]] = set()
    survivors: list[int] = []
    n_rows = 0
    for r in range(data_start, r_max + 1):
        n_rows += 1
        key = tuple(state.display_value(make_address(c, r)) for c in checked)
        if key not in seen:
            seen.add(key)
            survivors.append(r)

    if len(survivors) == n_rows:
        return state
    logger.debug("Removing %d duplicate rows from %s", n_rows - len(survivors), range_text)

    cells = dict(state.cells)
    for cell_id in expand_range(range_text):
        if cell_id in cells:
            cells[cell_id] = cells[cell_id].cleared()

    if has_header_row:
        for c in range(c_min, c_max + 1):
            header_id = make_address(c, r_min)
            if header_id in state.cells:
                cells[header_id] = state.cells[header_id]

    for offset, src_row in enumerate(survivors):
        target_row = data_start + offset
        for c in range(c_min, c_max + 1):
            src = state.cells.get(make_address(c, src_row))
            if src is not None:
                dst_id = make_address(c, target_row)
                cells[dst_id] = src.moved(dst_id)

    return replace(state, cells=cells, graph=rebuild_graph(cells))


# ---------------------------------------------------------------------------
# Find / replace
# ---------------------------------------------------------------------------


def _matches(text: str, find: str, match_case: bool, match_entire_cell: bool) -> bool:
    if not match_case:
        text = text.lower()
        find = find.lower()
    if match_entire_cell:
        return text == find
    return find in text


def find_cells(
    state: SheetState,
    find: str,
    range_text: str | None = None,
    match_case: bool = False,
    match_entire_cell: bool = False,
) -> list[str]:
    """Addresses of non-formula cells whose raw value matches *find*."""
    if not find:
        return []
    candidates = expand_range(range_text) if range_text else list(state.cells)
    found: list[str] = []
    for cell_id in candidates:
        cell = state.cells.get(cell_id)
        if cell is None or cell.is_formula:
            continue
        if _matches(cell.value, find, match_case, match_entire_cell):
            found.append(cell_id)
    return found


def find_and_replace(
    state: SheetState,
    find: str,
    replace_with: str,
    range_text: str | None = None,
    match_case: bool = False,
    match_entire_cell: bool = False,
    evaluator: FormulaEvaluator | None = None,
) -> SheetState:
    """Replace *find* in non-formula cells, then recalculate their dependents.

    Without *match_entire_cell* every occurrence is replaced, matched
    literally. Replaced cells are re-typed and never hold a formula.
    """
    pattern = re.compile(re.escape(find), 0 if match_case else re.IGNORECASE)
    cells = dict(state.cells)
    changed: list[str] = []

    for cell_id in find_cells(state, find, range_text, match_case, match_entire_cell):
        cell = cells[cell_id]
        if match_entire_cell:
            new_value = replace_with
        else:
            new_value = pattern.sub(lambda _m: replace_with, cell.value)
        if new_value == cell.value:
            continue
        cell_type = detect_cell_type(new_value)
        cells[cell_id] = replace(
            cell,
            value=new_value,
            display_value=new_value,
            type="text" if cell_type == "formula" else cell_type,
            formula=None,
        )
        changed.append(cell_id)

    if not changed:
        return state
    logger.debug("Replaced %r in %d cells", find, len(changed))

    graph = state.graph.copy()
    recalculate(cells, graph, changed, evaluator or FormulaEvaluator())
    return replace(state, cells=cells, graph=graph)
