"""Cell edits and dependents-first recalculation over SheetState snapshots.

Every function here takes a state and returns a new one. Working copies of
the cell store and graph are filled in completely before the new state is
built, so a half-applied edit is never visible.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableMapping
from dataclasses import replace

from sheetcalc._address import parse_address
from sheetcalc._cell import (
    DEFAULT_FORMAT,
    MIN_COLUMN_WIDTH,
    MIN_ROW_HEIGHT,
    Cell,
    ColumnConfig,
    FormulaData,
    RowConfig,
    detect_cell_type,
)
from sheetcalc._state import SheetState
from sheetcalc.calc._evaluator import FormulaEvaluator
from sheetcalc.calc._functions import CellError, format_value
from sheetcalc.calc._graph import DependencyGraph
from sheetcalc.calc._parser import MalformedFormula, formula_references, parse_formula
from sheetcalc.calc._protocol import CellDelta, EditResult

logger = logging.getLogger(__name__)

_default_evaluator = FormulaEvaluator()


def _formula_display(
    cell_ref: str, value: object, graph: DependencyGraph,
) -> str:
    if graph.is_circular(cell_ref):
        logger.debug("Circular reference through %s", cell_ref)
        return CellError.CIRCULAR.code
    return format_value(value)


def _formula_data(value: str) -> FormulaData | None:
    """Metadata for formula text; None when it does not parse."""
    try:
        parsed = parse_formula(value)
    except MalformedFormula:
        return None
    if parsed is None:
        return None
    return FormulaData(
        expression=value[1:],
        function_name=parsed.function_name,
        dependencies=tuple(formula_references(value)),
    )


def write_cell(
    cells: MutableMapping[str, Cell],
    graph: DependencyGraph,
    cell_id: str,
    value: str,
    evaluator: FormulaEvaluator,
) -> Cell:
    """Evaluate raw *value* into a Cell and store it in the working copies."""
    cell_type = detect_cell_type(value)
    display = value
    formula_data: FormulaData | None = None
    deps: set[str] = set()

    if cell_type == "formula":
        result = evaluator.evaluate(value, cells, deps)
        formula_data = _formula_data(value)
        graph.update_dependencies(cell_id, deps)
        display = _formula_display(cell_id, result, graph)
    else:
        graph.update_dependencies(cell_id, ())

    previous = cells.get(cell_id)
    cell = Cell(
        id=cell_id,
        value=value,
        display_value=display,
        type=cell_type,
        formula=formula_data,
        format=previous.format if previous is not None else DEFAULT_FORMAT,
    )
    cells[cell_id] = cell
    return cell


def recalculate(
    cells: MutableMapping[str, Cell],
    graph: DependencyGraph,
    changed: Iterable[str],
    evaluator: FormulaEvaluator,
) -> list[CellDelta]:
    """Re-evaluate everything downstream of *changed*, prerequisites first.

    A changed cell is only re-evaluated when another changed cell feeds it;
    its own write already computed it.
    """
    changed = list(changed)
    seeds: list[str] = []
    fed: set[str] = set()
    for ref in changed:
        for dep in sorted(graph.get_dependents(ref)):
            if dep != ref:
                fed.add(dep)
            if dep not in seeds:
                seeds.append(dep)

    skip = set(changed) - fed
    deltas: list[CellDelta] = []
    for cell_ref in graph.topological_order(seeds):
        if cell_ref in skip:
            continue
        cell = cells.get(cell_ref)
        if cell is None or not cell.is_formula:
            continue
        deps: set[str] = set()
        result = evaluator.evaluate(cell.value, cells, deps)
        graph.update_dependencies(cell_ref, deps)
        display = _formula_display(cell_ref, result, graph)
        cells[cell_ref] = replace(
            cell, display_value=display, formula=_formula_data(cell.value),
        )
        deltas.append(CellDelta(
            cell_ref=cell_ref,
            old_value=cell.display_value,
            new_value=display,
            formula=cell.value,
        ))
    return deltas


# ---------------------------------------------------------------------------
# State-level operations
# ---------------------------------------------------------------------------


def set_cell_values(
    state: SheetState,
    updates: Mapping[str, str],
    evaluator: FormulaEvaluator | None = None,
) -> tuple[SheetState, EditResult]:
    """Write several cells, then run one recalculation batch over all of them."""
    evaluator = evaluator or _default_evaluator
    for cell_id in updates:
        parse_address(cell_id)

    cells = dict(state.cells)
    graph = state.graph.copy()
    for cell_id, value in updates.items():
        write_cell(cells, graph, cell_id, value, evaluator)
    deltas = recalculate(cells, graph, updates.keys(), evaluator)

    written = tuple(cells[cell_id] for cell_id in updates)
    return replace(state, cells=cells, graph=graph), EditResult(written, tuple(deltas))


def set_cell_value(
    state: SheetState,
    cell_id: str,
    value: str,
    evaluator: FormulaEvaluator | None = None,
) -> tuple[SheetState, EditResult]:
    """Write raw text to one cell and recalculate its dependents."""
    return set_cell_values(state, {cell_id: value}, evaluator)


def set_cell_format(state: SheetState, cell_id: str, **changes: object) -> SheetState:
    """Merge format attributes into a cell, creating an empty cell if needed."""
    parse_address(cell_id)
    cell = state.cells.get(cell_id) or Cell(id=cell_id)
    cells = dict(state.cells)
    cells[cell_id] = replace(cell, format=replace(cell.format, **changes))
    return replace(state, cells=cells)


def resize_row(state: SheetState, row: int, height: int) -> SheetState:
    if row not in state.rows:
        return state
    rows = dict(state.rows)
    rows[row] = replace(rows[row], height=max(MIN_ROW_HEIGHT, height))
    return replace(state, rows=rows)


def resize_column(state: SheetState, column: str, width: int) -> SheetState:
    if column not in state.columns:
        return state
    columns = dict(state.columns)
    columns[column] = replace(columns[column], width=max(MIN_COLUMN_WIDTH, width))
    return replace(state, columns=columns)


def load_state(
    cells: Mapping[str, Cell],
    rows: Mapping[int, RowConfig] | None = None,
    columns: Mapping[str, ColumnConfig] | None = None,
) -> SheetState:
    """Adopt a collaborator-provided cell store and rebuild the graph."""
    for cell_id in cells:
        parse_address(cell_id)
    return SheetState.create(cells, rows, columns)
