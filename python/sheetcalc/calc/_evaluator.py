"""FormulaEvaluator: resolves flat ``=FUNC(args)`` calls against a cell store.

Arguments are either references (``A1``, ``A1:B3``) or literals. References
are expanded, recorded as dependencies and replaced by the referenced cells'
values; literals become numbers when they look like one. Evaluation never
raises: failures come back as :class:`CellError` sentinels.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sheetcalc._address import expand_range
from sheetcalc._cell import is_number_text
from sheetcalc.calc._functions import CellError, FunctionRegistry
from sheetcalc.calc._parser import MalformedFormula, is_reference, parse_formula

if TYPE_CHECKING:
    from sheetcalc._cell import Cell

logger = logging.getLogger(__name__)


def _cell_value(cell: Cell | None) -> float | str | None:
    """Value a formula sees when it reads *cell*."""
    if cell is None:
        return None
    if cell.type == "number":
        return float(cell.display_value)
    return cell.display_value


def _literal_value(token: str) -> float | str:
    """Number if *token* reads as one, else the text (quotes removed)."""
    if is_number_text(token):
        return float(token)
    if len(token) >= 2 and token[0] == '"' and token[-1] == '"':
        return token[1:-1].replace('\\"', '"')
    return token


class FormulaEvaluator:
    """Evaluates formulas against a read-only mapping of address -> Cell.

    Usage::

        evaluator = FormulaEvaluator()
        deps: set[str] = set()
        value = evaluator.evaluate("=SUM(A1:A3)", cells, deps)
    """

    def __init__(self, functions: FunctionRegistry | None = None) -> None:
        self._functions = functions if functions is not None else FunctionRegistry()

    @property
    def functions(self) -> FunctionRegistry:
        return self._functions

    def evaluate(
        self,
        formula: str,
        cells: Mapping[str, Cell],
        dependencies: set[str] | None = None,
    ) -> Any:
        """Evaluate *formula*, adding every address it reads to *dependencies*.

        Text that is not a formula comes back unchanged.
        """
        if dependencies is None:
            dependencies = set()
        try:
            parsed = parse_formula(formula)
        except MalformedFormula as e:
            logger.debug("Malformed formula %r: %s", formula, e)
            return CellError.ERROR
        if parsed is None:
            return formula

        try:
            args = [self._resolve_arg(arg, cells, dependencies) for arg in parsed.args]
            func = self._functions.get(parsed.function_name)
            if func is None:
                logger.debug("Unsupported function: %s", parsed.function_name)
                return CellError.NAME
            return func(args)
        except Exception as e:
            logger.debug("Error evaluating %r: %s", formula, e)
            return CellError.ERROR

    def _resolve_arg(
        self,
        arg: str,
        cells: Mapping[str, Cell],
        dependencies: set[str],
    ) -> list[Any]:
        """Resolve one argument token to the list of values it stands for."""
        if is_reference(arg):
            refs = expand_range(arg.upper())
            dependencies.update(refs)
            return [_cell_value(cells.get(ref)) for ref in refs]
        return [_literal_value(arg)]


_default_evaluator = FormulaEvaluator()


def evaluate(
    formula: str,
    cells: Mapping[str, Cell],
    dependencies: set[str] | None = None,
) -> Any:
    """Evaluate with the builtin function table."""
    return _default_evaluator.evaluate(formula, cells, dependencies)
