"""sheetcalc.calc - Formula parsing, evaluation and dependency tracking."""

from sheetcalc.calc._evaluator import FormulaEvaluator, evaluate
from sheetcalc.calc._functions import (
    FUNCTION_CATEGORIES,
    CellError,
    FunctionRegistry,
    format_value,
    is_error,
    is_supported,
)
from sheetcalc.calc._graph import DependencyGraph
from sheetcalc.calc._parser import (
    MalformedFormula,
    ParsedFormula,
    formula_references,
    parse_formula,
    split_arguments,
)
from sheetcalc.calc._protocol import CalcEngine, CellDelta, EditResult

__all__ = [
    "CalcEngine",
    "CellDelta",
    "CellError",
    "DependencyGraph",
    "EditResult",
    "FUNCTION_CATEGORIES",
    "FormulaEvaluator",
    "FunctionRegistry",
    "MalformedFormula",
    "ParsedFormula",
    "evaluate",
    "format_value",
    "formula_references",
    "is_error",
    "is_supported",
    "parse_formula",
    "split_arguments",
]
