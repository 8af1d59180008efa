"""sheetcalc - a small spreadsheet recalculation engine.

Usage::

    from sheetcalc import Spreadsheet

    sheet = Spreadsheet()
    sheet.set_cell_value("A1", "5")
    sheet.set_cell_value("A2", "7")
    sheet.set_cell_value("B1", "=SUM(A1:A2)")
    print(sheet.display_value("B1"))  # 12

    # Dependents recalculate on every write
    result = sheet.set_cell_value("A1", "10")
    print(result.recalculated)  # ['B1']

    # Structural edits
    sheet.insert_row(1)
    sheet.find_and_replace("foo", "bar", range_text="A1:C10")
"""

from sheetcalc._address import (
    InvalidAddress,
    expand_range,
    index_from_letters,
    letters_from_index,
    parse_address,
)
from sheetcalc._cell import (
    DEFAULT_FORMAT,
    Cell,
    CellFormat,
    ColumnConfig,
    FormulaData,
    RowConfig,
    detect_cell_type,
)
from sheetcalc._spreadsheet import Spreadsheet
from sheetcalc._state import SheetState
from sheetcalc.calc import CalcEngine, CellDelta, CellError, EditResult, FunctionRegistry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CalcEngine",
    "Cell",
    "CellDelta",
    "CellError",
    "CellFormat",
    "ColumnConfig",
    "DEFAULT_FORMAT",
    "EditResult",
    "FormulaData",
    "FunctionRegistry",
    "InvalidAddress",
    "RowConfig",
    "SheetState",
    "Spreadsheet",
    "detect_cell_type",
    "expand_range",
    "index_from_letters",
    "letters_from_index",
    "parse_address",
]
