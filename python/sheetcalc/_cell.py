"""Cell records and grid metadata.

All records are frozen; edits produce new instances via ``dataclasses.replace``
so that snapshots handed to collaborators never change underneath them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Literal

CellType = Literal["text", "number", "formula", "date", "error"]

DEFAULT_ROW_HEIGHT = 25
DEFAULT_COLUMN_WIDTH = 100
MIN_ROW_HEIGHT = 20
MIN_COLUMN_WIDTH = 30

# Whole-text decimal number: optional sign, fraction and exponent
_NUMBER_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*$")


@dataclass(frozen=True)
class CellFormat:
    bold: bool = False
    italic: bool = False
    font_size: int = 12
    font_family: str = "Arial"
    color: str = "#000000"
    background_color: str | None = None


DEFAULT_FORMAT = CellFormat()


@dataclass(frozen=True)
class FormulaData:
    """Parsed metadata stored alongside a formula cell."""

    expression: str  # formula text without the leading "="
    function_name: str
    dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class Cell:
    id: str
    value: str = ""
    display_value: str = ""
    type: CellType = "text"
    formula: FormulaData | None = None
    format: CellFormat = DEFAULT_FORMAT

    @property
    def is_formula(self) -> bool:
        return self.type == "formula"

    def cleared(self) -> Cell:
        """Same cell with its content removed; id and format are kept."""
        return replace(self, value="", display_value="", type="text", formula=None)

    def moved(self, new_id: str) -> Cell:
        return replace(self, id=new_id)


@dataclass(frozen=True)
class RowConfig:
    height: int = DEFAULT_ROW_HEIGHT
    visible: bool = True


@dataclass(frozen=True)
class ColumnConfig:
    width: int = DEFAULT_COLUMN_WIDTH
    visible: bool = True


def is_number_text(text: str) -> bool:
    """True when the whole of *text* is a finite decimal number."""
    return bool(_NUMBER_RE.match(text))


def detect_cell_type(value: str) -> CellType:
    """Classify raw input text as ``formula``, ``number`` or ``text``."""
    if value.startswith("="):
        return "formula"
    if is_number_text(value):
        return "number"
    return "text"
