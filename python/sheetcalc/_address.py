"""A1-style cell address helpers: column letters, ranges, containment."""

from __future__ import annotations

import re

_ADDRESS_RE = re.compile(r"^([A-Z]+)(\d+)$")
_CELL_REF_RE = re.compile(r"^[A-Z]+\d+$", re.IGNORECASE)
_RANGE_REF_RE = re.compile(r"^[A-Z]+\d+:[A-Z]+\d+$", re.IGNORECASE)


class InvalidAddress(ValueError):
    """Raised for malformed cell or range reference text."""


# ---------------------------------------------------------------------------
# Column letters
# ---------------------------------------------------------------------------


def index_from_letters(letters: str) -> int:
    """A->0, B->1, ..., Z->25, AA->26."""
    if not letters or not letters.isascii() or not letters.isalpha():
        raise InvalidAddress(f"Invalid column letters: {letters!r}")
    n = 0
    for ch in letters.upper():
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n - 1


def letters_from_index(index: int) -> str:
    """0->A, 25->Z, 26->AA."""
    if index < 0:
        raise InvalidAddress(f"Invalid column index: {index}")
    letters = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def column_index(column: str | int) -> int:
    """Accept a column as letters or a 0-based index and return the index."""
    if isinstance(column, int):
        if column < 0:
            raise InvalidAddress(f"Invalid column index: {column}")
        return column
    return index_from_letters(column)


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


def parse_address(address: str) -> tuple[str, int]:
    """Split ``"AZ12"`` into ``("AZ", 12)``.

    Raises InvalidAddress unless the text is an uppercase letter run followed
    by a positive row number.
    """
    m = _ADDRESS_RE.match(address)
    if not m:
        raise InvalidAddress(f"Invalid cell address: {address!r}")
    row = int(m.group(2))
    if row < 1:
        raise InvalidAddress(f"Invalid row number in {address!r}")
    return m.group(1), row


def make_address(column: str | int, row: int) -> str:
    """Build an address from a column (letters or 0-based index) and a row."""
    if row < 1:
        raise InvalidAddress(f"Invalid row number: {row}")
    return f"{letters_from_index(column_index(column))}{row}"


def address_to_colrow(address: str) -> tuple[int, int]:
    """``"B3"`` -> ``(1, 3)``: 0-based column index, 1-based row."""
    letters, row = parse_address(address)
    return index_from_letters(letters), row


def is_cell_reference(text: str) -> bool:
    return bool(_CELL_REF_RE.match(text))


def is_range_reference(text: str) -> bool:
    return bool(_RANGE_REF_RE.match(text))


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------


def range_bounds(range_text: str) -> tuple[int, int, int, int]:
    """Normalized ``(min_col, min_row, max_col, max_row)`` of a range.

    A single address is treated as a one-cell range. Corner order does not
    matter: ``B2:A1`` and ``A1:B2`` give the same bounds.
    """
    parts = range_text.split(":")
    if len(parts) == 1:
        col, row = address_to_colrow(parts[0])
        return col, row, col, row
    if len(parts) != 2:
        raise InvalidAddress(f"Invalid range: {range_text!r}")
    start_col, start_row = address_to_colrow(parts[0])
    end_col, end_row = address_to_colrow(parts[1])
    return (
        min(start_col, end_col),
        min(start_row, end_row),
        max(start_col, end_col),
        max(start_row, end_row),
    )


def expand_range(range_text: str) -> list[str]:
    """Expand ``"A1:B2"`` into ``["A1", "B1", "A2", "B2"]`` (row-major).

    A single address expands to itself.
    """
    c_min, r_min, c_max, r_max = range_bounds(range_text)
    letters = [letters_from_index(c) for c in range(c_min, c_max + 1)]
    cells: list[str] = []
    for r in range(r_min, r_max + 1):
        for col in letters:
            cells.append(f"{col}{r}")
    return cells


def is_within(address: str, range_text: str) -> bool:
    """True when *address* lies inside *range_text* (bounds inclusive)."""
    col, row = address_to_colrow(address)
    c_min, r_min, c_max, r_max = range_bounds(range_text)
    return c_min <= col <= c_max and r_min <= row <= r_max
