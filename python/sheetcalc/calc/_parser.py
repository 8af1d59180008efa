"""Formula parser: flat ``=NAME(arg, arg, ...)`` calls and reference extraction."""

from __future__ import annotations

import re
from dataclasses import dataclass

from sheetcalc._address import (
    InvalidAddress,
    expand_range,
    is_cell_reference,
    is_range_reference,
)

# NAME(ARGS) with nothing after the closing paren
_CALL_RE = re.compile(r"^([A-Z]+)\((.*)\)$", re.IGNORECASE)


class MalformedFormula(ValueError):
    """Raised when text starting with ``=`` is not a ``NAME(args)`` call."""


@dataclass(frozen=True)
class ParsedFormula:
    function_name: str  # upper-cased
    args: tuple[str, ...]  # raw, trimmed argument tokens


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_formula(text: str) -> ParsedFormula | None:
    """Parse a formula into its function name and raw argument tokens.

    Returns None when *text* is not a formula (no leading ``=``).
    Raises MalformedFormula for anything else that is not a flat call.
    """
    if not text.startswith("="):
        return None
    body = text[1:].strip()
    m = _CALL_RE.match(body)
    if not m:
        raise MalformedFormula(f"Invalid formula format: {text!r}")
    return ParsedFormula(
        function_name=m.group(1).upper(),
        args=tuple(split_arguments(m.group(2))),
    )


def split_arguments(args_text: str) -> list[str]:
    """Split on commas that are not inside a double-quoted run.

    A quote preceded by a backslash does not open or close a string.
    Segments are trimmed; an empty argument list yields ``[]``.
    """
    args: list[str] = []
    in_string = False
    current = ""
    prev = ""
    for ch in args_text:
        if ch == '"' and prev != "\\":
            in_string = not in_string
            current += ch
        elif ch == "," and not in_string:
            args.append(current.strip())
            current = ""
        else:
            current += ch
        prev = ch
    if current:
        args.append(current.strip())
    return args


def is_reference(token: str) -> bool:
    """True for a single-cell (``B3``) or range (``A1:C4``) token."""
    return is_cell_reference(token) or is_range_reference(token)


# ---------------------------------------------------------------------------
# Reference extraction
# ---------------------------------------------------------------------------


def formula_references(text: str) -> list[str]:
    """All cell addresses a formula reads, ranges expanded.

    First-seen order without duplicates. Non-formulas and malformed formulas
    read nothing, and a reference that is not a real address (``A0``) is
    skipped.
    """
    try:
        parsed = parse_formula(text)
    except MalformedFormula:
        return []
    if parsed is None:
        return []

    refs: list[str] = []
    seen: set[str] = set()
    for arg in parsed.args:
        if not is_reference(arg):
            continue
        try:
            expanded = expand_range(arg.upper())
        except InvalidAddress:
            continue
        for ref in expanded:
            if ref not in seen:
                refs.append(ref)
                seen.add(ref)
    return refs
