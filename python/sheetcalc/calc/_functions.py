"""Function table and builtin implementations for formula evaluation."""

from __future__ import annotations

from typing import Any, Callable


# ---------------------------------------------------------------------------
# CellError: sentinel display values for cells that failed to evaluate
# ---------------------------------------------------------------------------


class CellError:
    """Error value shown in place of a formula result.

    Use ``CellError.of(code)`` to get a cached singleton for each error code.
    Errors compare equal to their string code (``CellError.NAME == "#NAME?"``).
    """

    __slots__ = ("code",)
    _cache: dict[str, CellError] = {}

    ERROR: CellError
    NAME: CellError
    DIV0: CellError
    CIRCULAR: CellError

    def __init__(self, code: str) -> None:
        self.code = code

    @classmethod
    def of(cls, code: str) -> CellError:
        canon = code.upper()
        if canon not in cls._cache:
            cls._cache[canon] = cls(canon)
        return cls._cache[canon]

    def __repr__(self) -> str:
        return self.code

    def __str__(self) -> str:
        return self.code

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CellError):
            return self.code == other.code
        if isinstance(other, str):
            return self.code == other.upper()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.code)


# Singletons
CellError.ERROR = CellError.of("#ERROR!")
CellError.NAME = CellError.of("#NAME?")
CellError.DIV0 = CellError.of("#DIV/0!")
CellError.CIRCULAR = CellError.of("#CIRCULAR!")


def is_error(val: Any) -> bool:
    """Return True if *val* is a CellError instance."""
    return isinstance(val, CellError)


def format_value(value: Any) -> str:
    """Render an evaluation result as cell display text.

    Integral floats drop their fractional part, so ``3.0`` shows as ``"3"``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---------------------------------------------------------------------------
# Function table, organized by category.
# ---------------------------------------------------------------------------

FUNCTION_CATEGORIES: dict[str, str] = {
    # Math (5)
    "SUM": "math",
    "AVERAGE": "math",
    "MAX": "math",
    "MIN": "math",
    "COUNT": "math",
    # Text / data quality (3)
    "TRIM": "text",
    "UPPER": "text",
    "LOWER": "text",
}


def is_supported(func_name: str) -> bool:
    """Check if a function name is one of the builtins."""
    return func_name.upper() in FUNCTION_CATEGORIES


# ---------------------------------------------------------------------------
# Builtin implementations.
# Each takes a list of resolved arguments; every argument is itself a list
# of values (a literal or single cell resolves to a one-element list).
# ---------------------------------------------------------------------------


def _numeric_values(args: list[Any]) -> list[float]:
    """Flatten arguments and keep numbers, skipping None/str/errors."""
    result: list[float] = []
    for v in args:
        if isinstance(v, (list, tuple)):
            result.extend(_numeric_values(list(v)))
        elif isinstance(v, bool):
            continue
        elif isinstance(v, (int, float)):
            result.append(v)
        # Skip None, str, CellError
    return result


def _builtin_sum(args: list[Any]) -> float:
    return sum(_numeric_values(args))


def _builtin_average(args: list[Any]) -> float | CellError:
    nums = _numeric_values(args)
    if not nums:
        return CellError.DIV0
    return sum(nums) / len(nums)


def _builtin_max(args: list[Any]) -> float:
    nums = _numeric_values(args)
    if not nums:
        return 0
    return max(nums)


def _builtin_min(args: list[Any]) -> float:
    nums = _numeric_values(args)
    if not nums:
        return 0
    return min(nums)


def _builtin_count(args: list[Any]) -> int:
    """COUNT - counts numeric values only."""
    return len(_numeric_values(args))


def _single_text(args: list[Any]) -> str | None:
    """The one value of a one-argument, one-value call as text, else None."""
    if len(args) != 1:
        return None
    values = args[0] if isinstance(args[0], (list, tuple)) else [args[0]]
    if len(values) != 1:
        return None
    val = values[0]
    if val is None:
        return ""
    if isinstance(val, str):
        return val
    return format_value(val)


def _builtin_trim(args: list[Any]) -> str | CellError:
    text = _single_text(args)
    if text is None:
        return CellError.ERROR
    return text.strip()


def _builtin_upper(args: list[Any]) -> str | CellError:
    text = _single_text(args)
    if text is None:
        return CellError.ERROR
    return text.upper()


def _builtin_lower(args: list[Any]) -> str | CellError:
    text = _single_text(args)
    if text is None:
        return CellError.ERROR
    return text.lower()


_BUILTINS: dict[str, Callable[[list[Any]], Any]] = {
    "SUM": _builtin_sum,
    "AVERAGE": _builtin_average,
    "MAX": _builtin_max,
    "MIN": _builtin_min,
    "COUNT": _builtin_count,
    "TRIM": _builtin_trim,
    "UPPER": _builtin_upper,
    "LOWER": _builtin_lower,
}


class FunctionRegistry:
    """Registry of callable function implementations.

    Starts with builtins and can be extended with custom functions.
    """

    def __init__(self) -> None:
        self._functions: dict[str, Callable[[list[Any]], Any]] = dict(_BUILTINS)

    def register(self, name: str, func: Callable[[list[Any]], Any]) -> None:
        self._functions[name.upper()] = func

    def get(self, name: str) -> Callable[[list[Any]], Any] | None:
        return self._functions.get(name.upper())

    def has(self, name: str) -> bool:
        return name.upper() in self._functions

    @property
    def supported_functions(self) -> frozenset[str]:
        return frozenset(self._functions.keys())
