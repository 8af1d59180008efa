"""Dependency graph for formula cells with dependents-first ordering."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING

from sheetcalc.calc._parser import formula_references

if TYPE_CHECKING:
    from sheetcalc._cell import Cell


class DependencyGraph:
    """Tracks which cells read which other cells.

    ``dependencies`` and ``dependents`` are kept as exact inverses: an edge
    present in one is always present in the other, and empty sets are pruned.
    """

    __slots__ = ("dependencies", "dependents")

    def __init__(self) -> None:
        # cell -> set of cells it reads from
        self.dependencies: dict[str, set[str]] = {}
        # cell -> set of cells that read from it (reverse edges)
        self.dependents: dict[str, set[str]] = {}

    def update_dependencies(self, cell_ref: str, refs: Iterable[str]) -> None:
        """Replace every dependency of *cell_ref* with *refs*."""
        new_refs = set(refs)

        for old in self.dependencies.pop(cell_ref, set()):
            readers = self.dependents.get(old)
            if readers is not None:
                readers.discard(cell_ref)
                if not readers:
                    del self.dependents[old]

        if not new_refs:
            return
        self.dependencies[cell_ref] = new_refs
        for ref in new_refs:
            self.dependents.setdefault(ref, set()).add(cell_ref)

    def get_dependents(self, cell_ref: str) -> set[str]:
        return set(self.dependents.get(cell_ref, ()))

    def get_dependencies(self, cell_ref: str) -> set[str]:
        return set(self.dependencies.get(cell_ref, ()))

    def topological_order(self, seeds: Iterable[str]) -> list[str]:
        """Seeds and everything downstream of them, in evaluation order.

        Depth-first over the dependents relation, post-order, then reversed:
        a cell comes after every cell it reads that is also in the result.
        A cell already on the active path closes a cycle; the walk stops
        descending there instead of looping.
        """
        post_order: list[str] = []
        visited: set[str] = set()
        on_path: set[str] = set()

        def children(cell: str) -> Iterator[str]:
            return iter(sorted(self.dependents.get(cell, ())))

        # Explicit stack so long chains don't hit the recursion limit
        for seed in seeds:
            if seed in visited:
                continue
            on_path.add(seed)
            stack: list[tuple[str, Iterator[str]]] = [(seed, children(seed))]
            while stack:
                cell, pending = stack[-1]
                for dep in pending:
                    if dep not in visited and dep not in on_path:
                        on_path.add(dep)
                        stack.append((dep, children(dep)))
                        break
                else:
                    stack.pop()
                    on_path.discard(cell)
                    visited.add(cell)
                    post_order.append(cell)

        post_order.reverse()
        return post_order

    def reaches(self, source: str, target: str) -> bool:
        """True when *target* is reachable from *source* via dependencies."""
        queue: deque[str] = deque(self.dependencies.get(source, ()))
        seen: set[str] = set()
        while queue:
            cell = queue.popleft()
            if cell == target:
                return True
            if cell in seen:
                continue
            seen.add(cell)
            queue.extend(self.dependencies.get(cell, ()))
        return False

    def is_circular(self, cell_ref: str) -> bool:
        """True when *cell_ref* reads itself, directly or through others."""
        return self.reaches(cell_ref, cell_ref)

    def clear(self) -> None:
        self.dependencies.clear()
        self.dependents.clear()

    def copy(self) -> DependencyGraph:
        graph = DependencyGraph()
        graph.dependencies = {k: set(v) for k, v in self.dependencies.items()}
        graph.dependents = {k: set(v) for k, v in self.dependents.items()}
        return graph

    @classmethod
    def from_cells(cls, cells: Mapping[str, Cell]) -> DependencyGraph:
        """Build a graph by re-parsing the stored text of every formula cell."""
        graph = cls()
        for cell_ref, cell in cells.items():
            if cell.is_formula:
                graph.update_dependencies(cell_ref, formula_references(cell.value))
        return graph
