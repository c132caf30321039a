"""
L1 Domain — Dependency graph (pure).

Directed graph over package names: an edge A → B means "A depends on B".
Two phases: a mutable ``DependencyGraphBuilder`` collects packages, then
``build()`` freezes them into a read-only ``DependencyGraph`` that is
safe to query from many threads.

Traversals are iterative (explicit stacks) so long dependency chains
never hit the interpreter's recursion limit.
No I/O, no subprocess.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from deskforge.core.errors import CircularDependencyError
from deskforge.core.models.package import Package

logger = logging.getLogger(__name__)

_DONE = object()


class DependencyGraphBuilder:
    """Collects packages for a graph. Not thread-safe; add, then build."""

    def __init__(self) -> None:
        self._packages: dict[str, Package] = {}
        self._edges: dict[str, tuple[str, ...]] = {}

    def add_package(self, package: Package) -> DependencyGraphBuilder:
        """Record a package and its dependency list. Last write wins."""
        if package.name in self._packages:
            logger.debug("Replacing graph node: %s", package.name)
        self._packages[package.name] = package
        self._edges[package.name] = tuple(package.dependencies or ())
        return self

    def add_packages(self, packages: Iterable[Package]) -> DependencyGraphBuilder:
        for package in packages:
            self.add_package(package)
        return self

    def __len__(self) -> int:
        return len(self._packages)

    def build(self) -> DependencyGraph:
        """Freeze the collected packages. The builder stays usable."""
        return DependencyGraph(dict(self._packages), dict(self._edges))


class DependencyGraph:
    """Read-only dependency graph.

    Nodes keep insertion order, so cycle paths and resolution order are
    deterministic across runs. Edge targets may name packages that were
    never added; those are optional dependencies and are skipped during
    resolution.
    """

    def __init__(
        self,
        packages: Mapping[str, Package],
        edges: Mapping[str, tuple[str, ...]],
    ):
        self._packages = MappingProxyType(dict(packages))
        self._edges = MappingProxyType({k: tuple(v) for k, v in edges.items()})

    @classmethod
    def from_packages(cls, packages: Iterable[Package]) -> DependencyGraph:
        return DependencyGraphBuilder().add_packages(packages).build()

    # ── Lookups ──────────────────────────────────────────────────

    @property
    def packages(self) -> Mapping[str, Package]:
        return self._packages

    @property
    def names(self) -> list[str]:
        return list(self._packages)

    def get(self, name: str) -> Package | None:
        return self._packages.get(name)

    def dependencies_of(self, name: str) -> tuple[str, ...]:
        """Declared (direct) dependencies, empty for unknown names."""
        return self._edges.get(name, ())

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[str]:
        return iter(self._packages)

    # ── Cycle detection ──────────────────────────────────────────

    def has_circular_dependency(self) -> tuple[bool, list[str]]:
        """Depth-first search from every unvisited node.

        Returns:
            ``(True, cycle_path)`` for the first cycle found, where the
            path starts and ends with the repeated node (e.g.
            ``["b", "c", "b"]``); ``(False, [])`` otherwise.
        """
        visited: set[str] = set()
        on_stack: set[str] = set()

        for root in self._packages:
            if root in visited:
                continue

            path = [root]
            visited.add(root)
            on_stack.add(root)
            stack = [iter(self.dependencies_of(root))]

            while stack:
                dep = next(stack[-1], _DONE)
                if dep is _DONE:
                    stack.pop()
                    on_stack.discard(path.pop())
                    continue
                if dep not in visited:
                    visited.add(dep)
                    on_stack.add(dep)
                    path.append(dep)
                    stack.append(iter(self.dependencies_of(dep)))
                elif dep in on_stack:
                    return True, _close_cycle(path, dep)

        return False, []

    # ── Resolution ───────────────────────────────────────────────

    def resolve_dependencies(self, start: str) -> list[str]:
        """Installation order for ``start`` (dependencies first).

        Post-order DFS exploring dependencies in declaration order.
        Shared dependencies appear once, at their first discovery.
        Dependencies that are not nodes of the graph are skipped; an
        unknown ``start`` resolves to ``[start]``.

        Raises:
            CircularDependencyError: if the graph has a cycle anywhere,
                even one unreachable from ``start``.
        """
        has_cycle, cycle = self.has_circular_dependency()
        if has_cycle:
            raise CircularDependencyError(cycle)

        visited = {start}
        result: list[str] = []
        stack = [(start, iter(self.dependencies_of(start)))]

        while stack:
            node, deps = stack[-1]
            for dep in deps:
                if dep in visited or dep not in self._packages:
                    continue
                visited.add(dep)
                stack.append((dep, iter(self.dependencies_of(dep))))
                break
            else:
                stack.pop()
                result.append(node)

        return result

    def get_all_dependencies(self, name: str) -> list[str]:
        """Every name reachable from ``name``, excluding ``name`` itself.

        Each name appears once. Safe on cyclic graphs.
        """
        visited = {name}
        found: list[str] = []
        stack = [iter(self.dependencies_of(name))]

        while stack:
            for dep in stack[-1]:
                if dep in visited:
                    continue
                visited.add(dep)
                found.append(dep)
                stack.append(iter(self.dependencies_of(dep)))
                break
            else:
                stack.pop()

        return found

    def missing_dependencies(self) -> dict[str, list[str]]:
        """Declared dependencies that are not nodes, keyed by dependent."""
        missing: dict[str, list[str]] = {}
        for name, deps in self._edges.items():
            absent = [d for d in deps if d not in self._packages]
            if absent:
                missing[name] = absent
        return missing

    def __repr__(self) -> str:
        return f"<DependencyGraph nodes={len(self)}>"


def _close_cycle(path: list[str], repeated: str) -> list[str]:
    """Slice ``path`` from the first ``repeated`` and close the loop."""
    try:
        start = path.index(repeated)
    except ValueError:
        # Not expected while ``repeated`` is on the DFS stack.
        return [*path, repeated]
    return [*path[start:], repeated]
