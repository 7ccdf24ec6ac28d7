"""Dependency resolution using topological sorting."""

from __future__ import annotations

import enum
import graphlib
from graphlib import TopologicalSorter
from typing import Iterator, Optional

from outtree.logging import Logger, NullLogger
from outtree.nodes import NULL_NODE, Node, is_synthetic


class CycleError(Exception):
    """Raised when a dependency cycle is detected."""

    pass


class _Mark(enum.Enum):
    VISITING = 1
    VISITED = 2


def node_name(node: Node) -> str:
    return node.output.identity


class DependencyGraph:
    """Edge set of a root node's transitive closure.

    Nodes are registered by object identity, so a shared dependency reached
    through several paths is a single vertex. Built fresh for every run.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or NullLogger()
        self._nodes: dict[int, Node] = {}
        self._edges: list[tuple[int, int]] = []
        self._marks: dict[int, _Mark] = {}

    @property
    def nodes(self) -> list[Node]:
        """Registered nodes in discovery order."""
        return list(self._nodes.values())

    @property
    def edges(self) -> list[tuple[Node, Node]]:
        """(dependent, dependency) pairs in insertion order."""
        return [(self._nodes[a], self._nodes[b]) for a, b in self._edges]

    def _register(self, node: Node) -> int:
        key = id(node)
        self._nodes.setdefault(key, node)
        return key

    def _enter(self, node: Node) -> tuple[int, Iterator[Node]]:
        key = self._register(node)
        self._marks[key] = _Mark.VISITING
        if not node.requires:
            self._edges.append((key, self._register(NULL_NODE)))
        return key, iter(node.requires)

    def add_node(self, node: Node) -> None:
        """Record the edges of `node` and everything it requires.

        A node with no requirements gets a single edge to the null node. Edges
        back to a node that is still being visited are recorded without
        descending, leaving the cycle for `sort()` to report. The walk keeps an
        explicit stack, so chain depth is not bounded by the recursion limit.
        """
        key = self._register(node)
        if key in self._marks:
            return

        if is_synthetic(node):
            self._marks[key] = _Mark.VISITED
            return

        stack = [(node, *self._enter(node))]
        while stack:
            current, key, deps = stack[-1]
            dep = next(deps, None)
            if dep is None:
                self._marks[key] = _Mark.VISITED
                stack.pop()
                continue

            self._edges.append((key, self._register(dep)))
            mark = self._marks.get(id(dep))
            if mark is _Mark.VISITING:
                self.logger.trace(
                    f"Back edge {node_name(current)} -> {node_name(dep)}"
                )
            elif is_synthetic(dep):
                self._marks[id(dep)] = _Mark.VISITED
            elif mark is None:
                stack.append((dep, *self._enter(dep)))

    def sort(self) -> list[Node]:
        """Order nodes so every dependency precedes its dependents.

        The root comes last. Synthetic nodes are included. Ties between
        independent nodes are broken by insertion order, so a given graph shape
        always yields the same order.

        Raises:
            CycleError: If the edges contain a cycle
        """
        sorter = TopologicalSorter()
        for key in self._nodes:
            sorter.add(key)
        for dependent, dependency in self._edges:
            sorter.add(dependent, dependency)

        try:
            order = list(sorter.static_order())
        except graphlib.CycleError as e:
            cycle = " -> ".join(node_name(self._nodes[key]) for key in e.args[1])
            raise CycleError(f"Dependency cycle detected: {cycle}") from e

        self.logger.trace(f"Sorted {len(order)} node(s) from {len(self._edges)} edge(s)")
        return [self._nodes[key] for key in order]


def resolve_execution_order(root: Node, logger: Optional[Logger] = None) -> list[Node]:
    """Resolve execution order for a node and its dependencies.

    Args:
        root: Node to execute
        logger: Optional logger for diagnostic output

    Returns:
        Nodes in execution order (dependencies first, root last), including the
        null node

    Raises:
        CycleError: If a dependency cycle is detected
    """
    graph = DependencyGraph(logger)
    graph.add_node(root)
    return graph.sort()


def build_dependency_tree(root: Node) -> dict:
    """Build a tree structure representing dependencies for visualization.

    Args:
        root: Node to build the tree for

    Returns:
        Nested dictionary with "name", "kind", "node" and "deps" keys. A node
        that would close a cycle is reported with "cycle": True and no deps.
    """

    def entry(node: Node) -> dict:
        return {"name": node_name(node), "kind": node.kind, "node": node, "deps": []}

    tree = entry(root)
    visiting = {id(root)}
    stack = [(root, tree, iter(root.requires))]
    while stack:
        node, parent, deps = stack[-1]
        dep = next(deps, None)
        if dep is None:
            visiting.discard(id(node))
            stack.pop()
            continue

        child = entry(dep)
        parent["deps"].append(child)
        if id(dep) in visiting:
            child["cycle"] = True
            continue

        visiting.add(id(dep))
        stack.append((dep, child, iter(dep.requires)))

    return tree
