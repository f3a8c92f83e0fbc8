"""Value propagation graph with cycle rejection.

Nodes are value indices. An edge ``source -> target`` means *target* must
be recomputed whenever *source* changes. Edges come from three places:

  - dependencies: every value read by a dependency formula -> its owner
  - modifications: every non-target value read by a modifier -> target
  - conditions: every value read by an item condition -> every value
    that item modifies

The graph must stay acyclic; recomputation walks it recursively. Each new
edge is checked with a DFS from *target* looking for *source* before it
is recorded, so a rejected edge leaves the graph untouched.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque

from charsheet.errors import CyclicDependencyError

logger = logging.getLogger(__name__)


class ValueGraph:
    """Adjacency lists over value indices, kept acyclic."""

    __slots__ = ("_node_count", "_forward", "_reverse", "_detect_cycles")

    def __init__(self, detect_cycles: bool = True) -> None:
        self._node_count = 0
        self._forward: dict[int, list[int]] = defaultdict(list)
        self._reverse: dict[int, list[int]] = defaultdict(list)
        self._detect_cycles = detect_cycles

    # --- Construction --------------------------------------------------------

    def add_node(self) -> int:
        """Register a new value and return its index."""
        self._node_count += 1
        return self._node_count - 1

    def check_edge(self, source: int, target: int) -> None:
        """Raise CyclicDependencyError if ``source -> target`` closes a cycle."""
        if not self._detect_cycles:
            return
        if source == target:
            raise CyclicDependencyError([source, target])
        path = self.path(target, source)
        if path is not None:
            raise CyclicDependencyError([source, *path])

    def add_edge(self, source: int, target: int) -> bool:
        """Record ``source -> target``. Returns False if it already existed."""
        if target in self._forward[source]:
            return False
        self.check_edge(source, target)
        self._forward[source].append(target)
        self._reverse[target].append(source)
        logger.debug("edge v%d -> v%d", source, target)
        return True

    def add_edges(self, edges: list[tuple[int, int]]) -> None:
        """Record all *edges* or none of them."""
        added: list[tuple[int, int]] = []
        try:
            for source, target in edges:
                if self.add_edge(source, target):
                    added.append((source, target))
        except CyclicDependencyError:
            for source, target in reversed(added):
                self._forward[source].remove(target)
                self._reverse[target].remove(source)
            raise

    # --- Queries -------------------------------------------------------------

    def __len__(self) -> int:
        return self._node_count

    def dependents_of(self, node: int) -> list[int]:
        """Nodes recomputed when *node* changes (direct successors)."""
        return list(self._forward.get(node, []))

    def sources_of(self, node: int) -> list[int]:
        """Nodes whose change triggers *node* (direct predecessors)."""
        return list(self._reverse.get(node, []))

    def path(self, start: int, goal: int) -> list[int] | None:
        """Return a forward path from *start* to *goal*, or None."""
        visited: set[int] = set()
        trail: list[int] = []

        def _dfs(node: int) -> bool:
            if node in visited:
                return False
            visited.add(node)
            trail.append(node)
            if node == goal:
                return True
            for nxt in self._forward.get(node, []):
                if _dfs(nxt):
                    return True
            trail.pop()
            return False

        return trail if _dfs(start) else None

    def topological_order(self) -> list[int]:
        """Return all nodes with sources before the nodes they trigger.

        Uses Kahn's algorithm; among ready nodes, lower indices come first.
        """
        in_degree = [0] * self._node_count
        for node in range(self._node_count):
            for target in self._forward.get(node, []):
                in_degree[target] += 1

        queue: deque[int] = deque(
            node for node, deg in enumerate(in_degree) if deg == 0
        )
        result: list[int] = []

        while queue:
            node = queue.popleft()
            result.append(node)
            for target in self._forward.get(node, []):
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    queue.append(target)

        return result
