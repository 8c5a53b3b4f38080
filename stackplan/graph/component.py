from __future__ import annotations

import heapq
from collections import deque

from stackplan.core import debug
from stackplan.core.exceptions import (
    BaseError,
    CyclicDependencyError,
    GraphFinalizedError,
    GraphNotFinalizedError,
    UnknownResourceError,
)
from stackplan.registry import (
    HealthCheckAttributes,
    ResourceNode,
    ResourceRegistry,
)

from ._models import DependencyEdge, EdgeStrength


class DependencyGraph:
    """Directed graph of dependency edges over registered resources.

    An edge points from the dependent (`source`) to the dependency
    (`target`). The graph accepts edges until `finalize_and_validate`
    succeeds and is immutable afterwards.
    """

    registry: ResourceRegistry

    _edges: dict[tuple[str, str], DependencyEdge]
    _order: list[str] | None

    def __init__(self, registry: ResourceRegistry):
        self.registry = registry
        self._edges = dict()
        self._order = None

    @property
    def is_finalized(self) -> bool:
        return self._order is not None

    def add_edge(
        self,
        source: str,
        target: str,
        strength: str | EdgeStrength = EdgeStrength.HARD,
    ) -> DependencyEdge:
        """Declare that `source` depends on `target`.

        Declaring the same pair again is a no-op, except that a HARD
        declaration upgrades an existing SOFT edge.

        Raises:
            GraphFinalizedError: Graph already finalized.
            UnknownResourceError: Either endpoint is not registered.
        """
        if self.is_finalized:
            raise GraphFinalizedError()
        for id in (source, target):
            if id not in self.registry:
                raise UnknownResourceError(id)
        strength = EdgeStrength(strength)
        key = (source, target)
        existing = self._edges.get(key)
        if existing is not None and (
            existing.strength == EdgeStrength.HARD
            or strength == EdgeStrength.SOFT
        ):
            return existing
        edge = DependencyEdge(source=source, target=target, strength=strength)
        self._edges[key] = edge
        return edge

    def edges(self) -> list[DependencyEdge]:
        return list(self._edges.values())

    def dependencies(
        self,
        id: str,
        strength: EdgeStrength | None = None,
    ) -> list[DependencyEdge]:
        """Edges leaving `id`, in declaration order."""
        return [
            edge
            for edge in self._edges.values()
            if edge.source == id
            and (strength is None or edge.strength == strength)
        ]

    def dependents(
        self,
        id: str,
        strength: EdgeStrength | None = None,
    ) -> list[DependencyEdge]:
        """Edges entering `id`, in declaration order."""
        return [
            edge
            for edge in self._edges.values()
            if edge.target == id
            and (strength is None or edge.strength == strength)
        ]

    def finalize_and_validate(self) -> list[str]:
        """Validate the graph and freeze it together with the registry.

        A health check depends on the resource it monitors; the edge is
        added here when it was not declared.

        Returns:
            Topological order, dependencies first.

        Raises:
            UnknownResourceError: A health check targets an
                unregistered resource.
            CyclicDependencyError: Edges form a cycle.
        """
        if self._order is not None:
            return list(self._order)
        nodes = self.registry.close()
        try:
            checks = [
                (node.id, node.attributes)
                for node in nodes
                if isinstance(node.attributes, HealthCheckAttributes)
            ]
            self._validate_health_check_targets(checks)
            self._add_monitoring_edges(checks)
            adjacency = self._adjacency(nodes)
            if self._has_cycle(adjacency):
                raise CyclicDependencyError(self._shortest_cycle(adjacency))
        except BaseError:
            self.registry.reopen()
            raise
        self._order = self._sort(adjacency)
        debug(f"Graph finalized: {' '.join(self._order)}")
        return list(self._order)

    def topological_order(self) -> list[str]:
        """Cached topological order, dependencies first.

        Raises:
            GraphNotFinalizedError: Graph not finalized yet.
        """
        if self._order is None:
            raise GraphNotFinalizedError()
        return list(self._order)

    def _validate_health_check_targets(
        self,
        checks: list[tuple[str, HealthCheckAttributes]],
    ) -> None:
        for _, attributes in checks:
            if attributes.target not in self.registry:
                raise UnknownResourceError(attributes.target)

    def _add_monitoring_edges(
        self,
        checks: list[tuple[str, HealthCheckAttributes]],
    ) -> None:
        for id, attributes in checks:
            key = (id, attributes.target)
            existing = self._edges.get(key)
            if existing is None or existing.strength == EdgeStrength.SOFT:
                self._edges[key] = DependencyEdge(
                    source=id,
                    target=attributes.target,
                    strength=EdgeStrength.HARD,
                )

    def _adjacency(
        self,
        nodes: tuple[ResourceNode, ...],
    ) -> dict[str, list[str]]:
        adjacency: dict[str, list[str]] = {node.id: [] for node in nodes}
        for source, target in self._edges:
            adjacency[source].append(target)
        for targets in adjacency.values():
            targets.sort(key=self.registry.index)
        return adjacency

    def _has_cycle(self, adjacency: dict[str, list[str]]) -> bool:
        WHITE, GRAY, BLACK = 0, 1, 2
        color = {id: WHITE for id in adjacency}

        def visit(id: str) -> bool:
            color[id] = GRAY
            for next in adjacency[id]:
                if color[next] == GRAY:
                    return True
                if color[next] == WHITE and visit(next):
                    return True
            color[id] = BLACK
            return False

        for id in adjacency:
            if color[id] == WHITE and visit(id):
                return True
        return False

    def _shortest_cycle(self, adjacency: dict[str, list[str]]) -> list[str]:
        best: list[str] | None = None
        for start in adjacency:
            cycle = self._shortest_cycle_from(start, adjacency)
            if cycle is not None and (best is None or len(cycle) < len(best)):
                best = cycle
        return best or []

    def _shortest_cycle_from(
        self,
        start: str,
        adjacency: dict[str, list[str]],
    ) -> list[str] | None:
        parents: dict[str, str] = {}
        queue = deque([start])
        while queue:
            id = queue.popleft()
            for next in adjacency[id]:
                if next == start:
                    path = [id]
                    while path[-1] != start:
                        path.append(parents[path[-1]])
                    path.reverse()
                    return path
                if next not in parents:
                    parents[next] = id
                    queue.append(next)
        return None

    def _sort(self, adjacency: dict[str, list[str]]) -> list[str]:
        remaining = {id: len(targets) for id, targets in adjacency.items()}
        dependents: dict[str, list[str]] = {id: [] for id in adjacency}
        for source, targets in adjacency.items():
            for target in targets:
                dependents[target].append(source)
        heap = [
            (self.registry.index(id), id)
            for id, count in remaining.items()
            if count == 0
        ]
        heapq.heapify(heap)
        order: list[str] = []
        while heap:
            _, id = heapq.heappop(heap)
            order.append(id)
            for dependent in dependents[id]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(
                        heap, (self.registry.index(dependent), dependent)
                    )
        return order
