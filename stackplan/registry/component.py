from __future__ import annotations

import threading
from typing import Any, Iterable, Iterator

from stackplan.core import debug
from stackplan.core.exceptions import (
    DuplicateIdentifierError,
    GraphFinalizedError,
    UnknownResourceError,
)

from ._models import ResourceKind, ResourceNode


class ResourceView:
    """Restartable sequence of nodes in registration order.

    Every iteration starts from the first node and walks a snapshot
    taken under the registry lock.
    """

    _registry: ResourceRegistry

    def __init__(self, registry: ResourceRegistry):
        self._registry = registry

    def __iter__(self) -> Iterator[ResourceNode]:
        return iter(self._registry.snapshot())

    def __len__(self) -> int:
        return len(self._registry)


class ResourceRegistry:
    """Store of declared resources keyed by identifier.

    Registration order is preserved and used as the deterministic
    tie-break everywhere an ordering is otherwise unconstrained.
    Registration closes once the dependency graph over the registry is
    finalized.
    """

    _nodes: dict[str, ResourceNode]
    _positions: dict[str, int]
    _closed: bool
    _lock: threading.Lock

    def __init__(self, nodes: Iterable[ResourceNode] | None = None):
        self._nodes = dict()
        self._positions = dict()
        self._closed = False
        self._lock = threading.Lock()
        for node in nodes or []:
            self.register(node)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def register(self, node: ResourceNode) -> ResourceNode:
        """Register a resource.

        Args:
            node: Resource node.

        Returns:
            The registered node.

        Raises:
            DuplicateIdentifierError: Identifier already registered.
            GraphFinalizedError: Registry closed by graph finalization.
        """
        with self._lock:
            if self._closed:
                raise GraphFinalizedError()
            if node.id in self._nodes:
                raise DuplicateIdentifierError(node.id)
            self._positions[node.id] = len(self._nodes)
            self._nodes[node.id] = node
        debug(f"Registered {node.kind.value} {node.id}")
        return node

    def declare(
        self,
        id: str,
        kind: str | ResourceKind,
        attributes: dict[str, Any] | None = None,
    ) -> ResourceNode:
        return self.register(
            ResourceNode(id=id, kind=kind, attributes=attributes)
        )

    def close(self) -> tuple[ResourceNode, ...]:
        """Stop accepting registrations.

        Returns:
            Every node registered, in registration order.
        """
        with self._lock:
            self._closed = True
            return tuple(self._nodes.values())

    def reopen(self) -> None:
        """Accept registrations again after a failed finalization."""
        with self._lock:
            self._closed = False

    def get(self, id: str) -> ResourceNode:
        """Get a resource.

        Raises:
            UnknownResourceError: Identifier not registered.
        """
        try:
            return self._nodes[id]
        except KeyError:
            raise UnknownResourceError(id) from None

    def all(self) -> ResourceView:
        """Nodes in registration order.

        The returned view is lazy and can be iterated any number of times.
        """
        return ResourceView(self)

    def snapshot(self) -> tuple[ResourceNode, ...]:
        with self._lock:
            return tuple(self._nodes.values())

    def index(self, id: str) -> int:
        try:
            return self._positions[id]
        except KeyError:
            raise UnknownResourceError(id) from None

    def sort(self, ids: Iterable[str]) -> list[str]:
        return sorted(ids, key=self.index)

    def __contains__(self, id: object) -> bool:
        return id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
