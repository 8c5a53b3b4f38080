from __future__ import annotations

from collections import deque

from stackplan.core import debug
from stackplan.core.exceptions import BlockedByFailedDependencyError
from stackplan.graph import DependencyGraph, EdgeStrength
from stackplan.health import HealthGate, HealthSnapshot, HealthStatus
from stackplan.registry import (
    HealthCheckAttributes,
    ResourceNode,
    ResourceRegistry,
    ServiceAttributes,
)
from stackplan.resolver import ReferenceResolver

from ._models import Gate, ProvisioningPlan, Stage


class ProvisioningPlanner:
    """Layers the finalized graph into health-gated stages.

    Health checks are not provisioning steps of their own. An edge into
    a health check is planned as an edge into the resource it monitors,
    gated on that resource reading READY.
    """

    registry: ResourceRegistry
    graph: DependencyGraph
    health: HealthGate
    resolver: ReferenceResolver

    def __init__(
        self,
        registry: ResourceRegistry,
        graph: DependencyGraph,
        health: HealthGate,
        resolver: ReferenceResolver | None = None,
    ):
        self.registry = registry
        self.graph = graph
        self.health = health
        self.resolver = resolver or ReferenceResolver(registry, graph)

    def plan(self) -> ProvisioningPlan:
        """Compute the provisioning plan from the current health state.

        Returns:
            Provisioning plan.

        Raises:
            GraphNotFinalizedError: Graph not finalized.
            BlockedByFailedDependencyError: A monitored resource failed;
                carries every failed and transitively blocked resource.
            UnresolvedReferenceError: A planned service cannot be
                resolved.
        """
        order = self.graph.topological_order()
        resources = {node.id: node for node in self.registry.snapshot()}
        snapshot = self.health.snapshot()
        monitored = self._monitored(resources)
        nodes = [id for id in order if id not in monitored]
        hard, soft = self._predecessors(nodes, monitored)

        failed = [
            id
            for id in nodes
            if snapshot.status_of(id) == HealthStatus.FAILED
        ]
        if failed:
            blocked = self._blocked(failed, nodes)
            raise BlockedByFailedDependencyError(
                failed=self.registry.sort(failed),
                blocked=self.registry.sort(blocked),
            )

        levels: dict[str, int] = {}
        admitted: set[str] = set()
        for id in nodes:
            levels[id] = max(
                [levels[p] + 1 for p in hard[id]]
                + [levels[p] for p in soft[id]]
                + [0]
            )
            if all(
                p in admitted
                and snapshot.status_of(p) == HealthStatus.READY
                for p in hard[id]
            ) and all(p in admitted for p in soft[id]):
                admitted.add(id)

        stages = self._stages(levels, admitted, snapshot)
        deferred = self.registry.sort(set(nodes) - admitted)
        environments = {
            id: self.resolver.resolve(id)
            for id in self.registry.sort(admitted)
            if isinstance(resources[id].attributes, ServiceAttributes)
        }
        debug(
            f"Planned {len(admitted)} resources in {len(stages)} stages, "
            f"{len(deferred)} deferred"
        )
        return ProvisioningPlan(
            stages=stages,
            predecessors={
                id: self.registry.sort(hard[id])
                for id in self.registry.sort(admitted)
            },
            deferred=deferred,
            environments=environments,
            health=snapshot,
        )

    def _monitored(
        self,
        resources: dict[str, ResourceNode],
    ) -> dict[str, str]:
        return {
            id: node.attributes.target
            for id, node in resources.items()
            if isinstance(node.attributes, HealthCheckAttributes)
        }

    def _canonical(self, id: str, monitored: dict[str, str]) -> str:
        seen: set[str] = set()
        while id in monitored and id not in seen:
            seen.add(id)
            id = monitored[id]
        return id

    def _predecessors(
        self,
        nodes: list[str],
        monitored: dict[str, str],
    ) -> tuple[dict[str, set[str]], dict[str, set[str]]]:
        hard: dict[str, set[str]] = {id: set() for id in nodes}
        soft: dict[str, set[str]] = {id: set() for id in nodes}
        for edge in self.graph.edges():
            if edge.source in monitored:
                continue
            target = self._canonical(edge.target, monitored)
            if target == edge.source:
                continue
            if edge.strength == EdgeStrength.HARD:
                hard[edge.source].add(target)
            else:
                soft[edge.source].add(target)
        for id in nodes:
            soft[id] -= hard[id]
        return hard, soft

    def _blocked(self, failed: list[str], nodes: list[str]) -> set[str]:
        blocked: set[str] = set()
        queue = deque(failed)
        while queue:
            id = queue.popleft()
            for edge in self.graph.dependents(id, EdgeStrength.HARD):
                if edge.source not in blocked:
                    blocked.add(edge.source)
                    queue.append(edge.source)
        return blocked.intersection(nodes) - set(failed)

    def _stages(
        self,
        levels: dict[str, int],
        admitted: set[str],
        snapshot: HealthSnapshot,
    ) -> list[Stage]:
        members: dict[int, list[str]] = {}
        for id in self.registry.sort(admitted):
            members.setdefault(levels[id], []).append(id)
        stages: list[Stage] = []
        for level in sorted(members):
            resources = members[level]
            gates = [
                Gate(check=check, target=id, status=snapshot.checks[check])
                for id in resources
                for check in snapshot.monitors.get(id, [])
            ]
            stages.append(
                Stage(index=len(stages), resources=resources, gates=gates)
            )
        return stages
