from __future__ import annotations

from typing import Any

from stackplan.core import run_async
from stackplan.core.constants import MANIFEST_FILE
from stackplan.graph import DependencyEdge, DependencyGraph, EdgeStrength
from stackplan.health import HealthGate, HealthStatus
from stackplan.planner import ProvisioningPlan, ProvisioningPlanner
from stackplan.registry import ResourceKind, ResourceNode, ResourceRegistry
from stackplan.resolver import ReferenceResolver, ResolvedConfiguration


class Stack:
    """Deployment topology.

    Wires a registry, dependency graph, health gate, resolver and
    planner together. Declare resources and dependencies, finalize,
    then resolve and plan as often as needed.
    """

    name: str | None
    registry: ResourceRegistry
    graph: DependencyGraph
    health: HealthGate
    resolver: ReferenceResolver
    planner: ProvisioningPlanner

    def __init__(self, name: str | None = None):
        self.name = name
        self.registry = ResourceRegistry()
        self.graph = DependencyGraph(self.registry)
        self.health = HealthGate(self.registry)
        self.resolver = ReferenceResolver(self.registry, self.graph)
        self.planner = ProvisioningPlanner(
            self.registry, self.graph, self.health, self.resolver
        )

    @staticmethod
    def load(
        path: str = ".",
        manifest: str = MANIFEST_FILE,
        finalize: bool = True,
    ) -> Stack:
        from stackplan.core._loader import Loader

        return Loader(path=path, manifest=manifest).load(finalize=finalize)

    def declare(
        self,
        id: str,
        kind: str | ResourceKind,
        attributes: dict[str, Any] | None = None,
    ) -> ResourceNode:
        return self.registry.declare(id, kind, attributes)

    def depends(
        self,
        source: str,
        target: str,
        strength: str | EdgeStrength = EdgeStrength.HARD,
    ) -> DependencyEdge:
        return self.graph.add_edge(source, target, strength)

    def finalize(self) -> list[str]:
        return self.graph.finalize_and_validate()

    def order(self) -> list[str]:
        return self.graph.topological_order()

    def report(
        self,
        check_id: str,
        status: str | HealthStatus,
    ) -> HealthStatus:
        return self.health.report(check_id, status)

    def resolve(self, service_id: str) -> ResolvedConfiguration:
        return self.resolver.resolve(service_id)

    def resolve_all(self) -> dict[str, ResolvedConfiguration]:
        return self.resolver.resolve_all()

    def plan(self) -> ProvisioningPlan:
        return self.planner.plan()

    async def aresolve(self, service_id: str) -> ResolvedConfiguration:
        return await run_async(self.resolve, service_id)

    async def aresolve_all(self) -> dict[str, ResolvedConfiguration]:
        return await run_async(self.resolve_all)

    async def aplan(self) -> ProvisioningPlan:
        return await run_async(self.plan)
