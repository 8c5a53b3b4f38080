from __future__ import annotations

import re

from stackplan.core.exceptions import UnresolvedReferenceError
from stackplan.graph import DependencyGraph, EdgeStrength
from stackplan.registry import (
    ResourceRegistry,
    ServiceAttributes,
)

from ._facets import compute_facet, facet_prefix
from ._models import ResolvedConfiguration

REF_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ReferenceResolver:
    """Computes the environment of services from their dependencies.

    Each HARD dependency contributes its facet under
    `<PREFIX>_<FACET>`. Entries declared by the service itself take
    precedence over derived ones. Declared values may embed
    `${<resource>.<facet>}` references to any dependency of the service.
    """

    registry: ResourceRegistry
    graph: DependencyGraph

    def __init__(self, registry: ResourceRegistry, graph: DependencyGraph):
        self.registry = registry
        self.graph = graph

    def resolve(self, service_id: str) -> ResolvedConfiguration:
        """Resolve the environment of a service.

        Args:
            service_id: Service identifier.

        Returns:
            Resolved configuration.

        Raises:
            UnknownResourceError: Service not registered.
            UnresolvedReferenceError: A dependency facet or a declared
                reference cannot be computed.
        """
        node = self.registry.get(service_id)
        attributes = node.attributes
        if not isinstance(attributes, ServiceAttributes):
            raise UnresolvedReferenceError(
                f"{service_id} is a {node.kind.value}, not a service",
                id=service_id,
            )

        variables: dict[str, str] = {}
        origins: dict[str, str] = {}
        for edge in self.graph.dependencies(service_id, EdgeStrength.HARD):
            dependency = self.registry.get(edge.target)
            prefix = facet_prefix(dependency)
            for facet, value in compute_facet(
                dependency, self.registry
            ).items():
                name = f"{prefix}_{facet}"
                if name in origins and origins[name] != dependency.id:
                    raise UnresolvedReferenceError(
                        (
                            f"{name} is derived from both {origins[name]} "
                            f"and {dependency.id} for {service_id}"
                        ),
                        id=service_id,
                    )
                variables[name] = value
                origins[name] = dependency.id

        for name, value in attributes.environment.items():
            variables[name] = self._resolve_value(service_id, value)
        return ResolvedConfiguration(
            service=service_id,
            variables=dict(sorted(variables.items())),
        )

    def resolve_all(self) -> dict[str, ResolvedConfiguration]:
        return {
            node.id: self.resolve(node.id)
            for node in self.registry.all()
            if isinstance(node.attributes, ServiceAttributes)
        }

    def _resolve_value(self, service_id: str, value: str) -> str:
        def replace(match: re.Match) -> str:
            return self._resolve_ref(service_id, match.group(1))

        return REF_PATTERN.sub(replace, value)

    def _resolve_ref(self, service_id: str, ref: str) -> str:
        if "." not in ref:
            raise UnresolvedReferenceError(
                f"Reference ${{{ref}}} in {service_id} has no facet",
                id=service_id,
            )
        resource_id, facet = ref.rsplit(".", 1)
        targets = [e.target for e in self.graph.dependencies(service_id)]
        if resource_id not in targets:
            raise UnresolvedReferenceError(
                (
                    f"{service_id} references {resource_id} "
                    "without depending on it"
                ),
                id=service_id,
            )
        values = compute_facet(self.registry.get(resource_id), self.registry)
        key = facet.upper()
        if key not in values:
            raise UnresolvedReferenceError(
                f"{resource_id} exposes no facet {facet}",
                id=service_id,
            )
        return values[key]
