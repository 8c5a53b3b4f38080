"""
Facets are the values a resource exposes to its dependents.
"""

from __future__ import annotations

import re

from stackplan.core.exceptions import UnresolvedReferenceError
from stackplan.registry import (
    ComputeClusterAttributes,
    DatabaseAttributes,
    MessageClusterAttributes,
    ResourceKind,
    ResourceNode,
    ResourceRegistry,
    ServiceAttributes,
)

ENGINE_PORTS: dict[str, int] = {
    "postgres": 5432,
    "mysql": 3306,
    "mariadb": 3306,
    "sqlserver": 1433,
    "oracle": 1521,
}

STRUCTURAL_KINDS = (
    ResourceKind.NETWORK,
    ResourceKind.COMPUTE_CLUSTER,
    ResourceKind.HEALTH_CHECK,
)


def normalize_name(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "_", value).strip("_").upper()


def facet_prefix(node: ResourceNode) -> str:
    attributes = node.attributes
    if node.kind == ResourceKind.SERVICE:
        return normalize_name(node.id)
    env_prefix = getattr(attributes, "env_prefix", None)
    if env_prefix:
        return normalize_name(env_prefix)
    return normalize_name(node.kind.value)


def compute_facet(
    node: ResourceNode,
    registry: ResourceRegistry,
) -> dict[str, str]:
    """Compute the facet of a resource.

    Args:
        node: Resource exposing the facet.
        registry: Registry used to look up related resources.

    Returns:
        Facet name to value. Empty for structural resources.

    Raises:
        UnresolvedReferenceError: The resource lacks the values its
            facet needs.
    """
    attributes = node.attributes
    if node.kind in STRUCTURAL_KINDS:
        return {}
    if isinstance(attributes, DatabaseAttributes):
        return _database_facet(node.id, attributes)
    if isinstance(attributes, MessageClusterAttributes):
        return _message_cluster_facet(node.id, attributes)
    if isinstance(attributes, ServiceAttributes):
        return _service_facet(node.id, attributes, registry)
    raise UnresolvedReferenceError(
        f"No facet for {node.kind.value} {node.id}", id=node.id
    )


def _database_facet(
    id: str,
    attributes: DatabaseAttributes,
) -> dict[str, str]:
    port = attributes.port or ENGINE_PORTS.get(attributes.engine)
    if port is None:
        raise UnresolvedReferenceError(
            f"Database {id} has no port for engine {attributes.engine}",
            id=id,
        )
    address = attributes.address or id
    name = attributes.database_name or id
    credential_ref = attributes.credential_ref or f"{id}-credentials"
    return {
        "ADDRESS": address,
        "PORT": str(port),
        "NAME": name,
        "USERNAME": attributes.username,
        "CREDENTIAL": f"secret://{credential_ref}",
        "URL": f"{attributes.engine}://{address}:{port}/{name}",
    }


def _message_cluster_facet(
    id: str,
    attributes: MessageClusterAttributes,
) -> dict[str, str]:
    endpoints = list(attributes.bootstrap_endpoints)
    if not endpoints and attributes.domain:
        name = attributes.cluster_name or id
        endpoints = [
            f"{name}-broker-{n}.{attributes.domain}:{attributes.broker_port}"
            for n in range(1, attributes.broker_count + 1)
        ]
    if not endpoints:
        raise UnresolvedReferenceError(
            f"Message cluster {id} has no bootstrap endpoints",
            id=id,
        )
    return {"BOOTSTRAP_ENDPOINTS": ",".join(endpoints)}


def _service_facet(
    id: str,
    attributes: ServiceAttributes,
    registry: ResourceRegistry,
) -> dict[str, str]:
    if not attributes.ports:
        raise UnresolvedReferenceError(
            f"Service {id} exposes no ports", id=id
        )
    address = id
    if attributes.cluster is not None:
        cluster = registry.get(attributes.cluster)
        if isinstance(cluster.attributes, ComputeClusterAttributes) and (
            cluster.attributes.namespace
        ):
            address = f"{id}.{cluster.attributes.namespace}"
    return {"ADDRESS": address, "PORT": str(attributes.ports[0])}
