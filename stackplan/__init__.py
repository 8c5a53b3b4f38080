from .core.exceptions import (
    BaseError,
    BlockedByFailedDependencyError,
    CyclicDependencyError,
    DuplicateIdentifierError,
    GraphFinalizedError,
    GraphNotFinalizedError,
    LoadError,
    UnknownResourceError,
    UnresolvedReferenceError,
)
from .graph import DependencyEdge, DependencyGraph, EdgeStrength
from .health import HealthGate, HealthSnapshot, HealthStatus
from .planner import Gate, ProvisioningPlan, ProvisioningPlanner, Stage
from .registry import ResourceKind, ResourceNode, ResourceRegistry
from .resolver import ReferenceResolver, ResolvedConfiguration
from .stack import Stack

__all__ = [
    "BaseError",
    "BlockedByFailedDependencyError",
    "CyclicDependencyError",
    "DependencyEdge",
    "DependencyGraph",
    "DuplicateIdentifierError",
    "EdgeStrength",
    "Gate",
    "GraphFinalizedError",
    "GraphNotFinalizedError",
    "HealthGate",
    "HealthSnapshot",
    "HealthStatus",
    "LoadError",
    "ProvisioningPlan",
    "ProvisioningPlanner",
    "ReferenceResolver",
    "ResolvedConfiguration",
    "ResourceKind",
    "ResourceNode",
    "ResourceRegistry",
    "Stack",
    "Stage",
    "UnknownResourceError",
    "UnresolvedReferenceError",
]
