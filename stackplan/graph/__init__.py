from stackplan.core.exceptions import (
    CyclicDependencyError,
    GraphFinalizedError,
    GraphNotFinalizedError,
    UnknownResourceError,
)

from ._models import DependencyEdge, EdgeStrength
from .component import DependencyGraph

__all__ = [
    "DependencyEdge",
    "DependencyGraph",
    "EdgeStrength",
    "CyclicDependencyError",
    "GraphFinalizedError",
    "GraphNotFinalizedError",
    "UnknownResourceError",
]
