from stackplan.core.exceptions import (
    DuplicateIdentifierError,
    UnknownResourceError,
)

from ._models import (
    ATTRIBUTE_TYPES,
    Attributes,
    ComputeClusterAttributes,
    DatabaseAttributes,
    HealthCheckAttributes,
    MessageClusterAttributes,
    NetworkAttributes,
    ResourceKind,
    ResourceNode,
    ServiceAttributes,
)
from .component import ResourceRegistry, ResourceView

__all__ = [
    "ATTRIBUTE_TYPES",
    "Attributes",
    "ComputeClusterAttributes",
    "DatabaseAttributes",
    "HealthCheckAttributes",
    "MessageClusterAttributes",
    "NetworkAttributes",
    "ResourceKind",
    "ResourceNode",
    "ResourceRegistry",
    "ResourceView",
    "ServiceAttributes",
    "DuplicateIdentifierError",
    "UnknownResourceError",
]
