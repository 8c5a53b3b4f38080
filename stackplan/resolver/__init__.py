from stackplan.core.exceptions import UnresolvedReferenceError

from ._facets import compute_facet, facet_prefix, normalize_name
from ._models import ResolvedConfiguration
from .component import ReferenceResolver

__all__ = [
    "ReferenceResolver",
    "ResolvedConfiguration",
    "compute_facet",
    "facet_prefix",
    "normalize_name",
    "UnresolvedReferenceError",
]
