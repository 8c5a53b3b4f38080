from stackplan.core.exceptions import BlockedByFailedDependencyError

from ._models import Gate, ProvisioningPlan, Stage
from .component import ProvisioningPlanner

__all__ = [
    "Gate",
    "ProvisioningPlan",
    "ProvisioningPlanner",
    "Stage",
    "BlockedByFailedDependencyError",
]
