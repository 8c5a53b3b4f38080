from ._models import HealthSnapshot, HealthStatus
from .component import HealthGate

__all__ = ["HealthGate", "HealthSnapshot", "HealthStatus"]
