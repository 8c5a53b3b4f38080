from __future__ import annotations

from enum import Enum

from stackplan.core import FrozenDataModel


class HealthStatus(str, Enum):
    READY = "ready"
    PENDING = "pending"
    FAILED = "failed"


def combine(statuses: list[HealthStatus]) -> HealthStatus:
    if HealthStatus.FAILED in statuses:
        return HealthStatus.FAILED
    if all(status == HealthStatus.READY for status in statuses):
        return HealthStatus.READY
    return HealthStatus.PENDING


class HealthSnapshot(FrozenDataModel):
    """Point-in-time view of health checks.

    Attributes:
        checks: Health check id to effective status.
        monitors: Monitored resource id to the ids of its health checks.
    """

    checks: dict[str, HealthStatus] = {}
    monitors: dict[str, list[str]] = {}

    def is_monitored(self, resource_id: str) -> bool:
        return resource_id in self.monitors

    def status_of(self, resource_id: str) -> HealthStatus:
        """Status of a resource or of a health check.

        Unmonitored resources are READY once they exist.
        """
        if resource_id in self.checks:
            return self.checks[resource_id]
        return combine(
            [self.checks[id] for id in self.monitors.get(resource_id, [])]
        )
