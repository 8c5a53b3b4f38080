from __future__ import annotations

from stackplan.core import DataModel, FrozenDataModel
from stackplan.health import HealthSnapshot, HealthStatus
from stackplan.resolver import ResolvedConfiguration


class Gate(FrozenDataModel):
    """Health check that must read READY before the next stage.

    Attributes:
        check: Health check identifier.
        target: Monitored resource identifier.
        status: Status at planning time.
    """

    check: str
    target: str
    status: HealthStatus


class Stage(DataModel):
    """Resources that can be provisioned concurrently."""

    index: int
    resources: list[str] = []
    gates: list[Gate] = []


class ProvisioningPlan(DataModel):
    """Ordered provisioning stages.

    Attributes:
        stages: Stages in execution order.
        predecessors: HARD predecessors each planned resource waits for.
        deferred: Resources held back by a PENDING health check,
            in registration order. A later plan picks them up.
        environments: Resolved configuration of every planned service.
        health: Health snapshot the plan was computed from.
    """

    stages: list[Stage] = []
    predecessors: dict[str, list[str]] = {}
    deferred: list[str] = []
    environments: dict[str, ResolvedConfiguration] = {}
    health: HealthSnapshot = HealthSnapshot()

    @property
    def is_complete(self) -> bool:
        return not self.deferred

    def to_list(self) -> list[list[str]]:
        return [list(stage.resources) for stage in self.stages]

    def stage_of(self, id: str) -> int | None:
        for stage in self.stages:
            if id in stage.resources:
                return stage.index
        return None
