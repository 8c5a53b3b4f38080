from __future__ import annotations

import threading

from stackplan.core import debug, warn
from stackplan.core.exceptions import BadRequestError, UnknownResourceError
from stackplan.registry import HealthCheckAttributes, ResourceRegistry

from ._models import HealthSnapshot, HealthStatus


class HealthGate:
    """Health check status, written by an external checker.

    The gate never polls anything itself. The checker applies the check's
    `request_interval` and `failure_threshold`, so a FAILED report is
    terminal as soon as it arrives. It holds until the checker reports
    READY again or the check is reset. Unreported checks read PENDING.
    """

    registry: ResourceRegistry

    _reported: dict[str, HealthStatus]
    _lock: threading.Lock

    def __init__(self, registry: ResourceRegistry):
        self.registry = registry
        self._reported = dict()
        self._lock = threading.Lock()

    def report(
        self,
        check_id: str,
        status: str | HealthStatus,
    ) -> HealthStatus:
        """Report the outcome of a health check run.

        Args:
            check_id: Health check identifier.
            status: Reported status.

        Returns:
            Status of the check.

        Raises:
            UnknownResourceError: Check not registered.
            BadRequestError: Identifier is not a health check.
        """
        attributes = self._check_attributes(check_id)
        status = HealthStatus(status)
        with self._lock:
            self._reported[check_id] = status
        if status == HealthStatus.FAILED:
            warn(f"Health check {check_id} failed for {attributes.target}")
        else:
            debug(f"Health check {check_id}: {status.value}")
        return status

    def status(self, check_id: str) -> HealthStatus:
        self._check_attributes(check_id)
        with self._lock:
            return self._reported.get(check_id, HealthStatus.PENDING)

    def reset(self, check_id: str | None = None) -> None:
        with self._lock:
            if check_id is None:
                self._reported.clear()
            else:
                self._reported.pop(check_id, None)

    def monitors_of(self, resource_id: str) -> list[str]:
        """Health checks targeting a resource, in registration order."""
        return [
            node.id
            for node in self.registry.all()
            if isinstance(node.attributes, HealthCheckAttributes)
            and node.attributes.target == resource_id
        ]

    def is_satisfied(
        self,
        resource_id: str,
        snapshot: HealthSnapshot | None = None,
    ) -> HealthStatus:
        """Whether dependents of a resource may proceed.

        Args:
            resource_id: Resource or health check identifier.
            snapshot: Snapshot to read from. A fresh one is taken if
                not given.

        Raises:
            UnknownResourceError: Resource not registered.
        """
        if resource_id not in self.registry:
            raise UnknownResourceError(resource_id)
        if snapshot is None:
            snapshot = self.snapshot()
        return snapshot.status_of(resource_id)

    def snapshot(self) -> HealthSnapshot:
        checks: dict[str, HealthStatus] = {}
        monitors: dict[str, list[str]] = {}
        nodes = self.registry.snapshot()
        with self._lock:
            for node in nodes:
                attributes = node.attributes
                if not isinstance(attributes, HealthCheckAttributes):
                    continue
                checks[node.id] = self._reported.get(
                    node.id, HealthStatus.PENDING
                )
                monitors.setdefault(attributes.target, []).append(node.id)
        return HealthSnapshot(checks=checks, monitors=monitors)

    def _check_attributes(self, check_id: str) -> HealthCheckAttributes:
        node = self.registry.get(check_id)
        if not isinstance(node.attributes, HealthCheckAttributes):
            raise BadRequestError(f"{check_id} is not a health check")
        return node.attributes
