from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import (
    ConfigDict,
    SerializeAsAny,
    field_validator,
    model_validator,
)

from stackplan.core import FrozenDataModel


class ResourceKind(str, Enum):
    NETWORK = "network"
    DATABASE = "database"
    MESSAGE_CLUSTER = "message_cluster"
    COMPUTE_CLUSTER = "compute_cluster"
    HEALTH_CHECK = "health_check"
    SERVICE = "service"


class Attributes(FrozenDataModel):
    """Base for kind-specific attributes."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class NetworkAttributes(Attributes):
    """Virtual network."""

    name: str | None = None
    max_azs: int = 2
    domain: str = "internal"


class DatabaseAttributes(Attributes):
    """Relational database instance."""

    engine: str = "postgres"
    version: str = "17.2"
    instance_class: str = "burstable2.micro"
    allocated_storage: int = 20
    """Storage in GiB."""

    database_name: str | None = None
    username: str = "admin_user"
    credential_ref: str | None = None
    """Reference to the generated credential secret."""

    address: str | None = None
    port: int | None = None
    removal_policy: str = "destroy"
    env_prefix: str | None = None


class MessageClusterAttributes(Attributes):
    """Message streaming cluster."""

    cluster_name: str | None = None
    version: str = "2.8.0"
    broker_count: int = 2
    instance_type: str = "kafka.m5.xlarge"
    az_distribution: str = "DEFAULT"
    bootstrap_endpoints: list[str] = []
    domain: str | None = None
    broker_port: int = 9092
    env_prefix: str | None = None


class ComputeClusterAttributes(Attributes):
    """Container compute cluster."""

    namespace: str | None = None
    """Service discovery namespace."""


class HealthCheckAttributes(Attributes):
    """Health check watching another resource."""

    target: str
    type: str = "TCP"
    port: int | None = None
    request_interval: int = 30
    failure_threshold: int = 3

    @field_validator("failure_threshold")
    @classmethod
    def _check_threshold(cls, value: int) -> int:
        if value < 1:
            raise ValueError("failure_threshold must be at least 1")
        return value


class ServiceAttributes(Attributes):
    """Deployable container service."""

    image: str
    ports: list[int] = []
    environment: dict[str, str] = {}
    cpu: int = 256
    memory: int = 512
    """Memory limit in MiB."""

    desired_count: int = 1
    public: bool = False
    cluster: str | None = None
    log_group: str | None = None
    log_retention_days: int = 1
    health_check_grace_period: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        environment = data.get("environment")
        if isinstance(environment, dict):
            data["environment"] = {
                str(k): v if v is None or isinstance(v, str) else str(v)
                for k, v in environment.items()
            }
        if data.get("log_group") is None and data.get("image"):
            data["log_group"] = f"/ecs/{data['image']}"
        return data


ATTRIBUTE_TYPES: dict[ResourceKind, type[Attributes]] = {
    ResourceKind.NETWORK: NetworkAttributes,
    ResourceKind.DATABASE: DatabaseAttributes,
    ResourceKind.MESSAGE_CLUSTER: MessageClusterAttributes,
    ResourceKind.COMPUTE_CLUSTER: ComputeClusterAttributes,
    ResourceKind.HEALTH_CHECK: HealthCheckAttributes,
    ResourceKind.SERVICE: ServiceAttributes,
}


class ResourceNode(FrozenDataModel):
    """Declared resource.

    Attributes:
        id: Unique identifier.
        kind: Resource kind.
        attributes: Kind-specific attributes. A plain mapping is
            validated into the record for `kind`.
    """

    id: str
    kind: ResourceKind
    attributes: SerializeAsAny[Attributes]

    @model_validator(mode="before")
    @classmethod
    def _convert_attributes(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        kind = ResourceKind(data.get("kind"))
        attributes = data.get("attributes")
        expected = ATTRIBUTE_TYPES[kind]
        if attributes is None:
            attributes = dict()
        if isinstance(attributes, Attributes):
            if not isinstance(attributes, expected):
                raise ValueError(
                    f"{type(attributes).__name__} does not match kind "
                    f"{kind.value}"
                )
        else:
            attributes = expected.model_validate(attributes)
        return {**data, "kind": kind, "attributes": attributes}

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("id must not be empty")
        return value
