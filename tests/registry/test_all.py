import threading

import pytest
from pydantic import ValidationError

from stackplan.core.exceptions import GraphFinalizedError
from stackplan.registry import (
    DatabaseAttributes,
    DuplicateIdentifierError,
    ResourceKind,
    ResourceNode,
    ResourceRegistry,
    ServiceAttributes,
    UnknownResourceError,
)


def test_register_get():
    registry = ResourceRegistry()
    node = ResourceNode(id="db", kind="database", attributes={"port": 5433})
    assert registry.register(node) is node
    assert registry.get("db") is node
    assert isinstance(node.attributes, DatabaseAttributes)
    assert node.attributes.port == 5433
    assert node.attributes.engine == "postgres"
    assert node.attributes.allocated_storage == 20
    assert "db" in registry
    assert len(registry) == 1


def test_register_duplicate():
    registry = ResourceRegistry()
    registry.declare("vpc", "network")
    with pytest.raises(DuplicateIdentifierError) as e:
        registry.declare("vpc", ResourceKind.COMPUTE_CLUSTER)
    assert e.value.id == "vpc"
    assert e.value.status_code == 409
    assert registry.get("vpc").kind == ResourceKind.NETWORK


def test_get_unknown():
    registry = ResourceRegistry()
    with pytest.raises(UnknownResourceError):
        registry.get("missing")
    with pytest.raises(UnknownResourceError):
        registry.index("missing")


def test_all_preserves_registration_order():
    registry = ResourceRegistry()
    for id in ("c", "a", "b"):
        registry.declare(id, "network")
    nodes = registry.all()
    assert [node.id for node in nodes] == ["c", "a", "b"]
    # Iterating again restarts from the first node.
    assert [node.id for node in nodes] == ["c", "a", "b"]
    assert registry.sort(["b", "c", "a"]) == ["c", "a", "b"]
    assert registry.index("a") == 1


def test_all_is_lazy():
    registry = ResourceRegistry()
    registry.declare("a", "network")
    nodes = registry.all()
    registry.declare("b", "network")
    assert [node.id for node in nodes] == ["a", "b"]


def test_close_rejects_registration():
    registry = ResourceRegistry()
    registry.declare("vpc", "network")
    assert [node.id for node in registry.close()] == ["vpc"]
    assert registry.is_closed
    with pytest.raises(GraphFinalizedError):
        registry.declare("db", "database")
    assert len(registry) == 1
    registry.reopen()
    registry.declare("db", "database")
    assert [node.id for node in registry.all()] == ["vpc", "db"]


def test_iterate_while_registering():
    registry = ResourceRegistry()
    done = threading.Event()
    errors: list[Exception] = []

    def register():
        for i in range(2000):
            registry.declare(f"r{i}", "network")
        done.set()

    def read():
        while not done.is_set():
            try:
                ids = [node.id for node in registry.all()]
                assert ids == [f"r{i}" for i in range(len(ids))]
            except Exception as e:
                errors.append(e)
                return

    threads = [threading.Thread(target=register)] + [
        threading.Thread(target=read) for _ in range(3)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert errors == []
    assert len(registry.all()) == 2000


def test_service_attributes():
    node = ResourceNode(
        id="auth-service",
        kind="service",
        attributes={
            "image": "auth-service",
            "ports": [4005],
            "environment": {"PORT": 8080, "DEBUG": "false"},
        },
    )
    attributes = node.attributes
    assert isinstance(attributes, ServiceAttributes)
    assert attributes.environment == {"PORT": "8080", "DEBUG": "false"}
    assert attributes.log_group == "/ecs/auth-service"
    assert attributes.cpu == 256
    assert attributes.memory == 512
    assert attributes.public is False


def test_node_is_immutable():
    node = ResourceNode(id="vpc", kind="network")
    with pytest.raises(ValidationError):
        node.id = "other"
    with pytest.raises(ValidationError):
        node.attributes.max_azs = 3


@pytest.mark.parametrize(
    "kind,attributes",
    [
        ("unknown", {}),
        ("network", {"unexpected": 1}),
        ("service", {}),
        ("health_check", {}),
        ("health_check", {"target": "db", "failure_threshold": 0}),
    ],
)
def test_invalid_node(kind, attributes):
    with pytest.raises(ValidationError):
        ResourceNode(id="x", kind=kind, attributes=attributes)


def test_attributes_must_match_kind():
    with pytest.raises(ValidationError):
        ResourceNode(
            id="x",
            kind="network",
            attributes=DatabaseAttributes(),
        )


def test_empty_id():
    with pytest.raises(ValidationError):
        ResourceNode(id=" ", kind="network")


def test_node_serialization():
    node = ResourceNode(
        id="db", kind="database", attributes={"database_name": "patients"}
    )
    data = node.to_dict()
    assert data["kind"] == "database"
    assert data["attributes"]["database_name"] == "patients"
    assert ResourceNode.from_dict(data) == node
