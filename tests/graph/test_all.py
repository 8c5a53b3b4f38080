import itertools
import random

import pytest

from stackplan.graph import (
    CyclicDependencyError,
    DependencyGraph,
    EdgeStrength,
    GraphFinalizedError,
    GraphNotFinalizedError,
    UnknownResourceError,
)
from stackplan.registry import ResourceRegistry


def get_graph(ids: list[str]) -> DependencyGraph:
    registry = ResourceRegistry()
    for id in ids:
        registry.declare(id, "network")
    return DependencyGraph(registry)


def assert_respects_edges(graph: DependencyGraph, order: list[str]):
    position = {id: i for i, id in enumerate(order)}
    for edge in graph.edges():
        assert position[edge.target] < position[edge.source]


def test_add_edge_unknown_endpoint():
    graph = get_graph(["a"])
    with pytest.raises(UnknownResourceError) as e:
        graph.add_edge("a", "b")
    assert e.value.id == "b"
    with pytest.raises(UnknownResourceError):
        graph.add_edge("x", "a")
    assert graph.edges() == []


def test_add_edge_defaults_to_hard():
    graph = get_graph(["a", "b"])
    edge = graph.add_edge("a", "b")
    assert edge.strength == EdgeStrength.HARD
    assert edge.source == "a"
    assert edge.target == "b"


def test_add_edge_hard_supersedes_soft():
    graph = get_graph(["a", "b"])
    graph.add_edge("a", "b", "soft")
    graph.add_edge("a", "b", "hard")
    graph.add_edge("a", "b", "soft")
    assert len(graph.edges()) == 1
    assert graph.edges()[0].strength == EdgeStrength.HARD


def test_topological_order_before_finalize():
    graph = get_graph(["a"])
    with pytest.raises(GraphNotFinalizedError):
        graph.topological_order()


def test_add_edge_after_finalize():
    graph = get_graph(["a", "b"])
    graph.finalize_and_validate()
    assert graph.is_finalized
    with pytest.raises(GraphFinalizedError):
        graph.add_edge("a", "b")
    with pytest.raises(GraphFinalizedError):
        graph.registry.declare("c", "network")
    assert graph.topological_order() == ["a", "b"]


def test_order_respects_edges():
    graph = get_graph(["app", "db", "vpc", "queue"])
    graph.add_edge("app", "db")
    graph.add_edge("db", "vpc")
    graph.add_edge("app", "queue", EdgeStrength.SOFT)
    graph.add_edge("queue", "vpc")
    order = graph.finalize_and_validate()
    assert order == ["vpc", "db", "queue", "app"]
    assert graph.topological_order() == order
    assert_respects_edges(graph, order)


def test_order_ties_follow_registration():
    graph = get_graph(["c", "b", "a"])
    assert graph.finalize_and_validate() == ["c", "b", "a"]


def test_order_is_deterministic():
    ids = [f"r{i}" for i in range(12)]
    rng = random.Random(7)
    edges = [
        (ids[j], ids[i], rng.choice(list(EdgeStrength)))
        for i, j in itertools.combinations(range(len(ids)), 2)
        if rng.random() < 0.3
    ]
    orders = []
    for _ in range(3):
        graph = get_graph(ids)
        for source, target, strength in edges:
            graph.add_edge(source, target, strength)
        orders.append(graph.finalize_and_validate())
        assert_respects_edges(graph, orders[-1])
    assert orders[0] == orders[1] == orders[2]


def test_self_cycle():
    graph = get_graph(["a"])
    graph.add_edge("a", "a")
    with pytest.raises(CyclicDependencyError) as e:
        graph.finalize_and_validate()
    assert e.value.cycle == ["a"]
    assert not graph.is_finalized


def test_cycle_reports_shortest_cycle():
    graph = get_graph(["a", "b", "c", "d"])
    graph.add_edge("a", "b")
    graph.add_edge("b", "c")
    graph.add_edge("c", "d")
    graph.add_edge("d", "a")
    graph.add_edge("c", "b", EdgeStrength.SOFT)
    with pytest.raises(CyclicDependencyError) as e:
        graph.finalize_and_validate()
    assert e.value.cycle == ["b", "c"]
    assert "b -> c -> b" in str(e.value)


def test_cycle_edges_exist():
    graph = get_graph(["a", "b", "c", "d", "e"])
    graph.add_edge("a", "b")
    graph.add_edge("b", "c")
    graph.add_edge("c", "d")
    graph.add_edge("d", "b")
    graph.add_edge("e", "a")
    with pytest.raises(CyclicDependencyError) as e:
        graph.finalize_and_validate()
    cycle = e.value.cycle
    assert cycle == ["b", "c", "d"]
    declared = {(edge.source, edge.target) for edge in graph.edges()}
    for source, target in zip(cycle, cycle[1:] + cycle[:1]):
        assert (source, target) in declared


def test_dependencies_and_dependents():
    graph = get_graph(["app", "db", "queue"])
    graph.add_edge("app", "db")
    graph.add_edge("app", "queue", EdgeStrength.SOFT)
    assert [e.target for e in graph.dependencies("app")] == ["db", "queue"]
    assert [
        e.target for e in graph.dependencies("app", EdgeStrength.HARD)
    ] == ["db"]
    assert [e.source for e in graph.dependents("queue")] == ["app"]
    assert graph.dependents("app") == []


def test_health_check_monitoring_edge():
    registry = ResourceRegistry()
    registry.declare("check", "health_check", {"target": "db"})
    registry.declare("db", "database")
    graph = DependencyGraph(registry)
    assert graph.finalize_and_validate() == ["db", "check"]
    assert [e.target for e in graph.dependencies("check")] == ["db"]


def test_health_check_unknown_target():
    registry = ResourceRegistry()
    registry.declare("check", "health_check", {"target": "db"})
    graph = DependencyGraph(registry)
    with pytest.raises(UnknownResourceError):
        graph.finalize_and_validate()
    assert not registry.is_closed
    registry.declare("db", "database")
    assert graph.finalize_and_validate() == ["db", "check"]


def test_health_check_cycle():
    registry = ResourceRegistry()
    registry.declare("db", "database")
    registry.declare("check", "health_check", {"target": "db"})
    registry.declare("app", "service", {"image": "app"})
    graph = DependencyGraph(registry)
    graph.add_edge("app", "check")
    graph.add_edge("db", "app")
    with pytest.raises(CyclicDependencyError) as e:
        graph.finalize_and_validate()
    assert e.value.cycle == ["db", "app", "check"]


def test_soft_monitoring_edge_is_hard():
    registry = ResourceRegistry()
    registry.declare("db", "database")
    registry.declare("check", "health_check", {"target": "db"})
    graph = DependencyGraph(registry)
    graph.add_edge("check", "db", EdgeStrength.SOFT)
    graph.finalize_and_validate()
    assert [
        e.source for e in graph.dependents("db", EdgeStrength.HARD)
    ] == ["check"]
