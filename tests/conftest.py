"""Shared fixtures for flow graph tests."""
import pytest

from flowgraph.config.loader import SimulationConfig
from flowgraph.dag.builder import GraphBuilder
from flowgraph.scheduler.simulator import FlowSimulator


DEMO_EDGES = "start -> 0\n0 -> 1\n1 -> A\nA -> B\nB -> C\nC -> 0"
DAG_EDGES = "A -> B\nA -> C\nA -> D\nD -> B\nB -> C"
TWO_REGION_EDGES = DAG_EDGES + "\nX -> Z\nZ -> Y"


@pytest.fixture
def builder():
    return GraphBuilder()


@pytest.fixture
def demo_registry(builder):
    return builder.build(DEMO_EDGES)


@pytest.fixture
def dag_registry(builder):
    return builder.build(DAG_EDGES)


@pytest.fixture
def make_simulator(builder):
    """Build a graph and a simulator over it: make_simulator(edges, **settings)."""
    def _make(edges, **settings):
        registry = builder.build(edges)
        return registry, FlowSimulator(registry, SimulationConfig(**settings))
    return _make


def names(registry, node_ids):
    return [registry.get(node_id).name for node_id in node_ids]
