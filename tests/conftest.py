"""
Test Configuration and Fixtures
================================

Shared pytest fixtures for the architecture flow simulator.

Usage:
    pytest tests/                    # Run all tests
    pytest tests/ -v                 # Verbose output
    pytest tests/ -k "processor"     # Run only processor tests
    pytest tests/ --quick            # Skip slow tests
"""

import random

import pytest
from pathlib import Path
from typing import Any, Dict

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from archsim.config import SimulationSettings
from archsim.core import (
    ArchitectureGraph,
    ClientConfig,
    Edge,
    EdgeType,
    HTTPEdgeConfig,
    Node,
    NodeType,
    ServerConfig,
)


# =============================================================================
# Custom Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


def pytest_addoption(parser):
    """Add custom command line options"""
    parser.addoption(
        "--quick",
        action="store_true",
        default=False,
        help="Skip slow tests",
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests if --quick is specified"""
    if config.getoption("--quick"):
        skip_slow = pytest.mark.skip(reason="Skipped with --quick")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


# =============================================================================
# Random Sources
# =============================================================================

class FixedRandom(random.Random):
    """Random source whose uniform draw always returns ``value``."""

    def __init__(self, value: float = 0.5, seed: int = 0):
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def fixed_rng():
    """Factory for FixedRandom instances."""
    return FixedRandom


# =============================================================================
# Settings
# =============================================================================

@pytest.fixture
def settings() -> SimulationSettings:
    return SimulationSettings(seed=42)


# =============================================================================
# Graph Fixtures
# =============================================================================

def make_client_server_graph(users: int = 1, think_time: float = 1000,
                             edge_failure: float = 0.0) -> ArchitectureGraph:
    client = Node(
        id="client-1",
        node_type=NodeType.CLIENT,
        config=ClientConfig(concurrent_users=users, think_time_between_requests=think_time),
        label="Web Client",
    )
    server = Node(id="server-1", node_type=NodeType.SERVER, config=ServerConfig(), label="App Server")
    edge = Edge(
        id="e1",
        source="client-1",
        target="server-1",
        edge_type=EdgeType.HTTP,
        config=HTTPEdgeConfig(failure_probability=edge_failure),
    )
    return ArchitectureGraph([client, server], [edge])


@pytest.fixture
def client_server_graph() -> ArchitectureGraph:
    """One client (1 user, 1s think time) calling one server over HTTP."""
    return make_client_server_graph()


@pytest.fixture
def editor_document() -> Dict[str, Any]:
    """Architecture as exported by the diagram editor."""
    return {
        "nodes": [
            {
                "id": "c1",
                "type": "client",
                "position": {"x": 0, "y": 0},
                "data": {"label": "Browser", "concurrentUsers": 50, "thinkTimeBetweenRequests": 500},
            },
            {
                "id": "lb1",
                "type": "loadBalancer",
                "position": {"x": 300, "y": 0},
                "data": {"label": "LB", "algorithm": "Least Connections"},
            },
            {
                "id": "s1",
                "type": "server",
                "position": {"x": 600, "y": 0},
                "data": {"label": "API", "cpuCores": 8, "hasGPU": True},
            },
            {
                "id": "db1",
                "type": "database",
                "position": {"x": 900, "y": 0},
                "data": {"label": "Postgres", "readIOPS": 2000},
            },
        ],
        "edges": [
            {"id": "e1", "source": "c1", "target": "lb1", "type": "http", "data": {"method": "POST"}},
            {"id": "e2", "source": "lb1", "target": "s1", "type": "http"},
            {"id": "e3", "source": "s1", "target": "db1", "type": "database",
             "data": {"connectionType": "Write"}},
        ],
    }


@pytest.fixture
def graph_factory():
    """Factory for client -> server graphs with custom load and edge failure rate."""
    return make_client_server_graph
