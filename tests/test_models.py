"""
Tests for the architecture and simulation data model.

Covers:
    - Node / edge construction and config validation
    - Editor JSON conversion (camelCase keys, defaults)
    - ComponentUtilization clamping and release
    - SimulationState derived values
"""

import pytest

from archsim.core import (
    ClientConfig,
    DatabaseConfig,
    Edge,
    EdgeConfig,
    EdgeType,
    HTTPEdgeConfig,
    MessageQueueEdgeConfig,
    Node,
    NodeType,
    ServerConfig,
    EDGE_CONFIG_TYPES,
    NODE_CONFIG_TYPES,
)
from archsim.simulation import (
    ComponentUtilization,
    FailureReason,
    RequestStatus,
    RequestType,
    SimulationRequest,
    SimulationState,
)


# =============================================================================
# Nodes and Edges
# =============================================================================

class TestNode:

    def test_default_config_per_type(self):
        for node_type, config_type in NODE_CONFIG_TYPES.items():
            node = Node(id="n", node_type=node_type)
            assert isinstance(node.config, config_type)

    def test_mismatched_config_rejected(self):
        with pytest.raises(ValueError):
            Node(id="n", node_type=NodeType.SERVER, config=DatabaseConfig())

    def test_from_dict_reads_editor_keys(self):
        node = Node.from_dict({
            "id": "s1",
            "type": "server",
            "data": {"label": "API", "cpuCores": 8, "hasGPU": True, "maxRequestsPerSecond": 5000},
        })
        assert node.node_type == NodeType.SERVER
        assert node.label == "API"
        assert node.config.cpu_cores == 8
        assert node.config.has_gpu is True
        assert node.config.max_requests_per_second == 5000
        # untouched fields keep their defaults
        assert node.config.memory == ServerConfig().memory

    def test_from_dict_accepts_snake_case(self):
        node = Node.from_dict({"id": "c", "type": "client", "data": {"concurrent_users": 7}})
        assert node.config.concurrent_users == 7

    def test_from_dict_unknown_type(self):
        with pytest.raises(ValueError):
            Node.from_dict({"id": "x", "type": "mainframe"})

    def test_to_dict_uses_editor_keys(self):
        node = Node(id="d1", node_type=NodeType.DATABASE, label="Main DB")
        data = node.to_dict()
        assert data["type"] == "database"
        assert data["data"]["label"] == "Main DB"
        assert data["data"]["readIOPS"] == 1000
        assert "read_iops" not in data["data"]

    def test_display_name_falls_back_to_id(self):
        assert Node(id="n1", node_type=NodeType.CACHE).display_name == "n1"
        assert Node(id="n1", node_type=NodeType.CACHE, label="Redis").display_name == "Redis"


class TestEdge:

    def test_every_edge_type_has_config(self):
        assert set(EDGE_CONFIG_TYPES) == set(EdgeType)

    def test_message_queue_types_share_config(self):
        for edge_type in (EdgeType.MQTT, EdgeType.AMQP, EdgeType.KAFKA):
            assert edge_type.is_message_queue
            assert EDGE_CONFIG_TYPES[edge_type] is MessageQueueEdgeConfig
        assert not EdgeType.HTTP.is_message_queue

    def test_missing_type_is_default(self):
        edge = Edge.from_dict({"id": "e", "source": "a", "target": "b"})
        assert edge.edge_type == EdgeType.DEFAULT
        assert type(edge.config) is EdgeConfig

    def test_config_type_must_match_exactly(self):
        with pytest.raises(ValueError):
            Edge(id="e", source="a", target="b", edge_type=EdgeType.DEFAULT, config=HTTPEdgeConfig())

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            Edge.from_dict({"id": "e", "source": "a", "target": "b", "type": "carrier-pigeon"})

    def test_http_defaults_and_overrides(self):
        edge = Edge.from_dict({
            "id": "e", "source": "a", "target": "b", "type": "http",
            "data": {"method": "POST", "useTLS": True, "maxThroughputRPS": 50},
        })
        assert edge.config.method == "POST"
        assert edge.config.use_tls is True
        assert edge.config.max_throughput_rps == 50
        assert edge.config.http_version == "HTTP/1.1"


# =============================================================================
# Utilization
# =============================================================================

class TestComponentUtilization:

    def test_add_returns_applied_amount(self):
        util = ComponentUtilization()
        assert util.add_node("n", 0.3) == pytest.approx(0.3)
        assert util.node("n") == pytest.approx(0.3)

    def test_add_saturates_at_one(self):
        util = ComponentUtilization(nodes={"n": 0.95})
        applied = util.add_node("n", 0.1)
        assert util.node("n") == 1.0
        assert applied == pytest.approx(0.05)

    def test_negative_increment_ignored(self):
        util = ComponentUtilization()
        assert util.add_edge("e", -0.5) == 0.0
        assert util.edge("e") == 0.0

    def test_release_clamps_and_snaps(self):
        util = ComponentUtilization(nodes={"n": 0.2}, edges={"e": 0.1})
        util.release_node("n", 0.5)
        util.release_edge("e", 0.1 - 1e-12)
        assert util.node("n") == 0.0
        assert util.edge("e") == 0.0

    def test_release_unknown_component_is_noop(self):
        util = ComponentUtilization()
        util.release_node("ghost", 0.2)
        assert "ghost" not in util.nodes

    def test_copy_is_independent(self):
        util = ComponentUtilization(nodes={"n": 0.5})
        clone = util.copy()
        clone.add_node("n", 0.1)
        assert util.node("n") == 0.5


# =============================================================================
# Requests and State
# =============================================================================

class TestSimulationRequest:

    def _request(self):
        return SimulationRequest(
            id="req-1",
            request_type=RequestType.READ,
            source_node_id="c",
            current_node_id="c",
            destination_node_id="s",
            created_at=100,
            path=["c"],
        )

    def test_clone_is_deep(self):
        request = self._request()
        clone = request.clone()
        clone.path.append("s")
        clone.processing.node_utilization["c"] = 0.1
        assert request.path == ["c"]
        assert request.processing.node_utilization == {}

    def test_response_time(self):
        request = self._request()
        assert request.response_time is None
        request.completed_at = 350
        assert request.response_time == 250

    def test_terminal_statuses(self):
        assert RequestStatus.COMPLETED.is_terminal
        assert RequestStatus.FAILED.is_terminal
        assert not RequestStatus.PENDING.is_terminal
        assert not RequestStatus.PROCESSING.is_terminal

    def test_to_dict_reports_failure_reason_text(self):
        request = self._request()
        request.status = RequestStatus.FAILED
        request.failure_reason = FailureReason.NETWORK_CONGESTION
        data = request.to_dict()
        assert data["status"] == "failed"
        assert data["failure_reason"] == "Network congestion"
        assert data["type"] == "Read"


class TestSimulationState:

    def test_success_rate(self):
        state = SimulationState(completed_count=3, failed_count=1)
        assert state.success_rate == 75.0
        assert SimulationState().success_rate == 0.0

    def test_to_dict_omits_requests_by_default(self):
        data = SimulationState().to_dict()
        assert "active_requests" not in data
        assert "active_requests" in SimulationState().to_dict(include_requests=True)


def test_client_config_optional_pattern_fields():
    cfg = ClientConfig()
    assert cfg.burst_factor is None
    assert cfg.period_seconds is None
    assert ClientConfig.from_dict({"burstFactor": 3}).burst_factor == 3
