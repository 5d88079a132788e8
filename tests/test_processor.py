"""
Tests for RequestProcessor.

Covers:
    - Terminal monotonicity and input immutability
    - Timeout and retry exhaustion
    - Work at a node, overload and hop mechanics
    - Edge congestion and edge failure
    - Symmetric utilization accounting on every exit path
"""

import pytest

from archsim.config import SimulationSettings
from archsim.core import ArchitectureGraph, ClientConfig, Edge, EdgeType, Node, NodeType
from archsim.simulation import (
    ComponentUtilization,
    FailureReason,
    ProcessingData,
    RequestProcessor,
    RequestStatus,
    RequestType,
    SimulationRequest,
)


def make_request(current="client-1", destination="server-1", processing_time=0.0,
                 required=20.0, created_at=0.0, **kwargs):
    return SimulationRequest(
        id="req-1",
        request_type=kwargs.pop("request_type", RequestType.WRITE),
        source_node_id="client-1",
        current_node_id=current,
        destination_node_id=destination,
        created_at=created_at,
        size_kb=4,
        path=["client-1"] if current == "client-1" else ["client-1", current],
        processing=ProcessingData(processing_time=processing_time, required_processing_time=required),
        **kwargs,
    )


@pytest.fixture
def make_processor(fixed_rng):
    def factory(draw=0.5, **settings):
        return RequestProcessor(SimulationSettings(**settings), fixed_rng(draw))
    return factory


# =============================================================================
# Lifecycle guards
# =============================================================================

class TestGuards:

    def test_terminal_request_is_returned_untouched(self, make_processor, client_server_graph):
        request = make_request()
        request.status = RequestStatus.COMPLETED
        util = ComponentUtilization()
        result = make_processor().process_request(request, client_server_graph, 100, 100, util)
        assert result is request
        assert util.nodes == {} and util.edges == {}

    def test_input_request_is_not_mutated(self, make_processor, client_server_graph):
        request = make_request()
        make_processor().process_request(request, client_server_graph, 100, 100, ComponentUtilization())
        assert request.status == RequestStatus.PENDING
        assert request.processing.processing_time == 0
        assert request.processing.node_utilization == {}

    def test_timeout_releases_held_load(self, make_processor, client_server_graph):
        request = make_request(created_at=0)
        request.processing.node_utilization["client-1"] = 0.05
        util = ComponentUtilization(nodes={"client-1": 0.05})

        result = make_processor().process_request(request, client_server_graph, 100, 10001, util)

        assert result.status == RequestStatus.FAILED
        assert result.failure_reason == FailureReason.TIMEOUT
        assert result.failed_at == 10001
        assert util.node("client-1") == 0.0
        assert result.processing.node_utilization == {}

    def test_lifetime_boundary_is_inclusive(self, make_processor, client_server_graph):
        result = make_processor().process_request(
            make_request(created_at=0), client_server_graph, 100, 10000, ComponentUtilization())
        assert result.status == RequestStatus.PROCESSING

    def test_retry_budget_exhausted(self, make_processor, client_server_graph):
        request = make_request()
        request.processing.retry_count = 4
        result = make_processor().process_request(request, client_server_graph, 100, 100,
                                                  ComponentUtilization())
        assert result.failure_reason == FailureReason.MAX_RETRIES

        request.processing.retry_count = 3
        result = make_processor().process_request(request, client_server_graph, 100, 100,
                                                  ComponentUtilization())
        assert result.status == RequestStatus.PROCESSING

    def test_current_node_missing(self, make_processor, client_server_graph):
        result = make_processor().process_request(
            make_request(current="deleted"), client_server_graph, 100, 100, ComponentUtilization())
        assert result.failure_reason == FailureReason.CURRENT_NODE_NOT_FOUND


# =============================================================================
# Work at a node
# =============================================================================

class TestProcessing:

    def test_work_accrues_and_load_is_held(self, make_processor, client_server_graph):
        util = ComponentUtilization()
        result = make_processor().process_request(make_request(), client_server_graph, 100, 100, util)

        assert result.status == RequestStatus.PROCESSING
        assert result.processing.processing_time == 100
        assert util.node("client-1") > 0
        assert result.processing.node_utilization["client-1"] == pytest.approx(util.node("client-1"))

    def test_load_is_added_once_per_stay(self, make_processor, client_server_graph):
        processor = make_processor()
        util = ComponentUtilization()
        request = make_request(required=500)
        first = processor.process_request(request, client_server_graph, 100, 100, util)
        after_first = util.node("client-1")
        second = processor.process_request(first, client_server_graph, 100, 200, util)

        assert second.processing.processing_time == 200
        assert util.node("client-1") == after_first

    def test_overloaded_node_fails_request(self, make_processor, client_server_graph):
        util = ComponentUtilization(nodes={"server-1": 0.99})
        request = make_request(current="server-1", required=50)

        result = make_processor(draw=0.1).process_request(request, client_server_graph, 100, 100, util)

        assert result.failure_reason == FailureReason.NODE_OVERLOAD
        assert util.node("server-1") == pytest.approx(0.99)

    def test_overloaded_node_halves_progress(self, make_processor, client_server_graph):
        util = ComponentUtilization(nodes={"server-1": 0.99})
        request = make_request(current="server-1", required=500)
        result = make_processor(draw=0.5).process_request(request, client_server_graph, 100, 100, util)
        assert result.status == RequestStatus.PROCESSING
        assert result.processing.processing_time == 50

    def test_ambient_failure(self, make_processor, client_server_graph):
        # a zero draw is below any positive failure probability
        result = make_processor(draw=0.0).process_request(
            make_request(current="server-1", required=50), client_server_graph, 100, 100,
            ComponentUtilization())
        assert result.failure_reason == FailureReason.RANDOM_NODE_FAILURE


# =============================================================================
# Completion and hops
# =============================================================================

class TestTransitions:

    def test_completes_at_destination(self, make_processor, client_server_graph):
        request = make_request(current="server-1", processing_time=60, required=50)
        request.processing.node_utilization["server-1"] = 0.02
        util = ComponentUtilization(nodes={"server-1": 0.02})

        result = make_processor().process_request(request, client_server_graph, 100, 700, util)

        assert result.status == RequestStatus.COMPLETED
        assert result.completed_at == 700
        assert util.node("server-1") == 0.0

    def test_hop_to_next_node(self, make_processor, client_server_graph):
        request = make_request(processing_time=100, required=20)
        request.processing.node_utilization["client-1"] = 0.05
        util = ComponentUtilization(nodes={"client-1": 0.05})

        result = make_processor().process_request(request, client_server_graph, 100, 200, util)

        assert result.status == RequestStatus.PROCESSING
        assert result.current_node_id == "server-1"
        assert result.prev_node_id == "client-1"
        assert result.path == ["client-1", "server-1"]
        assert result.current_edge_id == "e1"
        assert result.processing.edge_to_decrease_id == "e1"
        assert result.processing.total_processing_time == 100
        assert result.processing.processing_time == 0
        assert result.processing.required_processing_time == pytest.approx(50)
        assert util.node("client-1") == 0.0
        assert util.edge("e1") > 0

    def test_edge_is_released_on_next_tick(self, make_processor, client_server_graph):
        processor = make_processor()
        util = ComponentUtilization()
        hopped = processor.process_request(
            make_request(processing_time=100), client_server_graph, 100, 200, util)
        assert util.edge("e1") > 0

        after = processor.process_request(hopped, client_server_graph, 100, 300, util)

        assert util.edge("e1") == 0.0
        assert after.current_edge_id is None
        assert after.processing.edge_to_decrease_id is None
        assert after.processing.edge_utilization == {}

    def test_client_to_database_penalty(self, make_processor):
        nodes = [Node("client-1", NodeType.CLIENT), Node("db-1", NodeType.DATABASE)]
        graph = ArchitectureGraph(nodes, [Edge("e1", "client-1", "db-1", EdgeType.DATABASE)])
        request = make_request(destination="db-1", processing_time=100, request_type=RequestType.READ)

        result = make_processor().process_request(request, graph, 100, 200, ComponentUtilization())

        # 5 ms database latency, times five for a client talking to storage
        assert result.current_node_id == "db-1"
        assert result.processing.required_processing_time == pytest.approx(25)

    def test_retry_roll_keeps_request_in_place(self, make_processor, client_server_graph):
        processor = make_processor(draw=0.1, retry_chance=0.5)
        result = processor.process_request(
            make_request(processing_time=100), client_server_graph, 100, 200, ComponentUtilization())
        assert result.current_node_id == "client-1"
        assert result.processing.retry_count == 1
        assert result.status == RequestStatus.PROCESSING

    def test_no_route_retries_or_fails(self, make_processor):
        client = Node("client-1", NodeType.CLIENT)
        graph = ArchitectureGraph([client, Node("server-1", NodeType.SERVER)], [])

        retried = make_processor().process_request(
            make_request(processing_time=100), graph, 100, 200, ComponentUtilization())
        assert retried.processing.retry_count == 1

        failed = make_processor().process_request(
            make_request(processing_time=100, retry_on_error=False), graph, 100, 200,
            ComponentUtilization())
        assert failed.failure_reason == FailureReason.NEXT_NODE_NOT_FOUND


# =============================================================================
# Edge failures
# =============================================================================

class TestEdgeFailures:

    def test_congestion_failure_releases_edge(self, make_processor, client_server_graph):
        util = ComponentUtilization(edges={"e1": 0.95})
        result = make_processor(draw=0.1).process_request(
            make_request(processing_time=100), client_server_graph, 100, 200, util)

        assert result.failure_reason == FailureReason.NETWORK_CONGESTION
        assert util.edge("e1") == pytest.approx(0.95)
        assert result.processing.edge_utilization == {}

    def test_congestion_penalty_without_failure(self, make_processor, client_server_graph):
        util = ComponentUtilization(edges={"e1": 0.95})
        result = make_processor(draw=0.5).process_request(
            make_request(processing_time=100), client_server_graph, 100, 200, util)

        assert result.current_node_id == "server-1"
        assert result.processing.required_processing_time == pytest.approx(70)

    def test_edge_failure_probability(self, make_processor, graph_factory):
        graph = graph_factory(edge_failure=1.0)
        util = ComponentUtilization()
        result = make_processor().process_request(
            make_request(processing_time=100), graph, 100, 200, util)

        assert result.failure_reason == FailureReason.EDGE_FAILURE
        assert util.edge("e1") == 0.0


# =============================================================================
# Batch
# =============================================================================

class TestBatch:

    def test_partitions_results_and_keeps_snapshot(self, make_processor, client_server_graph):
        done = make_request()
        done.status = RequestStatus.COMPLETED
        working = make_request()
        expired = make_request(created_at=-20000)
        snapshot = ComponentUtilization()

        result = make_processor().process_requests(
            [done, working, expired], client_server_graph, 100, 100, snapshot)

        assert result.completed == [done]
        assert [r.status for r in result.active] == [RequestStatus.PROCESSING]
        assert [r.failure_reason for r in result.failed] == [FailureReason.TIMEOUT]
        assert snapshot.nodes == {}
        assert result.utilization.node("client-1") > 0

    def test_utilization_stays_bounded_under_load(self, make_processor):
        client = Node("client-1", NodeType.CLIENT, ClientConfig(reconnect_attempts=30))
        graph = ArchitectureGraph([client, Node("server-1", NodeType.SERVER)],
                                  [Edge("e1", "client-1", "server-1")])
        requests = [make_request(required=1000) for _ in range(200)]
        result = make_processor().process_requests(requests, graph, 100, 100, ComponentUtilization())

        assert result.utilization.node("client-1") == 1.0
        held = sum(r.processing.node_utilization["client-1"] for r in result.active)
        assert held == pytest.approx(1.0)
