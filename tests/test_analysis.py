"""
Tests for SimulationAnalyzer: bottleneck detection and error breakdown.
"""

import pytest

from archsim.core import build_template
from archsim.simulation import (
    ComponentUtilization,
    FailureReason,
    RequestStatus,
    RequestType,
    SimulationAnalyzer,
    SimulationRequest,
)
from archsim.simulation.analysis import UNKNOWN_ERROR


@pytest.fixture
def analyzer():
    return SimulationAnalyzer(build_template("three-tier"))


def failed_request(node_id, reason, at, request_type=RequestType.READ):
    return SimulationRequest(
        id=f"req-{at}",
        request_type=request_type,
        source_node_id="client-1",
        current_node_id=node_id,
        destination_node_id="database-3",
        created_at=0,
        status=RequestStatus.FAILED,
        failed_at=at,
        failure_reason=reason,
    )


class TestBottlenecks:

    def test_threshold_is_strict_and_sorted(self, analyzer):
        util = ComponentUtilization(
            nodes={"server-2": 0.9, "database-3": 0.5, "client-1": 0.7},
            edges={"edge-server-2-database-3": 0.95},
        )
        found = analyzer.find_bottlenecks(util)

        assert [b.id for b in found] == ["edge-server-2-database-3", "server-2", "client-1"]
        assert found[0].kind == "edge"
        assert found[0].name == "Application Server -> Database"
        assert found[1].name == "Application Server"

    def test_limit(self, analyzer):
        util = ComponentUtilization(nodes={"server-2": 0.9, "database-3": 0.8, "client-1": 0.7})
        assert len(analyzer.find_bottlenecks(util, limit=2)) == 2
        assert len(analyzer.find_bottlenecks(util, limit=None)) == 3

    def test_unknown_edges_are_skipped(self, analyzer):
        util = ComponentUtilization(edges={"removed-edge": 0.99})
        assert analyzer.find_bottlenecks(util) == []

    def test_unknown_node_uses_id(self, analyzer):
        util = ComponentUtilization(nodes={"ghost": 0.9})
        assert analyzer.find_bottlenecks(util)[0].name == "ghost"


class TestErrors:

    def test_no_failures(self, analyzer):
        analysis = analyzer.analyze_errors([])
        assert analysis.total_errors == 0
        assert analysis.by_reason == []

    def test_breakdown(self, analyzer):
        failed = [
            failed_request("server-2", FailureReason.NODE_OVERLOAD, 100),
            failed_request("server-2", FailureReason.NODE_OVERLOAD, 200),
            failed_request("database-3", FailureReason.TIMEOUT, 300, RequestType.WRITE),
            failed_request("server-2", None, 400),
        ]
        analysis = analyzer.analyze_errors(failed, recent=2)

        assert analysis.total_errors == 4
        assert analysis.by_reason[0] == {"reason": "Node overload", "count": 2}
        assert {"reason": UNKNOWN_ERROR, "count": 1} in analysis.by_reason
        assert analysis.by_node[0] == {"node_id": "server-2", "node_name": "Application Server", "count": 3}
        assert {"type": "Write", "count": 1} in analysis.by_type
        assert [r["failed_at"] for r in analysis.recent] == [400, 300]

    def test_to_dict(self, analyzer):
        data = analyzer.analyze_errors([failed_request("client-1", FailureReason.EDGE_FAILURE, 10)]).to_dict()
        assert data["total_errors"] == 1
        assert data["by_reason"] == [{"reason": "Edge Failure Probability", "count": 1}]
