"""
Request Processor

Per-tick state machine advancing each request by one step:

    pending -> processing -> completed | failed

A request works at its current node until it has accrued the required
processing time, then either completes (at its destination) or hops to the
next node chosen by the router. Utilization is accounted per request: the
increment actually applied to a node or edge is stored on the request and
subtracted verbatim when the request leaves it, whatever the outcome.
"""

from __future__ import annotations
import logging
import random
from typing import List, Optional

from archsim.config.settings import SimulationSettings
from archsim.core.graph import ArchitectureGraph
from archsim.core.models import Node, NodeType
from .impact import ImpactCalculator
from .models import (
    ComponentUtilization,
    FailureReason,
    ProcessorResult,
    RequestStatus,
    SimulationRequest,
)
from .router import PathRouter

CLIENT_TO_DATABASE_PENALTY = 5


class RequestProcessor:
    """
    Advances requests against a graph and a utilization snapshot.

    Args:
        settings: simulator constants
        rng: random source shared with the impact model
        router: next-hop chooser (a default PathRouter when omitted)
        impact: capacity model (built from ``settings`` and ``rng`` when omitted)
    """

    def __init__(self, settings: Optional[SimulationSettings] = None,
                 rng: Optional[random.Random] = None,
                 router: Optional[PathRouter] = None,
                 impact: Optional[ImpactCalculator] = None):
        self.settings = settings or SimulationSettings()
        self.rng = rng or random.Random()
        self.router = router or PathRouter()
        self.impact = impact or ImpactCalculator(self.settings, self.rng)
        self.logger = logging.getLogger(__name__)

    # =========================================================================
    # Batch
    # =========================================================================

    def process_requests(self, requests: List[SimulationRequest], graph: ArchitectureGraph,
                         time_step: float, elapsed: float,
                         utilization: ComponentUtilization) -> ProcessorResult:
        """
        Advance every request by one tick.

        Requests are processed in list order against a private copy of
        ``utilization``; neither the snapshot nor the input requests are
        modified.
        """
        result = ProcessorResult(utilization=utilization.copy())

        for request in requests:
            updated = self.process_request(request, graph, time_step, elapsed, result.utilization)
            if updated.status == RequestStatus.COMPLETED:
                result.completed.append(updated)
            elif updated.status == RequestStatus.FAILED:
                result.failed.append(updated)
            else:
                result.active.append(updated)
        return result

    # =========================================================================
    # Single request
    # =========================================================================

    def process_request(self, request: SimulationRequest, graph: ArchitectureGraph,
                        time_step: float, elapsed: float,
                        utilization: ComponentUtilization) -> SimulationRequest:
        """
        Advance one request by one tick, folding its load changes into
        ``utilization`` in place. Terminal requests are returned untouched.
        """
        if request.is_terminal:
            return request

        r = request.clone()
        data = r.processing

        # 1. Leave the edge traversed on the previous tick
        if data.edge_to_decrease_id:
            self._release_edge(r, data.edge_to_decrease_id, utilization)
            data.edge_to_decrease_id = None
            r.current_edge_id = None

        # 2-4. Lifetime, retry budget, graph consistency
        if elapsed - r.created_at > self.settings.max_request_lifetime_ms:
            return self._fail(r, FailureReason.TIMEOUT, elapsed, utilization)
        if data.retry_count > r.max_retries:
            return self._fail(r, FailureReason.MAX_RETRIES, elapsed, utilization)

        current = graph.get_node(r.current_node_id)
        if current is None:
            return self._fail(r, FailureReason.CURRENT_NODE_NOT_FOUND, elapsed, utilization)

        # 5. Still working at the current node
        if data.processing_time < data.required_processing_time:
            self._occupy_node(r, current, utilization)

            if self.impact.is_node_overloaded(current, utilization):
                if self.rng.random() < self.settings.node_overload_failure_chance:
                    return self._fail(r, FailureReason.NODE_OVERLOAD, elapsed, utilization)
                data.processing_time += time_step * 0.5
            else:
                if self.rng.random() < self.impact.failure_probability(current, time_step):
                    return self._fail(r, FailureReason.RANDOM_NODE_FAILURE, elapsed, utilization)
                data.processing_time += time_step

            r.status = RequestStatus.PROCESSING
            return r

        # 6. Work done here: arrive, retry in place, or move on
        if r.current_node_id == r.destination_node_id:
            r.status = RequestStatus.COMPLETED
            r.completed_at = elapsed
            self._release_all(r, utilization)
            return r

        if r.retry_on_error and self.rng.random() < self.settings.retry_chance:
            return self._retry(r)

        next_node = self.router.determine_next_node(r, graph, utilization)
        if next_node is None:
            if r.retry_on_error:
                return self._retry(r)
            return self._fail(r, FailureReason.NEXT_NODE_NOT_FOUND, elapsed, utilization)

        r.prev_node_id = current.id
        edge = graph.find_edge(current.id, next_node.id)
        if edge is None:
            if r.retry_on_error:
                return self._retry(r)
            return self._fail(r, FailureReason.NEXT_EDGE_NOT_FOUND, elapsed, utilization)

        r.current_edge_id = edge.id
        applied = utilization.add_edge(edge.id, self.impact.edge_utilization_impact(r, edge))
        data.edge_utilization[edge.id] = data.edge_utilization.get(edge.id, 0.0) + applied

        edge_overloaded = self.impact.is_edge_overloaded(edge, utilization)
        if edge_overloaded and self.rng.random() < self.settings.edge_congestion_failure_chance:
            return self._fail(r, FailureReason.NETWORK_CONGESTION, elapsed, utilization)

        edge_failure = edge.config.failure_probability
        if edge_failure and self.rng.random() < edge_failure:
            return self._fail(r, FailureReason.EDGE_FAILURE, elapsed, utilization)

        # Hop
        self._release_node(r, current.id, utilization)
        r.current_node_id = next_node.id
        r.path.append(next_node.id)
        data.total_processing_time += data.processing_time
        data.processing_time = 0.0
        data.required_processing_time = self.impact.required_processing_time(next_node, r)
        if edge_overloaded:
            data.required_processing_time += self.settings.edge_congestion_penalty_ms
        if current.node_type == NodeType.CLIENT and next_node.node_type == NodeType.DATABASE:
            data.required_processing_time *= CLIENT_TO_DATABASE_PENALTY
        data.edge_to_decrease_id = edge.id
        r.status = RequestStatus.PROCESSING
        return r

    # =========================================================================
    # Transitions and accounting
    # =========================================================================

    @staticmethod
    def _retry(r: SimulationRequest) -> SimulationRequest:
        r.processing.retry_count += 1
        r.status = RequestStatus.PROCESSING
        return r

    def _fail(self, r: SimulationRequest, reason: FailureReason, elapsed: float,
              utilization: ComponentUtilization) -> SimulationRequest:
        r.status = RequestStatus.FAILED
        r.failed_at = elapsed
        r.failure_reason = reason
        self._release_all(r, utilization)
        self.logger.debug(f"Request {r.id} failed at {r.current_node_id}: {reason.value}")
        return r

    def _occupy_node(self, r: SimulationRequest, node: Node,
                     utilization: ComponentUtilization) -> None:
        """Add the request's load to ``node`` once per stay."""
        held = r.processing.node_utilization
        if node.id in held:
            return
        held[node.id] = utilization.add_node(
            node.id, self.impact.node_utilization_impact(r, node))

    @staticmethod
    def _release_node(r: SimulationRequest, node_id: str,
                      utilization: ComponentUtilization) -> None:
        amount = r.processing.node_utilization.pop(node_id, None)
        if amount is not None:
            utilization.release_node(node_id, amount)

    @staticmethod
    def _release_edge(r: SimulationRequest, edge_id: str,
                      utilization: ComponentUtilization) -> None:
        amount = r.processing.edge_utilization.pop(edge_id, None)
        if amount is not None:
            utilization.release_edge(edge_id, amount)

    def _release_all(self, r: SimulationRequest, utilization: ComponentUtilization) -> None:
        for node_id in list(r.processing.node_utilization):
            self._release_node(r, node_id, utilization)
        for edge_id in list(r.processing.edge_utilization):
            self._release_edge(r, edge_id, utilization)
        r.processing.edge_to_decrease_id = None
