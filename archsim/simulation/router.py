"""
Path Router

Chooses the next hop for a request that has finished its work at the
current node. Every simple path to the destination is scored on
architectural layering, specialised nodes, load balancing and current
utilization; the best path wins and its second vertex is the next hop.
"""

from __future__ import annotations
import logging
from typing import List, Optional

from archsim.core.graph import ArchitectureGraph
from archsim.core.models import Node, NodeType
from .models import ComponentUtilization, RequestType, SimulationRequest

BASE_PATH_SCORE = 100.0
PROTOCOL_MISMATCH_PENALTY = 50.0
POWERFUL_SERVER_CORES = 4


def _index_of(nodes: List[Node], node_type: NodeType) -> int:
    for index, node in enumerate(nodes):
        if node.node_type == node_type:
            return index
    return -1


class PathRouter:
    """Scores candidate paths and returns the next node to visit."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def determine_next_node(self, request: SimulationRequest, graph: ArchitectureGraph,
                            utilization: ComponentUtilization) -> Optional[Node]:
        """
        Next hop toward the request's destination.

        Returns None when the request is already at its destination, when
        no path exists, or when the chosen hop does not resolve to a node.
        Ties go to the first path in enumeration order.
        """
        current = request.current_node_id
        destination = request.destination_node_id
        if current == destination:
            return None

        paths = graph.simple_paths(current, destination)
        if not paths:
            self.logger.debug(f"No path from {current} to {destination} for {request.id}")
            return None

        best_path = paths[0]
        best_score = self.evaluate_path_quality(best_path, graph, request, utilization)
        for path in paths[1:]:
            score = self.evaluate_path_quality(path, graph, request, utilization)
            if score > best_score:
                best_path, best_score = path, score

        next_node = graph.get_node(best_path[1])
        if next_node is None:
            self.logger.debug(f"Next hop {best_path[1]} of {request.id} does not resolve")
        return next_node

    def evaluate_path_quality(self, path: List[str], graph: ArchitectureGraph,
                              request: SimulationRequest,
                              utilization: ComponentUtilization) -> float:
        """Non-negative desirability score of ``path`` for ``request``."""
        nodes = [n for n in (graph.get_node(node_id) for node_id in path) if n is not None]

        score = BASE_PATH_SCORE
        score += self.evaluate_architectural_layering(nodes, request.request_type)
        score += self.evaluate_specialized_nodes(nodes, request.request_type)
        score += self.evaluate_load_balancing(nodes)
        score += self.evaluate_path_utilization(nodes, utilization)
        if request.preferred_protocol and \
                not self.is_path_protocol_compatible(nodes, request.preferred_protocol):
            score -= PROTOCOL_MISMATCH_PENALTY
        return max(0.0, score)

    @staticmethod
    def evaluate_architectural_layering(nodes: List[Node], request_type: RequestType) -> float:
        score = 0.0
        ahead = nodes[1:]

        if any(n.node_type == NodeType.LOAD_BALANCER for n in ahead[:2]):
            score += 15

        if request_type in (RequestType.READ, RequestType.WRITE):
            server_index = _index_of(ahead, NodeType.SERVER)
            database_index = _index_of(ahead, NodeType.DATABASE)
            if server_index != -1 and database_index != -1 and server_index < database_index:
                score += 20
            if request_type == RequestType.READ:
                cache_index = _index_of(ahead, NodeType.CACHE)
                if cache_index != -1 and (database_index == -1 or cache_index < database_index):
                    score += 15

        if request_type == RequestType.COMPUTE:
            servers = sum(1 for n in ahead if n.node_type == NodeType.SERVER)
            score += 17.5 * servers
        return score

    @staticmethod
    def evaluate_specialized_nodes(nodes: List[Node], request_type: RequestType) -> float:
        types = [n.node_type for n in nodes]
        if request_type == RequestType.READ:
            return 20.0 if NodeType.CACHE in types else 0.0
        if request_type in (RequestType.WRITE, RequestType.TRANSACTION):
            return 20.0 if NodeType.DATABASE in types else 0.0
        if request_type == RequestType.COMPUTE:
            powerful = sum(
                1 for n in nodes
                if n.node_type == NodeType.SERVER and n.config.cpu_cores >= POWERFUL_SERVER_CORES
            )
            return 15.0 + powerful * 5 if powerful else 0.0
        return 0.0

    @staticmethod
    def evaluate_load_balancing(nodes: List[Node]) -> float:
        balancers = sum(1 for n in nodes if n.node_type == NodeType.LOAD_BALANCER)
        if not balancers:
            return 0.0
        score = 10.0
        first = _index_of(nodes, NodeType.LOAD_BALANCER)
        if 0 < first <= 2:
            score += 5
        if balancers > 2:
            score -= (balancers - 2) * 5
        return score

    @staticmethod
    def evaluate_path_utilization(nodes: List[Node], utilization: ComponentUtilization) -> float:
        """20 points scaled by how idle the nodes after the first are."""
        if not nodes:
            return 0.0
        ahead = [n for n in nodes if n.id != nodes[0].id]
        if not ahead:
            return 0.0
        average = sum(utilization.node(n.id) for n in ahead) / len(ahead)
        return 20 * (1 - average)

    @staticmethod
    def is_path_protocol_compatible(nodes: List[Node], protocol: str) -> bool:
        return all(
            protocol in n.config.supported_protocols
            for n in nodes if n.node_type == NodeType.SERVER
        )
