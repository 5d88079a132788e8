"""
Architecture Graph

Point-in-time snapshot of an architecture's nodes and edges, backed by a
NetworkX DiGraph for reachability and path enumeration.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional, Set

import networkx as nx

from .models import Edge, EdgeType, Node, NodeType


class ArchitectureGraph:
    """
    Read-only view over the node and edge lists supplied by the editor.

    Adjacency only follows edges whose source is a known node; edge
    targets that do not resolve still appear as path vertices so that
    routing can detect the inconsistency.

    Example:
        >>> graph = ArchitectureGraph.from_dict(document)
        >>> graph.reachable_from("client-1")
        {'server-1', 'db-1'}
    """

    def __init__(self, nodes: Optional[Iterable[Node]] = None,
                 edges: Optional[Iterable[Edge]] = None):
        self.nodes: List[Node] = list(nodes or [])
        self.edges: List[Edge] = list(edges or [])
        self.logger = logging.getLogger(__name__)

        self._nodes_by_id: Dict[str, Node] = {}
        for node in self.nodes:
            self._nodes_by_id.setdefault(node.id, node)
        self._edges_by_id: Dict[str, Edge] = {}
        for edge in self.edges:
            self._edges_by_id.setdefault(edge.id, edge)

        self.graph = nx.DiGraph()
        self._build()

    def _build(self) -> None:
        for node in self.nodes:
            self.graph.add_node(node.id, node_type=node.node_type)
        for edge in self.edges:
            if edge.source not in self._nodes_by_id:
                self.logger.debug(f"Edge {edge.id} has unknown source {edge.source}")
                continue
            if not self.graph.has_edge(edge.source, edge.target):
                self.graph.add_edge(edge.source, edge.target, edge_id=edge.id)

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArchitectureGraph":
        """Build a graph from the editor's ``{"nodes": [...], "edges": [...]}`` document."""
        nodes = [Node.from_dict(n) for n in data.get("nodes", [])]
        edges = [Edge.from_dict(e) for e in data.get("edges", [])]
        return cls(nodes, edges)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_node(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self._nodes_by_id.get(node_id)

    def get_edge(self, edge_id: Optional[str]) -> Optional[Edge]:
        if edge_id is None:
            return None
        return self._edges_by_id.get(edge_id)

    def nodes_of_type(self, node_type: NodeType) -> List[Node]:
        return [n for n in self.nodes if n.node_type == node_type]

    def find_edge(self, source: str, target: str) -> Optional[Edge]:
        """First edge, in list order, running from ``source`` to ``target``."""
        for edge in self.edges:
            if edge.source == source and edge.target == target:
                return edge
        return None

    def edges_of_type(self, edge_type: EdgeType) -> List[Edge]:
        return [e for e in self.edges if e.edge_type == edge_type]

    # =========================================================================
    # Topology
    # =========================================================================

    def reachable_from(self, node_id: str) -> Set[str]:
        """Ids reachable over directed edges, excluding the start node."""
        if node_id not in self.graph:
            return set()
        return set(nx.descendants(self.graph, node_id))

    def simple_paths(self, source: str, target: str) -> List[List[str]]:
        """
        All cycle-free paths from ``source`` to ``target``.

        Paths come out in depth-first order over neighbours in edge
        insertion order, so the enumeration order is stable for a given
        edge list.
        """
        if source not in self.graph or target not in self.graph:
            return []
        if source == target:
            return []
        return [list(p) for p in nx.all_simple_paths(self.graph, source, target)]

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"ArchitectureGraph(nodes={len(self.nodes)}, edges={len(self.edges)})"
