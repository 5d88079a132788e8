"""
Simulation Analysis

Derived views over a simulation state:
    - Bottlenecks: nodes and edges running above a utilization threshold
    - Errors: failed requests broken down by reason, node and request type
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from archsim.core.graph import ArchitectureGraph
from .models import ComponentUtilization, SimulationRequest

UNKNOWN_ERROR = "Unknown Error"


@dataclass
class Bottleneck:
    """A component running hot."""
    id: str
    name: str
    kind: str  # "node" or "edge"
    utilization: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "utilization": round(self.utilization, 4),
        }


@dataclass
class ErrorAnalysis:
    """Breakdown of failed requests."""
    total_errors: int = 0
    by_reason: List[Dict[str, Any]] = field(default_factory=list)
    by_node: List[Dict[str, Any]] = field(default_factory=list)
    by_type: List[Dict[str, Any]] = field(default_factory=list)
    recent: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_errors": self.total_errors,
            "by_reason": self.by_reason,
            "by_node": self.by_node,
            "by_type": self.by_type,
            "recent": self.recent,
        }


class SimulationAnalyzer:
    """Bottleneck and error analysis for a graph and its simulation state."""

    def __init__(self, graph: ArchitectureGraph):
        self.graph = graph

    def _node_name(self, node_id: str) -> str:
        node = self.graph.get_node(node_id)
        return node.display_name if node else node_id

    def find_bottlenecks(self, utilization: ComponentUtilization, threshold: float = 0.5,
                         limit: Optional[int] = 5) -> List[Bottleneck]:
        """Components with utilization strictly above ``threshold``, hottest first."""
        found: List[Bottleneck] = [
            Bottleneck(id=node_id, name=self._node_name(node_id), kind="node", utilization=value)
            for node_id, value in utilization.nodes.items()
            if value > threshold
        ]
        for edge_id, value in utilization.edges.items():
            if value <= threshold:
                continue
            edge = self.graph.get_edge(edge_id)
            if edge is None:
                continue
            name = f"{self._node_name(edge.source)} -> {self._node_name(edge.target)}"
            found.append(Bottleneck(id=edge_id, name=name, kind="edge", utilization=value))

        found.sort(key=lambda b: b.utilization, reverse=True)
        return found[:limit] if limit is not None else found

    def analyze_errors(self, failed: Iterable[SimulationRequest], top_reasons: int = 5,
                       top_nodes: int = 3, recent: int = 5) -> ErrorAnalysis:
        failed = list(failed)
        if not failed:
            return ErrorAnalysis()

        reasons = Counter(
            r.failure_reason.value if r.failure_reason else UNKNOWN_ERROR for r in failed)
        nodes = Counter(r.current_node_id for r in failed)
        types = Counter(r.request_type.value for r in failed)

        latest = sorted(failed, key=lambda r: r.failed_at or 0, reverse=True)[:recent]

        return ErrorAnalysis(
            total_errors=len(failed),
            by_reason=[{"reason": k, "count": v} for k, v in reasons.most_common(top_reasons)],
            by_node=[
                {"node_id": k, "node_name": self._node_name(k), "count": v}
                for k, v in nodes.most_common(top_nodes)
            ],
            by_type=[{"type": k, "count": v} for k, v in types.most_common()],
            recent=[
                {
                    "id": r.id,
                    "type": r.request_type.value,
                    "node_id": r.current_node_id,
                    "failed_at": r.failed_at,
                    "failure_reason": r.failure_reason.value if r.failure_reason else UNKNOWN_ERROR,
                }
                for r in latest
            ],
        )
