"""
Architecture Templates

Ready-made starting architectures. Every node and edge uses the default
configuration of its kind; nodes are laid out on a grid.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .graph import ArchitectureGraph
from .models import EDGE_CONFIG_TYPES, NODE_CONFIG_TYPES, Edge, EdgeType, Node, NodeType


@dataclass(frozen=True)
class ArchitectureTemplate:
    id: str
    name: str
    description: str
    nodes: Tuple[Tuple[NodeType, str], ...]
    edges: Tuple[Tuple[int, int, EdgeType], ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "node_count": len(self.nodes),
            "edge_count": len(self.edges),
        }


TEMPLATES: Dict[str, ArchitectureTemplate] = {
    t.id: t for t in (
        ArchitectureTemplate(
            id="three-tier",
            name="Three-Tier Architecture",
            description="Client -> application server -> database",
            nodes=(
                (NodeType.CLIENT, "Web Client"),
                (NodeType.SERVER, "Application Server"),
                (NodeType.DATABASE, "Database"),
            ),
            edges=(
                (0, 1, EdgeType.HTTP),
                (1, 2, EdgeType.DATABASE),
            ),
        ),
        ArchitectureTemplate(
            id="microservices",
            name="Microservices",
            description="API gateway fronting services that each own a database",
            nodes=(
                (NodeType.CLIENT, "Web Client"),
                (NodeType.LOAD_BALANCER, "API Gateway"),
                (NodeType.SERVER, "User Service"),
                (NodeType.SERVER, "Product Service"),
                (NodeType.SERVER, "Order Service"),
                (NodeType.DATABASE, "User DB"),
                (NodeType.DATABASE, "Product DB"),
                (NodeType.DATABASE, "Order DB"),
            ),
            edges=(
                (0, 1, EdgeType.HTTP),
                (1, 2, EdgeType.HTTP),
                (1, 3, EdgeType.HTTP),
                (1, 4, EdgeType.HTTP),
                (2, 5, EdgeType.DATABASE),
                (3, 6, EdgeType.DATABASE),
                (4, 7, EdgeType.DATABASE),
                (2, 3, EdgeType.HTTP),
                (3, 4, EdgeType.HTTP),
            ),
        ),
        ArchitectureTemplate(
            id="web-app-caching",
            name="Web Application with Caching",
            description="Load-balanced web servers sharing a cache and a database",
            nodes=(
                (NodeType.CLIENT, "Web Client"),
                (NodeType.LOAD_BALANCER, "Load Balancer"),
                (NodeType.SERVER, "Web Server 1"),
                (NodeType.SERVER, "Web Server 2"),
                (NodeType.CACHE, "Redis Cache"),
                (NodeType.DATABASE, "Database"),
            ),
            edges=(
                (0, 1, EdgeType.HTTP),
                (1, 2, EdgeType.HTTP),
                (1, 3, EdgeType.HTTP),
                (2, 4, EdgeType.HTTP),
                (3, 4, EdgeType.HTTP),
                (2, 5, EdgeType.DATABASE),
                (3, 5, EdgeType.DATABASE),
            ),
        ),
        ArchitectureTemplate(
            id="event-driven",
            name="Event-Driven Architecture",
            description="Gateway publishing to a broker that fans out to services",
            nodes=(
                (NodeType.CLIENT, "Web Client"),
                (NodeType.SERVER, "API Gateway"),
                (NodeType.SERVER, "Event Broker"),
                (NodeType.SERVER, "Order Service"),
                (NodeType.SERVER, "Payment Service"),
                (NodeType.SERVER, "Notification Service"),
                (NodeType.DATABASE, "Order DB"),
                (NodeType.DATABASE, "Payment DB"),
            ),
            edges=(
                (0, 1, EdgeType.HTTP),
                (1, 2, EdgeType.KAFKA),
                (2, 3, EdgeType.KAFKA),
                (2, 4, EdgeType.KAFKA),
                (2, 5, EdgeType.KAFKA),
                (3, 6, EdgeType.DATABASE),
                (4, 7, EdgeType.DATABASE),
            ),
        ),
    )
}


def grid_layout(count: int, center_x: float = 0.0, center_y: float = 0.0,
                col_space: float = 300.0, row_space: float = 200.0) -> List[Dict[str, float]]:
    """Positions for ``count`` nodes on a roughly square grid around a centre."""
    if count <= 0:
        return []
    columns = max(1, int(math.sqrt(count)))
    rows = math.ceil(count / columns)
    positions = []
    for index in range(count):
        row, col = divmod(index, columns)
        positions.append({
            "x": center_x + (col - columns // 2) * col_space,
            "y": center_y + (row - rows // 2) * row_space,
        })
    return positions


def list_templates() -> List[Dict[str, Any]]:
    return [t.to_dict() for t in TEMPLATES.values()]


def build_template(template_id: str) -> ArchitectureGraph:
    """
    Instantiate a template as a graph.

    Raises:
        ValueError: if the template id is unknown
    """
    template = TEMPLATES.get(template_id)
    if template is None:
        raise ValueError(
            f"Unknown template '{template_id}'. Available: {', '.join(TEMPLATES)}"
        )

    positions = grid_layout(len(template.nodes))
    nodes = [
        Node(
            id=f"{node_type.value}-{index + 1}",
            node_type=node_type,
            config=NODE_CONFIG_TYPES[node_type](),
            label=label,
            position=positions[index],
        )
        for index, (node_type, label) in enumerate(template.nodes)
    ]
    edges = [
        Edge(
            id=f"edge-{nodes[src].id}-{nodes[tgt].id}",
            source=nodes[src].id,
            target=nodes[tgt].id,
            edge_type=edge_type,
            config=EDGE_CONFIG_TYPES[edge_type](),
        )
        for src, tgt, edge_type in template.edges
    ]
    return ArchitectureGraph(nodes, edges)
