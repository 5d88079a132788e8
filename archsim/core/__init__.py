"""
Core architecture model: typed nodes, edges and the graph snapshot.
"""

from .models import (
    NodeType,
    EdgeType,
    Protocol,
    AuthenticationMethod,
    ConfigRecord,
    ServerConfig,
    DatabaseConfig,
    LoadBalancerConfig,
    ClientConfig,
    CacheConfig,
    EdgeConfig,
    HTTPEdgeConfig,
    WebSocketEdgeConfig,
    GRPCEdgeConfig,
    TCPEdgeConfig,
    UDPEdgeConfig,
    MessageQueueEdgeConfig,
    DatabaseEdgeConfig,
    EventStreamEdgeConfig,
    NODE_CONFIG_TYPES,
    EDGE_CONFIG_TYPES,
    Node,
    Edge,
)
from .graph import ArchitectureGraph
from .templates import TEMPLATES, build_template, list_templates

__all__ = [
    "NodeType", "EdgeType", "Protocol", "AuthenticationMethod", "ConfigRecord",
    "ServerConfig", "DatabaseConfig", "LoadBalancerConfig", "ClientConfig", "CacheConfig",
    "EdgeConfig", "HTTPEdgeConfig", "WebSocketEdgeConfig", "GRPCEdgeConfig",
    "TCPEdgeConfig", "UDPEdgeConfig", "MessageQueueEdgeConfig", "DatabaseEdgeConfig",
    "EventStreamEdgeConfig", "NODE_CONFIG_TYPES", "EDGE_CONFIG_TYPES",
    "Node", "Edge", "ArchitectureGraph",
    "TEMPLATES", "build_template", "list_templates",
]
