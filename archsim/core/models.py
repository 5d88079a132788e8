"""
Architecture Domain Models

Typed nodes and edges of an architecture diagram, with the per-variant
configuration records the simulator reads.

Configuration records accept and emit the camelCase keys used by the
diagram editor's JSON documents; missing keys take the editor defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, Field
from enum import Enum
from typing import Any, Dict, List, Optional, Type


# =============================================================================
# Enums
# =============================================================================

class NodeType(Enum):
    """Closed set of architecture component kinds."""
    SERVER = "server"
    DATABASE = "database"
    LOAD_BALANCER = "loadBalancer"
    CLIENT = "client"
    CACHE = "cache"


class EdgeType(Enum):
    """Closed set of connection kinds."""
    DEFAULT = "default"
    HTTP = "http"
    WEBSOCKET = "websocket"
    GRPC = "grpc"
    TCP = "tcp"
    UDP = "udp"
    MQTT = "mqtt"
    AMQP = "amqp"
    KAFKA = "kafka"
    EVENT_STREAM = "eventStream"
    DATABASE = "database"

    @property
    def is_message_queue(self) -> bool:
        return self in (EdgeType.MQTT, EdgeType.AMQP, EdgeType.KAFKA)


class Protocol(Enum):
    """Wire protocols a client prefers or a server supports."""
    HTTP = "HTTP"
    HTTPS = "HTTPS"
    WEBSOCKET = "WebSocket"
    GRPC = "gRPC"
    TCP = "TCP"
    UDP = "UDP"


class AuthenticationMethod(Enum):
    NONE = "None"
    BASIC = "Basic"
    OAUTH = "OAuth"
    JWT = "JWT"
    API_KEY = "API Key"
    CLIENT_CERTIFICATE = "Client Certificate"


# =============================================================================
# Configuration records
# =============================================================================

def _alias(key: str, default: Any = None, factory: Any = None) -> Any:
    """Field whose editor key is not the plain camelCase of its name."""
    if factory is not None:
        return field(default_factory=factory, metadata={"key": key})
    return field(default=default, metadata={"key": key})


def _editor_key(f: Field) -> str:
    alias = f.metadata.get("key")
    if alias:
        return alias
    head, *rest = f.name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class ConfigRecord:
    """Mixin giving configuration dataclasses editor-JSON conversion."""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None):
        data = data or {}
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            key = _editor_key(f)
            if key in data and data[key] is not None:
                value = data[key]
            elif f.name in data and data[f.name] is not None:
                value = data[f.name]
            else:
                continue
            kwargs[f.name] = list(value) if isinstance(value, (list, tuple)) else value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[_editor_key(f)] = list(value) if isinstance(value, (list, tuple)) else value
        return result


# -- Nodes --------------------------------------------------------------------

@dataclass(frozen=True)
class ServerConfig(ConfigRecord):
    """Application server capacity and policy."""
    cpu_cores: int = 4
    cpu_speed: float = 2.5               # GHz
    memory: float = 8                    # GB
    storage: float = 100                 # GB
    has_gpu: bool = _alias("hasGPU", False)
    instances: int = 2
    deployment_type: str = "Container"   # Container, VM, Serverless, Bare Metal
    auto_scaling: bool = False
    min_instances: int = 1
    max_instances: int = 10
    scaling_metric: str = "CPU"          # CPU, Memory, Requests
    scaling_threshold: float = 70
    region: str = "us-east-1"
    max_requests_per_second: float = 1000
    average_processing_time: float = 50  # ms
    concurrency_model: str = "Multi-Threaded"  # Single-Threaded, Multi-Threaded, Event-Loop, Worker Pool
    max_concurrent_requests: int = 100
    health_check_enabled: bool = True
    health_check_path: str = "/health"
    health_check_interval: float = 30
    restart_policy: str = "Always"       # Always, On-Failure, Never
    supported_protocols: List[str] = field(default_factory=lambda: ["HTTP", "HTTPS"])
    authentication_required: bool = False
    rate_limit_per_second: float = 0
    failure_probability: float = 0.005


@dataclass(frozen=True)
class DatabaseConfig(ConfigRecord):
    """Database engine capacity and policy."""
    db_type: str = "SQL"                 # SQL, NoSQL, NewSQL, Cache
    db_sub_type: str = "Relational"      # Relational, Document, Key-Value, Column-Family, Graph, In-Memory, ...
    storage_capacity: float = 100        # GB
    max_connections: int = 500
    read_iops: float = _alias("readIOPS", 1000)
    write_iops: float = _alias("writeIOPS", 500)
    average_latency: float = 5           # ms
    replication: bool = False
    replication_type: str = "Master-Slave"  # Master-Slave, Multi-Master, Sharded
    replication_factor: int = 3
    backup_strategy: str = "Daily"       # None, Daily, Continuous, ...
    auto_scaling: bool = False
    read_write_ratio: float = 70         # percent reads
    query_complexity: str = "Moderate"   # Simple, Moderate, Complex
    failure_probability: float = 0.001


@dataclass(frozen=True)
class LoadBalancerConfig(ConfigRecord):
    """Load balancer routing and resilience settings."""
    load_balancer_type: str = "Application"  # Network, Application, Gateway
    algorithm: str = "Round Robin"
    session_persistence: bool = False
    session_timeout: float = 30
    max_throughput: float = 10000
    max_connections: int = 100000
    processing_latency: float = 5
    ssl_termination: bool = True
    health_check_enabled: bool = True
    health_check_path: str = "/health"
    health_check_interval: float = 30
    health_check_timeout: float = 5
    healthy_threshold: int = 2
    unhealthy_threshold: int = 2
    connect_to_auto_scaling: bool = False
    content_based_routing: bool = False
    rate_limiting_enabled: bool = False
    high_availability: bool = True
    failover_strategy: str = "Active-Passive"  # Active-Active, Active-Passive, N+1
    failure_probability: float = 0.005


@dataclass(frozen=True)
class ClientConfig(ConfigRecord):
    """Traffic source: user population, device and request behaviour."""
    client_type: str = "Browser"         # Browser, Mobile App, Desktop App, IoT Device, API Client
    device_performance: str = "Medium"   # Low, Medium, High
    connection_type: str = "WiFi"        # Wired, WiFi, Cellular
    geographic_distribution: List[str] = field(
        default_factory=lambda: ["North America", "Europe"])
    concurrent_users: int = 100
    authentication_method: str = "OAuth"
    require_secure_connection: bool = True
    preferred_protocol: str = "HTTPS"
    supported_protocols: List[str] = field(default_factory=lambda: ["HTTP", "HTTPS"])
    connection_persistence: bool = True
    reconnect_attempts: int = 3
    bandwidth_limit: float = 10          # Mbps
    packet_loss_rate: float = 0.01
    network_stability: float = 0.95
    request_pattern: str = "Steady"      # Steady, Bursty, Periodic, Random
    burst_factor: Optional[float] = None
    period_seconds: Optional[float] = None
    retry_on_error: bool = True
    max_retries: int = 3
    cache_enabled: bool = True
    cache_ttl: float = _alias("cacheTTL", 300)
    think_time_between_requests: float = 1000  # ms


@dataclass(frozen=True)
class CacheConfig(ConfigRecord):
    """Cache tier sizing and consistency settings."""
    cache_type: str = "In-Memory"        # In-Memory, Distributed, CDN, ...
    cache_size_value: float = 1
    cache_size_unit: str = "GB"          # MB, GB, TB
    ttl: float = 3600
    eviction_policy: str = "LRU"
    write_policy: str = "Write-Through"  # Write-Through, Write-Behind, Write-Around
    consistency_level: str = "Eventual"  # Strong, Eventual
    max_throughput: float = 50000
    average_latency: float = 5
    expected_hit_rate: float = 0.8
    replication_enabled: bool = False
    replica_count: int = 2
    sharding_enabled: bool = False
    shard_count: int = 3
    auto_scaling_enabled: bool = False
    average_item_size: float = 10        # KB
    failure_probability: float = 0.002


NODE_CONFIG_TYPES: Dict[NodeType, Type[ConfigRecord]] = {
    NodeType.SERVER: ServerConfig,
    NodeType.DATABASE: DatabaseConfig,
    NodeType.LOAD_BALANCER: LoadBalancerConfig,
    NodeType.CLIENT: ClientConfig,
    NodeType.CACHE: CacheConfig,
}


# -- Edges --------------------------------------------------------------------

@dataclass(frozen=True)
class EdgeConfig(ConfigRecord):
    """Settings shared by every connection kind."""
    communication_pattern: str = "Sync"  # Sync, Async, Request-Reply, Pub-Sub, Stream
    bidirectional: bool = False
    latency_ms: float = 100
    latency_level: str = "Low"
    bandwidth_requirement: str = "Medium"
    bandwidth_mbps: float = 10
    max_throughput_rps: float = _alias("maxThroughputRPS", 1000)
    reliability: str = "Best-Effort"     # Best-Effort, At-Least-Once, Exactly-Once, ACID
    retry_enabled: bool = True
    retry_strategy: str = "Exponential"
    max_retries: int = 3
    retry_interval_ms: float = 1000
    timeout: float = 5000
    circuit_breaker_enabled: bool = False
    circuit_breaker_status: str = "Closed"
    failover_strategy: str = "None"
    encryption: str = "None"             # None, TLS, End-to-End, mTLS
    authentication: str = "None"
    average_request_size_kb: float = _alias("averageRequestSizeKB", 1)
    average_response_size_kb: float = _alias("averageResponseSizeKB", 10)
    compression_enabled: bool = False
    packet_loss_rate: float = 0.001
    failure_probability: float = 0.0001


@dataclass(frozen=True)
class HTTPEdgeConfig(EdgeConfig):
    method: str = "GET"
    http_version: str = "HTTP/1.1"
    use_tls: bool = _alias("useTLS", False)
    cache_enabled: bool = False
    cache_control: str = "No-Cache"
    cache_ttl_seconds: float = _alias("cacheTTLSeconds", 300)
    cors_enabled: bool = True
    rate_limit: float = 100
    rate_limit_burst: float = 20
    proxy_enabled: bool = False
    load_balanced: bool = False
    use_api_gateway: bool = False


@dataclass(frozen=True)
class WebSocketEdgeConfig(EdgeConfig):
    communication_pattern: str = "Stream"
    bidirectional: bool = True
    persistent: bool = True
    message_rate_per_second: float = 10
    average_message_size_kb: float = _alias("averageMessageSizeKB", 2)
    heartbeat_enabled: bool = True
    heartbeat_interval_ms: float = 30000
    auto_reconnect: bool = True
    subprotocol: str = ""


@dataclass(frozen=True)
class GRPCEdgeConfig(EdgeConfig):
    communication_pattern: str = "Request-Reply"
    reliability: str = "At-Least-Once"
    encryption: str = "TLS"
    authentication: str = "Bearer Token"
    compression_enabled: bool = True
    service_method: str = ""
    streaming: str = "None"              # None, Client, Server, Bidirectional
    load_balancing_policy: str = "Round-Robin"
    channel_pooling: bool = True
    keep_alive_enabled: bool = True
    keep_alive_time_ms: float = 60000


@dataclass(frozen=True)
class TCPEdgeConfig(EdgeConfig):
    communication_pattern: str = "Stream"
    bidirectional: bool = True
    reliability: str = "At-Least-Once"
    latency_ms: float = 50
    port: int = 8080
    keep_alive_enabled: bool = True
    connection_pool_enabled: bool = True
    max_concurrent_connections: int = 100
    nagle_algorithm_enabled: bool = True
    socket_buffer_size_kb: float = _alias("socketBufferSizeKB", 64)


@dataclass(frozen=True)
class UDPEdgeConfig(EdgeConfig):
    communication_pattern: str = "Async"
    reliability: str = "Best-Effort"
    retry_enabled: bool = False
    latency_ms: float = 30
    packet_loss_rate: float = 0.01
    port: int = 8080
    packet_size_bytes: int = 1472
    multicast: bool = False
    broadcast: bool = False
    checksum_validation: bool = True


@dataclass(frozen=True)
class MessageQueueEdgeConfig(EdgeConfig):
    """Shared by the MQTT, AMQP and Kafka connection kinds."""
    communication_pattern: str = "Pub-Sub"
    reliability: str = "At-Least-Once"
    retry_enabled: bool = True
    max_retries: int = 5
    queue_name: str = "default-queue"
    topic_pattern: str = "topic.*"
    delivery_guarantee: str = "At-Least-Once"  # At-Most-Once, At-Least-Once, Exactly-Once
    persistent: bool = True
    durable_subscription: bool = True
    message_priority: str = "Normal"     # Low, Normal, High, Critical
    message_expiration_ms: float = 86400000
    dead_letter_queue_enabled: bool = True
    max_queue_size_mb: float = _alias("maxQueueSizeMB", 100)
    ordering_guaranteed: bool = False
    partitioning: bool = True
    partition_key: str = "messageId"
    consumer_groups: List[str] = field(default_factory=lambda: ["default-consumer-group"])


@dataclass(frozen=True)
class DatabaseEdgeConfig(EdgeConfig):
    communication_pattern: str = "Request-Reply"
    bidirectional: bool = True
    reliability: str = "ACID"
    encryption: str = "TLS"
    authentication: str = "Basic"
    connection_type: str = "Read-Write"  # Read-Only, Write-Only, Read-Write, Admin
    connection_pooling: bool = True
    min_connections: int = 5
    max_connections: int = 20
    isolation_level: str = "Read Committed"
    read_only: bool = False
    prepared_statements: bool = True
    transactional: bool = True
    query_timeout: float = 30000


@dataclass(frozen=True)
class EventStreamEdgeConfig(EdgeConfig):
    communication_pattern: str = "Pub-Sub"
    reliability: str = "At-Least-Once"
    event_types: List[str] = field(default_factory=lambda: ["default-event"])
    stream_name: str = "default-stream"
    sharding: bool = True
    shard_count: int = 3
    retention_period_hours: float = 24
    ordered: bool = False
    max_batch_size: int = 100


EDGE_CONFIG_TYPES: Dict[EdgeType, Type[EdgeConfig]] = {
    EdgeType.DEFAULT: EdgeConfig,
    EdgeType.HTTP: HTTPEdgeConfig,
    EdgeType.WEBSOCKET: WebSocketEdgeConfig,
    EdgeType.GRPC: GRPCEdgeConfig,
    EdgeType.TCP: TCPEdgeConfig,
    EdgeType.UDP: UDPEdgeConfig,
    EdgeType.MQTT: MessageQueueEdgeConfig,
    EdgeType.AMQP: MessageQueueEdgeConfig,
    EdgeType.KAFKA: MessageQueueEdgeConfig,
    EdgeType.DATABASE: DatabaseEdgeConfig,
    EdgeType.EVENT_STREAM: EventStreamEdgeConfig,
}


# =============================================================================
# Graph elements
# =============================================================================

@dataclass(frozen=True)
class Node:
    """A typed component of the architecture."""
    id: str
    node_type: NodeType
    config: Any = None
    label: str = ""
    position: Dict[str, float] = field(default_factory=lambda: {"x": 0.0, "y": 0.0})

    def __post_init__(self):
        expected = NODE_CONFIG_TYPES[self.node_type]
        if self.config is None:
            object.__setattr__(self, "config", expected())
        elif not isinstance(self.config, expected):
            raise ValueError(
                f"Node '{self.id}' of type {self.node_type.value} requires "
                f"{expected.__name__}, got {type(self.config).__name__}"
            )

    @property
    def display_name(self) -> str:
        return self.label or self.id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        try:
            node_type = NodeType(data["type"])
        except (KeyError, ValueError):
            raise ValueError(f"Unknown node type: {data.get('type')!r}")
        payload = dict(data.get("data") or {})
        config = NODE_CONFIG_TYPES[node_type].from_dict(payload)
        return cls(
            id=str(data["id"]),
            node_type=node_type,
            config=config,
            label=payload.get("label", ""),
            position=dict(data.get("position") or {"x": 0.0, "y": 0.0}),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = self.config.to_dict()
        if self.label:
            payload["label"] = self.label
        return {
            "id": self.id,
            "type": self.node_type.value,
            "position": dict(self.position),
            "data": payload,
        }


@dataclass(frozen=True)
class Edge:
    """A typed, directed connection between two nodes."""
    id: str
    source: str
    target: str
    edge_type: EdgeType = EdgeType.DEFAULT
    config: Any = None

    def __post_init__(self):
        expected = EDGE_CONFIG_TYPES[self.edge_type]
        if self.config is None:
            object.__setattr__(self, "config", expected())
        elif type(self.config) is not expected:
            raise ValueError(
                f"Edge '{self.id}' of type {self.edge_type.value} requires "
                f"{expected.__name__}, got {type(self.config).__name__}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Edge":
        raw_type = data.get("type") or EdgeType.DEFAULT.value
        try:
            edge_type = EdgeType(raw_type)
        except ValueError:
            raise ValueError(f"Unknown edge type: {raw_type!r}")
        return cls(
            id=str(data["id"]),
            source=str(data["source"]),
            target=str(data["target"]),
            edge_type=edge_type,
            config=EDGE_CONFIG_TYPES[edge_type].from_dict(data.get("data")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.edge_type.value,
            "data": self.config.to_dict(),
        }
