"""
Impact Calculator

Capacity model of the simulator: how much load one request puts on a node
or edge, when a node counts as overloaded, how likely it is to fail during
a tick, and how long a request must work at it.

Each formula dispatches on the node or edge kind through a table that
covers every member of NodeType / EdgeType.
"""

from __future__ import annotations
import logging
import math
import random
from typing import Callable, Dict, Optional

from archsim.config.settings import SimulationSettings
from archsim.core.models import (
    CacheConfig,
    ClientConfig,
    DatabaseConfig,
    DatabaseEdgeConfig,
    Edge,
    EdgeConfig,
    EdgeType,
    EventStreamEdgeConfig,
    GRPCEdgeConfig,
    HTTPEdgeConfig,
    LoadBalancerConfig,
    MessageQueueEdgeConfig,
    Node,
    NodeType,
    ServerConfig,
    TCPEdgeConfig,
    UDPEdgeConfig,
    WebSocketEdgeConfig,
)
from .models import ComponentUtilization, RequestType, SimulationRequest

logger = logging.getLogger(__name__)

# Per-request ceilings on a single contribution
MAX_NODE_IMPACT = 0.1
MAX_EDGE_IMPACT = 0.2

BASE_OVERLOAD_THRESHOLD = 0.8
DEFAULT_FAILURE_RATE = 0.001
DEFAULT_PROCESSING_TIME = 20.0
CACHE_HIT_PROCESSING_TIME = 3.0

_WRITES = (RequestType.WRITE, RequestType.TRANSACTION)


class ImpactCalculator:
    """
    Node and edge capacity formulas.

    Args:
        settings: simulator constants (edge overload threshold)
        rng: random source for the stochastic parts of the model
    """

    def __init__(self, settings: Optional[SimulationSettings] = None,
                 rng: Optional[random.Random] = None):
        self.settings = settings or SimulationSettings()
        self.rng = rng or random.Random()

        self._node_impact: Dict[NodeType, Callable[[SimulationRequest, Node], float]] = {
            NodeType.CLIENT: self._client_impact,
            NodeType.SERVER: self._server_impact,
            NodeType.DATABASE: self._database_impact,
            NodeType.LOAD_BALANCER: self._load_balancer_impact,
            NodeType.CACHE: self._cache_impact,
        }
        self._edge_impact: Dict[EdgeType, Callable[[float, EdgeConfig, float], float]] = {
            EdgeType.DEFAULT: lambda impact, cfg, size: impact,
            EdgeType.HTTP: self._http_edge_impact,
            EdgeType.WEBSOCKET: self._websocket_edge_impact,
            EdgeType.GRPC: self._grpc_edge_impact,
            EdgeType.TCP: self._tcp_edge_impact,
            EdgeType.UDP: self._udp_edge_impact,
            EdgeType.MQTT: self._message_queue_edge_impact,
            EdgeType.AMQP: self._message_queue_edge_impact,
            EdgeType.KAFKA: self._message_queue_edge_impact,
            EdgeType.DATABASE: self._database_edge_impact,
            EdgeType.EVENT_STREAM: self._event_stream_edge_impact,
        }
        self._overload_threshold: Dict[NodeType, Callable[[Node], float]] = {
            NodeType.CLIENT: lambda node: BASE_OVERLOAD_THRESHOLD,
            NodeType.SERVER: self._server_threshold,
            NodeType.DATABASE: self._database_threshold,
            NodeType.LOAD_BALANCER: self._load_balancer_threshold,
            NodeType.CACHE: self._cache_threshold,
        }
        self._failure_rate: Dict[NodeType, Callable[[Node], float]] = {
            NodeType.CLIENT: self._client_failure_rate,
            NodeType.SERVER: self._server_failure_rate,
            NodeType.DATABASE: self._database_failure_rate,
            NodeType.LOAD_BALANCER: self._load_balancer_failure_rate,
            NodeType.CACHE: self._cache_failure_rate,
        }
        self._processing_time: Dict[NodeType, Callable[[Node, SimulationRequest], float]] = {
            NodeType.CLIENT: lambda node, request: DEFAULT_PROCESSING_TIME,
            NodeType.SERVER: self._server_processing_time,
            NodeType.DATABASE: self._database_processing_time,
            NodeType.LOAD_BALANCER: self._load_balancer_processing_time,
            NodeType.CACHE: self._cache_processing_time,
        }

    # =========================================================================
    # Public API
    # =========================================================================

    def node_utilization_impact(self, request: SimulationRequest, node: Node) -> float:
        """Load one request adds to a node, capped at MAX_NODE_IMPACT."""
        impact = self._node_impact[node.node_type](request, node)
        return min(max(impact, 0.0), MAX_NODE_IMPACT)

    def edge_utilization_impact(self, request: SimulationRequest, edge: Edge) -> float:
        """Load one request adds to an edge, capped at MAX_EDGE_IMPACT."""
        cfg: EdgeConfig = edge.config
        size = request.size_kb

        impact = math.log10(1 + size)
        impact *= 100 / (cfg.max_throughput_rps or 100)
        if cfg.bandwidth_mbps:
            impact *= 0.1 / cfg.bandwidth_mbps

        impact = self._edge_impact[edge.edge_type](impact, cfg, size)

        if cfg.communication_pattern == "Sync":
            impact *= 1.1
        elif cfg.communication_pattern == "Stream":
            impact *= 1.3
        if cfg.encryption in ("End-to-End", "mTLS"):
            impact *= 1.2
        if cfg.authentication and cfg.authentication != "None":
            impact *= 1.1
        if cfg.reliability in ("Exactly-Once", "ACID"):
            impact *= 1.3
        if cfg.latency_ms and cfg.latency_ms > 10:
            impact *= 1 + min((cfg.latency_ms - 10) / 100, 0.5)
        if cfg.compression_enabled:
            impact *= 0.6
        if cfg.packet_loss_rate:
            impact *= 1 + cfg.packet_loss_rate * 5
            if cfg.communication_pattern == "Stream" or size > 500:
                impact *= 1 + cfg.packet_loss_rate * 3
        if cfg.retry_enabled:
            impact *= 1.2

        return min(max(impact, 0.0), MAX_EDGE_IMPACT)

    def overload_threshold(self, node: Node) -> float:
        return self._overload_threshold[node.node_type](node)

    def is_node_overloaded(self, node: Node, utilization: ComponentUtilization) -> bool:
        return utilization.node(node.id) > self.overload_threshold(node)

    def is_edge_overloaded(self, edge: Edge, utilization: ComponentUtilization) -> bool:
        return utilization.edge(edge.id) > self.settings.edge_overload_threshold

    def failure_probability(self, node: Node, time_step: float) -> float:
        """Chance the node fails a request during one tick of ``time_step`` ms."""
        return self._failure_rate[node.node_type](node) * (time_step / 1000)

    def required_processing_time(self, node: Node, request: SimulationRequest) -> float:
        """Work (ms) the request must accrue at ``node``, with +/-20% jitter."""
        base = self._processing_time[node.node_type](node, request)
        return base * (0.8 + self.rng.random() * 0.4)

    # =========================================================================
    # Node load
    # =========================================================================

    def _client_impact(self, request: SimulationRequest, node: Node) -> float:
        cfg: ClientConfig = node.config
        impact = request.size_kb / 50000

        if cfg.device_performance == "Low":
            impact *= 1.5
        elif cfg.device_performance == "High":
            impact *= 0.5

        if cfg.bandwidth_limit > 0:
            impact *= (1 / math.log10(cfg.bandwidth_limit + 1)) * 3

        if cfg.connection_type == "Cellular":
            impact *= 1.4
        elif cfg.connection_type == "WiFi":
            impact *= 1.1
        elif cfg.connection_type == "Wired":
            impact *= 0.8

        if cfg.client_type == "IoT Device":
            impact *= 1.6
        elif cfg.client_type == "Mobile App":
            impact *= 1.2
        elif cfg.client_type == "API Client":
            impact *= 0.7

        if cfg.network_stability < 0.7:
            impact *= 2 - cfg.network_stability
        if cfg.packet_loss_rate > 0:
            impact *= 1 + cfg.packet_loss_rate * 10

        if cfg.authentication_method in ("OAuth", "JWT"):
            impact *= 1.1
        elif cfg.authentication_method == "Client Certificate":
            impact *= 1.2

        if len(cfg.geographic_distribution) > 3:
            impact *= 0.9
        if cfg.connection_persistence:
            impact *= 1.1
            if cfg.reconnect_attempts:
                impact *= cfg.reconnect_attempts
        return impact

    def _server_impact(self, request: SimulationRequest, node: Node) -> float:
        cfg: ServerConfig = node.config
        impact = (request.size_kb / 1000) * (1 / (cfg.cpu_cores or 1)) \
            * (100 / (cfg.max_concurrent_requests or 1))

        if cfg.cpu_speed > 0:
            impact /= cfg.cpu_speed / 2.5
        if cfg.memory > 0:
            impact *= max(0.5, 4 / cfg.memory)
        impact *= 1000 / (cfg.max_requests_per_second or 1)

        if cfg.concurrency_model == "Single-Threaded":
            impact *= 2
        elif cfg.concurrency_model == "Event-Loop":
            impact *= 0.8

        if cfg.restart_policy == "Always":
            impact *= 1.3
        elif cfg.restart_policy == "Never":
            impact *= 0.8

        impact *= {"Container": 1.1, "VM": 1.2, "Serverless": 0.9,
                   "Bare Metal": 0.8}.get(cfg.deployment_type, 1.0)

        if cfg.scaling_metric == "CPU":
            if request.request_type == RequestType.COMPUTE:
                impact *= 1.3
        elif cfg.scaling_metric == "Memory":
            if request.size_kb > 200:
                impact *= 2
        elif cfg.scaling_metric == "Requests":
            impact *= 0.9

        if cfg.instances > 1:
            impact *= 1 / cfg.instances
        if cfg.authentication_required:
            impact *= 1.2
        return impact

    def _database_impact(self, request: SimulationRequest, node: Node) -> float:
        cfg: DatabaseConfig = node.config
        impact = request.size_kb / 10000

        if cfg.db_type == "NoSQL":
            impact *= 0.7
        elif cfg.db_type == "Cache":
            impact *= 0.4

        if cfg.query_complexity == "Moderate":
            impact *= 3
        elif cfg.query_complexity == "Complex":
            impact *= 7 if cfg.db_type == "SQL" else 6

        impact *= 100 / (cfg.max_connections or 1)

        # The ratio is configured in percent, so a uniform draw almost
        # always lands on the read side.
        ratio = cfg.read_write_ratio or 0.7
        if not self.rng.random() < ratio:
            impact *= 1.5

        if cfg.replication:
            impact *= 0.7
        if cfg.storage_capacity:
            impact *= max(0.5, 100 / cfg.storage_capacity)
        if cfg.average_latency:
            impact *= cfg.average_latency / 5

        if cfg.backup_strategy == "Continuous":
            impact *= 1.15
        elif cfg.backup_strategy == "Daily":
            if self.rng.random() < 0.05:  # backup window
                impact *= 1.5
        return impact

    def _load_balancer_impact(self, request: SimulationRequest, node: Node) -> float:
        cfg: LoadBalancerConfig = node.config
        impact = request.size_kb / 4000
        impact *= 1000 / (cfg.max_throughput or 1)

        if cfg.algorithm == "Round Robin":
            impact *= 1.2
        elif cfg.algorithm == "Least Connections":
            impact *= 1.1

        if cfg.ssl_termination:
            impact *= 2
        if cfg.content_based_routing:
            impact *= 1.5

        impact *= {"Network": 0.7, "Application": 1.2,
                   "Gateway": 1.5}.get(cfg.load_balancer_type, 1.0)

        if cfg.session_persistence:
            impact *= 1.15
            if cfg.session_timeout and cfg.session_timeout < 10:
                impact *= 1.1

        impact *= max(0.5, 100000 / (cfg.max_connections or 1))

        if cfg.processing_latency < 5:
            impact *= 0.9
        elif cfg.processing_latency > 10:
            impact *= 1.2

        if cfg.health_check_enabled:
            impact *= 1.1
            if cfg.health_check_interval and cfg.health_check_interval < 10:
                impact *= 1.1

        # content inspection is charged a second time on the routing path
        if cfg.content_based_routing:
            impact *= 1.3
        return impact

    def _cache_impact(self, request: SimulationRequest, node: Node) -> float:
        cfg: CacheConfig = node.config
        impact = request.size_kb / 2000

        hit = self.rng.random() < cfg.expected_hit_rate
        impact *= 0.2 if hit else 2

        if cfg.cache_type == "In-Memory":
            impact *= 0.5
        elif cfg.cache_type == "Distributed":
            impact *= 1.2

        if cfg.eviction_policy in ("LRU", "LFU"):
            impact *= 1.2

        size_mb = cfg.cache_size_value
        if cfg.cache_size_unit == "GB":
            size_mb *= 1024
        elif cfg.cache_size_unit == "TB":
            size_mb *= 1024 * 1024
        capacity_items = size_mb * 1024 / (cfg.average_item_size or 10)
        if capacity_items > 1_000_000:
            impact *= 0.8
        elif capacity_items < 1000:
            impact *= 1.2

        is_write = request.request_type in _WRITES
        if cfg.consistency_level == "Strong":
            impact *= 1.3
            if is_write:
                impact *= 1.5
        if cfg.consistency_level == "Eventual":
            impact *= 0.9

        if cfg.average_latency:
            impact *= cfg.average_item_size / 5

        if cfg.replication_enabled:
            replicas = cfg.replica_count or 1
            impact *= 1 + replicas * 0.2
            if is_write:
                impact *= 1 + replicas * 0.3

        if cfg.sharding_enabled:
            impact /= math.sqrt(cfg.shard_count or 1)
            impact *= 1.1

        if cfg.auto_scaling_enabled:
            impact *= 0.9
        return impact

    # =========================================================================
    # Edge load (per kind, before the shared modifiers)
    # =========================================================================

    @staticmethod
    def _http_edge_impact(impact: float, cfg: HTTPEdgeConfig, size: float) -> float:
        impact *= 1.2
        if cfg.method in ("GET", "HEAD"):
            impact *= 0.8
        elif cfg.method in ("POST", "PUT", "PATCH"):
            impact *= 1.2
        if cfg.http_version == "HTTP/2":
            impact *= 0.8
        elif cfg.http_version == "HTTP/3":
            impact *= 0.7
        if cfg.use_tls:
            impact *= 1.2
        return impact

    @staticmethod
    def _websocket_edge_impact(impact: float, cfg: WebSocketEdgeConfig, size: float) -> float:
        if cfg.message_rate_per_second > 10:
            impact *= 1 + min(cfg.message_rate_per_second / 100, 1)
        if cfg.heartbeat_enabled:
            if cfg.heartbeat_interval_ms and cfg.heartbeat_interval_ms < 15000:
                impact *= 1.1
            else:
                impact *= 1.05
        if cfg.average_message_size_kb:
            if cfg.average_message_size_kb < 1:
                impact *= 1.15
            elif cfg.average_message_size_kb > 100:
                impact *= 1.2
        if cfg.auto_reconnect:
            impact *= 1.05
        if cfg.subprotocol:
            impact *= 1.1
        return impact

    @staticmethod
    def _grpc_edge_impact(impact: float, cfg: GRPCEdgeConfig, size: float) -> float:
        impact *= 1.1
        if cfg.streaming in ("Server", "Client"):
            impact *= 1.2
        elif cfg.streaming == "Bidirectional":
            impact *= 1.5
        if cfg.channel_pooling:
            impact *= 0.9
        if cfg.keep_alive_enabled:
            impact *= 1.05
        if cfg.load_balancing_policy == "Round-Robin":
            impact *= 0.95
        elif cfg.load_balancing_policy == "Custom":
            impact *= 1.1
        return impact

    @staticmethod
    def _tcp_edge_impact(impact: float, cfg: TCPEdgeConfig, size: float) -> float:
        if cfg.nagle_algorithm_enabled and size < 5:
            impact *= 0.8
        if cfg.connection_pool_enabled:
            impact *= 0.9
            if cfg.max_concurrent_connections and cfg.max_concurrent_connections > 10:
                impact *= 0.9
        if cfg.keep_alive_enabled:
            impact *= 0.85
        if cfg.socket_buffer_size_kb:
            if cfg.socket_buffer_size_kb < 32:
                impact *= 1.2
            elif cfg.socket_buffer_size_kb > 128:
                impact *= 0.9
        return impact

    @staticmethod
    def _udp_edge_impact(impact: float, cfg: UDPEdgeConfig, size: float) -> float:
        impact *= 0.8
        if cfg.checksum_validation:
            impact *= 1.05
        if cfg.multicast:
            impact *= 1.3
        elif cfg.broadcast:
            impact *= 1.5
        if cfg.packet_size_bytes:
            if cfg.packet_size_bytes < 512:
                impact *= 1.1
            elif cfg.packet_size_bytes > 8192:
                impact *= 1.2
        return impact

    @staticmethod
    def _message_queue_edge_impact(impact: float, cfg: MessageQueueEdgeConfig, size: float) -> float:
        if size < 10:
            impact *= 0.6
        elif size > 100:
            impact *= 1.5
        if cfg.delivery_guarantee == "Exactly-Once":
            impact *= 1.5
        elif cfg.delivery_guarantee == "At-Least-Once":
            impact *= 1.2
        if cfg.persistent:
            impact *= 1.2
        if cfg.partitioning and cfg.partition_key:
            impact *= 0.8
        if cfg.ordering_guaranteed:
            impact *= 1.25
        if cfg.dead_letter_queue_enabled:
            impact *= 1.1
        if cfg.message_priority in ("Critical", "High"):
            impact *= 1.15
        return impact

    @staticmethod
    def _database_edge_impact(impact: float, cfg: DatabaseEdgeConfig, size: float) -> float:
        if cfg.connection_type == "Read":
            impact *= 0.8
        elif cfg.connection_type == "Write":
            impact *= 1.3
        elif cfg.connection_type == "Admin":
            impact *= 1.1
        if cfg.isolation_level == "Serializable":
            impact *= 1.4
        elif cfg.isolation_level == "Repeatable Read":
            impact *= 1.2
        if cfg.connection_pooling:
            if cfg.max_connections and cfg.max_connections > 10:
                impact *= 0.85
            else:
                impact *= 0.95
        if cfg.prepared_statements:
            impact *= 0.9
        if cfg.transactional:
            impact *= 1.15
        if cfg.query_timeout and cfg.query_timeout > 60000:
            impact *= 1.2
        return impact

    @staticmethod
    def _event_stream_edge_impact(impact: float, cfg: EventStreamEdgeConfig, size: float) -> float:
        if cfg.ordered:
            impact *= 1.3
        if cfg.sharding and cfg.shard_count and cfg.shard_count > 1:
            impact *= 1 - 0.2 * min(cfg.shard_count / 3, 2)
        if cfg.retention_period_hours:
            if cfg.retention_period_hours > 72:
                impact *= 1.2
            elif cfg.retention_period_hours < 24:
                impact *= 0.9
        if cfg.max_batch_size and cfg.max_batch_size > 50:
            impact *= 0.9
        return impact

    # =========================================================================
    # Overload thresholds
    # =========================================================================

    @staticmethod
    def _server_threshold(node: Node) -> float:
        cfg: ServerConfig = node.config
        threshold = BASE_OVERLOAD_THRESHOLD
        if cfg.auto_scaling:
            threshold += 0.05
        if cfg.scaling_metric == "CPU":
            threshold += 0.05
        elif cfg.scaling_metric == "Memory":
            threshold += 0.1
        elif cfg.scaling_metric == "Requests":
            threshold -= 0.02
        if cfg.memory > 0:
            threshold += max(0.01, cfg.memory / 1000)
        if cfg.cpu_cores >= 4:
            threshold += cfg.cpu_cores / 100
        if cfg.cpu_speed >= 2:
            threshold += cfg.cpu_speed / 100
        if cfg.has_gpu:
            threshold += 0.02
        if cfg.memory > 0:
            threshold += min(0.01, cfg.memory / 1000)
        return threshold

    @staticmethod
    def _database_threshold(node: Node) -> float:
        cfg: DatabaseConfig = node.config
        return 0.85 + (0.05 if cfg.auto_scaling else 0.0)

    @staticmethod
    def _load_balancer_threshold(node: Node) -> float:
        cfg: LoadBalancerConfig = node.config
        threshold = BASE_OVERLOAD_THRESHOLD
        if cfg.algorithm == "Least Connections":
            threshold += 0.05
        elif cfg.algorithm == "Weighted":
            threshold += 0.03
        elif cfg.algorithm in ("IP Hash", "URL Path"):
            threshold -= 0.02
        return threshold

    def _cache_threshold(self, node: Node) -> float:
        cfg: CacheConfig = node.config
        threshold = BASE_OVERLOAD_THRESHOLD
        if cfg.max_throughput / 100000 < self.rng.random():
            threshold -= 0.02
        return threshold

    # =========================================================================
    # Ambient failure rates (per second)
    # =========================================================================

    @staticmethod
    def _client_failure_rate(node: Node) -> float:
        cfg: ClientConfig = node.config
        rate = DEFAULT_FAILURE_RATE
        if cfg.connection_persistence:
            rate *= 0.8
            if cfg.reconnect_attempts:
                rate *= 1 / cfg.reconnect_attempts
        return rate

    @staticmethod
    def _server_failure_rate(node: Node) -> float:
        cfg: ServerConfig = node.config
        rate = cfg.failure_probability or DEFAULT_FAILURE_RATE
        if cfg.restart_policy == "Always":
            rate *= 0.5
        if cfg.deployment_type in ("VM", "Bare Metal"):
            rate *= 0.8
        if cfg.scaling_metric == "CPU":
            rate *= 0.9
        elif cfg.scaling_metric == "Memory":
            rate *= 1.1
        return rate

    @staticmethod
    def _database_failure_rate(node: Node) -> float:
        cfg: DatabaseConfig = node.config
        rate = cfg.failure_probability or DEFAULT_FAILURE_RATE
        if cfg.backup_strategy == "Continuous":
            rate *= 0.8
        elif cfg.backup_strategy == "None":
            rate *= 1.2
        return rate

    @staticmethod
    def _load_balancer_failure_rate(node: Node) -> float:
        cfg: LoadBalancerConfig = node.config
        rate = cfg.failure_probability or DEFAULT_FAILURE_RATE
        rate *= {"Network": 0.8, "Application": 1.1,
                 "Gateway": 1.2}.get(cfg.load_balancer_type, 1.0)
        if cfg.connect_to_auto_scaling:
            rate *= 0.7
        if cfg.health_check_enabled:
            rate *= 0.8
            if cfg.health_check_interval and cfg.health_check_interval < 10:
                rate *= 0.9
            if cfg.healthy_threshold and cfg.healthy_threshold <= 2:
                rate *= 0.9
            if cfg.unhealthy_threshold and cfg.unhealthy_threshold > 3:
                rate *= 1.1
        if cfg.high_availability:
            rate *= 0.6
        rate *= {"Active-Active": 0.5, "N+1": 0.7,
                 "Active-Passive": 0.8}.get(cfg.failover_strategy, 1.0)
        return rate

    @staticmethod
    def _cache_failure_rate(node: Node) -> float:
        cfg: CacheConfig = node.config
        rate = cfg.failure_probability or DEFAULT_FAILURE_RATE
        if cfg.replication_enabled:
            rate *= 1 / (cfg.replica_count or 1)
        if cfg.sharding_enabled:
            rate *= 0.8
        return rate

    # =========================================================================
    # Required processing time (before jitter)
    # =========================================================================

    @staticmethod
    def _server_processing_time(node: Node, request: SimulationRequest) -> float:
        cfg: ServerConfig = node.config
        base = cfg.average_processing_time or DEFAULT_PROCESSING_TIME
        if request.request_type == RequestType.COMPUTE:
            base *= 1.5
        return base

    @staticmethod
    def _database_processing_time(node: Node, request: SimulationRequest) -> float:
        cfg: DatabaseConfig = node.config
        base = cfg.average_latency or DEFAULT_PROCESSING_TIME
        if request.request_type == RequestType.WRITE:
            base *= 1.5
        elif request.request_type == RequestType.TRANSACTION:
            base *= 2
        return base

    def _cache_processing_time(self, node: Node, request: SimulationRequest) -> float:
        cfg: CacheConfig = node.config
        base = cfg.average_latency or DEFAULT_PROCESSING_TIME

        miss = self.rng.random() > cfg.expected_hit_rate
        if miss:
            base *= 3
        if request.request_type in _WRITES:
            base *= {"Write-Through": 1.8, "Write-Behind": 0.9,
                     "Write-Around": 1.5}.get(cfg.write_policy, 1.0)
        if request.request_type == RequestType.READ and cfg.write_policy == "Write-Behind":
            if self.rng.random() < 0.05:  # stale read
                base *= 0.8
        if not miss:
            base = CACHE_HIT_PROCESSING_TIME
        return base

    @staticmethod
    def _load_balancer_processing_time(node: Node, request: SimulationRequest) -> float:
        cfg: LoadBalancerConfig = node.config
        if cfg.processing_latency:
            base = cfg.processing_latency
        else:
            base = {"Network": 2.0, "Application": 5.0,
                    "Gateway": 8.0}.get(cfg.load_balancer_type, 4.0)
        if cfg.session_persistence:
            base += 2
        if cfg.content_based_routing:
            base += 8
        return base
