"""
Request Generator

Turns client configuration into new simulated requests each tick.

Per client, the expected request count for a tick is derived from the user
population and think time, shaped by the client's traffic pattern and
always rounded up. Each request then gets a type, a destination chosen
among reachable nodes, a size and an initial processing requirement.
"""

from __future__ import annotations
import logging
import math
import random
import uuid
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from archsim.config.settings import SimulationSettings
from archsim.core.graph import ArchitectureGraph
from archsim.core.models import (
    CacheConfig,
    ClientConfig,
    DatabaseConfig,
    LoadBalancerConfig,
    Node,
    NodeType,
    ServerConfig,
)
from .models import ProcessingData, RequestStatus, RequestType, SimulationRequest

T = TypeVar("T")

BURST_INTERVAL_MS = 10_000
BURST_DURATION_MS = 2_000
DEFAULT_BURST_FACTOR = 5
DEFAULT_PERIOD_SECONDS = 60
TOP_CANDIDATES = 3

SIZE_BY_TYPE = {
    RequestType.READ: 0.7,
    RequestType.WRITE: 1.5,
    RequestType.COMPUTE: 1.0,
    RequestType.TRANSACTION: 2.0,
}
PROTOCOL_SIZE_FACTOR = {
    "gRPC": 0.5, "HTTP": 1.5, "HTTPS": 1.7, "WebSocket": 0.7, "TCP": 0.6, "UDP": 0.4,
}
CLIENT_TYPE_SIZE_FACTOR = {
    "Mobile App": 0.7, "IoT Device": 0.3, "Browser": 1.2, "Desktop App": 0.7, "API Client": 1.0,
}
AUTH_SIZE_OVERHEAD = {
    "JWT": 0.5, "OAuth": 0.5, "Client Certificate": 1.0, "API Key": 0.2,
}
DEVICE_PROCESSING_TIME = {"Low": 30.0, "Medium": 20.0}


def round_half_up(value: float) -> int:
    """Round .5 upwards, unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def weighted_random_selection(scored: Sequence[Tuple[T, float]], rng: random.Random) -> T:
    """
    Pick one item with probability proportional to its score.

    Raises:
        ValueError: if ``scored`` is empty
    """
    if not scored:
        raise ValueError("Cannot select from an empty candidate list")
    if len(scored) == 1:
        return scored[0][0]

    total = sum(score for _, score in scored)
    draw = rng.random() * total
    cumulative = 0.0
    for item, score in scored:
        cumulative += score
        if draw <= cumulative:
            return item
    return scored[0][0]


class RequestGenerator:
    """
    Produces new requests for every client node of a graph.

    Example:
        >>> generator = RequestGenerator(rng=random.Random(7))
        >>> requests = generator.generate_requests(graph, current_time=100, time_step=100)
    """

    def __init__(self, settings: Optional[SimulationSettings] = None,
                 rng: Optional[random.Random] = None):
        self.settings = settings or SimulationSettings()
        self.rng = rng or random.Random()
        self.logger = logging.getLogger(__name__)

    # =========================================================================
    # Public API
    # =========================================================================

    def generate_requests(self, graph: ArchitectureGraph, current_time: float,
                          time_step: float) -> List[SimulationRequest]:
        """One batch of brand-new requests per client node."""
        new_requests: List[SimulationRequest] = []
        for client in graph.nodes_of_type(NodeType.CLIENT):
            cfg: ClientConfig = client.config
            rps = self.calculate_requests_per_second(
                cfg.concurrent_users, cfg.think_time_between_requests)
            expected = rps * time_step / 1000
            adjusted = self.apply_request_pattern(cfg, expected, current_time)
            count = max(0, math.ceil(adjusted))

            for _ in range(count):
                request = self.generate_request_from_client(client, graph, current_time)
                if request is not None:
                    new_requests.append(request)

        if new_requests:
            self.logger.debug(f"Generated {len(new_requests)} requests at t={current_time}")
        return new_requests

    def generate_request_from_client(self, client: Node, graph: ArchitectureGraph,
                                     current_time: float) -> Optional[SimulationRequest]:
        """Build one request from ``client``; None when nothing is reachable."""
        cfg: ClientConfig = client.config
        request_type = self.determine_request_type()
        destination = self.determine_request_destination(client, request_type, graph)
        if destination is None:
            return None

        size = self.determine_request_size(client, destination, request_type)
        initial_time = self.determine_initial_processing_time(cfg)
        regions = cfg.geographic_distribution
        region = regions[int(self.rng.random() * len(regions))] if regions else ""

        return SimulationRequest(
            id=self.generate_request_id(),
            request_type=request_type,
            status=RequestStatus.PENDING,
            source_node_id=client.id,
            current_node_id=client.id,
            destination_node_id=destination.id,
            path=[client.id],
            size_kb=size,
            created_at=current_time,
            secure_connection=cfg.require_secure_connection,
            preferred_protocol=cfg.preferred_protocol,
            auth_method=cfg.authentication_method,
            max_retries=cfg.max_retries,
            source_region=region,
            cache_enabled=cfg.cache_enabled,
            retry_on_error=cfg.retry_on_error,
            processing=ProcessingData(required_processing_time=initial_time),
        )

    def generate_request_id(self) -> str:
        return f"req-{uuid.UUID(int=self.rng.getrandbits(128)).hex[:8]}"

    @staticmethod
    def calculate_requests_per_second(concurrent_users: float, think_time_ms: float) -> int:
        """Requests per second for a user population, rounded half-up."""
        if think_time_ms <= 0:
            return 0
        return round_half_up(concurrent_users * (1000 / think_time_ms))

    def apply_request_pattern(self, cfg: ClientConfig, expected: float,
                              current_time: float) -> float:
        pattern = cfg.request_pattern
        if pattern == "Bursty":
            if current_time % BURST_INTERVAL_MS < BURST_DURATION_MS:
                return expected * (cfg.burst_factor or DEFAULT_BURST_FACTOR)
        elif pattern == "Periodic":
            period_ms = (cfg.period_seconds or DEFAULT_PERIOD_SECONDS) * 1000
            phase = (current_time % period_ms) / period_ms
            return expected * (1 + 0.5 * math.sin(phase * 2 * math.pi))
        elif pattern == "Random":
            return expected * (0.5 + self.rng.random())
        return expected

    def determine_request_type(self) -> RequestType:
        s = self.settings
        draw = self.rng.random()
        if draw < s.read_probability:
            return RequestType.READ
        if draw < s.read_probability + s.write_probability:
            return RequestType.WRITE
        if draw < s.read_probability + s.write_probability + s.compute_probability:
            return RequestType.COMPUTE
        return RequestType.TRANSACTION

    # =========================================================================
    # Destination selection
    # =========================================================================

    def determine_request_destination(self, client: Node, request_type: RequestType,
                                      graph: ArchitectureGraph) -> Optional[Node]:
        cfg: ClientConfig = client.config
        reachable_ids = graph.reachable_from(client.id)
        if not reachable_ids:
            self.logger.debug(f"No reachable nodes from client {client.id}")
            return None
        reachable = [n for n in graph.nodes if n.id in reachable_ids and n.id != client.id]

        def of_type(node_type: NodeType) -> List[Node]:
            return [n for n in reachable if n.node_type == node_type]

        caches = of_type(NodeType.CACHE)
        databases = of_type(NodeType.DATABASE)
        servers = of_type(NodeType.SERVER)

        if request_type == RequestType.READ:
            if cfg.cache_enabled and caches:
                return self.select_cache_node(caches, request_type)
            if databases:
                return self.select_database_node(databases, request_type)
            if servers:
                return self.select_server_node(servers, request_type, cfg)
        elif request_type in (RequestType.WRITE, RequestType.TRANSACTION):
            if databases:
                return self.select_database_node(databases, request_type)
            if servers:
                return self.select_server_node(servers, request_type, cfg)
        elif request_type == RequestType.COMPUTE:
            if servers:
                return self.select_server_node(servers, request_type, cfg)

        for candidates in (
            of_type(NodeType.LOAD_BALANCER),
            [n for n in reachable if n.node_type != NodeType.CLIENT],
            of_type(NodeType.CLIENT),
        ):
            if candidates:
                return candidates[int(self.rng.random() * len(candidates))]

        self.logger.debug(f"No suitable destination for client {client.id}")
        return None

    def _pick(self, nodes: List[Node], score: Callable[[Node], float]) -> Node:
        scored = sorted(((n, score(n)) for n in nodes), key=lambda pair: pair[1], reverse=True)
        return weighted_random_selection(scored[:TOP_CANDIDATES], self.rng)

    def select_cache_node(self, caches: List[Node], request_type: RequestType) -> Node:
        def score(node: Node) -> float:
            cfg: CacheConfig = node.config
            value = self.rng.random() * 10
            value += (100 - cfg.average_latency) * 0.1
            value += cfg.expected_hit_rate * 20
            value += (cfg.max_throughput / 10000) * 0.5
            if request_type == RequestType.READ and cfg.cache_type == "In-Memory":
                value += 5
            if cfg.cache_type == "CDN":
                value += 3
            return value
        return self._pick(caches, score)

    def select_database_node(self, databases: List[Node], request_type: RequestType) -> Node:
        def score(node: Node) -> float:
            cfg: DatabaseConfig = node.config
            value = self.rng.random() * 10
            value += cfg.storage_capacity / 100
            if cfg.auto_scaling:
                value += 5

            if request_type == RequestType.READ:
                value += (cfg.read_iops / 500) * 2
                value += (50 - cfg.average_latency) * 0.3
                if cfg.db_sub_type == "In-Memory":
                    value += 5
                value += cfg.read_write_ratio / 10
                if cfg.query_complexity == "Simple":
                    value += 3
                elif cfg.query_complexity == "Complex":
                    value -= 2
                if cfg.replication:
                    value += 4
                    if cfg.replication_type in ("Multi-Master", "Sharded"):
                        value += 3
            elif request_type == RequestType.WRITE:
                value += (cfg.write_iops / 250) * 2
                value += (50 - cfg.average_latency) * 0.2
                if cfg.db_type == "NoSQL":
                    value += 4
                value += (100 - cfg.read_write_ratio) / 10
                if cfg.replication:
                    value += {"Multi-Master": 5, "Sharded": 4}.get(cfg.replication_type, 1)
            elif request_type == RequestType.TRANSACTION:
                value += 25 if cfg.db_type == "SQL" or cfg.db_sub_type == "NewSQL" else -10
                value += cfg.max_connections / 500
                value += (50 - cfg.average_latency) * 0.3
                if cfg.backup_strategy == "Continuous":
                    value += 5
                elif cfg.backup_strategy == "Daily":
                    value += 2
            elif request_type == RequestType.COMPUTE:
                if cfg.db_sub_type in ("Column-Family", "Graph"):
                    value += 6
                if cfg.db_sub_type == "In-Memory":
                    value += 4
                if cfg.query_complexity == "Complex":
                    value += 5
            return value
        return self._pick(databases, score)

    def select_server_node(self, servers: List[Node], request_type: RequestType,
                           client: Optional[ClientConfig] = None) -> Node:
        def score(node: Node) -> float:
            cfg: ServerConfig = node.config
            value = self.rng.random() * 10
            value += cfg.max_requests_per_second / 1000
            value += (200 - cfg.average_processing_time) * 0.1
            value += cfg.instances * 0.5
            if cfg.auto_scaling:
                value += 3
            if cfg.health_check_enabled:
                value += 2
            value += cfg.cpu_cores * 0.5
            value += (cfg.memory / 4) * 0.5
            if client is not None and client.preferred_protocol \
                    and client.preferred_protocol in cfg.supported_protocols:
                value += 5

            if request_type == RequestType.READ:
                value += cfg.max_concurrent_requests / 25
                if cfg.concurrency_model in ("Event-Loop", "Worker Pool"):
                    value += 3
            elif request_type == RequestType.WRITE:
                value += (cfg.storage / 50) * 0.5
                if cfg.restart_policy == "Always":
                    value += 3
                if cfg.concurrency_model == "Multi-Threaded":
                    value += 3
            elif request_type == RequestType.COMPUTE:
                value += cfg.cpu_cores * 1.5 + cfg.cpu_speed * 2 + cfg.memory / 2
                if cfg.has_gpu:
                    value += 30
                if cfg.concurrency_model == "Worker Pool":
                    value += 5
            elif request_type == RequestType.TRANSACTION:
                value += (100 - cfg.average_processing_time) * 0.2
                if cfg.authentication_required:
                    value += 4
                if cfg.concurrency_model == "Multi-Threaded":
                    value += 4
                if cfg.deployment_type in ("Bare Metal", "VM"):
                    value += 3
            return value
        return self._pick(servers, score)

    # =========================================================================
    # Size and timing
    # =========================================================================

    def determine_request_size(self, client: Node, target: Node,
                               request_type: RequestType) -> int:
        """Request size in whole KB."""
        size = self.settings.base_request_size_kb * SIZE_BY_TYPE[request_type]
        size = self._client_size_adjustments(client.config, size)
        size = self._target_size_adjustments(target, size)
        return round_half_up(size * (0.8 + self.rng.random() * 0.4))

    @staticmethod
    def _client_size_adjustments(cfg: ClientConfig, size: float) -> float:
        size *= PROTOCOL_SIZE_FACTOR.get(cfg.preferred_protocol, 1.0)
        size *= CLIENT_TYPE_SIZE_FACTOR.get(cfg.client_type, 1.0)
        return size + AUTH_SIZE_OVERHEAD.get(cfg.authentication_method, 0.0)

    @staticmethod
    def _target_size_adjustments(target: Node, size: float) -> float:
        if target.node_type == NodeType.DATABASE:
            db: DatabaseConfig = target.config
            size *= 5  # clients addressing storage directly
            size *= {"Moderate": 2, "Complex": 4}.get(db.query_complexity, 1)
            size *= {"SQL": 1.2, "NoSQL": 0.8}.get(db.db_type, 1.0)
        elif target.node_type == NodeType.SERVER:
            server: ServerConfig = target.config
            if "HTTP" in server.supported_protocols:
                size *= 1.2
            elif "gRPC" in server.supported_protocols:
                size *= 0.7
            if server.authentication_required:
                size *= 1.3
        elif target.node_type == NodeType.LOAD_BALANCER:
            lb: LoadBalancerConfig = target.config
            if lb.content_based_routing:
                size *= 1.3
        return size

    @staticmethod
    def determine_initial_processing_time(cfg: ClientConfig) -> float:
        processing_time = DEVICE_PROCESSING_TIME.get(cfg.device_performance, 10.0)
        if cfg.bandwidth_limit and cfg.bandwidth_limit > 0:
            processing_time *= min(10 / cfg.bandwidth_limit, 3)
        return processing_time
