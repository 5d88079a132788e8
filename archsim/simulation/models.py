from __future__ import annotations
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# Utilization values below this are treated as fully released.
UTILIZATION_EPSILON = 1e-9


# =============================================================================
# Enums
# =============================================================================

class RequestType(Enum):
    """Kind of work a simulated request carries."""
    READ = "Read"
    WRITE = "Write"
    COMPUTE = "Compute"
    TRANSACTION = "Transaction"


class RequestStatus(Enum):
    """Request lifecycle; COMPLETED and FAILED are terminal."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.COMPLETED, RequestStatus.FAILED)


class FailureReason(str, Enum):
    """Closed set of reasons a request can fail with."""
    TIMEOUT = "Timeout - exceeded maximum lifetime"
    MAX_RETRIES = "Exceeded maximum retry attempts"
    CURRENT_NODE_NOT_FOUND = "Current node not found"
    NODE_OVERLOAD = "Node overload"
    RANDOM_NODE_FAILURE = "Random node failure"
    NEXT_NODE_NOT_FOUND = "Next node not found"
    NEXT_EDGE_NOT_FOUND = "Next edge not found"
    NETWORK_CONGESTION = "Network congestion"
    EDGE_FAILURE = "Edge Failure Probability"


# =============================================================================
# Utilization
# =============================================================================

def _clamp(value: float) -> float:
    if value < UTILIZATION_EPSILON:
        return 0.0
    return min(1.0, value)


@dataclass
class ComponentUtilization:
    """
    Saturating load per node and edge, each value within [0, 1].

    ``add_*`` returns the increment actually applied after clamping, which
    is what a request must store so that releasing it later subtracts
    exactly what it added.
    """
    nodes: Dict[str, float] = field(default_factory=dict)
    edges: Dict[str, float] = field(default_factory=dict)

    def copy(self) -> "ComponentUtilization":
        return ComponentUtilization(nodes=dict(self.nodes), edges=dict(self.edges))

    def node(self, node_id: str) -> float:
        return self.nodes.get(node_id, 0.0)

    def edge(self, edge_id: str) -> float:
        return self.edges.get(edge_id, 0.0)

    def add_node(self, node_id: str, amount: float) -> float:
        return self._add(self.nodes, node_id, amount)

    def add_edge(self, edge_id: str, amount: float) -> float:
        return self._add(self.edges, edge_id, amount)

    def release_node(self, node_id: str, amount: float) -> None:
        self._release(self.nodes, node_id, amount)

    def release_edge(self, edge_id: str, amount: float) -> None:
        self._release(self.edges, edge_id, amount)

    @staticmethod
    def _add(values: Dict[str, float], key: str, amount: float) -> float:
        before = values.get(key, 0.0)
        after = min(1.0, before + max(0.0, amount))
        values[key] = after
        return after - before

    @staticmethod
    def _release(values: Dict[str, float], key: str, amount: float) -> None:
        if key not in values:
            return
        values[key] = _clamp(values[key] - amount)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            "nodes": {k: round(v, 6) for k, v in self.nodes.items()},
            "edges": {k: round(v, 6) for k, v in self.edges.items()},
        }


# =============================================================================
# Requests
# =============================================================================

@dataclass
class ProcessingData:
    """Per-request bookkeeping of work done and load contributed."""
    retry_count: int = 0
    processing_time: float = 0.0
    required_processing_time: float = 0.0
    # Live contributions this request holds, keyed by component id
    node_utilization: Dict[str, float] = field(default_factory=dict)
    edge_utilization: Dict[str, float] = field(default_factory=dict)
    total_processing_time: float = 0.0
    edge_to_decrease_id: Optional[str] = None


@dataclass
class SimulationRequest:
    """A unit of traffic moving through the architecture."""
    id: str
    request_type: RequestType
    source_node_id: str
    current_node_id: str
    destination_node_id: str
    created_at: float
    size_kb: float = 1.0
    status: RequestStatus = RequestStatus.PENDING
    prev_node_id: Optional[str] = None
    path: List[str] = field(default_factory=list)
    current_edge_id: Optional[str] = None
    completed_at: Optional[float] = None
    failed_at: Optional[float] = None
    failure_reason: Optional[FailureReason] = None

    # Client-derived preferences
    preferred_protocol: Optional[str] = None
    secure_connection: bool = False
    auth_method: Optional[str] = None
    retry_on_error: bool = True
    max_retries: int = 3
    cache_enabled: bool = False
    source_region: str = ""

    processing: ProcessingData = field(default_factory=ProcessingData)

    def clone(self) -> "SimulationRequest":
        return copy.deepcopy(self)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def response_time(self) -> Optional[float]:
        """Simulated end-to-end time, for completed requests."""
        if self.completed_at is None:
            return None
        return self.completed_at - self.created_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.request_type.value,
            "status": self.status.value,
            "source_node_id": self.source_node_id,
            "current_node_id": self.current_node_id,
            "prev_node_id": self.prev_node_id,
            "destination_node_id": self.destination_node_id,
            "path": list(self.path),
            "current_edge_id": self.current_edge_id,
            "size_kb": self.size_kb,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
            "failed_at": self.failed_at,
            "failure_reason": self.failure_reason.value if self.failure_reason else None,
            "preferred_protocol": self.preferred_protocol,
            "retry_count": self.processing.retry_count,
            "max_retries": self.max_retries,
            "source_region": self.source_region,
            "processing_time": round(self.processing.processing_time, 3),
            "required_processing_time": round(self.processing.required_processing_time, 3),
            "total_processing_time": round(self.processing.total_processing_time, 3),
        }


# =============================================================================
# Results and metrics
# =============================================================================

@dataclass
class ProcessorResult:
    """Outcome of processing one batch of requests for one tick."""
    active: List[SimulationRequest] = field(default_factory=list)
    completed: List[SimulationRequest] = field(default_factory=list)
    failed: List[SimulationRequest] = field(default_factory=list)
    utilization: ComponentUtilization = field(default_factory=ComponentUtilization)


@dataclass(frozen=True)
class MetricDataPoint:
    """Per-tick time-series sample."""
    timestamp: float
    active_request_count: int
    completed_request_count: int
    failed_request_count: int
    average_response_time: float
    average_request_size: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "active_request_count": self.active_request_count,
            "completed_request_count": self.completed_request_count,
            "failed_request_count": self.failed_request_count,
            "average_response_time": round(self.average_response_time, 3),
            "average_request_size": round(self.average_request_size, 3),
        }


@dataclass
class SimulationState:
    """Everything the engine owns between ticks."""
    elapsed_time: float = 0.0
    active_requests: List[SimulationRequest] = field(default_factory=list)
    completed_requests: List[SimulationRequest] = field(default_factory=list)
    failed_requests: List[SimulationRequest] = field(default_factory=list)
    completed_count: int = 0
    failed_count: int = 0
    average_response_time: float = 0.0
    average_request_size: float = 0.0
    utilization: ComponentUtilization = field(default_factory=ComponentUtilization)
    metric_history: List[MetricDataPoint] = field(default_factory=list)

    @property
    def total_requests(self) -> int:
        return len(self.active_requests) + self.completed_count + self.failed_count

    @property
    def success_rate(self) -> float:
        finished = self.completed_count + self.failed_count
        return self.completed_count / finished * 100 if finished else 0.0

    def to_dict(self, include_requests: bool = False) -> Dict[str, Any]:
        result = {
            "elapsed_time": self.elapsed_time,
            "active_request_count": len(self.active_requests),
            "completed_count": self.completed_count,
            "failed_count": self.failed_count,
            "success_rate": round(self.success_rate, 2),
            "average_response_time": round(self.average_response_time, 3),
            "average_request_size": round(self.average_request_size, 3),
            "utilization": self.utilization.to_dict(),
            "metric_history": [p.to_dict() for p in self.metric_history],
        }
        if include_requests:
            result["active_requests"] = [r.to_dict() for r in self.active_requests]
            result["completed_requests"] = [r.to_dict() for r in self.completed_requests]
            result["failed_requests"] = [r.to_dict() for r in self.failed_requests]
        return result
