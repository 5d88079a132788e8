"""
Simulation Settings

Tunable constants of the simulator, loadable from the environment.
"""

import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class SimulationSettings:
    """Simulator constants; every field can be overridden via ``ARCHSIM_*``."""

    # Clock
    tick_interval_ms: int = 100
    max_request_lifetime_ms: float = 10000

    # Histories
    max_history_length: int = 1000
    max_metric_history_length: int = 100

    # Request mix (cumulative thresholds on one uniform draw)
    read_probability: float = 0.4
    write_probability: float = 0.3
    compute_probability: float = 0.15

    # Failure injection
    node_overload_failure_chance: float = 0.3
    retry_chance: float = 0.05
    edge_overload_threshold: float = 0.9
    edge_congestion_failure_chance: float = 0.2
    edge_congestion_penalty_ms: float = 20

    base_request_size_kb: float = 1.0

    seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> "SimulationSettings":
        """Load settings from environment variables."""
        seed = os.getenv("ARCHSIM_SEED")
        return cls(
            tick_interval_ms=int(os.getenv("ARCHSIM_TICK_INTERVAL_MS", "100")),
            max_request_lifetime_ms=float(os.getenv("ARCHSIM_MAX_REQUEST_LIFETIME_MS", "10000")),
            max_history_length=int(os.getenv("ARCHSIM_MAX_HISTORY_LENGTH", "1000")),
            max_metric_history_length=int(os.getenv("ARCHSIM_MAX_METRIC_HISTORY_LENGTH", "100")),
            read_probability=float(os.getenv("ARCHSIM_READ_PROBABILITY", "0.4")),
            write_probability=float(os.getenv("ARCHSIM_WRITE_PROBABILITY", "0.3")),
            compute_probability=float(os.getenv("ARCHSIM_COMPUTE_PROBABILITY", "0.15")),
            node_overload_failure_chance=float(os.getenv("ARCHSIM_NODE_OVERLOAD_FAILURE_CHANCE", "0.3")),
            retry_chance=float(os.getenv("ARCHSIM_RETRY_CHANCE", "0.05")),
            edge_overload_threshold=float(os.getenv("ARCHSIM_EDGE_OVERLOAD_THRESHOLD", "0.9")),
            edge_congestion_failure_chance=float(os.getenv("ARCHSIM_EDGE_CONGESTION_FAILURE_CHANCE", "0.2")),
            edge_congestion_penalty_ms=float(os.getenv("ARCHSIM_EDGE_CONGESTION_PENALTY_MS", "20")),
            base_request_size_kb=float(os.getenv("ARCHSIM_BASE_REQUEST_SIZE_KB", "1.0")),
            seed=int(seed) if seed else None,
        )

    def validate(self) -> "SimulationSettings":
        """Raise ValueError on an inconsistent configuration; returns self."""
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive")
        if self.max_request_lifetime_ms <= 0:
            raise ValueError("max_request_lifetime_ms must be positive")
        if self.max_history_length <= 0 or self.max_metric_history_length <= 0:
            raise ValueError("history lengths must be positive")
        if self.base_request_size_kb <= 0:
            raise ValueError("base_request_size_kb must be positive")

        chances = {
            "read_probability": self.read_probability,
            "write_probability": self.write_probability,
            "compute_probability": self.compute_probability,
            "node_overload_failure_chance": self.node_overload_failure_chance,
            "retry_chance": self.retry_chance,
            "edge_overload_threshold": self.edge_overload_threshold,
            "edge_congestion_failure_chance": self.edge_congestion_failure_chance,
        }
        for name, value in chances.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")

        mix = self.read_probability + self.write_probability + self.compute_probability
        if mix > 1.0 + 1e-9:
            raise ValueError(f"request type probabilities sum to {mix:.3f} (> 1)")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
