"""
Simulation Service

Application service for headless runs: resolves a graph, drives the engine
for a fixed number of ticks and summarizes the outcome.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from archsim.config.settings import SimulationSettings
from archsim.core.graph import ArchitectureGraph
from archsim.core.interfaces import IArchitectureRepository
from archsim.core.templates import build_template
from archsim.simulation.analysis import SimulationAnalyzer
from archsim.simulation.engine import SimulationEngine
from archsim.simulation.models import SimulationState

logger = logging.getLogger(__name__)


def percentile(sorted_values: List[float], fraction: float) -> float:
    if not sorted_values:
        return 0.0
    index = min(len(sorted_values) - 1, int(len(sorted_values) * fraction))
    return sorted_values[index]


@dataclass
class SimulationReport:
    """Outcome of a headless simulation run."""
    ticks: int
    state: SimulationState
    graph: ArchitectureGraph
    settings: SimulationSettings
    bottlenecks: List[Dict[str, Any]] = field(default_factory=list)
    errors: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def latency(self) -> Dict[str, float]:
        times = sorted(
            r.response_time for r in self.state.completed_requests if r.response_time is not None)
        if not times:
            return {}
        return {
            "min": times[0],
            "p50": percentile(times, 0.5),
            "p90": percentile(times, 0.9),
            "p99": percentile(times, 0.99),
            "max": times[-1],
            "samples": len(times),
        }

    def to_dict(self) -> Dict[str, Any]:
        state = self.state
        return {
            "timestamp": self.timestamp,
            "summary": {
                "ticks": self.ticks,
                "elapsed_time": state.elapsed_time,
                "total_requests": state.total_requests,
                "active_request_count": len(state.active_requests),
                "completed_count": state.completed_count,
                "failed_count": state.failed_count,
                "success_rate": round(state.success_rate, 2),
                "average_response_time": round(state.average_response_time, 3),
                "average_request_size": round(state.average_request_size, 3),
            },
            "graph": {"nodes": len(self.graph.nodes), "edges": len(self.graph.edges)},
            "latency": self.latency,
            "utilization": state.utilization.to_dict(),
            "bottlenecks": self.bottlenecks,
            "errors": self.errors,
            "metric_history": [p.to_dict() for p in state.metric_history],
            "settings": self.settings.to_dict(),
        }


class SimulationService:
    """
    Runs headless simulations against graphs from a repository or from the
    built-in templates.
    """

    def __init__(self, repository: Optional[IArchitectureRepository] = None,
                 settings: Optional[SimulationSettings] = None):
        self.repository = repository
        self.settings = settings or SimulationSettings()

    def load_graph(self, source: Optional[str] = None,
                   template: Optional[str] = None) -> ArchitectureGraph:
        """
        Resolve a graph from a template id or a repository entry.

        Raises:
            ValueError: if neither is given, or a source is given without a repository
        """
        if template:
            return build_template(template)
        if source:
            if self.repository is None:
                raise ValueError("No repository configured to load architectures from")
            return self.repository.load_graph(source)
        raise ValueError("Either a source or a template must be given")

    def run(self, graph: ArchitectureGraph, ticks: int = 100,
            seed: Optional[int] = None) -> SimulationReport:
        """Simulate ``ticks`` intervals of traffic through ``graph``."""
        if ticks <= 0:
            raise ValueError("ticks must be positive")
        settings = replace(self.settings, seed=seed) if seed is not None else self.settings

        logger.info(f"Running simulation: {graph!r}, ticks={ticks}, seed={settings.seed}")
        engine = SimulationEngine(settings, graph)
        state = engine.run(ticks)

        analyzer = SimulationAnalyzer(graph)
        report = SimulationReport(
            ticks=ticks,
            state=state,
            graph=graph,
            settings=settings,
            bottlenecks=[b.to_dict() for b in analyzer.find_bottlenecks(state.utilization)],
            errors=analyzer.analyze_errors(state.failed_requests).to_dict(),
        )
        logger.info(
            f"Simulation finished: completed={state.completed_count}, "
            f"failed={state.failed_count}, active={len(state.active_requests)}"
        )
        return report

    def run_source(self, source: Optional[str] = None, template: Optional[str] = None,
                   ticks: int = 100, seed: Optional[int] = None) -> SimulationReport:
        return self.run(self.load_graph(source, template), ticks=ticks, seed=seed)
