"""
Simulation Engine

Owns the authoritative simulation state and drives one fixed-interval tick:

    Generator -> Processor -> partition -> running averages -> metric point

``step`` is the pure transition ``(graph, previous state) -> new state``;
``tick`` applies it to the engine's own state under a lock so that
concurrent callers are serialized. ``SimulationClock`` is the background
driver that calls ``tick`` on the configured interval while the engine is
running and not paused.
"""

from __future__ import annotations
import logging
import random
import threading
from typing import Any, Dict, List, Optional, Tuple

from archsim.config.settings import SimulationSettings
from archsim.core.graph import ArchitectureGraph
from .generator import RequestGenerator
from .models import MetricDataPoint, SimulationRequest, SimulationState
from .processor import RequestProcessor
from .router import PathRouter


def weighted_average(old_average: float, old_count: int,
                     batch_average: float, batch_count: int) -> float:
    """Merge a batch average into a running average."""
    if batch_count <= 0:
        return old_average
    return (old_average * old_count + batch_average * batch_count) / (old_count + batch_count)


class SimulationEngine:
    """
    Tick orchestrator with start/pause/resume/reset lifecycle.

    Example:
        >>> engine = SimulationEngine(SimulationSettings(seed=42), graph)
        >>> for _ in range(50):
        ...     engine.tick()
        >>> engine.snapshot()["completed_count"]
    """

    def __init__(self, settings: Optional[SimulationSettings] = None,
                 graph: Optional[ArchitectureGraph] = None,
                 rng: Optional[random.Random] = None):
        self.settings = (settings or SimulationSettings()).validate()
        self.rng = rng or random.Random(self.settings.seed)
        self.logger = logging.getLogger(__name__)

        self.generator = RequestGenerator(self.settings, self.rng)
        self.processor = RequestProcessor(self.settings, self.rng, router=PathRouter())

        self.graph = graph if graph is not None else ArchitectureGraph()
        self.state = SimulationState()
        self.is_running = False
        self.is_paused = False

        self._lock = threading.RLock()
        self._clock: Optional[SimulationClock] = None

    # =========================================================================
    # Graph
    # =========================================================================

    def set_graph(self, graph: ArchitectureGraph) -> None:
        """Replace the graph snapshot used by subsequent ticks."""
        with self._lock:
            self.graph = graph
        self.logger.info(f"Graph updated: {graph!r}")

    # =========================================================================
    # Ticking
    # =========================================================================

    def tick(self, graph: Optional[ArchitectureGraph] = None) -> SimulationState:
        """
        Advance the engine's own state by one interval and return it.

        An explicitly passed graph, even an empty one, is the snapshot for
        this tick; ``None`` means the engine's current graph.
        """
        with self._lock:
            self.state = self.step(graph if graph is not None else self.graph, self.state)
            return self.state

    def step(self, graph: ArchitectureGraph, previous: SimulationState) -> SimulationState:
        """Pure tick: derive the next state without touching ``previous``."""
        s = self.settings
        time_step = s.tick_interval_ms
        elapsed = previous.elapsed_time + time_step

        new_requests = self.generator.generate_requests(graph, elapsed, time_step)
        result = self.processor.process_requests(
            previous.active_requests + new_requests,
            graph,
            time_step,
            elapsed,
            previous.utilization,
        )

        completed = result.completed
        average_response_time = previous.average_response_time
        average_request_size = previous.average_request_size
        if completed:
            batch_response = sum(r.response_time for r in completed) / len(completed)
            batch_size = sum(r.size_kb for r in completed) / len(completed)
            average_response_time = weighted_average(
                previous.average_response_time, previous.completed_count,
                batch_response, len(completed))
            average_request_size = weighted_average(
                previous.average_request_size, previous.completed_count,
                batch_size, len(completed))

        completed_count = previous.completed_count + len(completed)
        failed_count = previous.failed_count + len(result.failed)

        point = MetricDataPoint(
            timestamp=elapsed,
            active_request_count=len(result.active),
            completed_request_count=completed_count,
            failed_request_count=failed_count,
            average_response_time=average_response_time,
            average_request_size=average_request_size,
        )

        return SimulationState(
            elapsed_time=elapsed,
            active_requests=result.active,
            completed_requests=self._trim(previous.completed_requests + completed,
                                          s.max_history_length),
            failed_requests=self._trim(previous.failed_requests + result.failed,
                                       s.max_history_length),
            completed_count=completed_count,
            failed_count=failed_count,
            average_response_time=average_response_time,
            average_request_size=average_request_size,
            utilization=result.utilization,
            metric_history=self._trim(previous.metric_history + [point],
                                      s.max_metric_history_length),
        )

    @staticmethod
    def _trim(items: List[Any], limit: int) -> List[Any]:
        return items[-limit:] if len(items) > limit else items

    def run(self, ticks: int, graph: Optional[ArchitectureGraph] = None) -> SimulationState:
        """Run ``ticks`` steps synchronously."""
        for _ in range(ticks):
            self.tick(graph)
        return self.state

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self, background: bool = True) -> None:
        """Mark the engine running; optionally start the background clock."""
        with self._lock:
            self.is_running = True
            self.is_paused = False
        if background and (self._clock is None or not self._clock.is_alive):
            self._clock = SimulationClock(self, self.settings.tick_interval_ms)
            self._clock.start()
        self.logger.info("Simulation started")

    def pause(self) -> None:
        with self._lock:
            if self.is_running:
                self.is_paused = True
        self.logger.info("Simulation paused")

    def resume(self) -> None:
        with self._lock:
            if self.is_running:
                self.is_paused = False
        self.logger.info("Simulation resumed")

    def stop(self) -> None:
        """Stop the clock, keeping the accumulated state."""
        clock = self._clock
        self._clock = None
        if clock is not None:
            clock.stop()
        with self._lock:
            self.is_running = False
            self.is_paused = False

    def halt(self) -> None:
        """Mark the engine stopped after its clock gave up; the state is kept."""
        with self._lock:
            self.is_running = False
            self.is_paused = False
        self.logger.warning("Simulation halted")

    def reset(self) -> None:
        """Stop and discard all in-flight requests, histories and utilization."""
        self.stop()
        with self._lock:
            self.state = SimulationState()
        self.logger.info("Simulation reset")

    @property
    def is_active(self) -> bool:
        return self.is_running and not self.is_paused

    # =========================================================================
    # Views
    # =========================================================================

    def snapshot(self, include_requests: bool = False) -> Dict[str, Any]:
        """Serializable read-only view of the current state."""
        with self._lock:
            data = self.state.to_dict(include_requests=include_requests)
            data["is_running"] = self.is_running
            data["is_paused"] = self.is_paused
            return data

    def current(self) -> Tuple[ArchitectureGraph, SimulationState]:
        """Consistent pair of the graph and the state computed on it."""
        with self._lock:
            return self.graph, self.state

    def active_requests(self) -> List[SimulationRequest]:
        with self._lock:
            return list(self.state.active_requests)


class SimulationClock:
    """Background thread calling ``engine.tick()`` every ``interval_ms``."""

    def __init__(self, engine: SimulationEngine, interval_ms: float):
        self.engine = engine
        self.interval = interval_ms / 1000
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.logger = logging.getLogger(__name__)

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name="simulation-clock", daemon=True)
        self._thread.start()

    def run(self) -> None:
        while not self._stop_event.is_set():
            if self.engine.is_active:
                try:
                    self.engine.tick()
                except Exception as e:
                    self.logger.error(f"Tick failed, stopping clock: {e}")
                    self._stop_event.set()
                    self.engine.halt()
                    break
            self._stop_event.wait(self.interval)

    def stop(self, timeout: float = 1.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
