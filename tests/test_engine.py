"""
Tests for SimulationEngine and SimulationClock.

Covers:
    - End-to-end client -> server scenario
    - Running averages and bounded histories
    - Pure step vs. stateful tick
    - Lifecycle (start/pause/resume/stop/reset) and the background clock
    - Utilization accounting across many ticks
"""

import random
import time
from unittest.mock import MagicMock

import pytest

from archsim.config import SimulationSettings
from archsim.core import ArchitectureGraph, build_template
from archsim.simulation import FailureReason, SimulationClock, SimulationEngine, SimulationState
from archsim.simulation.engine import weighted_average


@pytest.fixture
def engine(client_server_graph, fixed_rng):
    return SimulationEngine(SimulationSettings(), client_server_graph, rng=fixed_rng(0.5))


class TestWeightedAverage:

    def test_first_batch(self):
        assert weighted_average(0.0, 0, 10.0, 2) == 10.0

    def test_merge(self):
        assert weighted_average(10.0, 2, 20.0, 2) == 15.0
        assert weighted_average(10.0, 3, 30.0, 1) == 15.0

    def test_empty_batch_keeps_average(self):
        assert weighted_average(12.5, 4, 0.0, 0) == 12.5


class TestEndToEnd:

    def test_single_client_single_server(self, engine):
        # created at t=100, hops at 200, works at the server at 300, done at 400
        for _ in range(3):
            engine.tick()
        assert engine.state.completed_count == 0
        assert len(engine.state.active_requests) == 3

        state = engine.tick()

        assert state.elapsed_time == 400
        assert state.completed_count == 1
        assert state.failed_count == 0
        assert state.average_response_time == 300
        assert state.average_request_size == 4
        completed = state.completed_requests[0]
        assert completed.path == ["client-1", "server-1"]
        assert completed.response_time == 300
        assert len(state.metric_history) == 4
        assert state.metric_history[-1].completed_request_count == 1

    def test_utilization_returns_to_zero(self, engine, graph_factory):
        engine.run(4)
        # same topology, no more traffic
        engine.set_graph(graph_factory(users=0))
        engine.run(4)

        state = engine.state
        assert state.active_requests == []
        assert state.completed_count == 4
        assert all(v == 0.0 for v in state.utilization.nodes.values())
        assert all(v == 0.0 for v in state.utilization.edges.values())

    def test_running_average_over_many_completions(self, engine):
        engine.run(10)
        state = engine.state
        assert state.completed_count == 7
        assert state.average_response_time == pytest.approx(300)


class TestHistories:

    def test_histories_are_bounded(self, client_server_graph, fixed_rng):
        settings = SimulationSettings(max_history_length=5, max_metric_history_length=3)
        engine = SimulationEngine(settings, client_server_graph, rng=fixed_rng(0.5))
        state = engine.run(20)

        assert state.completed_count == 17
        assert len(state.completed_requests) == 5
        assert len(state.metric_history) == 3
        assert state.metric_history[-1].timestamp == 2000
        # the most recent completions are kept
        assert state.completed_requests[-1].completed_at == 2000


class TestStep:

    def test_step_does_not_touch_previous_state(self, engine, client_server_graph):
        previous = SimulationState()
        new = engine.step(client_server_graph, previous)
        assert previous.elapsed_time == 0
        assert previous.active_requests == []
        assert new.elapsed_time == 100
        assert len(new.active_requests) == 1
        assert engine.state.elapsed_time == 0

    def test_tick_accepts_graph_override(self, engine, graph_factory):
        state = engine.tick(graph_factory(users=0))
        assert state.active_requests == []
        assert state.elapsed_time == 100

    def test_invalid_settings_rejected(self):
        with pytest.raises(ValueError):
            SimulationEngine(SimulationSettings(tick_interval_ms=0))


class TestGraphSnapshot:

    def test_empty_graph_fails_in_flight_requests(self, engine):
        engine.tick()
        engine.tick()
        assert len(engine.state.active_requests) == 2

        state = engine.tick(ArchitectureGraph())

        assert state.active_requests == []
        assert state.failed_count == 2
        assert {r.failure_reason for r in state.failed_requests} == {FailureReason.CURRENT_NODE_NOT_FOUND}
        assert all(v == 0.0 for v in state.utilization.nodes.values())
        assert all(v == 0.0 for v in state.utilization.edges.values())

    def test_empty_graph_applies_to_that_tick_only(self, engine):
        engine.run(1, ArchitectureGraph())
        assert engine.state.total_requests == 0

        state = engine.tick()
        assert len(state.active_requests) == 1

    def test_empty_graph_at_construction(self):
        graph = ArchitectureGraph()
        assert SimulationEngine(graph=graph).graph is graph


class TestLifecycle:

    def test_start_pause_resume_stop(self, engine):
        assert not engine.is_active
        engine.start(background=False)
        assert engine.is_running and engine.is_active

        engine.pause()
        assert engine.is_paused and not engine.is_active
        engine.resume()
        assert engine.is_active

        engine.stop()
        assert not engine.is_running and not engine.is_paused

    def test_pause_ignored_when_not_running(self, engine):
        engine.pause()
        assert not engine.is_paused

    def test_reset_discards_everything(self, engine):
        engine.run(5)
        engine.start(background=False)
        engine.reset()

        state = engine.state
        assert not engine.is_running
        assert state.elapsed_time == 0
        assert state.active_requests == []
        assert state.completed_count == 0
        assert state.metric_history == []
        assert state.utilization.nodes == {}

    def test_snapshot(self, engine):
        engine.run(2)
        snapshot = engine.snapshot()
        assert snapshot["elapsed_time"] == 200
        assert snapshot["active_request_count"] == 2
        assert snapshot["is_running"] is False
        assert "active_requests" not in snapshot
        assert len(engine.snapshot(include_requests=True)["active_requests"]) == 2

    def test_current_pairs_graph_and_state(self, engine, client_server_graph):
        graph, state = engine.current()
        assert graph is client_server_graph
        assert state is engine.state


class TestClock:

    @pytest.mark.slow
    def test_background_ticks(self, client_server_graph):
        engine = SimulationEngine(SimulationSettings(tick_interval_ms=10, seed=1), client_server_graph)
        engine.start()
        clock = engine._clock
        try:
            deadline = time.time() + 2
            while engine.state.elapsed_time < 50 and time.time() < deadline:
                time.sleep(0.01)
        finally:
            engine.stop()

        assert engine.state.elapsed_time >= 50
        assert not clock.is_alive
        assert engine._clock is None

    def test_paused_engine_is_not_ticked(self):
        engine = MagicMock()
        engine.is_active = False
        clock = SimulationClock(engine, 1)
        clock.start()
        time.sleep(0.05)
        clock.stop()
        engine.tick.assert_not_called()

    def test_clock_stops_on_tick_error(self):
        engine = MagicMock()
        engine.is_active = True
        engine.tick.side_effect = RuntimeError("boom")
        clock = SimulationClock(engine, 1)
        clock.start()
        clock._thread.join(1)
        assert not clock.is_alive
        assert engine.tick.call_count == 1
        engine.halt.assert_called_once()

    @pytest.mark.slow
    def test_engine_restarts_after_clock_error(self, client_server_graph):
        engine = SimulationEngine(SimulationSettings(tick_interval_ms=10, seed=1), client_server_graph)
        step = engine.step
        calls = []

        def flaky_step(graph, previous):
            calls.append(previous.elapsed_time)
            if len(calls) == 3:
                raise RuntimeError("transient")
            return step(graph, previous)

        engine.step = flaky_step
        engine.start()
        failed_clock = engine._clock
        failed_clock._thread.join(2)

        assert not failed_clock.is_alive
        assert not engine.is_running
        assert engine.state.elapsed_time == 20

        engine.start()
        try:
            assert engine._clock is not failed_clock
            deadline = time.time() + 2
            while engine.state.elapsed_time <= 20 and time.time() < deadline:
                time.sleep(0.01)
        finally:
            engine.stop()

        assert engine.state.elapsed_time > 20


class TestAccounting:

    @pytest.mark.parametrize("template_id", ["web-app-caching", "microservices"])
    def test_utilization_matches_held_contributions(self, template_id):
        engine = SimulationEngine(SimulationSettings(), build_template(template_id),
                                  rng=random.Random(2024))
        for _ in range(40):
            state = engine.tick()
            util = state.utilization

            for node_id, value in util.nodes.items():
                assert 0.0 <= value <= 1.0
                held = sum(r.processing.node_utilization.get(node_id, 0.0)
                           for r in state.active_requests)
                assert value == pytest.approx(held, abs=1e-6)

            for edge_id, value in util.edges.items():
                assert 0.0 <= value <= 1.0
                held = sum(r.processing.edge_utilization.get(edge_id, 0.0)
                           for r in state.active_requests)
                assert value == pytest.approx(held, abs=1e-6)

            for request in state.completed_requests + state.failed_requests:
                assert request.processing.node_utilization == {}
                assert request.processing.edge_utilization == {}

    def test_seeded_runs_are_reproducible(self):
        results = []
        for _ in range(2):
            engine = SimulationEngine(SimulationSettings(seed=99), build_template("three-tier"))
            state = engine.run(30)
            results.append((state.completed_count, state.failed_count, state.average_response_time))
        assert results[0] == results[1]
