"""
Simulation endpoints: interactive engine lifecycle and headless runs.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Dict, Any, Optional
import logging

from api.dependencies import get_engine, get_settings
from api.models import GraphPayload, TickRequest, RunRequest
from archsim.application.services import SimulationService
from archsim.config import SimulationSettings
from archsim.core import ArchitectureGraph, list_templates
from archsim.simulation import SimulationAnalyzer, SimulationEngine

router = APIRouter(prefix="/api/v1/simulation", tags=["simulation"])
logger = logging.getLogger(__name__)


def _parse_graph(payload: GraphPayload) -> ArchitectureGraph:
    try:
        return ArchitectureGraph.from_dict(payload.model_dump())
    except (KeyError, ValueError, TypeError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid architecture: {str(e)}")


@router.get("/templates", response_model=Dict[str, Any])
async def get_templates():
    """List the built-in starting architectures."""
    return {"success": True, "templates": list_templates()}


@router.put("/graph", response_model=Dict[str, Any])
async def set_graph(payload: GraphPayload, engine: SimulationEngine = Depends(get_engine)):
    """
    Replace the graph snapshot used by subsequent ticks.

    In-flight requests keep their ids; a request whose current node is gone
    fails on its next tick.
    """
    graph = _parse_graph(payload)
    engine.set_graph(graph)
    return {
        "success": True,
        "graph": {"nodes": len(graph.nodes), "edges": len(graph.edges)},
    }


@router.post("/start", response_model=Dict[str, Any])
async def start_simulation(engine: SimulationEngine = Depends(get_engine)):
    try:
        engine.start()
        return {"success": True, "is_running": engine.is_running, "is_paused": engine.is_paused}
    except Exception as e:
        logger.error(f"Failed to start simulation: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to start simulation: {str(e)}")


@router.post("/pause", response_model=Dict[str, Any])
async def pause_simulation(engine: SimulationEngine = Depends(get_engine)):
    engine.pause()
    return {"success": True, "is_running": engine.is_running, "is_paused": engine.is_paused}


@router.post("/resume", response_model=Dict[str, Any])
async def resume_simulation(engine: SimulationEngine = Depends(get_engine)):
    engine.resume()
    return {"success": True, "is_running": engine.is_running, "is_paused": engine.is_paused}


@router.post("/reset", response_model=Dict[str, Any])
async def reset_simulation(engine: SimulationEngine = Depends(get_engine)):
    """Stop the clock and discard all in-flight requests, histories and utilization."""
    engine.reset()
    return {"success": True, "state": engine.snapshot()}


@router.post("/tick", response_model=Dict[str, Any])
def tick_simulation(request: Optional[TickRequest] = None,
                          engine: SimulationEngine = Depends(get_engine)):
    """Advance the simulation manually, independent of the background clock."""
    count = request.count if request else 1
    try:
        for _ in range(count):
            engine.tick()
        return {"success": True, "ticks": count, "state": engine.snapshot()}
    except Exception as e:
        logger.error(f"Tick failed: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Tick failed: {str(e)}")


@router.get("/state", response_model=Dict[str, Any])
async def get_state(include_requests: bool = Query(False, description="Include request lists"),
                    engine: SimulationEngine = Depends(get_engine)):
    """
    Current simulation state: counters, running averages, utilization and
    the metric history.
    """
    return {"success": True, "state": engine.snapshot(include_requests=include_requests)}


@router.get("/analysis", response_model=Dict[str, Any])
async def get_analysis(threshold: float = Query(0.5, ge=0.0, le=1.0, description="Bottleneck utilization threshold"),
                       engine: SimulationEngine = Depends(get_engine)):
    """Bottlenecks and error breakdown for the current state."""
    try:
        graph, state = engine.current()
        analyzer = SimulationAnalyzer(graph)
        return {
            "success": True,
            "bottlenecks": [b.to_dict() for b in analyzer.find_bottlenecks(state.utilization, threshold)],
            "errors": analyzer.analyze_errors(state.failed_requests).to_dict(),
        }
    except Exception as e:
        logger.error(f"Analysis failed: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")


@router.post("/run", response_model=Dict[str, Any])
def run_simulation(request: RunRequest, settings: SimulationSettings = Depends(get_settings)):
    """
    Headless run of ``ticks`` intervals on a posted graph or a template.

    Does not touch the interactive engine.
    """
    if request.graph is None and not request.template:
        raise HTTPException(status_code=400, detail="Either graph or template must be provided")

    service = SimulationService(settings=settings)
    if request.graph is not None:
        graph = _parse_graph(request.graph)
    else:
        try:
            graph = service.load_graph(template=request.template)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    try:
        logger.info(f"Running headless simulation: ticks={request.ticks}, seed={request.seed}")
        report = service.run(graph, ticks=request.ticks, seed=request.seed)
        return {"success": True, "report": report.to_dict()}
    except Exception as e:
        logger.error(f"Simulation failed: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Simulation failed: {str(e)}")
