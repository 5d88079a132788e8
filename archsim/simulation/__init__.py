"""
Simulation core: request generation, routing, per-tick processing and
orchestration.
"""

from .models import (
    RequestType,
    RequestStatus,
    FailureReason,
    ComponentUtilization,
    ProcessingData,
    SimulationRequest,
    ProcessorResult,
    MetricDataPoint,
    SimulationState,
)
from .impact import ImpactCalculator
from .generator import RequestGenerator
from .router import PathRouter
from .processor import RequestProcessor
from .engine import SimulationEngine, SimulationClock
from .analysis import SimulationAnalyzer, Bottleneck, ErrorAnalysis

__all__ = [
    "RequestType", "RequestStatus", "FailureReason", "ComponentUtilization",
    "ProcessingData", "SimulationRequest", "ProcessorResult", "MetricDataPoint",
    "SimulationState", "ImpactCalculator", "RequestGenerator", "PathRouter",
    "RequestProcessor", "SimulationEngine", "SimulationClock",
    "SimulationAnalyzer", "Bottleneck", "ErrorAnalysis",
]
