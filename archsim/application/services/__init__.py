from .simulation_service import SimulationService, SimulationReport

__all__ = ["SimulationService", "SimulationReport"]
