"""
FastAPI dependency injection for API routes.

Provides:
  - ``get_settings``: simulator settings loaded once from ``ARCHSIM_*``
  - ``get_engine``: the process-wide interactive simulation engine
"""

import logging
import threading
from typing import Optional

from archsim.config import SimulationSettings
from archsim.simulation import SimulationEngine

logger = logging.getLogger(__name__)

_settings: Optional[SimulationSettings] = None
_engine: Optional[SimulationEngine] = None
_engine_lock = threading.Lock()


def get_settings() -> SimulationSettings:
    global _settings
    if _settings is None:
        _settings = SimulationSettings.from_env().validate()
    return _settings


def get_engine() -> SimulationEngine:
    """
    Shared engine dependency.

    Every request operates on the same engine so that start/pause/tick and
    the state view observe one simulation.
    """
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = SimulationEngine(get_settings())
            logger.info("Simulation engine created")
        return _engine


def shutdown_engine() -> None:
    """Stop the background clock, if any; called on application shutdown."""
    global _engine
    with _engine_lock:
        if _engine is not None:
            _engine.stop()
            _engine = None
