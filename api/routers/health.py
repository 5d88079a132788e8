"""
Health check endpoints.
"""

from fastapi import APIRouter
from typing import Dict, Any
from datetime import datetime

from archsim import __version__
from api.models import HealthResponse

router = APIRouter()


@router.get("/", response_model=Dict[str, Any])
async def root():
    """Root endpoint - API information"""
    return {
        "name": "Architecture Flow Simulator API",
        "version": __version__,
        "status": "running",
        "endpoints": {
            "health": "/health",
            "graph": "/api/v1/simulation/graph",
            "state": "/api/v1/simulation/state",
            "analysis": "/api/v1/simulation/analysis",
            "run": "/api/v1/simulation/run",
            "templates": "/api/v1/simulation/templates",
        },
    }


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint. Verifies API is running."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow().isoformat(),
        version=__version__,
        message="API is running.",
    )
