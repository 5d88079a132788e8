"""
Pydantic models for API requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Dict, Any, List, Optional


class GraphPayload(BaseModel):
    """Architecture document in the editor format."""
    nodes: List[Dict[str, Any]] = Field(default_factory=list, description="Editor nodes: id, type, data, position")
    edges: List[Dict[str, Any]] = Field(default_factory=list, description="Editor edges: id, source, target, type, data")


class TickRequest(BaseModel):
    count: int = Field(default=1, ge=1, le=10000, description="Number of ticks to advance")


class RunRequest(BaseModel):
    """Headless run on a posted graph or a built-in template."""
    graph: Optional[GraphPayload] = Field(default=None, description="Architecture to simulate")
    template: Optional[str] = Field(default=None, description="Template id, used when no graph is posted")
    ticks: int = Field(default=100, ge=1, le=100000, description="Number of ticks to simulate")
    seed: Optional[int] = Field(default=None, description="Random seed for reproducibility")


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    message: Optional[str] = None
