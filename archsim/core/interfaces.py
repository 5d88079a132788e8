"""
Repository Interface

Defines the IArchitectureRepository Protocol: where architecture graphs are
loaded from and saved to. Services depend on this Protocol rather than on
a concrete store.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from archsim.core.graph import ArchitectureGraph


@runtime_checkable
class IArchitectureRepository(Protocol):
    """Port for architecture graph persistence."""

    def load_graph(self, name: str) -> ArchitectureGraph:
        """Load the graph stored under ``name``."""
        ...

    def save_graph(self, graph: ArchitectureGraph, name: str) -> str:
        """Persist ``graph`` under ``name``; returns where it was written."""
        ...

    def list_graphs(self) -> List[str]:
        """Names of the stored graphs."""
        ...
