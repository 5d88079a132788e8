"""
File Store Adapter

Implements IArchitectureRepository on top of JSON files in the editor's
document format.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from archsim.core.graph import ArchitectureGraph


class ArchitectureFileStore:
    """
    Local filesystem implementation of IArchitectureRepository.

    Names are resolved relative to ``base_dir`` (the working directory when
    omitted); a missing ``.json`` suffix is added.
    """

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir or os.getcwd()
        self.logger = logging.getLogger(__name__)

    def resolve(self, name: str) -> str:
        path = name if name.endswith(".json") else f"{name}.json"
        if not os.path.isabs(path):
            path = os.path.join(self.base_dir, path)
        return path

    def read_json(self, path: str) -> Dict[str, Any]:
        """Read JSON file and return parsed content."""
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def write_json(self, path: str, data: Dict[str, Any]) -> str:
        """Write data as JSON to file. Returns the written path."""
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, default=str)
        return path

    def load_graph(self, name: str) -> ArchitectureGraph:
        path = self.resolve(name)
        if not os.path.exists(path):
            raise FileNotFoundError(f"Architecture file not found: {path}")
        graph = ArchitectureGraph.from_dict(self.read_json(path))
        self.logger.info(f"Loaded {graph!r} from {path}")
        return graph

    def save_graph(self, graph: ArchitectureGraph, name: str) -> str:
        path = self.write_json(self.resolve(name), graph.to_dict())
        self.logger.info(f"Saved {graph!r} to {path}")
        return path

    def list_graphs(self) -> List[str]:
        if not os.path.isdir(self.base_dir):
            return []
        return sorted(
            os.path.splitext(f)[0] for f in os.listdir(self.base_dir) if f.endswith(".json")
        )
