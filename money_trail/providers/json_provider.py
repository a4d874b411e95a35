"""JSON Network Provider - Load ``{nodes, links}`` from a file on disk."""

import asyncio
import json
from pathlib import Path

import structlog

from money_trail.graph.model import Graph

logger = structlog.get_logger()


class JsonFileProvider:
    """Read the network from a JSON document.

    A missing or unreadable file is not an error at this layer: it yields an
    empty graph, the same "no data yet" state the UI already handles.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Graph:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            logger.warning("network_file_unreadable", path=str(self.path), error=str(e))
            return Graph.empty()
        except ValueError as e:
            logger.warning("network_file_invalid_json", path=str(self.path), error=str(e))
            return Graph.empty()

        if not isinstance(payload, dict):
            logger.warning("network_file_unexpected_shape", path=str(self.path))
            return Graph.empty()

        graph = Graph.from_dict(payload)
        logger.info(
            "loaded_network_file",
            path=str(self.path),
            nodes=len(graph.nodes),
            links=len(graph.links),
        )
        return graph

    async def fetch(self) -> Graph:
        return await asyncio.to_thread(self.load)


class StaticNetworkProvider:
    """Serve a graph that is already in memory (fixtures, tests, notebooks)."""

    def __init__(self, graph: Graph | None = None):
        self.graph = graph or Graph.empty()

    async def fetch(self) -> Graph:
        return self.graph
