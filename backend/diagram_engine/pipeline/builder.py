import logging
import time
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from diagram_engine.config import DiagramConfig, default_config
from diagram_engine.ir.errors import GenerationError
from diagram_engine.ir.graph import Diagram, DiagramKind, GraphEdge, GraphNode
from diagram_engine.ir.records import BuildInput

logger = logging.getLogger(__name__)

Graph = Tuple[List[GraphNode], List[GraphEdge]]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_graph_integrity(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> None:
    """Node and edge ids are unique; every edge endpoint names an existing node."""
    node_ids = set()
    for node in nodes:
        if node.id in node_ids:
            raise GenerationError(f"Duplicate node id '{node.id}'")
        node_ids.add(node.id)

    edge_ids = set()
    for edge in edges:
        if edge.id in edge_ids:
            raise GenerationError(f"Duplicate edge id '{edge.id}'")
        edge_ids.add(edge.id)
        if edge.source not in node_ids or edge.target not in node_ids:
            raise GenerationError(
                f"Edge '{edge.id}' references unknown node "
                f"({edge.source} -> {edge.target})"
            )


class GraphBuilder(ABC):
    """
    One implementation per diagram kind.

    Must:
    - be deterministic for identical input (timestamps aside)
    - never call the explanation capability
    - return at least one node or raise GenerationError
    """

    kind: DiagramKind
    id_prefix: str

    def __init__(self, config: Optional[DiagramConfig] = None):
        self.config = config or default_config()

    @abstractmethod
    def build_graph(self, request: BuildInput) -> Graph:
        pass

    @abstractmethod
    def summarize(
        self,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        request: BuildInput,
    ) -> Dict[str, Any]:
        """Counts by category, computed from the given node/edge lists."""
        pass

    def metadata(
        self,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        request: BuildInput,
    ) -> Dict[str, Any]:
        data = {
            "totalNodes": len(nodes),
            "totalEdges": len(edges),
        }
        data.update(self.summarize(nodes, edges, request))
        data["createdAt"] = utc_timestamp()
        return data

    def build(self, request: BuildInput) -> Diagram:
        nodes, edges = self.build_graph(request)

        if not nodes:
            raise GenerationError(
                f"{self.kind.title} generation produced no nodes",
                details="All input records were filtered out during validation",
            )

        check_graph_integrity(nodes, edges)

        logger.info(
            "[%s] Built %d nodes, %d edges for %r",
            self.kind.value,
            len(nodes),
            len(edges),
            request.project_name,
        )

        return Diagram(
            id=f"{self.id_prefix}-{int(time.time() * 1000)}",
            name=f"{request.project_name} - {self.kind.title}",
            kind=self.kind,
            nodes=tuple(nodes),
            edges=tuple(edges),
            metadata=self.metadata(nodes, edges, request),
            description=request.description,
        )

    def with_nodes(
        self,
        diagram: Diagram,
        nodes: Sequence[GraphNode],
        request: BuildInput,
    ) -> Diagram:
        """Swap in (enriched) nodes and recompute metadata from the final lists."""
        if [n.id for n in nodes] != diagram.node_ids:
            raise GenerationError("Enriched nodes do not match the built diagram")

        return replace(
            diagram,
            nodes=tuple(nodes),
            metadata=self.metadata(nodes, diagram.edges, request),
        )
