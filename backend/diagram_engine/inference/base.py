from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from diagram_engine.ir.graph import DiagramKind, GraphNode, NodeExplanation
from diagram_engine.ir.records import EndpointRecord, SchemaRecord


@dataclass(frozen=True)
class EnrichmentContext:
    """Project-level facts an explanation may draw on."""
    name: str
    description: str = ""
    schemas: List[SchemaRecord] = field(default_factory=list)
    endpoints: List[EndpointRecord] = field(default_factory=list)


class ExplanationGenerator(ABC):
    name: str

    @abstractmethod
    def explain(
        self,
        node: GraphNode,
        context: EnrichmentContext,
        kind: DiagramKind,
    ) -> NodeExplanation:
        """
        Must:
        - return an explanation for exactly this node
        - raise EnrichmentError (or let the transport error propagate) on failure
        - NEVER modify the node
        """
        pass
