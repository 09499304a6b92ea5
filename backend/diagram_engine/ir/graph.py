from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .records import FieldReference


class DiagramKind(str, Enum):
    ERD = "erd"
    API_MAP = "api-map"
    DATA_FLOW = "dataflow"
    LLD = "lld"

    @property
    def response_key(self) -> str:
        return _RESPONSE_KEYS[self]

    @property
    def title(self) -> str:
        return _TITLES[self]


_RESPONSE_KEYS = {
    DiagramKind.ERD: "erd",
    DiagramKind.API_MAP: "apiMap",
    DiagramKind.DATA_FLOW: "dataFlow",
    DiagramKind.LLD: "lld",
}

_TITLES = {
    DiagramKind.ERD: "Entity Relationship Diagram",
    DiagramKind.API_MAP: "API Endpoints Map",
    DiagramKind.DATA_FLOW: "Data Flow Diagram",
    DiagramKind.LLD: "Low Level Design",
}


class RelationType(str, Enum):
    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class NodeExplanation:
    why_chosen: str
    how_it_fits: str
    tradeoffs: str
    best_practices: str


# -------------------------
# Node payloads (one per diagram kind)
# -------------------------

@dataclass(frozen=True)
class ErdField:
    name: str
    type: str
    is_primary_key: bool
    is_foreign_key: bool
    is_unique: bool
    is_nullable: bool
    references: Optional[FieldReference] = None


@dataclass(frozen=True)
class TableData:
    fields: List[ErdField]
    color: str
    indexes: List[str] = field(default_factory=list)
    constraints: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class EndpointSummary:
    id: str
    method: str
    path: str
    description: str
    requires_auth: bool
    color: str
    request_body: Optional[Dict[str, Any]] = None
    response_type: str = "JSON"
    status_codes: List[int] = field(default_factory=lambda: [200, 400, 401, 500])


@dataclass(frozen=True)
class GroupData:
    endpoints: List[EndpointSummary]
    color: str
    endpoint_paths: List[str] = field(default_factory=list)
    formatted_endpoints: str = ""
    auth_endpoints: int = 0
    public_endpoints: int = 0
    resources: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FlowNodeData:
    color: str
    technology: str
    operations: List[str] = field(default_factory=list)
    data_types: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ComponentData:
    color: str
    technology: str
    layer: str
    layer_index: int
    layer_color: Optional[str] = None
    methods: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)


NodePayload = Union[TableData, GroupData, FlowNodeData, ComponentData]


# -------------------------
# Edge payloads
# -------------------------

@dataclass(frozen=True)
class RelationshipData:
    source_field: str
    target_field: str
    relation_type: RelationType


@dataclass(frozen=True)
class ApiLinkData:
    protocol: str = "HTTP"
    requires_auth: bool = False


@dataclass(frozen=True)
class FlowData:
    protocol: str = "HTTP"
    data_type: Optional[str] = None
    is_encrypted: bool = False
    is_bidirectional: bool = False


@dataclass(frozen=True)
class CallData:
    protocol: str = "Method Call"
    data_flow: Optional[str] = None


EdgePayload = Union[RelationshipData, ApiLinkData, FlowData, CallData]


# -------------------------
# Graph
# -------------------------

@dataclass(frozen=True)
class GraphNode:
    id: str
    kind: str
    position: Position
    label: str
    description: str
    data: NodePayload
    explanation: Optional[NodeExplanation] = None


@dataclass(frozen=True)
class GraphEdge:
    id: str
    source: str
    target: str
    kind: str
    label: str
    data: EdgePayload
    color: Optional[str] = None
    animated: bool = False
    dashed: bool = False


@dataclass(frozen=True)
class Diagram:
    id: str
    name: str
    kind: DiagramKind
    nodes: Tuple[GraphNode, ...]
    edges: Tuple[GraphEdge, ...]
    metadata: Dict[str, Any] = field(default_factory=dict)
    description: Optional[str] = None
    insights: Optional[Dict[str, Any]] = None

    @property
    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]
