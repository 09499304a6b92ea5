from enum import Enum
from typing import Any, Dict

from diagram_engine.ir.graph import Diagram, GraphEdge, GraphNode
from diagram_engine.visual.visual_style import DEFAULT_COLOR

PRIMITIVE_TYPES = (str, int, float, bool, type(None))

EDGE_TYPE = "smoothstep"
DASH_PATTERN = "5,5"


def camel_case(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def serialize_ir(obj: Any):
    """
    Serialize IR objects into JSON-compatible structures.
    Deterministic. Attribute names become camelCase, None attributes are dropped.
    """

    # Enums first: str-based enums would otherwise pass as primitives
    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, PRIMITIVE_TYPES):
        return obj

    if isinstance(obj, (list, tuple)):
        return [serialize_ir(item) for item in obj]

    if isinstance(obj, dict):
        return {k: serialize_ir(v) for k, v in obj.items()}

    # IR / dataclass-like objects
    if hasattr(obj, "__dict__"):
        return {
            camel_case(key): serialize_ir(value)
            for key, value in obj.__dict__.items()
            if not key.startswith("_") and value is not None
        }

    return str(obj)


def serialize_node(node: GraphNode) -> Dict[str, Any]:
    data = {"label": node.label, "description": node.description}
    data.update(serialize_ir(node.data))
    if node.explanation is not None:
        data["aiExplanation"] = serialize_ir(node.explanation)

    return {
        "id": node.id,
        "type": node.kind,
        "position": serialize_ir(node.position),
        "data": data,
    }


def serialize_edge(edge: GraphEdge) -> Dict[str, Any]:
    style = {"stroke": edge.color or DEFAULT_COLOR, "strokeWidth": 2}
    if edge.dashed:
        style["strokeDasharray"] = DASH_PATTERN

    data = {"kind": edge.kind}
    data.update(serialize_ir(edge.data))

    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "type": EDGE_TYPE,
        "label": edge.label,
        "animated": edge.animated,
        "style": style,
        "data": data,
    }


def serialize_diagram(diagram: Diagram) -> Dict[str, Any]:
    payload = {
        "id": diagram.id,
        "name": diagram.name,
        "type": diagram.kind.value,
        "nodes": [serialize_node(n) for n in diagram.nodes],
        "edges": [serialize_edge(e) for e in diagram.edges],
        "metadata": serialize_ir(diagram.metadata),
    }
    if diagram.description:
        payload["description"] = diagram.description
    if diagram.insights:
        payload["aiInsights"] = serialize_ir(diagram.insights)
    return payload
