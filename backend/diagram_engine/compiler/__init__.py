from diagram_engine.compiler.layout import compute_layered_position, compute_position
from diagram_engine.compiler.normalize import (
    normalize_endpoints,
    normalize_request,
    normalize_schemas,
)
from diagram_engine.compiler.relationships import RelationshipRegistry, classify

__all__ = [
    "compute_position",
    "compute_layered_position",
    "normalize_schemas",
    "normalize_endpoints",
    "normalize_request",
    "classify",
    "RelationshipRegistry",
]
