from typing import Dict, Optional, Type

from diagram_engine.config import DiagramConfig
from diagram_engine.ir.graph import DiagramKind

from .api_map_builder import APIMapBuilder
from .builder import GraphBuilder
from .dataflow_builder import DataFlowBuilder
from .erd_builder import ERDBuilder
from .lld_builder import LLDBuilder

BUILDERS: Dict[DiagramKind, Type[GraphBuilder]] = {
    DiagramKind.ERD: ERDBuilder,
    DiagramKind.API_MAP: APIMapBuilder,
    DiagramKind.DATA_FLOW: DataFlowBuilder,
    DiagramKind.LLD: LLDBuilder,
}


def get_builder(kind: DiagramKind, config: Optional[DiagramConfig] = None) -> GraphBuilder:
    return BUILDERS[kind](config)
