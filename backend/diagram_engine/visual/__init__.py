# Visual styling module
# Color tables are plain data; builders receive them through DiagramConfig

from diagram_engine.visual.visual_style import (
    COMPONENT_COLORS,
    DATAFLOW_COLORS,
    DEFAULT_COLOR,
    GROUP_COLORS,
    LAYER_COLORS,
    METHOD_COLORS,
    TABLE_COLORS,
    exact_color,
    keyword_color,
)

__all__ = [
    "COMPONENT_COLORS",
    "DATAFLOW_COLORS",
    "DEFAULT_COLOR",
    "GROUP_COLORS",
    "LAYER_COLORS",
    "METHOD_COLORS",
    "TABLE_COLORS",
    "exact_color",
    "keyword_color",
]
