import math

from diagram_engine.config import LayeredLayoutConfig, LayoutConfig
from diagram_engine.ir.graph import Position


def columns_per_row(total: int, config: LayoutConfig) -> int:
    return max(1, min(config.max_per_row, math.ceil(math.sqrt(total))))


def compute_position(index: int, total: int, config: LayoutConfig) -> Position:
    """
    Grid position for node ``index`` of ``total``.

    Rows hold at most ``min(max_per_row, ceil(sqrt(total)))`` nodes. Every row,
    including a shorter trailing one, is centered under the full grid width
    (``max_per_row`` columns). Pure: identical input gives identical output.
    """
    if total < 1:
        raise ValueError("total must be >= 1")
    if index < 0 or index >= total:
        raise ValueError(f"index {index} out of range for total {total}")

    per_row = columns_per_row(total, config)
    row = index // per_row
    col = index % per_row

    nodes_in_row = min(per_row, total - row * per_row)
    row_width = (nodes_in_row - 1) * config.horizontal_spacing
    grid_width = (config.max_per_row - 1) * config.horizontal_spacing
    row_start_x = config.start_x + (grid_width - row_width) / 2

    return Position(
        x=row_start_x + col * config.horizontal_spacing,
        y=config.start_y + row * config.vertical_spacing,
    )


def compute_layered_position(
    layer: int,
    index: int,
    total_in_layer: int,
    config: LayeredLayoutConfig,
) -> Position:
    """
    Column-per-layer position: x follows the layer, y the index inside it.

    A layer whose total height fits inside ``band_height`` is centered in the
    band; taller layers start at ``start_y``.
    """
    if total_in_layer < 1:
        raise ValueError("total_in_layer must be >= 1")
    if index < 0 or index >= total_in_layer:
        raise ValueError(f"index {index} out of range for layer of {total_in_layer}")
    if layer < 0:
        raise ValueError("layer must be >= 0")

    total_height = (total_in_layer - 1) * config.vertical_spacing
    offset = 0.0
    if total_height <= config.band_height:
        offset = (config.band_height - total_height) / 2

    return Position(
        x=config.start_x + layer * config.horizontal_spacing,
        y=config.start_y + offset + index * config.vertical_spacing,
    )
