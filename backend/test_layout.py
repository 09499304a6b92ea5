import pytest

from diagram_engine.compiler.layout import (
    columns_per_row,
    compute_layered_position,
    compute_position,
)
from diagram_engine.config import LayeredLayoutConfig, LayoutConfig


@pytest.mark.parametrize("total", [1, 2, 3, 4, 5, 9, 10, 17, 40])
def test_positions_are_pairwise_distinct(total):
    config = LayoutConfig()
    positions = {(p.x, p.y) for p in (compute_position(i, total, config) for i in range(total))}
    assert len(positions) == total


def test_single_node_is_centered_in_grid():
    config = LayoutConfig()
    position = compute_position(0, 1, config)
    # grid is 4 columns of 450 wide starting at 50
    assert position.x == 50 + (3 * 450) / 2
    assert position.y == 50


def test_rows_hold_at_most_max_per_row():
    config = LayoutConfig(max_per_row=4)
    assert columns_per_row(4, config) == 2
    assert columns_per_row(10, config) == 4
    assert columns_per_row(100, config) == 4

    ys = [compute_position(i, 10, config).y for i in range(10)]
    assert ys.count(50) == 4


def test_layout_is_deterministic_and_configurable():
    wide = LayoutConfig(horizontal_spacing=1000, max_per_row=2)
    first = [compute_position(i, 5, wide) for i in range(5)]
    second = [compute_position(i, 5, wide) for i in range(5)]
    assert first == second
    assert first[1].x - first[0].x == 1000


def test_out_of_range_index_rejected():
    with pytest.raises(ValueError):
        compute_position(3, 3, LayoutConfig())
    with pytest.raises(ValueError):
        compute_position(0, 0, LayoutConfig())


def test_layered_position_columns_follow_layer():
    config = LayeredLayoutConfig(horizontal_spacing=500, vertical_spacing=200, band_height=800)
    a = compute_layered_position(0, 0, 3, config)
    b = compute_layered_position(1, 0, 3, config)
    assert b.x - a.x == 500
    # three nodes span 400, centered in an 800 band
    assert a.y == config.start_y + 200


def test_layered_position_tall_layer_starts_at_top():
    config = LayeredLayoutConfig(vertical_spacing=200, band_height=0)
    assert compute_layered_position(2, 0, 6, config).y == config.start_y
