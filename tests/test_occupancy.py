import numpy as np
import pytest

from amr_nav.mapping.occupancy import SpatialMemory, bresenham
from amr_nav.types import Cell


def test_bresenham_includes_both_ends() -> None:
    cells = list(bresenham(0, 0, 3, 1))
    assert cells[0] == (0, 0)
    assert cells[-1] == (3, 1)
    assert len(cells) == 4


def test_grid_size_rounds_up() -> None:
    memory = SpatialMemory(9, 7, cell_size=2)
    assert memory.shape == (4, 5)
    assert memory.unexplored_ratio() == 1.0


def test_far_hit_only_frees_the_path() -> None:
    memory = SpatialMemory(10, 10, cell_size=1, max_range=5.0)
    memory.integrate([(7.5, 0.5)], (0.5, 0.5))
    counts = memory.counts()
    assert counts["free"] == 7
    assert counts["occupied"] == 0
    assert memory.cell(0, 7) == Cell.UNKNOWN
    assert not memory.is_fully_explored()


def test_near_hit_marks_end_cell_occupied() -> None:
    memory = SpatialMemory(20, 20, max_range=10.0)
    memory.integrate([(9.5, 0.5)], (0.5, 0.5))
    assert memory.cell(0, 9) == Cell.OCCUPIED
    assert memory.cell_at(4.2, 0.9) == Cell.FREE


def test_hit_at_range_limit_is_not_a_wall() -> None:
    memory = SpatialMemory(20, 20, max_range=10.0)
    # 9.9 >= 0.98 * 10
    memory.integrate([(10.4, 0.5)], (0.5, 0.5))
    assert memory.cell(0, 10) == Cell.UNKNOWN
    assert memory.cell(0, 9) == Cell.FREE


def test_exploration_threshold() -> None:
    memory = SpatialMemory(10, 10, max_range=100.0)
    for row in range(9):
        y = row + 0.5
        memory.integrate([(9.5, y)], (0.5, y))
    assert memory.unexplored_ratio() == pytest.approx(0.10)
    memory.integrate([(2.5, 9.5)], (0.5, 9.5))
    assert memory.counts()["unknown"] == 7
    assert memory.is_fully_explored()
    assert memory.is_fully_explored()


def test_occupied_cells_are_never_freed() -> None:
    memory = SpatialMemory(10, 10, max_range=100.0)
    memory.integrate([(5.5, 0.5)], (0.5, 0.5))
    assert memory.cell(0, 5) == Cell.OCCUPIED
    before = memory.render() == Cell.OCCUPIED
    # Ray passes straight through the marked cell
    memory.integrate([(9.5, 0.5)], (0.5, 0.5))
    memory.integrate([(0.5, 0.5)], (9.5, 0.5))
    after = memory.render() == Cell.OCCUPIED
    assert memory.cell(0, 5) == Cell.OCCUPIED
    assert np.all(after[before])


def test_empty_integrate_is_identity() -> None:
    memory = SpatialMemory(10, 10)
    memory.integrate([(3.5, 3.5)], (0.5, 0.5))
    snapshot = memory.render()
    memory.integrate([], (5.5, 5.5))
    assert np.array_equal(snapshot, memory.render())


def test_out_of_grid_points_are_skipped() -> None:
    memory = SpatialMemory(10, 10)
    memory.integrate([(15.0, 0.5), (-3.0, 2.0)], (0.5, 0.5))
    assert memory.counts()["unknown"] == 100
    assert memory.cell_at(-1.0, 4.0) == Cell.UNKNOWN
    with pytest.raises(IndexError):
        memory.cell(10, 0)


def test_smooth_fills_gap_without_erasing() -> None:
    memory = SpatialMemory(10, 10, max_range=100.0)
    memory.integrate([(3.5, 5.5)], (0.5, 5.5))
    memory.integrate([(5.5, 5.5)], (0.5, 5.5))
    assert memory.cell(5, 4) == Cell.FREE
    before = memory.render() == Cell.OCCUPIED
    memory.smooth(1)
    after = memory.render() == Cell.OCCUPIED
    assert memory.cell(5, 4) == Cell.OCCUPIED
    assert np.all(after[before])
    # Free cells away from the wall are untouched
    assert memory.cell(5, 1) == Cell.FREE


def test_render_snapshot_is_read_only() -> None:
    memory = SpatialMemory(10, 10)
    snapshot = memory.render()
    assert not snapshot.flags.writeable
    image = memory.to_image()
    assert image.dtype == np.uint8
    assert np.all(image == 127)


def test_smooth_closes_gap_on_grid_edge() -> None:
    memory = SpatialMemory(10, 10, max_range=100.0)
    memory.integrate([(3.5, 0.5)], (0.5, 0.5))
    memory.integrate([(5.5, 0.5)], (0.5, 0.5))
    assert memory.cell(0, 4) == Cell.FREE
    memory.smooth(1)
    assert memory.cell(0, 4) == Cell.OCCUPIED
    assert memory.counts()["occupied"] == 3
    assert memory.cell(0, 1) == Cell.FREE
