"""Tests for horizontal grids and grid clipping.

Reference grid (conftest): 60x60 cells of 0.5 degrees over lon [100, 130],
lat [20, 50]; cell centres at 100.25 ... 129.75 and 20.25 ... 49.75.
"""

from __future__ import annotations

import logging

import pytest

from edal.errors import (
    ConstructionError,
    IndexOutOfRangeError,
    MismatchedReferenceSystemError,
)
from edal.geometry.value_objects import BoundingBox, HorizontalPosition, Polygon
from edal.grid.services import clamped_index, clip, index_window
from edal.grid.value_objects import HorizontalGrid, RegularGrid


def _bbox(min_x, min_y, max_x, max_y, crs="EPSG:4326") -> BoundingBox:
    return BoundingBox(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y, crs=crs)


# ===========================================================================
# Grid value objects
# ===========================================================================
def test_grid_cell_centre_and_footprint(reference_grid):
    cell = reference_grid.get_cell(10, 5)
    assert cell.grid_coordinates == (10, 5)
    assert cell.i == 10
    assert cell.j == 5
    assert cell.centre.x == pytest.approx(105.25)
    assert cell.centre.y == pytest.approx(22.75)
    assert cell.footprint.min_x == pytest.approx(105.0)
    assert cell.footprint.max_y == pytest.approx(23.0)


def test_grid_cell_out_of_range(reference_grid):
    with pytest.raises(IndexOutOfRangeError):
        reference_grid.get_cell(60, 0)


def test_grid_bounding_box(reference_grid):
    bbox = reference_grid.bounding_box()
    assert bbox.min_x == pytest.approx(100.0)
    assert bbox.max_x == pytest.approx(130.0)
    assert bbox.min_y == pytest.approx(20.0)
    assert bbox.max_y == pytest.approx(50.0)


def test_grid_requires_axes():
    with pytest.raises(ConstructionError):
        HorizontalGrid(x_axis=None, y_axis=None)


def test_domain_objects_indexed_y_then_x():
    grid = HorizontalGrid.from_values([0.0, 10.0, 20.0], [0.0, 5.0])
    cells = grid.domain_objects()
    assert cells.shape == (2, 3)
    assert cells.get(1, 2).grid_coordinates == (2, 1)
    assert [c.grid_coordinates for c in grid.iter_cells()][:4] == [
        (0, 0),
        (1, 0),
        (2, 0),
        (0, 1),
    ]


def test_find_cell(reference_grid):
    cell = reference_grid.find_cell(HorizontalPosition(x=105.3, y=22.9))
    assert cell.grid_coordinates == (10, 5)
    assert reference_grid.find_cell(HorizontalPosition(x=99.0, y=22.9)) is None
    assert (
        reference_grid.find_cell(HorizontalPosition(x=105.3, y=22.9, crs="EPSG:3857"))
        is None
    )


def test_regular_grid_transform(reference_grid):
    col, row = reference_grid.fractional_index(105.3, 22.9)
    assert col == pytest.approx(10.6)
    assert row == pytest.approx(5.8)
    x, y = reference_grid.transform * (0, 0)
    assert (x, y) == pytest.approx((100.0, 20.0))


# ===========================================================================
# Axis windows
# ===========================================================================
def test_clamped_index_and_window(reference_grid):
    axis = reference_grid.x_axis
    assert clamped_index(axis, 50.0) == 0
    assert clamped_index(axis, 500.0) == 59
    assert index_window(axis, 125.0, 140.0) == range(49, 60)


# ===========================================================================
# clip: no overlap -> None
# ===========================================================================
@pytest.mark.parametrize(
    "bbox",
    [
        (65.0, 22.3, 90.0, 24.8),
        (65.0, 10.3, 90.0, 18.8),
        (11.0, 10.3, 150.0, 18.8),
        (135.0, 22.0, 140.0, 25.0),
        (105.0, 55.0, 110.0, 60.0),
    ],
)
def test_clip_without_overlap_is_none(reference_grid, bbox):
    assert clip(reference_grid, _bbox(*bbox)) is None


# ===========================================================================
# clip: overlap
# ===========================================================================
def test_clip_interior_box(reference_grid):
    bbox = _bbox(105.0, 22.3, 110.0, 24.8)
    cells = clip(reference_grid, bbox)

    assert cells.size() == 50
    assert all(bbox.contains(cell.centre) for cell in cells)
    # x index outer, y index inner
    assert cells.get(0).grid_coordinates == (10, 5)
    assert cells.get(1).grid_coordinates == (10, 6)
    assert cells.get(5).grid_coordinates == (11, 5)


@pytest.mark.parametrize(
    "bbox, expected_count",
    [
        ((90.0, 22.3, 112.0, 24.8), 24 * 5),
        ((105.0, 12.3, 110.0, 24.8), 10 * 10),
        ((90.0, 12.3, 135.0, 55.0), 60 * 60),
        ((125.0, 12.3, 135.0, 24.8), 10 * 10),
        ((95.0, 45.2, 105.0, 60.3), 10 * 10),
        ((128.0, 45.2, 140.0, 60.3), 4 * 10),
        ((90.0, 25.0, 110.0, 27.0), 20 * 4),
    ],
)
def test_clip_partial_overlap_clamps_to_grid(reference_grid, bbox, expected_count):
    region = _bbox(*bbox)
    cells = clip(reference_grid, region)

    assert cells.size() == expected_count
    assert all(region.contains(cell.centre) for cell in cells)


def test_clip_touching_edge_is_empty_not_none(reference_grid):
    cells = clip(reference_grid, _bbox(130.0, 20.0, 135.0, 50.0))
    assert cells is not None
    assert cells.is_empty()


def test_clip_with_polygon(reference_grid):
    region = Polygon.from_points([105.0, 110.0, 110.0, 105.0], [22.3, 22.3, 24.8, 24.8])
    cells = clip(reference_grid, region)
    assert cells.size() == 50


def test_clip_with_triangle(reference_grid):
    region = Polygon.from_points([100.0, 110.0, 100.0], [20.0, 20.0, 30.0])
    cells = clip(reference_grid, region)
    assert cells.size() > 0
    assert all(region.contains_point(cell.centre) for cell in cells)
    assert all(cell.centre.x + cell.centre.y < 130.0 for cell in cells)


def test_clip_descending_axis():
    grid = HorizontalGrid.from_values([0.0, 10.0, 20.0], [50.0, 40.0, 30.0, 20.0, 10.0])
    cells = clip(grid, _bbox(-5.0, 25.0, 25.0, 45.0))

    assert [c.grid_coordinates for c in cells] == [
        (0, 1),
        (0, 2),
        (1, 1),
        (1, 2),
        (2, 1),
        (2, 2),
    ]


def test_clip_mismatched_crs_raises(reference_grid):
    with pytest.raises(MismatchedReferenceSystemError):
        clip(reference_grid, _bbox(105.0, 22.3, 110.0, 24.8, crs="EPSG:3857"))


def test_clip_logs_cell_count(reference_grid, caplog):
    with caplog.at_level(logging.DEBUG, logger="edal.grid.services"):
        clip(reference_grid, _bbox(105.0, 22.3, 110.0, 24.8))
    assert "50 cells" in caplog.text


# ===========================================================================
# Longitude grids
# ===========================================================================
@pytest.fixture
def global_grid() -> RegularGrid:
    return RegularGrid.from_bounding_box(
        _bbox(0.0, -10.0, 360.0, 10.0), 36, 2, x_is_longitude=True
    )


def test_index_window_past_east_edge_clamps_on_longitude(global_grid):
    assert index_window(global_grid.x_axis, 340.0, 370.0) == range(33, 36)


def test_clip_past_east_edge_keeps_eastern_cells(global_grid):
    cells = clip(global_grid, _bbox(340.0, -5.0, 370.0, 5.0))

    assert cells is not None
    assert cells.size() == 4
    assert sorted({c.centre.x for c in cells}) == [345.0, 355.0]


def test_clip_past_west_edge_keeps_western_cells(global_grid):
    cells = clip(global_grid, _bbox(-20.0, -5.0, 15.0, 5.0))

    assert cells is not None
    assert sorted({c.centre.x for c in cells}) == [5.0, 15.0]
