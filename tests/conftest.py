"""Shared fixtures for all EDAL tests.

Fixtures build small domain objects directly (no I/O). The reference grid
matches the one used throughout the clipping tests: 60x60 cells of 0.5
degrees over lon [100, 130], lat [20, 50].
"""

from __future__ import annotations

from datetime import datetime

import pytest

from edal.geometry.value_objects import BoundingBox, HorizontalPosition, Polygon
from edal.grid.axes import TimeAxis
from edal.grid.value_objects import RegularGrid


@pytest.fixture
def reference_grid() -> RegularGrid:
    """60x60 regular grid, cell centres at 100.25 ... 129.75 / 20.25 ... 49.75."""
    return RegularGrid.from_bounding_box(
        BoundingBox(min_x=100.0, min_y=20.0, max_x=130.0, max_y=50.0), 60, 60
    )


@pytest.fixture
def unit_square() -> Polygon:
    """Counter-clockwise square [0, 10] x [0, 10]."""
    return Polygon.from_points([0.0, 10.0, 10.0, 0.0], [0.0, 0.0, 10.0, 10.0])


@pytest.fixture
def daily_time_axis() -> TimeAxis:
    """Three consecutive days at midnight."""
    return TimeAxis(
        name="time",
        values=(datetime(2020, 1, 1), datetime(2020, 1, 2), datetime(2020, 1, 3)),
    )


@pytest.fixture
def path_points() -> tuple[HorizontalPosition, ...]:
    """Three evenly spaced points along the x axis."""
    return (
        HorizontalPosition(x=0.0, y=0.0),
        HorizontalPosition(x=1.0, y=0.0),
        HorizontalPosition(x=2.0, y=0.0),
    )
