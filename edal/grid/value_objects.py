"""Grid Bounded Context - Value Objects.

Horizontal grids built from two referenceable axes, and the cells they
produce on demand. A grid never materialises its cells unless asked to.

Index convention: i is the x-axis index, j the y-axis index. Arrays of
cells are indexed [j][i] (row = y).
"""

from __future__ import annotations

from collections.abc import Iterator

from affine import Affine
from pydantic import BaseModel, ConfigDict, model_validator

from edal.errors import ConstructionError
from edal.geometry.value_objects import (
    DEFAULT_CRS,
    BoundingBox,
    HorizontalPosition,
)
from edal.grid.arrays import Array2D
from edal.grid.axes import NumericAxis, ReferenceableAxis, RegularAxis


class GridCell2D(BaseModel):
    """One cell of a horizontal grid (Value Object)."""

    grid_coordinates: tuple[int, int]  # (i, j)
    centre: HorizontalPosition
    footprint: BoundingBox

    model_config = ConfigDict(frozen=True)

    @property
    def i(self) -> int:
        return self.grid_coordinates[0]

    @property
    def j(self) -> int:
        return self.grid_coordinates[1]


class HorizontalGrid(BaseModel):
    """Rectilinear grid: an x axis, a y axis and a CRS token (Value Object).

    Axes may be irregular; see RegularGrid for evenly spaced axes.
    """

    x_axis: ReferenceableAxis
    y_axis: ReferenceableAxis
    crs: str = DEFAULT_CRS

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def require_axes(cls, data: object) -> object:
        if isinstance(data, dict):
            for key in ("x_axis", "y_axis"):
                if data.get(key) is None:
                    raise ConstructionError(f"Grid {key} cannot be None")
        return data

    @property
    def x_size(self) -> int:
        return self.x_axis.size()

    @property
    def y_size(self) -> int:
        return self.y_axis.size()

    def size(self) -> int:
        return self.x_size * self.y_size

    def bounding_box(self) -> BoundingBox:
        """Combined footprint of all cells."""
        return BoundingBox.from_extents(
            self.x_axis.coordinate_extent, self.y_axis.coordinate_extent, self.crs
        )

    def get_cell(self, i: int, j: int) -> GridCell2D:
        """Build the cell at x index i, y index j.

        Raises:
            IndexOutOfRangeError: i or j outside the axes
        """
        x = self.x_axis.get_coordinate_value(i)
        y = self.y_axis.get_coordinate_value(j)
        x_bounds = self.x_axis.coordinate_bounds(i)
        y_bounds = self.y_axis.coordinate_bounds(j)
        return GridCell2D(
            grid_coordinates=(i, j),
            centre=HorizontalPosition(x=x, y=y, crs=self.crs),
            footprint=BoundingBox.from_extents(x_bounds, y_bounds, self.crs),
        )

    def iter_cells(self) -> Iterator[GridCell2D]:
        """Cells in row-major order (j outer, i inner), built lazily."""
        for j in range(self.y_size):
            for i in range(self.x_size):
                yield self.get_cell(i, j)

    def domain_objects(self) -> Array2D:
        """Materialise every cell into an Array2D indexed [j][i]."""
        return Array2D.of(
            [self.get_cell(i, j) for i in range(self.x_size)]
            for j in range(self.y_size)
        )

    def find_cell(self, position: HorizontalPosition) -> GridCell2D | None:
        """Cell whose footprint contains position, or None (same CRS only)."""
        if position.crs != self.crs:
            return None
        i = self.x_axis.find_index_of(position.x)
        j = self.y_axis.find_index_of(position.y)
        if i is None or j is None:
            return None
        return self.get_cell(i, j)

    @classmethod
    def from_values(
        cls,
        x_values: list[float],
        y_values: list[float],
        crs: str = DEFAULT_CRS,
        x_is_longitude: bool = False,
    ) -> "HorizontalGrid":
        return cls(
            x_axis=NumericAxis(name="x", values=x_values, is_longitude=x_is_longitude),
            y_axis=NumericAxis(name="y", values=y_values),
            crs=crs,
        )


class RegularGrid(HorizontalGrid):
    """Grid with evenly spaced axes; index lookup is arithmetic (Value Object).

    The grid's geotransform maps (column, row) cell-corner coordinates to
    CRS coordinates, with row 0 at y index 0.
    """

    x_axis: RegularAxis
    y_axis: RegularAxis

    @classmethod
    def from_bounding_box(
        cls,
        bbox: BoundingBox,
        x_size: int,
        y_size: int,
        x_is_longitude: bool = False,
    ) -> "RegularGrid":
        """x_size by y_size cells exactly tiling bbox, ascending on both axes."""
        return cls(
            x_axis=RegularAxis.from_extent(
                "x", bbox.min_x, bbox.max_x, x_size, is_longitude=x_is_longitude
            ),
            y_axis=RegularAxis.from_extent("y", bbox.min_y, bbox.max_y, y_size),
            crs=bbox.crs,
        )

    @property
    def transform(self) -> Affine:
        x0 = self.x_axis.first - self.x_axis.spacing / 2.0
        y0 = self.y_axis.first - self.y_axis.spacing / 2.0
        return Affine(self.x_axis.spacing, 0.0, x0, 0.0, self.y_axis.spacing, y0)

    def fractional_index(self, x: float, y: float) -> tuple[float, float]:
        """Inverse geotransform: CRS coordinates to fractional (column, row)."""
        col, row = ~self.transform * (x, y)
        return col, row
