"""Hovmoeller Bounded Context - Value Objects.

A Hovmoeller domain is the cross product of sample points along a path and
the cells of a time axis: one HovmoellerCell per (time index, point index),
stored in a dense Array2D indexed [time][point].

Points on the path are produced upstream (by sampling a line string) and
must already share one CRS.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from edal.errors import ConstructionError, MismatchedReferenceSystemError
from edal.geometry.value_objects import Extent, HorizontalPosition, LineString
from edal.grid.arrays import Array2D
from edal.grid.axes import TimeAxis


class HovmoellerCell(BaseModel):
    """One path point paired with one time-cell extent (Value Object)."""

    horizontal_position: HorizontalPosition
    time_extent: Extent

    model_config = ConfigDict(frozen=True)


class HovmoellerPosition(BaseModel):
    """A position in Hovmoeller space: a point and a time span (Value Object)."""

    horizontal_position: HorizontalPosition
    time_extent: Extent

    model_config = ConfigDict(frozen=True)


class HovmoellerDomain(BaseModel):
    """Dense (time x point) domain of HovmoellerCells (Value Object).

    Zero points or no time axis gives an empty domain: no cells, and every
    membership query returns False. A time axis without points still keeps
    its time dimension, so the shape is (number_of_times, 0).

    Invariants:
        HD-1: all points share one CRS
        HD-2: domain_objects.shape == (number_of_times, number_of_points)
        HD-3: cell [t][p] pairs point p with time_axis.coordinate_bounds(t)
    """

    points_on_line_string: tuple[HorizontalPosition, ...] = ()
    time_axis: TimeAxis | None = None
    domain_objects: Array2D | None = Field(default=None, repr=False)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def require_points(cls, data: Any) -> Any:
        if isinstance(data, dict) and "points_on_line_string" in data:
            if data["points_on_line_string"] is None:
                raise ConstructionError("Points on line string cannot be None")
        return data

    @model_validator(mode="after")
    def build_cells(self) -> "HovmoellerDomain":
        points = self.points_on_line_string
        if points:
            crs = points[0].crs
            for point in points[1:]:
                if point.crs != crs:
                    raise MismatchedReferenceSystemError(point.crs, crs)

        if not points or self.time_axis is None:
            cells = np.empty((self.number_of_times, len(points)), dtype=object)
        else:
            time_extents = [
                self.time_axis.coordinate_bounds(t) for t in range(self.time_axis.size())
            ]
            cells = np.empty((len(time_extents), len(points)), dtype=object)
            for t, extent in enumerate(time_extents):
                for p, point in enumerate(points):
                    cells[t, p] = HovmoellerCell(
                        horizontal_position=point, time_extent=extent
                    )

        # Derived field: always rebuilt from the inputs
        object.__setattr__(self, "domain_objects", Array2D(data=cells))
        return self

    @classmethod
    def empty(cls) -> "HovmoellerDomain":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.domain_objects.is_empty()

    @property
    def number_of_points(self) -> int:
        return len(self.points_on_line_string)

    @property
    def number_of_times(self) -> int:
        return 0 if self.time_axis is None else self.time_axis.size()

    @property
    def crs(self) -> str | None:
        if not self.points_on_line_string:
            return None
        return self.points_on_line_string[0].crs

    def get_cell(self, time_index: int, point_index: int) -> HovmoellerCell:
        """Raises IndexOutOfRangeError outside the domain."""
        return self.domain_objects.get(time_index, point_index)

    def __iter__(self) -> Iterator[HovmoellerCell]:  # type: ignore[override]
        return iter(self.domain_objects)

    def contains(self, position: HorizontalPosition, time: datetime) -> bool:
        """Linear scan over all cells; not an indexed lookup.

        True iff some cell's point equals position (by value, CRS included)
        and that cell's time extent contains time.
        """
        for cell in self.domain_objects:
            if cell.horizontal_position == position and cell.time_extent.contains(time):
                return True
        return False

    def contains_position(self, position: HovmoellerPosition) -> bool:
        """True iff position's point is on the path and its time span fits one cell."""
        for cell in self.domain_objects:
            if cell.horizontal_position == position.horizontal_position and (
                cell.time_extent.contains_extent(position.time_extent)
            ):
                return True
        return False

    def line_string(self) -> LineString | None:
        """The sampled path, or None with fewer than 2 points."""
        if len(self.points_on_line_string) < 2:
            return None
        return LineString(control_points=self.points_on_line_string)


class HovmoellerFeature(BaseModel):
    """Named data values over a Hovmoeller domain, one Array2D per parameter.

    Invariants:
        HF-1: every value array has shape (number_of_times, number_of_points)
    """

    id: str
    name: str
    description: str = ""
    domain: HovmoellerDomain
    values: dict[str, Array2D]

    model_config = ConfigDict(frozen=True)

    def __hash__(self) -> int:
        # dict fields defeat the generated frozen hash
        return hash(
            (
                self.id,
                self.name,
                self.description,
                self.domain,
                tuple(sorted(self.values.items(), key=lambda item: item[0])),
            )
        )

    @model_validator(mode="after")
    def validate_shapes(self) -> "HovmoellerFeature":
        expected = (self.domain.number_of_times, self.domain.number_of_points)
        for param_id, array in self.values.items():
            if array.shape != expected:
                raise ConstructionError(
                    f"Values for '{param_id}' have shape {array.shape}, "
                    f"domain needs {expected}"
                )
        return self

    @property
    def parameter_ids(self) -> tuple[str, ...]:
        return tuple(self.values)

    def get_values(self, param_id: str) -> Array2D:
        """Raises KeyError for an unknown parameter."""
        try:
            return self.values[param_id]
        except KeyError:
            raise KeyError(
                f"Feature '{self.id}' has no parameter '{param_id}'"
            ) from None
