"""Geometry Bounded Context - Value Objects.

Immutable data structures for positions, intervals and planar shapes.
All validation occurs at construction time via Pydantic; equality and
hashing are structural (frozen models compare by value).
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, model_validator

from edal.errors import (
    ConstructionError,
    IndexOutOfRangeError,
    InvalidPolygonError,
    MismatchedReferenceSystemError,
)

if TYPE_CHECKING:
    from edal.geometry.ports import CoordinateTransformer

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_CRS = "EPSG:4326"  # WGS84 lon/lat, x = longitude


# ---------------------------------------------------------------------------
# Extent
# ---------------------------------------------------------------------------
class Extent(BaseModel):
    """Closed interval [low, high] over any ordered type (Value Object).

    Used for coordinate ranges (floats) and time spans (datetimes).

    Invariants:
        EX-1: low <= high
        EX-2: low and high are either both set or both None (empty extent)
    """

    low: Any = None
    high: Any = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_order(self) -> "Extent":
        if (self.low is None) != (self.high is None):
            raise ConstructionError(
                f"Extent bounds must both be set or both be None: "
                f"low={self.low!r}, high={self.high!r}"
            )
        if self.low is None:
            return self
        try:
            reversed_bounds = self.high < self.low
        except TypeError as e:
            raise ConstructionError(
                f"Extent bounds are not comparable: {self.low!r}, {self.high!r}"
            ) from e
        if reversed_bounds:
            raise ConstructionError(
                f"Extent low must not exceed high: low={self.low!r}, high={self.high!r}"
            )
        return self

    @classmethod
    def empty(cls) -> "Extent":
        """Return the canonical empty extent, which contains nothing."""
        return cls()

    @classmethod
    def spanning(cls, a: Any, b: Any) -> "Extent":
        """Build an extent from two bounds given in either order."""
        return cls(low=a, high=b) if a <= b else cls(low=b, high=a)

    @property
    def is_empty(self) -> bool:
        return self.low is None

    def contains(self, value: Any) -> bool:
        """Check if value lies within the closed interval."""
        if self.is_empty or value is None:
            return False
        return self.low <= value <= self.high

    def contains_extent(self, other: "Extent") -> bool:
        """Check if another (non-empty) extent lies entirely within this one."""
        if other.is_empty:
            return False
        return self.contains(other.low) and self.contains(other.high)

    @property
    def width(self) -> Any:
        """high - low (a timedelta for datetime extents)."""
        if self.is_empty:
            raise ConstructionError("Empty extent has no width")
        return self.high - self.low


# ---------------------------------------------------------------------------
# HorizontalPosition
# ---------------------------------------------------------------------------
class HorizontalPosition(BaseModel):
    """A 2D position in a named coordinate reference system (Value Object).

    The CRS is an opaque token (e.g. "EPSG:4326"); converting between CRSs
    is delegated to a CoordinateTransformer. Equality includes the CRS.
    """

    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    crs: str = DEFAULT_CRS

    model_config = ConfigDict(frozen=True)

    def in_crs(
        self, target_crs: str, transformer: "CoordinateTransformer | None" = None
    ) -> "HorizontalPosition":
        """Return this position expressed in target_crs.

        Raises:
            MismatchedReferenceSystemError: CRSs differ and no transformer given
        """
        if self.crs == target_crs:
            return self
        if transformer is None:
            raise MismatchedReferenceSystemError.for_position(self, target_crs)
        return transformer.transform_position(self, target_crs)


# ---------------------------------------------------------------------------
# BoundingBox
# ---------------------------------------------------------------------------
class BoundingBox(BaseModel):
    """Axis-aligned rectangle in one CRS (Value Object).

    Containment is closed: positions on the edges are inside. Zero-width
    boxes are allowed (e.g. the extent of a single-value axis). This differs
    from Polygon, whose even-odd test puts boundary points outside.
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float
    crs: str = DEFAULT_CRS

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_bounds(self) -> "BoundingBox":
        if not (self.min_x <= self.max_x):
            raise ConstructionError(
                f"Invalid x ordering: min_x={self.min_x} > max_x={self.max_x}"
            )
        if not (self.min_y <= self.max_y):
            raise ConstructionError(
                f"Invalid y ordering: min_y={self.min_y} > max_y={self.max_y}"
            )
        return self

    @classmethod
    def from_extents(
        cls, x_extent: Extent, y_extent: Extent, crs: str = DEFAULT_CRS
    ) -> "BoundingBox":
        return cls(
            min_x=x_extent.low,
            min_y=y_extent.low,
            max_x=x_extent.high,
            max_y=y_extent.high,
            crs=crs,
        )

    @property
    def x_extent(self) -> Extent:
        return Extent(low=self.min_x, high=self.max_x)

    @property
    def y_extent(self) -> Extent:
        return Extent(low=self.min_y, high=self.max_y)

    def contains(self, position: HorizontalPosition) -> bool:
        """Check if position is within bounds (inclusive).

        Raises:
            MismatchedReferenceSystemError: position is in another CRS
        """
        if position.crs != self.crs:
            raise MismatchedReferenceSystemError(position.crs, self.crs)
        return (
            self.min_x <= position.x <= self.max_x
            and self.min_y <= position.y <= self.max_y
        )

    def intersects(self, other: "BoundingBox") -> bool:
        """Check if two boxes overlap; touching edges count as overlap."""
        return not (
            other.max_x < self.min_x
            or self.max_x < other.min_x
            or other.max_y < self.min_y
            or self.max_y < other.min_y
        )

    def vertices(self) -> tuple[HorizontalPosition, ...]:
        """Corners in counter-clockwise order, starting at (min_x, min_y)."""
        return (
            HorizontalPosition(x=self.min_x, y=self.min_y, crs=self.crs),
            HorizontalPosition(x=self.max_x, y=self.min_y, crs=self.crs),
            HorizontalPosition(x=self.max_x, y=self.max_y, crs=self.crs),
            HorizontalPosition(x=self.min_x, y=self.max_y, crs=self.crs),
        )

    def to_polygon(self) -> "Polygon":
        return Polygon(vertices=self.vertices())


# ---------------------------------------------------------------------------
# Polygon
# ---------------------------------------------------------------------------
class Polygon(BaseModel):
    """Simple polygon given by ordered vertices, implicitly closed (Value Object).

    Vertices are the single stored representation; coordinate arrays are
    derived on demand.

    Invariants:
        PG-1: at least 3 vertices
        PG-2: all vertices share one CRS
    """

    vertices: tuple[HorizontalPosition, ...]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def require_vertices(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("vertices") is None:
            raise ConstructionError("Polygon vertices cannot be None")
        return data

    @model_validator(mode="after")
    def validate_polygon(self) -> "Polygon":
        if len(self.vertices) < 3:
            raise InvalidPolygonError(
                f"Polygon needs at least 3 vertices, got {len(self.vertices)}"
            )
        crs = self.vertices[0].crs
        for vertex in self.vertices[1:]:
            if vertex.crs != crs:
                raise MismatchedReferenceSystemError(vertex.crs, crs)
        return self

    @classmethod
    def from_points(
        cls,
        x_points: Sequence[float],
        y_points: Sequence[float],
        crs: str = DEFAULT_CRS,
    ) -> "Polygon":
        """Build a polygon from parallel x and y coordinate arrays.

        Raises:
            ConstructionError: arrays are None or differ in length
        """
        if x_points is None or y_points is None:
            raise ConstructionError("x_points and y_points cannot be None")
        if len(x_points) != len(y_points):
            raise ConstructionError(
                f"The lengths of x_points ({len(x_points)}) and y_points "
                f"({len(y_points)}) must be equal"
            )
        return cls(
            vertices=tuple(
                HorizontalPosition(x=x, y=y, crs=crs)
                for x, y in zip(x_points, y_points)
            )
        )

    @property
    def crs(self) -> str:
        return self.vertices[0].crs

    @property
    def x_points(self) -> NDArray[np.float64]:
        return np.array([v.x for v in self.vertices], dtype=np.float64)

    @property
    def y_points(self) -> NDArray[np.float64]:
        return np.array([v.y for v in self.vertices], dtype=np.float64)

    def bounding_box(self) -> BoundingBox:
        """Envelope of the vertices."""
        xs, ys = self.x_points, self.y_points
        return BoundingBox(
            min_x=float(xs.min()),
            min_y=float(ys.min()),
            max_x=float(xs.max()),
            max_y=float(ys.max()),
            crs=self.crs,
        )

    def contains_point(
        self,
        position: HorizontalPosition,
        transformer: "CoordinateTransformer | None" = None,
    ) -> bool:
        """Even-odd containment test; boundary points are outside.

        See edal.geometry.services.contains_point.
        """
        from edal.geometry.services import contains_point

        return contains_point(self, position, transformer)

    def contains(self, x: float, y: float) -> bool:
        """Containment test for raw coordinates already in the polygon's CRS."""
        from edal.geometry.services import point_in_polygon

        return point_in_polygon(self.x_points, self.y_points, x, y)


# ---------------------------------------------------------------------------
# LineString
# ---------------------------------------------------------------------------
class LineString(BaseModel):
    """Ordered path through control points in one CRS (Value Object).

    Distances are planar, measured in CRS units.
    """

    control_points: tuple[HorizontalPosition, ...]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_line(self) -> "LineString":
        if len(self.control_points) < 2:
            raise ConstructionError(
                f"LineString needs at least 2 control points, "
                f"got {len(self.control_points)}"
            )
        crs = self.control_points[0].crs
        for point in self.control_points[1:]:
            if point.crs != crs:
                raise MismatchedReferenceSystemError(point.crs, crs)
        return self

    @property
    def crs(self) -> str:
        return self.control_points[0].crs

    def control_point_distances(self) -> NDArray[np.float64]:
        """Cumulative distance of each control point from the first (first is 0)."""
        xs = np.array([p.x for p in self.control_points], dtype=np.float64)
        ys = np.array([p.y for p in self.control_points], dtype=np.float64)
        steps = np.hypot(np.diff(xs), np.diff(ys))
        return np.concatenate(([0.0], np.cumsum(steps)))

    @property
    def length(self) -> float:
        return float(self.control_point_distances()[-1])

    def fractional_control_point_distance(self, index: int) -> float:
        """Distance of control point `index` along the path, as a fraction of length."""
        distances = self.control_point_distances()
        if not 0 <= index < len(distances):
            raise IndexOutOfRangeError(index, len(distances), "line string")
        total = distances[-1]
        if math.isclose(total, 0.0):
            return 0.0
        return float(distances[index] / total)

    def to_wkt_points(self) -> str:
        """Control points as "x y,x y,..."."""
        return ",".join(f"{p.x} {p.y}" for p in self.control_points)
