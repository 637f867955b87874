"""Geometry Bounded Context - Domain Services.

Pure planar algorithms over Polygon and HorizontalPosition:
- point_in_polygon / contains_point: even-odd (ray casting) containment
- sutherland_hodgman: clip a subject polygon against a convex clip polygon

NO CRS math here - positions in a foreign CRS are converted through a
CoordinateTransformer port supplied by the caller.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

from edal.errors import (
    InvalidPolygonError,
    MismatchedReferenceSystemError,
    NumericalDegeneracyError,
)
from edal.geometry.ports import CoordinateTransformer
from edal.geometry.value_objects import HorizontalPosition, Polygon

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
# Relative tolerance on the line-intersection determinant, scaled by the
# magnitudes of both line equations.
DETERMINANT_TOLERANCE = 1e-12

# Relative tolerance for "point lies on an edge", scaled by squared edge length.
BOUNDARY_TOLERANCE = 1e-12


# ---------------------------------------------------------------------------
# Point in Polygon
# ---------------------------------------------------------------------------
def on_boundary(
    xs: NDArray[np.float64], ys: NDArray[np.float64], x: float, y: float
) -> bool:
    """Check if (x, y) lies on any edge (vertices included) of the closed ring."""
    xj, yj = np.roll(xs, 1), np.roll(ys, 1)
    ex, ey = xs - xj, ys - yj
    cross = ex * (y - yj) - ey * (x - xj)
    seg_len_sq = ex * ex + ey * ey
    collinear = np.abs(cross) <= BOUNDARY_TOLERANCE * np.maximum(seg_len_sq, 1.0)
    within = (
        (np.minimum(xs, xj) <= x)
        & (x <= np.maximum(xs, xj))
        & (np.minimum(ys, yj) <= y)
        & (y <= np.maximum(ys, yj))
    )
    return bool(np.any(collinear & within))


def point_in_polygon(
    xs: NDArray[np.float64], ys: NDArray[np.float64], x: float, y: float
) -> bool:
    """Even-odd rule containment for a closed ring of vertices.

    Casts a horizontal ray from (x, y) and toggles on each edge crossing.
    Points exactly on the boundary are classified as outside.

    Args:
        xs: Vertex x coordinates (ring is implicitly closed)
        ys: Vertex y coordinates
        x: Query x
        y: Query y

    Returns:
        True if the point is strictly inside the polygon
    """
    if on_boundary(xs, ys, x, y):
        return False

    # Edge (v[j], v[i]) with j = i - 1 (mod N)
    xj, yj = np.roll(xs, 1), np.roll(ys, 1)
    straddles = (ys > y) != (yj > y)
    # Horizontal edges never straddle, so their NaN/inf results are masked out
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = (xj - xs) * (y - ys) / (yj - ys) + xs
    crossings = straddles & (x < x_cross)
    return bool(np.count_nonzero(crossings) % 2 == 1)


def contains_point(
    polygon: Polygon,
    position: HorizontalPosition,
    transformer: CoordinateTransformer | None = None,
) -> bool:
    """Test if position is strictly inside polygon.

    If the position is in another CRS it is first transformed into the
    polygon's CRS via `transformer`.

    Raises:
        MismatchedReferenceSystemError: CRSs differ and no transformer given
    """
    local = position.in_crs(polygon.crs, transformer)
    return point_in_polygon(polygon.x_points, polygon.y_points, local.x, local.y)


# ---------------------------------------------------------------------------
# Orientation Helpers
# ---------------------------------------------------------------------------
def signed_area(polygon: Polygon) -> float:
    """Shoelace area; positive for counter-clockwise vertex order."""
    xs, ys = polygon.x_points, polygon.y_points
    return float(0.5 * np.sum(xs * np.roll(ys, -1) - np.roll(xs, -1) * ys))


def is_convex(polygon: Polygon) -> bool:
    """Check if every turn along the ring has the same sign (collinear allowed)."""
    xs, ys = polygon.x_points, polygon.y_points
    dx1 = np.roll(xs, -1) - xs
    dy1 = np.roll(ys, -1) - ys
    dx2 = np.roll(dx1, -1)
    dy2 = np.roll(dy1, -1)
    turns = dx1 * dy2 - dy1 * dx2
    return bool(np.all(turns >= 0) or np.all(turns <= 0))


def distinct_ring(
    vertices: tuple[HorizontalPosition, ...],
) -> list[HorizontalPosition]:
    """Vertices with consecutive repeats removed, closing vertex included.

    An explicitly closed ring [a, b, c, a] becomes [b, c, a].
    """
    return [v for i, v in enumerate(vertices) if v != vertices[i - 1]]


def is_inside(
    a: HorizontalPosition, b: HorizontalPosition, c: HorizontalPosition
) -> bool:
    """Check if c lies strictly left of the directed clip edge a -> b."""
    return (a.x - c.x) * (b.y - c.y) > (a.y - c.y) * (b.x - c.x)


def intersection(
    a: HorizontalPosition,
    b: HorizontalPosition,
    p: HorizontalPosition,
    q: HorizontalPosition,
) -> HorizontalPosition:
    """Intersection of the infinite lines a-b and p-q.

    Raises:
        NumericalDegeneracyError: the lines are parallel or coincident
    """
    a1 = b.y - a.y
    b1 = a.x - b.x
    c1 = a1 * a.x + b1 * a.y

    a2 = q.y - p.y
    b2 = p.x - q.x
    c2 = a2 * p.x + b2 * p.y

    det = a1 * b2 - a2 * b1
    scale = (abs(a1) + abs(b1)) * (abs(a2) + abs(b2))
    if scale == 0.0 or abs(det) <= DETERMINANT_TOLERANCE * scale:
        raise NumericalDegeneracyError(
            f"Parallel or degenerate edges: ({a.x}, {a.y})->({b.x}, {b.y}) "
            f"and ({p.x}, {p.y})->({q.x}, {q.y})"
        )

    x = (b2 * c1 - b1 * c2) / det
    y = (a1 * c2 - a2 * c1) / det
    return HorizontalPosition(x=x, y=y, crs=a.crs)


# ---------------------------------------------------------------------------
# Sutherland-Hodgman
# ---------------------------------------------------------------------------
def sutherland_hodgman(subject: Polygon, clip_polygon: Polygon) -> Polygon | None:
    """Intersect subject with a convex clip polygon, one clip edge at a time.

    The clip polygon may be wound either way; it is walked counter-clockwise.
    A non-convex clip polygon gives an unspecified result and is logged.

    Args:
        subject: Polygon to be clipped
        clip_polygon: Convex clipping polygon, same CRS as subject

    Returns:
        The intersection polygon in the subject's CRS, or None when the
        polygons do not intersect (or only touch, leaving < 3 vertices).

    Raises:
        MismatchedReferenceSystemError: polygons are in different CRSs
        InvalidPolygonError: clip polygon has fewer than 3 distinct vertices
        NumericalDegeneracyError: an edge intersection is numerically degenerate
    """
    if subject.crs != clip_polygon.crs:
        raise MismatchedReferenceSystemError(clip_polygon.crs, subject.crs)

    # Zero-length clip edges have no inside half-plane
    clipper = distinct_ring(clip_polygon.vertices)
    if len(clipper) < 3:
        raise InvalidPolygonError(
            f"Clip polygon has {len(clipper)} distinct vertices, needs at least 3"
        )
    ring = Polygon(vertices=tuple(clipper))

    if not is_convex(ring):
        logger.warning(
            "Clip polygon with %d vertices is not convex; result is unspecified",
            len(clipper),
        )

    if signed_area(ring) < 0:
        clipper.reverse()

    result = list(subject.vertices)
    clipper_length = len(clipper)
    for i in range(clipper_length):
        clip_end = clipper[i - 1]
        clip_head = clipper[i]
        current = result
        result = []
        for j in range(len(current)):
            subject_end = current[j - 1]
            subject_head = current[j]
            if is_inside(clip_end, clip_head, subject_head):
                if not is_inside(clip_end, clip_head, subject_end):
                    result.append(
                        intersection(clip_end, clip_head, subject_end, subject_head)
                    )
                result.append(subject_head)
            elif is_inside(clip_end, clip_head, subject_end):
                result.append(
                    intersection(clip_end, clip_head, subject_end, subject_head)
                )
        if not result:
            break

    if len(result) < 3:
        logger.debug("Sutherland-Hodgman: no intersection (%d vertices)", len(result))
        return None
    return Polygon(vertices=tuple(result))
