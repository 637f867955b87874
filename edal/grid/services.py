"""Grid Bounded Context - Domain Services.

Grid clipping: select the cells of a horizontal grid whose centre lies in a
region. This is a centre-in-region approximation, not an exact cell/polygon
intersection; it is cheap and adequate for near-regular grids used for
visualisation.
"""

from __future__ import annotations

import logging

from edal.errors import MismatchedReferenceSystemError
from edal.geometry.value_objects import BoundingBox, Polygon
from edal.grid.arrays import Array1D
from edal.grid.axes import ReferenceableAxis
from edal.grid.value_objects import GridCell2D, HorizontalGrid

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helper: Axis Window
# ---------------------------------------------------------------------------
def clamped_index(axis: ReferenceableAxis, value: float) -> int:
    """Index of the cell containing value; misses clamp to the nearest axis end.

    Clamping is policy, not an error: a clip region may extend past the grid.
    Longitude axes are not wrapped here, so an edge past the eastern end of
    the grid clamps to the last cell instead of folding back to the first.
    """
    return axis.clamped_index_of(value)


def index_window(axis: ReferenceableAxis, low: float, high: float) -> range:
    """Inclusive range of axis indices overlapping [low, high]."""
    a = clamped_index(axis, low)
    b = clamped_index(axis, high)
    if a > b:
        a, b = b, a
    return range(a, b + 1)


# ---------------------------------------------------------------------------
# Main Service: clip
# ---------------------------------------------------------------------------
def clip(
    grid: HorizontalGrid,
    region: BoundingBox | Polygon,
) -> Array1D | None:
    """Clip a grid to a region, keeping cells whose centre is inside it.

    Args:
        grid: Grid to clip (regular grids look up indices arithmetically)
        region: Axis-aligned box (closed containment) or general polygon
            (even-odd containment, boundary excluded); same CRS as the grid

    Returns:
        None if the region's envelope does not overlap the grid at all;
        otherwise an Array1D of GridCell2D, ordered x index outer, y index
        inner. An overlapping region that captures no centre gives an empty
        Array1D.

    Raises:
        MismatchedReferenceSystemError: region and grid CRSs differ
    """
    if region.crs != grid.crs:
        raise MismatchedReferenceSystemError(region.crs, grid.crs)

    envelope = region if isinstance(region, BoundingBox) else region.bounding_box()
    grid_box = grid.bounding_box()

    if not grid_box.intersects(envelope):
        logger.debug(
            "Clip region [%s, %s]-[%s, %s] does not overlap grid",
            envelope.min_x,
            envelope.min_y,
            envelope.max_x,
            envelope.max_y,
        )
        return None

    x_window = index_window(grid.x_axis, envelope.min_x, envelope.max_x)
    y_window = index_window(grid.y_axis, envelope.min_y, envelope.max_y)

    selected: list[GridCell2D] = []
    for i in x_window:
        for j in y_window:
            cell = grid.get_cell(i, j)
            if isinstance(region, BoundingBox):
                inside = region.contains(cell.centre)
            else:
                inside = region.contains_point(cell.centre)
            if inside:
                selected.append(cell)

    logger.debug(
        "Clipped grid %dx%d to window x%s y%s: %d cells",
        grid.x_size,
        grid.y_size,
        (x_window.start, x_window.stop - 1),
        (y_window.start, y_window.stop - 1),
        len(selected),
    )
    return Array1D.of(selected)
