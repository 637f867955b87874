"""Hovmoeller Bounded Context - Domain Services.

Pure numeric preparation of a Hovmoeller diagram, independent of any
charting library:
- strip layout: each path point becomes a vertical strip whose width is
  proportional to the path distance it represents
- value padding: repeat each point's column across its strip width
- axis helpers: value range, time step, label formatting

NO rendering here - a plotting layer consumes these results.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import timedelta

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict

from edal.errors import ConstructionError
from edal.geometry.value_objects import Extent, HorizontalPosition
from edal.grid.arrays import Array2D
from edal.grid.axes import TimeAxis
from edal.hovmoeller.value_objects import HovmoellerDomain, HovmoellerFeature

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
# (lower, upper, multiplier, tick unit): finer paths get finer integer units.
# The default applies when the minimum midpoint gap falls in no band.
DEFAULT_MULTIPLIER = 100
DEFAULT_TICK_UNIT = 25.0
_RESOLUTION_BANDS = (
    (0.001, 0.01, 1000, 250.0),
    (0.0001, 0.001, 10000, 2000.0),
)


class StripLayout(BaseModel):
    """Widths of the Hovmoeller strips in integer distance units (Value Object).

    Fields:
        widths: one width per path point, in units of 1/multiplier of the path
        multiplier: integer units per whole path length
        tick_unit: suggested tick spacing on the distance axis, in units
    """

    widths: tuple[int, ...]
    multiplier: int
    tick_unit: float

    model_config = ConfigDict(frozen=True)

    @property
    def total_width(self) -> int:
        return sum(self.widths)

    def marker_edges(self) -> tuple[float, ...]:
        """Edges of the per-point label markers; marker k ends at the centre of strip k."""
        edges = [0.0]
        start, previous_half = 0.0, 0.0
        for width in self.widths:
            half = width / 2.0
            start = start + previous_half + half
            edges.append(start)
            previous_half = half
        return tuple(edges)


# ---------------------------------------------------------------------------
# Strip Layout
# ---------------------------------------------------------------------------
def midpoint_distances(fractions: Sequence[float]) -> NDArray[np.float64]:
    """Midpoints between consecutive path fractions; the last keeps its value."""
    values = np.asarray(fractions, dtype=np.float64)
    if values.size == 0:
        return values
    mids = np.empty_like(values)
    mids[:-1] = (values[:-1] + values[1:]) / 2.0
    mids[-1] = values[-1]
    return mids


def strip_widths(fractions: Sequence[float]) -> StripLayout:
    """Integer strip widths from fractional control-point distances.

    Args:
        fractions: distance of each point along the path, 0 = start, 1 = end

    Returns:
        StripLayout with one width per point
    """
    mids = midpoint_distances(fractions)
    if mids.size == 0:
        return StripLayout(
            widths=(), multiplier=DEFAULT_MULTIPLIER, tick_unit=DEFAULT_TICK_UNIT
        )

    gaps = np.empty_like(mids)
    gaps[0] = mids[0]
    gaps[1:] = np.diff(mids)
    min_gap = float(gaps[1:].min()) if mids.size > 1 else math.inf

    multiplier, tick_unit = DEFAULT_MULTIPLIER, DEFAULT_TICK_UNIT
    for lower, upper, band_multiplier, band_tick in _RESOLUTION_BANDS:
        if lower < min_gap < upper:
            multiplier, tick_unit = band_multiplier, band_tick

    widths = tuple(int(g * multiplier) for g in gaps)
    return StripLayout(widths=widths, multiplier=multiplier, tick_unit=tick_unit)


def strip_layout(domain: HovmoellerDomain) -> StripLayout:
    """Strip layout for the path of a Hovmoeller domain.

    Raises:
        ConstructionError: the domain has fewer than 2 path points
    """
    line = domain.line_string()
    if line is None:
        raise ConstructionError(
            f"Strip layout needs at least 2 path points, got {domain.number_of_points}"
        )
    fractions = [
        line.fractional_control_point_distance(i)
        for i in range(len(line.control_points))
    ]
    layout = strip_widths(fractions)
    logger.debug(
        "Strip layout for %d points: multiplier=%d, total width=%d",
        len(fractions),
        layout.multiplier,
        layout.total_width,
    )
    return layout


def pad_values(values: Array2D, widths: Sequence[int]) -> Array2D:
    """Repeat column k of values widths[k] times (rows unchanged).

    None values become NaN.

    Raises:
        ConstructionError: widths does not have one entry per column
    """
    if len(widths) != values.x_size:
        raise ConstructionError(
            f"Need one width per column: {len(widths)} widths, {values.x_size} columns"
        )
    data = np.array(
        [[np.nan if v is None else float(v) for v in row] for row in values.to_numpy()],
        dtype=np.float64,
    ).reshape(values.shape)
    return Array2D(data=np.repeat(data, np.asarray(widths, dtype=np.intp), axis=1))


def padded_feature_values(feature: HovmoellerFeature, param_id: str) -> Array2D:
    """Values of one parameter, padded to the strip layout of its domain."""
    layout = strip_layout(feature.domain)
    return pad_values(feature.get_values(param_id), layout.widths)


# ---------------------------------------------------------------------------
# Axis Helpers
# ---------------------------------------------------------------------------
def value_range(values: Array2D) -> Extent:
    """Min/max of the values, ignoring None and NaN; empty if nothing is valid."""
    data = np.array(
        [np.nan if v is None else float(v) for v in values], dtype=np.float64
    )
    valid = data[~np.isnan(data)]
    if valid.size == 0:
        return Extent.empty()
    return Extent(low=float(valid.min()), high=float(valid.max()))


def time_step(time_axis: TimeAxis) -> timedelta:
    """Average time-cell length: coordinate extent width / number of times."""
    return time_axis.coordinate_extent.width / time_axis.size()


# ---------------------------------------------------------------------------
# Label Formatting
# ---------------------------------------------------------------------------
def format_number(value: float) -> str:
    """Grouped number with 0 to 4 fraction digits, e.g. 1234.5 -> "1,234.5"."""
    text = f"{value:,.4f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_two_decimals(value: float) -> str:
    """At most two fraction digits, no trailing zeros, '.' separator."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_position_label(position: HorizontalPosition) -> str:
    """Strip label "[y,x]" (latitude first for geographic CRSs)."""
    return f"[{format_two_decimals(position.y)},{format_two_decimals(position.x)}]"
