"""Grid Bounded Context - Referenceable Axes.

An axis is an ordered, named, strictly monotonic sequence of coordinate
values. Each value is a cell centre; cell boundaries sit halfway between
neighbouring values and are extrapolated by half a gap beyond both ends.

Variants (all immutable, validated at construction):
- NumericAxis: arbitrary (irregular) float values
- RegularAxis: first value + constant spacing, O(1) index lookup
- TimeAxis: datetime values, timedelta-based extrapolation

NumericAxis and RegularAxis take an `is_longitude` flag: index lookup on a
longitude axis treats the target modulo 360 degrees.

Extent convention: coordinate_extent and coordinate_bounds always return
an Extent with low <= high, for ascending and descending axes alike.
"""

from __future__ import annotations

import bisect
import math
from abc import abstractmethod
from collections.abc import Iterator, Sequence
from datetime import datetime
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, model_validator

from edal.errors import ConstructionError, IndexOutOfRangeError
from edal.geometry.value_objects import Extent

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
LONGITUDE_PERIOD = 360.0  # Degrees


# ---------------------------------------------------------------------------
# Extrapolation functions
# ---------------------------------------------------------------------------
def extend_first_linear(first: Any, following: Any) -> Any:
    """Lower cell bound of the first value: first - (following - first) / 2.

    Works for floats and for datetimes (the gap is a timedelta).
    """
    return first - (following - first) / 2


def extend_last_linear(last: Any, second_last: Any) -> Any:
    """Upper cell bound of the last value: last + (last - second_last) / 2."""
    return last + (last - second_last) / 2


def midpoint(a: Any, b: Any) -> Any:
    """Halfway between a and b (floats or datetimes)."""
    return a + (b - a) / 2


class CoordinateValues(Sequence):
    """Read-only, lazy list view over an axis' coordinate values."""

    def __init__(self, axis: "ReferenceableAxis") -> None:
        self._axis = axis

    def __len__(self) -> int:
        return self._axis.size()

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [
                self._axis.get_coordinate_value(i)
                for i in range(*index.indices(len(self)))
            ]
        if index < 0:
            index += len(self)
        return self._axis.get_coordinate_value(index)

    def __iter__(self) -> Iterator[Any]:
        for i in range(len(self)):
            yield self._axis.get_coordinate_value(i)

    def __repr__(self) -> str:
        return f"CoordinateValues({list(self)!r})"


# ---------------------------------------------------------------------------
# ReferenceableAxis (common behaviour)
# ---------------------------------------------------------------------------
class ReferenceableAxis(BaseModel):
    """Ordered, named sequence of coordinate values (Value Object).

    Subclasses supply the storage (size, get_coordinate_value), the
    direction, and the extrapolation functions; everything else derives
    from those.

    Invariants:
        AX-1: size() >= 1
        AX-2: values strictly monotonic in the declared direction
    """

    name: str

    model_config = ConfigDict(frozen=True)

    # -- storage ----------------------------------------------------------
    @abstractmethod
    def size(self) -> int: ...

    @abstractmethod
    def _value_at(self, index: int) -> Any: ...

    @abstractmethod
    def is_ascending(self) -> bool: ...

    # -- extrapolation ----------------------------------------------------
    def extend_first_value(self, first: Any, following: Any) -> Any:
        return extend_first_linear(first, following)

    def extend_last_value(self, last: Any, second_last: Any) -> Any:
        return extend_last_linear(last, second_last)

    # -- derived ----------------------------------------------------------
    def get_coordinate_value(self, index: int) -> Any:
        """Value at index.

        Raises:
            IndexOutOfRangeError: index not in [0, size)
        """
        if not 0 <= index < self.size():
            raise IndexOutOfRangeError(index, self.size(), f"axis '{self.name}'")
        return self._value_at(index)

    @property
    def coordinate_values(self) -> CoordinateValues:
        return CoordinateValues(self)

    @property
    def first_value(self) -> Any:
        return self._value_at(0)

    @property
    def last_value(self) -> Any:
        return self._value_at(self.size() - 1)

    @property
    def minimum_value(self) -> Any:
        return self.first_value if self.is_ascending() else self.last_value

    @property
    def maximum_value(self) -> Any:
        return self.last_value if self.is_ascending() else self.first_value

    @property
    def coordinate_extent(self) -> Extent:
        """Outer bound of the axis: cell footprints, not just sample points."""
        if self.size() == 1:
            return Extent(low=self.minimum_value, high=self.maximum_value)
        lower_of_first = self.extend_first_value(self.first_value, self._value_at(1))
        upper_of_last = self.extend_last_value(
            self.last_value, self._value_at(self.size() - 2)
        )
        return Extent.spanning(lower_of_first, upper_of_last)

    def coordinate_bounds(self, index: int) -> Extent:
        """Cell extent of the value at index.

        Raises:
            IndexOutOfRangeError: index not in [0, size)
        """
        value = self.get_coordinate_value(index)
        n = self.size()
        if n == 1:
            return Extent(low=value, high=value)
        if index == 0:
            start = self.extend_first_value(value, self._value_at(1))
        else:
            start = midpoint(self._value_at(index - 1), value)
        if index == n - 1:
            end = self.extend_last_value(value, self._value_at(n - 2))
        else:
            end = midpoint(value, self._value_at(index + 1))
        return Extent.spanning(start, end)

    def find_index_of(self, value: Any) -> int | None:
        """Index of the cell whose bounds contain value, or None.

        Bounds between neighbouring cells belong to the cell nearer the
        axis minimum; the outer extent is closed at both ends.
        """
        extent = self.coordinate_extent
        if not extent.contains(value):
            return None
        if self.size() == 1:
            return 0
        return self._locate(value)

    def nearest_index(self, value: Any) -> int:
        """Index of the coordinate value closest to value (ties go low)."""
        found = self.find_index_of(value)
        if found is not None:
            return found
        if value < self.minimum_value:
            return 0 if self.is_ascending() else self.size() - 1
        return self.size() - 1 if self.is_ascending() else 0

    def clamped_index_of(self, value: Any) -> int:
        """Index of the cell containing value, without longitude wrapping.

        Values beyond the coordinate extent clamp to the cell at that end of
        the axis, so a window [low, high] never folds around the period.
        """
        extent = self.coordinate_extent
        if value < extent.low:
            value = extent.low
        elif value > extent.high:
            value = extent.high
        if self.size() == 1:
            return 0
        return self._locate(value)

    def _locate(self, value: Any) -> int:
        """Binary search over interior cell boundaries (value is inside extent)."""
        n = self.size()
        if self.is_ascending():
            boundaries = [
                midpoint(self._value_at(i), self._value_at(i + 1)) for i in range(n - 1)
            ]
            return bisect.bisect_left(boundaries, value)
        # Descending: search the reversed (ascending) sequence
        boundaries = [
            midpoint(self._value_at(i), self._value_at(i - 1))
            for i in range(n - 1, 0, -1)
        ]
        return n - 1 - bisect.bisect_left(boundaries, value)


def _check_strictly_monotonic(values: Sequence[Any]) -> bool:
    """Return the direction (True = ascending) of a strictly monotonic sequence.

    Raises:
        ConstructionError: ties or direction changes
    """
    if len(values) < 2:
        return True
    ascending = values[1] > values[0]
    for i in range(1, len(values)):
        step_up = values[i] > values[i - 1]
        if values[i] == values[i - 1] or step_up != ascending:
            raise ConstructionError(
                f"Axis values must be strictly monotonic; "
                f"violation at index {i}: {values[i - 1]!r} -> {values[i]!r}"
            )
    return ascending


def _wrap_longitude(value: float, extent: Extent) -> float:
    """Shift value by whole periods into [extent.low, extent.low + 360)."""
    return extent.low + (value - extent.low) % LONGITUDE_PERIOD


# ---------------------------------------------------------------------------
# NumericAxis
# ---------------------------------------------------------------------------
class NumericAxis(ReferenceableAxis):
    """Axis of arbitrary, strictly monotonic float values."""

    values: tuple[float, ...]
    is_longitude: bool = False

    @model_validator(mode="before")
    @classmethod
    def require_values(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("values") is None:
            raise ConstructionError("Axis values cannot be None")
        return data

    @model_validator(mode="after")
    def validate_values(self) -> "NumericAxis":
        if len(self.values) == 0:
            raise ConstructionError(f"Axis '{self.name}' needs at least one value")
        if any(not math.isfinite(v) for v in self.values):
            raise ConstructionError(f"Axis '{self.name}' values must be finite")
        _check_strictly_monotonic(self.values)
        return self

    def size(self) -> int:
        return len(self.values)

    def _value_at(self, index: int) -> float:
        return self.values[index]

    def is_ascending(self) -> bool:
        return len(self.values) < 2 or self.values[1] > self.values[0]

    def find_index_of(self, value: float) -> int | None:
        if self.is_longitude:
            value = _wrap_longitude(value, self.coordinate_extent)
        return super().find_index_of(value)

    def _locate(self, value: float) -> int:
        vals = np.asarray(self.values, dtype=np.float64)
        ascending = self.is_ascending()
        if not ascending:
            vals = vals[::-1]
        boundaries = (vals[:-1] + vals[1:]) / 2.0
        idx = int(np.searchsorted(boundaries, value, side="left"))
        return idx if ascending else len(vals) - 1 - idx


# ---------------------------------------------------------------------------
# RegularAxis
# ---------------------------------------------------------------------------
class RegularAxis(ReferenceableAxis):
    """Evenly spaced axis: value(i) = first + i * spacing.

    A negative spacing gives a descending axis. Index lookup inverts the
    arithmetic instead of searching.
    """

    first: float
    spacing: float
    n: int
    is_longitude: bool = False

    @model_validator(mode="after")
    def validate_layout(self) -> "RegularAxis":
        if self.n < 1:
            raise ConstructionError(
                f"Axis '{self.name}' needs at least one cell, got {self.n}"
            )
        if not (math.isfinite(self.first) and math.isfinite(self.spacing)):
            raise ConstructionError(
                f"Axis '{self.name}' first value and spacing must be finite"
            )
        if self.spacing == 0 and self.n > 1:
            raise ConstructionError(f"Axis '{self.name}' spacing cannot be zero")
        return self

    @classmethod
    def from_extent(
        cls, name: str, low: float, high: float, n: int, is_longitude: bool = False
    ) -> "RegularAxis":
        """n cells exactly tiling [low, high], centres at half-cell offsets."""
        if n < 1:
            raise ConstructionError(f"Axis '{name}' needs at least one cell, got {n}")
        spacing = (high - low) / n
        return cls(
            name=name,
            first=low + spacing / 2.0,
            spacing=spacing,
            n=n,
            is_longitude=is_longitude,
        )

    def size(self) -> int:
        return self.n

    def _value_at(self, index: int) -> float:
        return self.first + index * self.spacing

    def is_ascending(self) -> bool:
        return self.spacing >= 0

    def find_index_of(self, value: float) -> int | None:
        if self.is_longitude:
            value = _wrap_longitude(value, self.coordinate_extent)
        return super().find_index_of(value)

    def _locate(self, value: float) -> int:
        # Fractional position of value relative to the lower edge of cell 0
        fractional = (value - self.first) / self.spacing + 0.5
        if self.spacing > 0:
            index = math.ceil(fractional) - 1
        else:
            index = math.floor(fractional)
        return min(max(index, 0), self.n - 1)


# ---------------------------------------------------------------------------
# TimeAxis
# ---------------------------------------------------------------------------
class TimeAxis(ReferenceableAxis):
    """Axis of strictly monotonic datetimes.

    Extrapolation and cell boundaries use timedelta arithmetic, so uneven
    calendar gaps (e.g. months) produce uneven cells.
    """

    values: tuple[datetime, ...]

    @model_validator(mode="before")
    @classmethod
    def require_values(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("values") is None:
            raise ConstructionError("Time axis values cannot be None")
        return data

    @model_validator(mode="after")
    def validate_values(self) -> "TimeAxis":
        if len(self.values) == 0:
            raise ConstructionError(f"Time axis '{self.name}' needs at least one value")
        try:
            _check_strictly_monotonic(self.values)
        except TypeError as e:
            # Mixed naive and aware datetimes
            raise ConstructionError(f"Time axis '{self.name}': {e}") from e
        return self

    def size(self) -> int:
        return len(self.values)

    def _value_at(self, index: int) -> datetime:
        return self.values[index]

    def is_ascending(self) -> bool:
        return len(self.values) < 2 or self.values[1] > self.values[0]
