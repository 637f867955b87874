"""Grid Bounded Context - Dense Containers.

Index-addressed, shape-checked, iterable containers used for per-cell domain
objects (GridCell2D, HovmoellerCell) and for data values.

The backing numpy array is made truly immutable (read-only) at construction
time, as an owned copy: caller-provided arrays are never modified.

Array2D is indexed [y][x] and iterates row-major, so rendering code can zip
values against the domain positionally.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, model_validator

from edal.errors import ConstructionError, IndexOutOfRangeError


def _frozen_copy(data: Any, ndim: int) -> NDArray[Any]:
    """Owned, contiguous, read-only copy of data with the given rank."""
    if data is None:
        raise ConstructionError("Array data cannot be None")
    if isinstance(data, np.ndarray):
        array = np.array(data, copy=True, order="C")
    else:
        array = np.asarray(data)
        if array.dtype.kind in "US":
            # Never coerce strings/objects into a text dtype
            array = np.asarray(data, dtype=object)
        array = np.array(array, copy=True, order="C")
    if array.ndim != ndim:
        raise ConstructionError(f"Data must be {ndim}D, got {array.ndim}D")
    array.flags.writeable = False
    return array


class _DenseArray(BaseModel):
    """Common behaviour of the 1D and 2D containers."""

    data: np.ndarray

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self.data.shape)

    @property
    def ndim(self) -> int:
        return self.data.ndim

    def size(self) -> int:
        return int(self.data.size)

    def __len__(self) -> int:
        return self.size()

    def is_empty(self) -> bool:
        return self.data.size == 0

    def to_numpy(self) -> NDArray[Any]:
        """The read-only backing array (row-major)."""
        return self.data

    def __iter__(self) -> Iterator[Any]:  # type: ignore[override]
        for value in self.data.flat:
            yield value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.data.shape == other.data.shape and all(
            a == b for a, b in zip(self.data.flat, other.data.flat)
        )

    def __hash__(self) -> int:
        return hash((self.data.shape, tuple(self.data.flat)))

    def _check_index(self, index: int, axis: int, what: str) -> None:
        length = self.data.shape[axis]
        if not 0 <= index < length:
            raise IndexOutOfRangeError(index, length, what)


class Array1D(_DenseArray):
    """One-dimensional container; may be empty (size 0)."""

    @model_validator(mode="before")
    @classmethod
    def freeze(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {**data, "data": _frozen_copy(data.get("data"), 1)}
        return data

    @classmethod
    def of(cls, values: Iterable[Any]) -> "Array1D":
        """Build from any iterable, keeping Python objects as-is."""
        items = list(values)
        array = np.empty(len(items), dtype=object)
        for i, item in enumerate(items):
            array[i] = item
        return cls(data=array)

    def get(self, index: int) -> Any:
        """Value at index.

        Raises:
            IndexOutOfRangeError: index not in [0, size)
        """
        self._check_index(index, 0, "Array1D")
        return self.data[index]

    def __getitem__(self, index: int) -> Any:
        return self.get(index)


class Array2D(_DenseArray):
    """Two-dimensional container indexed [y][x]; shape (y_size, x_size)."""

    @model_validator(mode="before")
    @classmethod
    def freeze(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {**data, "data": _frozen_copy(data.get("data"), 2)}
        return data

    @classmethod
    def of(cls, rows: Iterable[Iterable[Any]], x_size: int | None = None) -> "Array2D":
        """Build from nested rows of Python objects.

        Raises:
            ConstructionError: rows differ in length
        """
        materialised = [list(row) for row in rows]
        if x_size is None:
            x_size = len(materialised[0]) if materialised else 0
        array = np.empty((len(materialised), x_size), dtype=object)
        for y, row in enumerate(materialised):
            if len(row) != x_size:
                raise ConstructionError(
                    f"Row {y} has {len(row)} values, expected {x_size}"
                )
            for x, item in enumerate(row):
                array[y, x] = item
        return cls(data=array)

    @property
    def y_size(self) -> int:
        return int(self.data.shape[0])

    @property
    def x_size(self) -> int:
        return int(self.data.shape[1])

    def get(self, y: int, x: int) -> Any:
        """Value at row y, column x.

        Raises:
            IndexOutOfRangeError: y or x outside the array
        """
        self._check_index(y, 0, "Array2D y dimension")
        self._check_index(x, 1, "Array2D x dimension")
        return self.data[y, x]

    def __getitem__(self, index: tuple[int, int]) -> Any:
        y, x = index
        return self.get(y, x)

    def row(self, y: int) -> Array1D:
        self._check_index(y, 0, "Array2D y dimension")
        return Array1D(data=self.data[y, :])

    def column(self, x: int) -> Array1D:
        self._check_index(x, 1, "Array2D x dimension")
        return Array1D(data=self.data[:, x])
