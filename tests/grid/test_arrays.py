"""Tests for the dense Array1D / Array2D containers."""

from __future__ import annotations

import numpy as np
import pytest

from edal.errors import ConstructionError, IndexOutOfRangeError
from edal.grid.arrays import Array1D, Array2D


# ===========================================================================
# Array1D
# ===========================================================================
def test_array1d_get_and_iterate():
    array = Array1D(data=[1.0, 2.0, 3.0])
    assert array.size() == 3
    assert len(array) == 3
    assert array.get(1) == 2.0
    assert array[2] == 3.0
    assert list(array) == [1.0, 2.0, 3.0]


def test_array1d_index_out_of_range():
    array = Array1D(data=[1.0, 2.0, 3.0])
    with pytest.raises(IndexOutOfRangeError):
        array.get(3)
    with pytest.raises(IndexOutOfRangeError):
        array.get(-1)


def test_array1d_is_read_only_copy():
    source = np.array([1.0, 2.0])
    array = Array1D(data=source)
    source[0] = 99.0

    assert array.get(0) == 1.0
    assert not array.to_numpy().flags.writeable
    with pytest.raises(ValueError):
        array.to_numpy()[0] = 5.0


def test_array1d_rejects_none_and_wrong_rank():
    with pytest.raises(ConstructionError):
        Array1D(data=None)
    with pytest.raises(ConstructionError):
        Array1D(data=[[1.0, 2.0]])


def test_array1d_empty():
    array = Array1D.of([])
    assert array.is_empty()
    assert array.size() == 0
    assert list(array) == []


def test_array1d_of_keeps_objects():
    items = [("a", 1), ("b", 2)]
    array = Array1D.of(items)
    assert array.shape == (2,)
    assert array.get(1) == ("b", 2)


# ===========================================================================
# Array2D
# ===========================================================================
def test_array2d_shape_and_indexing():
    array = Array2D.of([[1, 2, 3], [4, 5, 6]])
    assert array.shape == (2, 3)
    assert array.y_size == 2
    assert array.x_size == 3
    assert array.get(1, 0) == 4
    assert array[0, 2] == 3


def test_array2d_iterates_row_major():
    array = Array2D.of([[1, 2, 3], [4, 5, 6]])
    assert list(array) == [1, 2, 3, 4, 5, 6]
    assert list(array.row(1)) == [4, 5, 6]
    assert list(array.column(2)) == [3, 6]


def test_array2d_index_out_of_range():
    array = Array2D.of([[1, 2, 3], [4, 5, 6]])
    with pytest.raises(IndexOutOfRangeError):
        array.get(2, 0)
    with pytest.raises(IndexOutOfRangeError):
        array.get(0, 3)


def test_array2d_ragged_rows_rejected():
    with pytest.raises(ConstructionError):
        Array2D.of([[1, 2, 3], [4, 5]])


def test_array2d_rejects_wrong_rank():
    with pytest.raises(ConstructionError):
        Array2D(data=[1.0, 2.0])


def test_array2d_empty_rows_keep_width():
    array = Array2D.of([], x_size=4)
    assert array.shape == (0, 4)
    assert array.is_empty()


# ===========================================================================
# Equality
# ===========================================================================
def test_arrays_compare_by_value():
    a = Array2D(data=np.array([[1.0, 2.0], [3.0, 4.0]]))
    b = Array2D(data=np.array([[1.0, 2.0], [3.0, 4.0]]))
    c = Array2D(data=np.array([[1.0, 2.0, 3.0, 4.0]]))
    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert Array1D(data=[1.0]) != Array2D(data=[[1.0]])
