"""EDAL Domain - Error Hierarchy.

Custom exceptions shared by the geometry, grid and Hovmoeller contexts.

Errors raised from pydantic validators deliberately do not derive from
ValueError, so pydantic propagates them unwrapped instead of folding them
into a ValidationError.

Empty results (no overlap, no intersection, empty domain) are NOT errors:
they are returned as None or as size-0 containers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from edal.geometry.value_objects import HorizontalPosition


class EdalError(Exception):
    """Base error for EDAL domain operations."""


class ConstructionError(EdalError):
    """Required input missing or inconsistent at construction time."""


class IndexOutOfRangeError(EdalError, IndexError):
    """Axis or array index outside its bounds.

    Attributes:
        index: The offending index
        size: The valid size of the indexed dimension
    """

    def __init__(self, index: int, size: int, what: str = "axis") -> None:
        self.index = index
        self.size = size
        super().__init__(f"Index {index} out of range for {what} of size {size}")


class InvalidPolygonError(EdalError):
    """Polygon is degenerate (fewer than 3 vertices) or otherwise unusable."""


class NumericalDegeneracyError(EdalError):
    """Line intersection with a (near-)zero determinant: parallel edges."""


class MismatchedReferenceSystemError(EdalError):
    """Entities in different CRSs combined with no way to convert them.

    Attributes:
        source_crs: CRS of the offending entity
        target_crs: CRS it had to be expressed in
    """

    def __init__(self, source_crs: str, target_crs: str, detail: str = "") -> None:
        self.source_crs = source_crs
        self.target_crs = target_crs
        message = f"Cannot combine CRS {source_crs} with {target_crs}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    @classmethod
    def for_position(
        cls, position: "HorizontalPosition", target_crs: str
    ) -> "MismatchedReferenceSystemError":
        return cls(position.crs, target_crs, "no coordinate transformer supplied")
