"""Domain Port(s) for coordinate reference system conversion.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No CRS math here.
"""

from __future__ import annotations

from typing import Protocol

from .value_objects import HorizontalPosition


class CoordinateTransformer(Protocol):
    """Port for re-expressing positions in another CRS.

    Implementations live in infrastructure (e.g., the pyproj adapter).
    """

    def transform_position(
        self, position: HorizontalPosition, target_crs: str
    ) -> HorizontalPosition:
        """Return `position` expressed in `target_crs`."""
        ...
