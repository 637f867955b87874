"""EDAL Domain Layer.

Geospatial domain primitives organized by bounded contexts:
- geometry: positions, extents, bounding boxes, polygons, line strings
- grid: referenceable axes, dense arrays, horizontal grids, grid clipping
- hovmoeller: time x path domains and features, strip layout for plotting
"""

# Imports alphabetized per project style (isort)
from edal import errors, geometry, grid, hovmoeller

__all__ = ["errors", "geometry", "grid", "hovmoeller"]
