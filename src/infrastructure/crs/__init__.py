"""Infrastructure adapters for coordinate reference system conversion.

This module provides the pyproj-backed implementation of the
CoordinateTransformer port.
"""

from .pyproj_adapter import PyprojTransformer

__all__ = ["PyprojTransformer"]
