"""pyproj adapter for the CoordinateTransformer port.

Re-expresses HorizontalPositions in another CRS with pyproj. Axis order is
always (x, y) = (easting/longitude, northing/latitude), matching the domain
convention, regardless of the authority's declared axis order.

Transformers are expensive to build, so one is kept per (source, target)
pair in an LRU cache owned by the adapter instance.
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache

from pyproj import Transformer
from pyproj.exceptions import CRSError, ProjError

from edal.errors import MismatchedReferenceSystemError
from edal.geometry.value_objects import HorizontalPosition

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 32


class PyprojTransformer:
    """Infrastructure adapter converting positions between CRSs with pyproj.

    Parameters
    ----------
    cache_size: int
        Maximum number of (source, target) pyproj transformers kept alive.
    """

    def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE) -> None:
        if cache_size < 1:
            raise ValueError(f"cache_size must be >= 1, got {cache_size}")
        self.cache_size = cache_size
        self._transformer_for = lru_cache(maxsize=cache_size)(self._build)

    @staticmethod
    def _build(source_crs: str, target_crs: str) -> Transformer:
        try:
            transformer = Transformer.from_crs(source_crs, target_crs, always_xy=True)
        except (CRSError, ProjError) as e:
            raise MismatchedReferenceSystemError(source_crs, target_crs, str(e)) from e
        logger.debug("Created pyproj transformer %s -> %s", source_crs, target_crs)
        return transformer

    def transform_position(
        self, position: HorizontalPosition, target_crs: str
    ) -> HorizontalPosition:
        """Return `position` expressed in `target_crs`.

        Raises:
            MismatchedReferenceSystemError: unknown CRS, or the position
                cannot be represented in the target CRS
        """
        if position.crs == target_crs:
            return position

        transformer = self._transformer_for(position.crs, target_crs)
        try:
            x, y = transformer.transform(position.x, position.y, errcheck=True)
        except ProjError as e:
            raise MismatchedReferenceSystemError(
                position.crs, target_crs, f"cannot transform ({position.x}, {position.y}): {e}"
            ) from e

        if not (math.isfinite(x) and math.isfinite(y)):
            raise MismatchedReferenceSystemError(
                position.crs,
                target_crs,
                f"({position.x}, {position.y}) has no finite image",
            )
        return HorizontalPosition(x=x, y=y, crs=target_crs)

    def cache_info(self):
        """Hit/miss statistics of the transformer cache."""
        return self._transformer_for.cache_info()
