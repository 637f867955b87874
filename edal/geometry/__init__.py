"""Geometry Bounded Context.

Planar shapes in a named coordinate reference system:
- Value Objects: Extent, HorizontalPosition, BoundingBox, Polygon, LineString
- Services: point_in_polygon, sutherland_hodgman
- Ports: CoordinateTransformer
"""
