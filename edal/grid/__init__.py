"""Grid Bounded Context.

Gridded domains and their cells:
- Axes: NumericAxis, RegularAxis, TimeAxis
- Containers: Array1D, Array2D
- Value Objects: GridCell2D, HorizontalGrid, RegularGrid
- Services: clip
"""
