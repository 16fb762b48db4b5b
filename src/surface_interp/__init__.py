"""The surface_interp package interpolates fields defined on surfaces.

This package offers:
  - Nearest-triangle interpolation of cell and point fields on 3D
    triangulated surfaces.
  - Nearest-segment interpolation of point fields on 2D (r, z) polylines.
  - Conversion between cell- and point-centered fields.
  - Reading legacy VTK, VTU and polyline text files; writing VTU.

Submodules:
  - config: Global settings and logging level.
  - errors: Exception types.
  - search: Nearest-triangle search and candidate pruners.
  - segment: Closest-point and barycentric helpers for line segments.
  - surface2d: SurfaceInterpolator2D for polylines.
  - surface3d: SurfaceInterpolator3D for triangulated surfaces.
  - targets: Marker and output-buffer handling for interpolate.
  - triangle: Triangle geometric primitive.

Classes:
  FieldType, SurfaceInterpolator2D, SurfaceInterpolator3D, Triangle,
  BoundingSpherePruner, KDTreePruner

Utilities:
  VTKLegacyReader, VTUReader, VTUWriter, TXTReader
"""

from .config import (
    config,
    configure,
    use,
    set_log_level,
)
from .errors import (
    SurfaceInterpError,
    FormatError,
    UnknownFieldError,
    UnsupportedConversionError,
    InterpolationFailedError,
)

from surface_interp.segment import barycentric_coordinates, closest_segment_point
from surface_interp.triangle import Triangle
from surface_interp.search import (
    BoundingSpherePruner,
    KDTreePruner,
    Pruner,
    find_closest_triangle,
)
from surface_interp.surface3d import FieldType, SurfaceInterpolator3D
from surface_interp.surface2d import SurfaceInterpolator2D

from utils.paraview_writer import VTUWriter
from utils.txt_reader import TXTReader
from utils.vtk_reader import VTKLegacyReader
from utils.vtu_reader import VTUReader

__all__ = [
    # Core classes
    "FieldType",
    "SurfaceInterpolator2D",
    "SurfaceInterpolator3D",
    "Triangle",
    # Search
    "BoundingSpherePruner",
    "KDTreePruner",
    "Pruner",
    "find_closest_triangle",
    # Geometry helpers
    "barycentric_coordinates",
    "closest_segment_point",
    # Errors
    "SurfaceInterpError",
    "FormatError",
    "UnknownFieldError",
    "UnsupportedConversionError",
    "InterpolationFailedError",
    # Utilities
    "VTKLegacyReader",
    "VTUReader",
    "VTUWriter",
    "TXTReader",
    # Configuration
    "config",
    "configure",
    "use",
    "set_log_level",
]
