"""Plain containers returned by the mesh readers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict
from numpy.typing import NDArray

import numpy as np


@dataclass
class SurfaceMeshData:
    """Triangulated surface with scalar and vector fields, as read from disk.

    Attributes:
        points (NDArray[Any]): Coordinates, shape (n_points, 3).
        triangles (NDArray[Any]): Vertex indices, shape (n_triangles, 3).
        cell_fields (Dict[str, NDArray[Any]]): Per-triangle scalars.
        point_fields (Dict[str, NDArray[Any]]): Per-point scalars.
        cell_vector_fields (Dict[str, NDArray[Any]]): Per-triangle 3-vectors.
    """

    points: NDArray[Any] = field(default_factory=lambda: np.empty((0, 3)))
    triangles: NDArray[Any] = field(
        default_factory=lambda: np.empty((0, 3), dtype=int)
    )
    cell_fields: Dict[str, NDArray[Any]] = field(default_factory=dict)
    point_fields: Dict[str, NDArray[Any]] = field(default_factory=dict)
    cell_vector_fields: Dict[str, NDArray[Any]] = field(default_factory=dict)


@dataclass
class PolylineData:
    """Ordered 2D point sequence with per-point scalar fields.

    Attributes:
        points (NDArray[Any]): Coordinates, shape (n_points, 2).
        fields (Dict[str, NDArray[Any]]): Per-point scalars.
        coordinate_names (tuple): Names of the two coordinate columns.
    """

    points: NDArray[Any] = field(default_factory=lambda: np.empty((0, 2)))
    fields: Dict[str, NDArray[Any]] = field(default_factory=dict)
    coordinate_names: tuple = ("x", "y")


class MeshFormatError(ValueError):
    """Raised by the readers for malformed or unsupported file content."""
