"""Module defining the Triangle class, the geometric primitive of 3D surfaces.

This module provides the Triangle class, which caches the normal, area,
center and longest side of a triangle and answers closest-point and
barycentric-coordinate queries.
"""
from __future__ import annotations

import logging
from typing import Any, Tuple
from numpy.typing import NDArray

import numpy as np

from .config import config
from .segment import barycentric_coordinates as segment_barycentric_coordinates
from .segment import closest_segment_point

_LOGGER = logging.getLogger(__name__)


class Triangle:
    """Geometric summary of a single triangle in 3D.

    The vertex order defines the winding and therefore the direction of the
    normal. All derived quantities are computed by `reinit` and never change
    until the next `reinit` call.

    Attributes:
        points (NDArray[Any]): Vertex coordinates, shape (3, 3).
        normal (NDArray[Any]): Unit normal; left unnormalized (zero) for
            degenerate triangles.
        area (float): Triangle area.
        center (NDArray[Any]): Vertex centroid.
        longest_side (float): Length of the longest edge.
    """

    points: NDArray[Any]
    normal: NDArray[Any]
    area: float
    center: NDArray[Any]
    longest_side: float

    def __init__(
        self,
        p0: NDArray[Any] | None = None,
        p1: NDArray[Any] | None = None,
        p2: NDArray[Any] | None = None,
    ) -> None:
        """Create a triangle, optionally initialized from three vertices."""
        if p0 is None or p1 is None or p2 is None:
            p0 = p1 = p2 = np.zeros(3)
        self.reinit(p0, p1, p2)

    def reinit(self, p0: NDArray[Any], p1: NDArray[Any], p2: NDArray[Any]) -> None:
        """Set the vertices and recompute every cached quantity.

        Args:
            p0 (NDArray[Any]): First vertex.
            p1 (NDArray[Any]): Second vertex.
            p2 (NDArray[Any]): Third vertex.
        """
        self.points = np.array([p0, p1, p2], dtype=float).reshape(3, 3)
        a, b, c = self.points

        n = np.cross(b - a, c - a)
        self.area = 0.5 * float(np.linalg.norm(n))
        if self.area > 0.0:
            n = n / (2.0 * self.area)
        self.normal = n

        self.center = (a + b + c) / 3.0
        self.longest_side = max(
            float(np.linalg.norm(b - a)),
            float(np.linalg.norm(c - a)),
            float(np.linalg.norm(b - c)),
        )

    @property
    def is_degenerate(self) -> bool:
        """Return True if the area is negligible relative to the squared longest side."""
        return self.area <= config.degenerate_tolerance * self.longest_side**2

    def project_to_plane(self, p: NDArray[Any]) -> NDArray[Any]:
        """Project `p` orthogonally onto the triangle plane."""
        p = np.asarray(p, dtype=float)
        return p - self.normal * float(np.dot(self.normal, p - self.points[0]))

    def closest_triangle_point(self, p: NDArray[Any]) -> NDArray[Any]:
        """Return the point of the triangle closest to `p`.

        The point is first projected onto the triangle plane. If the
        projection lies inside the triangle (all barycentric coordinates in
        [0, 1]) it is returned; otherwise the closest point on each edge is
        computed and the nearest one (by squared distance) is returned.

        Args:
            p (NDArray[Any]): Query point.

        Returns:
            NDArray[Any]: Closest point on the triangle.
        """
        p = np.asarray(p, dtype=float)

        if not self.is_degenerate:
            p_proj = self.project_to_plane(p)
            t3 = self.barycentric_coordinates(p_proj)
            if all(0.0 <= t <= 1.0 for t in t3):
                return p_proj

        p_closest = self.points[0]
        d2_min = -1.0
        for i in range(3):
            p_edge = closest_segment_point(p, self.points[i], self.points[(i + 1) % 3])
            diff = p - p_edge
            d2 = float(np.dot(diff, diff))
            if d2 < d2_min or d2_min < 0.0:
                d2_min = d2
                p_closest = p_edge
        return p_closest

    def barycentric_coordinates(self, p: NDArray[Any]) -> Tuple[float, float, float]:
        """Return the barycentric coordinates of an in-plane point `p`.

        Each coordinate is the signed area of the sub-triangle opposite to a
        vertex divided by the triangle area, with the sign taken relative to
        the triangle normal. For degenerate triangles the coordinates are the
        2-point coordinates along the longest edge, with zero weight on the
        remaining vertex.

        Args:
            p (NDArray[Any]): Point in the triangle plane.

        Returns:
            Tuple[float, float, float]: Weights of vertices 0, 1 and 2.
        """
        p = np.asarray(p, dtype=float)
        a, b, c = self.points

        if self.is_degenerate:
            return self._degenerate_coordinates(p)

        return (
            self._signed_area(p, b, c) / self.area,
            self._signed_area(a, p, c) / self.area,
            self._signed_area(a, b, p) / self.area,
        )

    def _signed_area(
        self, p0: NDArray[Any], p1: NDArray[Any], p2: NDArray[Any]
    ) -> float:
        """Signed area of (p0, p1, p2), positive when wound like this triangle."""
        return 0.5 * float(np.dot(self.normal, np.cross(p1 - p0, p2 - p0)))

    def _degenerate_coordinates(self, p: NDArray[Any]) -> Tuple[float, float, float]:
        edges = [(0, 1), (1, 2), (2, 0)]
        lengths = [
            float(np.linalg.norm(self.points[j] - self.points[i])) for i, j in edges
        ]
        i, j = edges[int(np.argmax(lengths))]

        coords = [0.0, 0.0, 0.0]
        if lengths[int(np.argmax(lengths))] == 0.0:
            coords[0] = 1.0
        else:
            w_i, w_j = segment_barycentric_coordinates(
                p, self.points[i], self.points[j]
            )
            coords[i] = w_i
            coords[j] = w_j

        _LOGGER.debug(
            "barycentric_coordinates: degenerate triangle (area=%.3g), "
            "using edge (%d, %d)",
            self.area,
            i,
            j,
        )
        return coords[0], coords[1], coords[2]

    def __repr__(self) -> str:
        """Return a string representation of the triangle."""
        return (
            f"Triangle(points={self.points.tolist()}, area={self.area:.6g}, "
            f"longest_side={self.longest_side:.6g})"
        )
