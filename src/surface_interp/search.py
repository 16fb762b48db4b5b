"""Nearest-triangle search over a triangle cache.

The search runs in two passes. A pruner first proposes candidate triangles
for a query point; the closest point is searched among those. If the pruner
proposes nothing, every triangle is checked. The result is therefore always
the globally closest triangle whenever the pruned pass finds nothing, and
pruners only affect speed on well-behaved meshes.

Pruners:
  - BoundingSpherePruner: keeps triangles whose center lies within
    `factor * longest_side` of the query point (vectorized NumPy test).
  - KDTreePruner: same acceptance test, with a SciPy KD-tree over the
    triangle centers to avoid testing far triangles at all.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence, Tuple, runtime_checkable
from numpy.typing import NDArray

import numpy as np
from scipy.spatial import cKDTree

from .config import config
from .errors import InterpolationFailedError
from .triangle import Triangle

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class Pruner(Protocol):
    """Proposes candidate triangles for a query point."""

    def prepare(self, triangles: Sequence[Triangle]) -> None:
        """Build any acceleration data for `triangles`."""
        ...

    def candidates(self, point: NDArray[Any]) -> NDArray[Any]:
        """Return indices of the triangles worth testing for `point`."""
        ...


class BoundingSpherePruner:
    """Reject triangles whose center is too far from the query point.

    A triangle `j` is a candidate if
    ``|point - center_j| <= factor * longest_side_j``.

    Args:
        factor (Optional[float]): Radius multiplier. Defaults to the
            configured `prune_factor` at `prepare` time.
    """

    def __init__(self, factor: Optional[float] = None) -> None:
        self.factor = factor
        self._centers: NDArray[Any] = np.empty((0, 3))
        self._radii: NDArray[Any] = np.empty(0)

    def prepare(self, triangles: Sequence[Triangle]) -> None:
        factor = config.prune_factor if self.factor is None else float(self.factor)
        self._centers = np.array([t.center for t in triangles], dtype=float).reshape(
            -1, 3
        )
        self._radii = factor * np.array(
            [t.longest_side for t in triangles], dtype=float
        )
        _LOGGER.debug(
            "%s prepared for %d triangles (factor=%g)",
            type(self).__name__,
            len(triangles),
            factor,
        )

    def candidates(self, point: NDArray[Any]) -> NDArray[Any]:
        if self._radii.size == 0:
            return np.empty(0, dtype=int)
        dist = np.linalg.norm(self._centers - point, axis=1)
        return np.flatnonzero(dist <= self._radii)


class KDTreePruner(BoundingSpherePruner):
    """Bounding-sphere pruning accelerated by a KD-tree over triangle centers.

    The tree is queried with the largest radius, then the per-triangle radius
    test of `BoundingSpherePruner` is applied to the returned subset.
    """

    def __init__(self, factor: Optional[float] = None) -> None:
        super().__init__(factor)
        self._tree: Optional[cKDTree] = None
        self._r_max = 0.0

    def prepare(self, triangles: Sequence[Triangle]) -> None:
        super().prepare(triangles)
        if self._radii.size == 0:
            self._tree = None
            self._r_max = 0.0
            return
        self._tree = cKDTree(self._centers)
        self._r_max = float(self._radii.max())

    def candidates(self, point: NDArray[Any]) -> NDArray[Any]:
        if self._tree is None:
            return np.empty(0, dtype=int)
        idx = np.asarray(self._tree.query_ball_point(point, r=self._r_max), dtype=int)
        if idx.size == 0:
            return idx
        dist = np.linalg.norm(self._centers[idx] - point, axis=1)
        return np.sort(idx[dist <= self._radii[idx]])


def _closest_among(
    triangles: Sequence[Triangle], indices: Any, point: NDArray[Any]
) -> Tuple[int, NDArray[Any], float]:
    """Return (index, closest point, squared distance); index -1 if none."""
    j_found = -1
    p_found = point
    d2_min = -1.0
    for j in indices:
        j = int(j)
        p_trial = triangles[j].closest_triangle_point(point)
        diff = p_trial - point
        d2 = float(np.dot(diff, diff))
        if d2 < d2_min or d2_min < 0.0:
            d2_min = d2
            p_found = p_trial
            j_found = j
    return j_found, p_found, d2_min


def find_closest_triangle(
    triangles: Sequence[Triangle],
    point: NDArray[Any],
    pruner: Optional[Pruner] = None,
) -> Tuple[int, NDArray[Any]]:
    """Find the triangle closest to `point`.

    Args:
        triangles (Sequence[Triangle]): Triangle cache.
        point (NDArray[Any]): Query point (3D).
        pruner (Optional[Pruner]): Prepared pruner; if None every triangle
            is checked directly.

    Returns:
        Tuple[int, NDArray[Any]]: Index of the closest triangle and the
        closest point on it.

    Raises:
        InterpolationFailedError: If `triangles` is empty.
    """
    p = np.asarray(point, dtype=float)

    j_found = -1
    p_found = p
    if pruner is not None:
        j_found, p_found, _ = _closest_among(triangles, pruner.candidates(p), p)
        if j_found < 0:
            _LOGGER.debug(
                "find_closest_triangle: no candidate near %s, "
                "continuing with full search",
                p.tolist(),
            )

    if j_found < 0:
        j_found, p_found, _ = _closest_among(triangles, range(len(triangles)), p)

    if j_found < 0:
        _LOGGER.error("find_closest_triangle: no triangle found for %s", p.tolist())
        raise InterpolationFailedError(p)

    return j_found, p_found
