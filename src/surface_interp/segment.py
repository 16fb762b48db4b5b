"""Line-segment helpers shared by the 2D and 3D interpolators.

Both functions work on points of any dimension.
"""
from __future__ import annotations

from typing import Any, Tuple
from numpy.typing import NDArray

import numpy as np


def _segment_parameter(
    p: NDArray[Any], p0: NDArray[Any], p1: NDArray[Any]
) -> float:
    """Return the (unclamped) position of `p` along p0->p1; 0 for zero length."""
    d = p1 - p0
    d2 = float(np.dot(d, d))
    if d2 == 0.0:
        return 0.0
    return float(np.dot(d, p - p0)) / d2


def closest_segment_point(
    p: NDArray[Any], p0: NDArray[Any], p1: NDArray[Any]
) -> NDArray[Any]:
    """Return the point of segment [p0, p1] closest to `p`.

    The projection parameter is clamped to [0, 1], so points beyond either end
    map to that endpoint. A zero-length segment returns `p0`.

    Args:
        p: Query point.
        p0: First segment endpoint.
        p1: Second segment endpoint.

    Returns:
        NDArray[Any]: Closest point on the segment.
    """
    p = np.asarray(p, dtype=float)
    p0 = np.asarray(p0, dtype=float)
    p1 = np.asarray(p1, dtype=float)

    t = min(1.0, max(0.0, _segment_parameter(p, p0, p1)))
    return p0 + t * (p1 - p0)


def barycentric_coordinates(
    p: NDArray[Any], p0: NDArray[Any], p1: NDArray[Any]
) -> Tuple[float, float]:
    """Return the 2-point barycentric coordinates of `p` on segment [p0, p1].

    `(1, 0)` corresponds to `p0` and `(0, 1)` to `p1`. Coordinates are not
    clamped, so points beyond the ends give linear extrapolation weights.
    """
    t = _segment_parameter(
        np.asarray(p, dtype=float),
        np.asarray(p0, dtype=float),
        np.asarray(p1, dtype=float),
    )
    return 1.0 - t, t
