"""Module defining SurfaceInterpolator2D for point fields on 2D polylines.

The polyline is an ordered point sequence; segment ``i`` joins points ``i``
and ``i + 1``. Typical use is an axisymmetric (r, z) boundary that is kept
sorted along z and may be extended by appending points as it moves.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple
from numpy.typing import ArrayLike, NDArray

import numpy as np

from utils.mesh_data import MeshFormatError
from utils.paraview_writer import VTUWriter
from utils.txt_reader import TXTReader
from .config import config
from .errors import FormatError, InterpolationFailedError, UnknownFieldError
from .segment import barycentric_coordinates, closest_segment_point
from .targets import target_mask, target_output

_LOGGER = logging.getLogger(__name__)


def _query_points(target_points: ArrayLike) -> NDArray[Any]:
    """Return target points as an (n, 2) array, mapping (x, y, z) to (r, z)."""
    pts = np.asarray(target_points, dtype=float)
    if pts.size == 0:
        return np.empty((0, 2))
    if pts.ndim != 2 or pts.shape[1] not in (2, 3):
        raise ValueError(
            f"target_points must have shape (n, 2) or (n, 3), got {pts.shape}"
        )
    if pts.shape[1] == 3:
        # 3D (x, y, z) -> 2D cylindrical (r, z)
        return np.column_stack([np.hypot(pts[:, 0], pts[:, 1]), pts[:, 2]])
    return pts


class SurfaceInterpolator2D:
    """Interpolate point fields defined on a 2D polyline.

    Args:
        filename (Optional[str]): Text table to load (see `read_txt`).
        points (Optional[ArrayLike]): Initial (n, 2) points, used when no
            file is given.

    Attributes:
        coordinate_names (Tuple[str, str]): Names of the two coordinates.
    """

    _points: NDArray[Any]
    _fields: Dict[str, NDArray[Any]]
    coordinate_names: Tuple[str, str]

    def __init__(
        self,
        filename: Optional[str] = None,
        points: Optional[ArrayLike] = None,
    ) -> None:
        self.clear()
        if filename is not None:
            self.read_txt(filename)
        elif points is not None:
            self.set_points(points)

    # ------------------------------------------------------------------ state
    @property
    def points(self) -> NDArray[Any]:
        """Copy of the polyline points, shape (n_points, 2)."""
        return self._points.copy()

    def get_points(self) -> NDArray[Any]:
        return self.points

    @property
    def n_points(self) -> int:
        return int(self._points.shape[0])

    def clear(self) -> None:
        """Remove all points and fields."""
        self._points = np.empty((0, 2))
        self._fields = {}
        self.coordinate_names = ("r", "z")

    def set_points(self, points: ArrayLike) -> None:
        """Replace the polyline points.

        Fields whose length no longer matches the number of points are
        dropped with a warning.

        Args:
            points (ArrayLike): (n, 2) points, ordered along the polyline.
        """
        pts = np.array(points, dtype=float)
        if pts.size == 0:
            pts = np.empty((0, 2))
        if pts.ndim != 2 or pts.shape[1] != 2:
            raise ValueError(f"points must have shape (n, 2), got {pts.shape}")
        self._points = pts

        for name in [k for k, v in self._fields.items() if v.shape[0] != pts.shape[0]]:
            _LOGGER.warning(
                "set_points: dropping field '%s' (%d values, %d points)",
                name,
                self._fields[name].shape[0],
                pts.shape[0],
            )
            del self._fields[name]

    def append_point(
        self, point: ArrayLike, values: Optional[Mapping[str, float]] = None
    ) -> None:
        """Extend the polyline by one endpoint.

        Every field gets a value for the new point: the one given in
        `values`, or else a copy of the field's current last value.

        Raises:
            UnknownFieldError: If `values` names a field that does not exist.
        """
        p = np.asarray(point, dtype=float).reshape(-1)
        if p.shape != (2,):
            raise ValueError(f"point must have 2 coordinates, got {p.shape[0]}")
        values = dict(values or {})
        for name in values:
            if name not in self._fields:
                raise UnknownFieldError(name)

        for name, field in self._fields.items():
            if name in values:
                new = float(values[name])
            else:
                new = float(field[-1]) if field.size else 0.0
            self._fields[name] = np.append(field, new)
        self._points = np.vstack([self._points, p])

    def set_field(self, name: str, values: ArrayLike) -> None:
        """Add or overwrite a point field.

        Raises:
            FormatError: If the length does not match the number of points.
        """
        arr = np.array(values, dtype=float).reshape(-1)
        if arr.shape[0] != self.n_points:
            msg = f"PointData {name} has {arr.shape[0]} values, expected {self.n_points}"
            _LOGGER.error("set_field: %s", msg)
            raise FormatError(msg)
        self._fields[name] = arr

    def field(self, name: str) -> NDArray[Any]:
        """Return a copy of a point field.

        Raises:
            UnknownFieldError: If no such field exists.
        """
        return self._field(name).copy()

    def _field(self, name: str) -> NDArray[Any]:
        if name not in self._fields:
            _LOGGER.error("Field '%s' does not exist", name)
            raise UnknownFieldError(name)
        return self._fields[name]

    def field_names(self) -> List[str]:
        return sorted(self._fields)

    # -------------------------------------------------------------------- I/O
    def read_txt(self, filename: str) -> bool:
        """Read points and fields from a whitespace-delimited text table.

        The current state is cleared first. A missing file is logged and
        leaves the interpolator empty.

        Returns:
            bool: False if the file does not exist, True otherwise.

        Raises:
            FormatError: On malformed content.
        """
        self.clear()
        start = time.perf_counter()
        try:
            data = TXTReader.read(filename)
        except FileNotFoundError:
            _LOGGER.warning("Could not open '%s'", filename)
            return False
        except MeshFormatError as exc:
            _LOGGER.error("Could not read '%s': %s", filename, exc)
            raise FormatError(str(exc)) from exc

        self._points = data.points
        self._fields = dict(data.fields)
        self.coordinate_names = (data.coordinate_names[0], data.coordinate_names[1])
        _LOGGER.info("Read '%s' in %.3f s", filename, time.perf_counter() - start)
        self.info()
        return True

    def write_vtu(self, filename: str, precision: Optional[int] = None) -> None:
        """Write the polyline and its fields as VTK lines.

        Points are placed at (r, 0, z), the same axisymmetric embedding used
        by `SurfaceInterpolator3D` for (r, z) queries.
        """
        pts3 = np.zeros((self.n_points, 3))
        pts3[:, 0] = self._points[:, 0]
        pts3[:, 2] = self._points[:, 1]
        elements = [(j, j + 1) for j in range(self.n_points - 1)]
        VTUWriter.write_line_vtu(
            pts3,
            elements,
            filename,
            point_fields=self._fields,
            precision=config.precision if precision is None else int(precision),
        )
        _LOGGER.info("VTU written to '%s' (points=%d)", filename, self.n_points)

    def info(self) -> None:
        """Log the number of points and every field with its length."""
        _LOGGER.info("n_points:%d", self.n_points)
        for name, values in self._fields.items():
            _LOGGER.info("PointData %s %d", name, values.shape[0])

    # ------------------------------------------------------------- geometry
    def _closest_segment(self, p: NDArray[Any]) -> Tuple[int, NDArray[Any]]:
        """Return the index of the closest segment and the closest point on it.

        Squared distances are compared; ties go to the lower segment index.
        """
        if self.n_points < 2:
            _LOGGER.error(
                "Polyline has %d point(s); at least 2 are needed", self.n_points
            )
            raise InterpolationFailedError(p)

        j_found = 0
        p_found = self._points[0]
        d2_min = -1.0
        for j in range(self.n_points - 1):
            p_trial = closest_segment_point(p, self._points[j], self._points[j + 1])
            diff = p_trial - p
            d2 = float(np.dot(diff, diff))
            if d2 < d2_min or d2_min < 0.0:
                d2_min = d2
                p_found = p_trial
                j_found = j
        return j_found, p_found

    def project(self, point: ArrayLike) -> NDArray[Any]:
        """Return the polyline point closest to `point`.

        Raises:
            InterpolationFailedError: If the polyline has fewer than 2 points.
        """
        p = np.asarray(point, dtype=float).reshape(-1)
        if p.shape != (2,):
            raise ValueError(f"point must have 2 coordinates, got {p.shape[0]}")
        return self._closest_segment(p)[1]

    def interpolate(
        self,
        field_name: str,
        target_points: ArrayLike,
        markers: Optional[ArrayLike] = None,
        target_values: Optional[NDArray[Any]] = None,
    ) -> NDArray[Any]:
        """Interpolate a point field to target points.

        For every marked target point the closest segment is found and the
        field is blended linearly between the segment endpoints at the
        closest point. Points beyond the polyline ends get the endpoint
        value. Unmarked entries stay 0.

        Target points of shape (n, 3) are mapped to (sqrt(x^2 + y^2), z).

        Args:
            field_name (str): Name of the source field.
            target_points (ArrayLike): (n, 2) or (n, 3) query points.
            markers (Optional[ArrayLike]): Boolean mask; all True if omitted.
            target_values (Optional[NDArray[Any]]): Output array of length n
                to fill in place.

        Returns:
            NDArray[Any]: Interpolated values aligned with `target_points`.

        Raises:
            UnknownFieldError: If the field does not exist.
            InterpolationFailedError: If the polyline has fewer than 2 points.
        """
        source_field = self._field(field_name)

        pts = _query_points(target_points)
        n_values = pts.shape[0]
        mask = target_mask(markers, n_values)
        out = target_output(target_values, n_values)

        start = time.perf_counter()
        for i in np.flatnonzero(mask):
            j, p_found = self._closest_segment(pts[i])
            w0, w1 = barycentric_coordinates(
                p_found, self._points[j], self._points[j + 1]
            )
            out[i] = w0 * source_field[j] + w1 * source_field[j + 1]

        _LOGGER.info(
            "Interpolated field '%s' at %d point(s) in %.3f s",
            field_name,
            int(mask.sum()),
            time.perf_counter() - start,
        )
        return out

    def __repr__(self) -> str:
        return (
            f"SurfaceInterpolator2D(n_points={self.n_points}, "
            f"fields={self.field_names()})"
        )
