"""Module defining SurfaceInterpolator3D for fields on triangulated surfaces.

This module provides:
  - Loading surfaces with fields from legacy VTK, VTU or any meshio format.
  - Writing surfaces with fields to VTU.
  - Nearest-triangle interpolation of cell and point fields.
  - Conversion between cell- and point-centered fields.

Used to transfer boundary values from an external surface mesh onto
arbitrary query points (e.g. boundary DoFs of another mesh).
"""
from __future__ import annotations

import enum
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
from numpy.typing import ArrayLike, NDArray

import numpy as np
import meshio

from utils.mesh_data import MeshFormatError, SurfaceMeshData
from utils.paraview_writer import VTUWriter
from utils.vtk_reader import VTKLegacyReader
from utils.vtu_reader import VTUReader
from .config import config
from .errors import (
    FormatError,
    UnknownFieldError,
    UnsupportedConversionError,
)
from .search import BoundingSpherePruner, Pruner, find_closest_triangle
from .targets import target_mask, target_output
from .triangle import Triangle

_LOGGER = logging.getLogger(__name__)

# meshio blocks that may accompany a surface and are dropped on import.
_IGNORED_CELL_TYPES = ("vertex", "line", "line3")


class FieldType(str, enum.Enum):
    """Domain a scalar field is attached to."""

    CELL = "cell"
    POINT = "point"


FieldTypeLike = Union[FieldType, str]


def _field_type(value: FieldTypeLike) -> FieldType:
    try:
        return FieldType(value)
    except ValueError as exc:
        raise ValueError(
            f"Unknown field type {value!r}; expected 'cell' or 'point'"
        ) from exc


def _query_points(target_points: ArrayLike) -> NDArray[Any]:
    """Return target points as an (n, 3) array, mapping (r, z) to (r, 0, z)."""
    pts = np.asarray(target_points, dtype=float)
    if pts.size == 0:
        return np.empty((0, 3))
    if pts.ndim != 2 or pts.shape[1] not in (2, 3):
        raise ValueError(
            f"target_points must have shape (n, 2) or (n, 3), got {pts.shape}"
        )
    if pts.shape[1] == 2:
        # 2D cylindrical (r, z) -> 3D (x, y, z) in the y = 0 plane
        pts3 = np.zeros((pts.shape[0], 3))
        pts3[:, 0] = pts[:, 0]
        pts3[:, 2] = pts[:, 1]
        return pts3
    return pts


class SurfaceInterpolator3D:
    """Interpolate fields defined on a 3D triangulated surface.

    The surface is a point cloud plus a triangle connectivity table. Scalar
    fields live either on triangles (cell fields) or on points (point
    fields); vector fields live on triangles only. A cache of `Triangle`
    objects is derived from the topology by `preprocess` together with the
    diagnostic fields ``area``, ``longest_side``, ``center`` and ``normal``.

    Args:
        filename (Optional[str]): Mesh file to load (see `read`).
        pruner (Optional[Pruner]): Candidate pruner used by `interpolate`.
            Defaults to `BoundingSpherePruner`.

    Attributes:
        pruner (Pruner): Candidate pruner for the nearest-triangle search.
    """

    _points: NDArray[Any]
    _triangles: NDArray[Any]
    _cell_fields: Dict[str, NDArray[Any]]
    _point_fields: Dict[str, NDArray[Any]]
    _cell_vector_fields: Dict[str, NDArray[Any]]
    _triangle_cache: List[Triangle]

    def __init__(
        self,
        filename: Optional[str] = None,
        pruner: Optional[Pruner] = None,
    ) -> None:
        self._pruner: Pruner = pruner if pruner is not None else BoundingSpherePruner()
        self._topology_version = 0
        self._cache_version = -1
        self.clear()

        if filename is not None:
            self.read(filename)

    # ------------------------------------------------------------------ state
    @property
    def pruner(self) -> Pruner:
        return self._pruner

    @pruner.setter
    def pruner(self, pruner: Pruner) -> None:
        self._pruner = pruner
        self._cache_version = -1

    @property
    def points(self) -> NDArray[Any]:
        """Copy of the point coordinates, shape (n_points, 3)."""
        return self._points.copy()

    @property
    def triangles(self) -> NDArray[Any]:
        """Copy of the connectivity table, shape (n_triangles, 3)."""
        return self._triangles.copy()

    @property
    def n_points(self) -> int:
        return int(self._points.shape[0])

    @property
    def n_triangles(self) -> int:
        return int(self._triangles.shape[0])

    @property
    def triangle_cache(self) -> Tuple[Triangle, ...]:
        """Up-to-date triangle cache (rebuilt first if the topology changed)."""
        self._ensure_cache()
        return tuple(self._triangle_cache)

    def clear(self) -> None:
        """Remove points, triangles, all fields and the triangle cache."""
        self._points = np.empty((0, 3))
        self._triangles = np.empty((0, 3), dtype=int)
        self._cell_fields = {}
        self._point_fields = {}
        self._cell_vector_fields = {}
        self._triangle_cache = []
        self._topology_version += 1

    def set_mesh(self, points: ArrayLike, triangles: ArrayLike) -> None:
        """Replace the surface with new points and triangles.

        All fields are removed and the triangle cache is rebuilt.

        Args:
            points (ArrayLike): (n_points, 3) coordinates.
            triangles (ArrayLike): (n_triangles, 3) vertex indices.

        Raises:
            FormatError: If the shapes are wrong or an index is out of range.
        """
        self.clear()
        self._load(
            SurfaceMeshData(
                points=np.asarray(points, dtype=float),
                triangles=np.asarray(triangles, dtype=int),
            ),
            "set_mesh",
        )

    def _load(self, data: SurfaceMeshData, source: str) -> None:
        pts = np.asarray(data.points, dtype=float)
        tris = np.asarray(data.triangles)
        if pts.size == 0:
            pts = np.empty((0, 3))
        if tris.size == 0:
            tris = np.empty((0, 3), dtype=int)
        if pts.ndim != 2 or pts.shape[1] != 3:
            raise FormatError(f"{source}: points must have shape (n, 3), got {pts.shape}")
        if tris.ndim != 2 or tris.shape[1] != 3:
            raise FormatError(
                f"{source}: triangles must have shape (n, 3), got {tris.shape}"
            )
        if tris.size and (tris.min() < 0 or tris.max() >= pts.shape[0]):
            msg = (
                f"{source}: triangle vertex index out of range "
                f"[0, {pts.shape[0]})"
            )
            _LOGGER.error("%s", msg)
            raise FormatError(msg)

        self._points = np.array(pts, dtype=float)
        self._triangles = np.array(tris, dtype=int)
        self._topology_version += 1

        for name, values in data.cell_fields.items():
            self._store(FieldType.CELL, name, values, source)
        for name, values in data.point_fields.items():
            self._store(FieldType.POINT, name, values, source)
        for name, values in data.cell_vector_fields.items():
            arr = np.array(values, dtype=float)
            if arr.shape != (self.n_triangles, 3):
                msg = (
                    f"{source}: CellData {name} has shape {arr.shape}, "
                    f"expected ({self.n_triangles}, 3)"
                )
                _LOGGER.error("%s", msg)
                raise FormatError(msg)
            self._cell_vector_fields[name] = arr

        self.info()
        self.preprocess()

    def _store(
        self, field_type: FieldType, name: str, values: ArrayLike, source: str
    ) -> None:
        arr = np.array(values, dtype=float).reshape(-1)
        expected = self.n_triangles if field_type is FieldType.CELL else self.n_points
        if arr.shape[0] != expected:
            domain = "CellData" if field_type is FieldType.CELL else "PointData"
            msg = f"{source}: {domain} {name} has {arr.shape[0]} values, expected {expected}"
            _LOGGER.error("%s", msg)
            raise FormatError(msg)
        self._fields(field_type)[name] = arr

    def _fields(self, field_type: FieldType) -> Dict[str, NDArray[Any]]:
        return self._cell_fields if field_type is FieldType.CELL else self._point_fields

    # ----------------------------------------------------------------- fields
    def set_field(self, field_type: FieldTypeLike, name: str, values: ArrayLike) -> None:
        """Add or overwrite a scalar field.

        Raises:
            FormatError: If the length does not match the field's domain.
        """
        self._store(_field_type(field_type), name, values, "set_field")

    def field(self, field_type: FieldTypeLike, name: str) -> NDArray[Any]:
        """Return a copy of a scalar field.

        Raises:
            UnknownFieldError: If no such field exists.
        """
        return self._field(_field_type(field_type), name).copy()

    def _field(self, field_type: FieldType, name: str) -> NDArray[Any]:
        fields = self._fields(field_type)
        if name not in fields:
            _LOGGER.error("Field '%s' does not exist in %s fields", name, field_type.value)
            raise UnknownFieldError(name, field_type.value)
        return fields[name]

    def vector_field(
        self, name: str, field_type: FieldTypeLike = FieldType.CELL
    ) -> NDArray[Any]:
        """Return a copy of a cell vector field, shape (n_triangles, 3).

        Raises:
            NotImplementedError: For point vector fields.
            UnknownFieldError: If no such field exists.
        """
        if _field_type(field_type) is not FieldType.CELL:
            raise NotImplementedError("Only cell vector fields are supported.")
        if name not in self._cell_vector_fields:
            _LOGGER.error("Vector field '%s' does not exist", name)
            raise UnknownFieldError(name, "cell vector")
        return self._cell_vector_fields[name].copy()

    def field_names(self, field_type: FieldTypeLike) -> List[str]:
        """Return the sorted names of the scalar fields of a domain."""
        return sorted(self._fields(_field_type(field_type)))

    def vector_field_names(self) -> List[str]:
        return sorted(self._cell_vector_fields)

    # -------------------------------------------------------------------- I/O
    def read(self, filename: str) -> bool:
        """Read a surface with fields, choosing the reader by file extension.

        ``.vtk`` uses `read_vtk`, ``.vtu`` uses `read_vtu`; any other
        extension is read through meshio.

        Returns:
            bool: False if the file does not exist, True otherwise.
        """
        suffix = Path(filename).suffix.lower()
        if suffix == ".vtk":
            return self.read_vtk(filename)
        if suffix == ".vtu":
            return self.read_vtu(filename)

        self.clear()
        if not Path(filename).is_file():
            _LOGGER.warning("Could not open '%s'", filename)
            return False
        try:
            mesh = meshio.read(filename)
        except meshio.ReadError as exc:
            _LOGGER.error("meshio could not read '%s': %s", filename, exc)
            raise FormatError(f"{filename}: {exc}") from exc
        self._load(self._meshio_data(mesh, str(filename)), str(filename))
        return True

    def read_vtk(self, filename: str) -> bool:
        """Read a surface with fields from a legacy ASCII VTK file.

        The current state is cleared first. A missing file is logged and
        leaves the interpolator empty.

        Returns:
            bool: False if the file does not exist, True otherwise.

        Raises:
            FormatError: On malformed content or non-triangle cells.
        """
        return self._read_with(VTKLegacyReader.read, filename)

    def read_vtu(self, filename: str) -> bool:
        """Read a surface with fields from an ASCII VTU file.

        The current state is cleared first. A missing file is logged and
        leaves the interpolator empty.

        Returns:
            bool: False if the file does not exist, True otherwise.

        Raises:
            FormatError: On malformed content, non-triangle cells or array
                sizes that do not match the number of points/cells.
        """
        return self._read_with(VTUReader.read, filename)

    def _read_with(self, reader: Any, filename: str) -> bool:
        self.clear()
        start = time.perf_counter()
        try:
            data = reader(filename)
        except FileNotFoundError:
            _LOGGER.warning("Could not open '%s'", filename)
            return False
        except MeshFormatError as exc:
            _LOGGER.error("Could not read '%s': %s", filename, exc)
            raise FormatError(str(exc)) from exc
        self._load(data, str(filename))
        _LOGGER.info("Read '%s' in %.3f s", filename, time.perf_counter() - start)
        return True

    def write_vtu(self, filename: str, precision: Optional[int] = None) -> None:
        """Write the surface with every cell, cell vector and point field.

        Args:
            filename (str): Output ``.vtu`` path.
            precision (Optional[int]): Digits after the decimal point;
                defaults to the configured precision.
        """
        self._ensure_cache()
        start = time.perf_counter()
        try:
            VTUWriter.write_triangle_vtu(
                self._points,
                self._triangles,
                filename,
                cell_fields=self._cell_fields,
                cell_vector_fields=self._cell_vector_fields,
                point_fields=self._point_fields,
                precision=config.precision if precision is None else int(precision),
            )
        except Exception:
            _LOGGER.exception("write_vtu failed for '%s'.", filename)
            raise
        _LOGGER.info(
            "VTU written to '%s' (points=%d, triangles=%d) in %.3f s",
            filename,
            self.n_points,
            self.n_triangles,
            time.perf_counter() - start,
        )

    def write(self, filename: str) -> None:
        """Write the surface, choosing the writer by file extension.

        ``.vtu`` uses `write_vtu`; any other extension is written by meshio.
        """
        if Path(filename).suffix.lower() == ".vtu":
            self.write_vtu(filename)
            return
        self._ensure_cache()
        self.to_meshio().write(filename)
        _LOGGER.info("Mesh written to '%s' via meshio", filename)

    @classmethod
    def from_meshio(cls, mesh: meshio.Mesh) -> SurfaceInterpolator3D:
        """Build an interpolator from a meshio mesh with triangle cells.

        Vertex and line blocks are ignored; any other cell type is rejected.

        Raises:
            FormatError: If the mesh contains non-triangle surface or volume cells.
        """
        surface = cls()
        surface._load(cls._meshio_data(mesh, "meshio"), "meshio")
        return surface

    @staticmethod
    def _meshio_data(mesh: meshio.Mesh, source: str) -> SurfaceMeshData:
        blocks: List[int] = []
        for k, block in enumerate(mesh.cells):
            if block.type == "triangle":
                blocks.append(k)
            elif block.type in _IGNORED_CELL_TYPES:
                _LOGGER.debug("%s: ignoring %s cells", source, block.type)
            else:
                raise FormatError(
                    f"{source}: triangle expected, found '{block.type}' cells"
                )

        pts = np.asarray(mesh.points, dtype=float)
        if pts.ndim == 2 and pts.shape[1] == 2:
            pts = np.column_stack([pts, np.zeros(pts.shape[0])])

        data = SurfaceMeshData(
            points=pts,
            triangles=(
                np.concatenate([mesh.cells[k].data for k in blocks]).astype(int)
                if blocks
                else np.empty((0, 3), dtype=int)
            ),
        )
        for name, values in mesh.point_data.items():
            arr = np.asarray(values, dtype=float)
            if arr.ndim == 1:
                data.point_fields[name] = arr
        for name, per_block in mesh.cell_data.items():
            if not blocks:
                continue
            arr = np.concatenate(
                [np.asarray(per_block[k], dtype=float) for k in blocks]
            )
            if arr.ndim == 1:
                data.cell_fields[name] = arr
            elif arr.ndim == 2 and arr.shape[1] == 3:
                data.cell_vector_fields[name] = arr
        return data

    def to_meshio(self) -> meshio.Mesh:
        """Return the surface and all fields as a meshio mesh."""
        cell_data: Dict[str, List[NDArray[Any]]] = {
            name: [values.copy()] for name, values in self._cell_fields.items()
        }
        for name, values in self._cell_vector_fields.items():
            cell_data[name] = [values.copy()]
        return meshio.Mesh(
            points=self._points.copy(),
            cells=[("triangle", self._triangles.copy())],
            point_data={k: v.copy() for k, v in self._point_fields.items()},
            cell_data=cell_data,
        )

    def info(self) -> None:
        """Log the mesh size and every field with its length."""
        _LOGGER.info("n_points:%d n_triangles:%d", self.n_points, self.n_triangles)
        for name, values in self._cell_fields.items():
            _LOGGER.info("CellData %s %d", name, values.shape[0])
        for name, values in self._cell_vector_fields.items():
            _LOGGER.info("CellData %s %dx3", name, values.shape[0])
        for name, values in self._point_fields.items():
            _LOGGER.info("PointData %s %d", name, values.shape[0])

    # ------------------------------------------------------------- geometry
    def preprocess(self) -> None:
        """Rebuild the triangle cache and the derived cell fields.

        Sets the cell fields ``area`` and ``longest_side`` and the cell vector
        fields ``center`` and ``normal``, then prepares the pruner.
        """
        start = time.perf_counter()
        n = self.n_triangles

        cache: List[Triangle] = []
        area = np.zeros(n)
        longest_side = np.zeros(n)
        center = np.zeros((n, 3))
        normal = np.zeros((n, 3))

        for i, (a, b, c) in enumerate(self._triangles):
            triangle = Triangle(self._points[a], self._points[b], self._points[c])
            cache.append(triangle)
            area[i] = triangle.area
            longest_side[i] = triangle.longest_side
            center[i] = triangle.center
            normal[i] = triangle.normal

        n_degenerate = sum(1 for t in cache if t.is_degenerate)
        if n_degenerate:
            _LOGGER.warning(
                "preprocess: %d degenerate triangle(s) with ~zero area.", n_degenerate
            )

        self._triangle_cache = cache
        self._cell_fields["area"] = area
        self._cell_fields["longest_side"] = longest_side
        self._cell_vector_fields["center"] = center
        self._cell_vector_fields["normal"] = normal

        self._pruner.prepare(cache)
        self._cache_version = self._topology_version

        _LOGGER.debug(
            "preprocess: %d triangles in %.3f s", n, time.perf_counter() - start
        )

    def _ensure_cache(self) -> None:
        if self._cache_version != self._topology_version:
            _LOGGER.debug("Triangle cache is stale; rebuilding.")
            self.preprocess()

    # ---------------------------------------------------------- interpolate
    def interpolate(
        self,
        field_type: FieldTypeLike,
        field_name: str,
        target_points: ArrayLike,
        markers: Optional[ArrayLike] = None,
        target_values: Optional[NDArray[Any]] = None,
        pruner: Optional[Pruner] = None,
    ) -> NDArray[Any]:
        """Interpolate a scalar field to target points.

        For every marked target point the closest triangle is found. A cell
        field yields that triangle's value; a point field yields the
        barycentric blend of its three vertex values at the closest point.
        Unmarked entries stay 0.

        Target points of shape (n, 2) are read as axisymmetric (r, z) and
        mapped to (r, 0, z).

        Args:
            field_type (FieldTypeLike): ``FieldType.CELL`` or ``FieldType.POINT``.
            field_name (str): Name of the source field.
            target_points (ArrayLike): (n, 3) or (n, 2) query points.
            markers (Optional[ArrayLike]): Boolean mask; all True if omitted.
            target_values (Optional[NDArray[Any]]): Output array of length n
                to fill in place.
            pruner (Optional[Pruner]): Pruner for this call only.

        Returns:
            NDArray[Any]: Interpolated values aligned with `target_points`.

        Raises:
            UnknownFieldError: If the field does not exist.
            InterpolationFailedError: If a marked point finds no triangle.
            ValueError: On malformed arguments.
        """
        ftype = _field_type(field_type)
        source_field = self._field(ftype, field_name)

        pts = _query_points(target_points)
        n_values = pts.shape[0]
        mask = target_mask(markers, n_values)
        out = target_output(target_values, n_values)

        if not mask.any():
            return out

        start = time.perf_counter()
        self._ensure_cache()
        if pruner is not None:
            pruner.prepare(self._triangle_cache)
        active = pruner if pruner is not None else self._pruner

        for i in np.flatnonzero(mask):
            j_found, p_found = find_closest_triangle(
                self._triangle_cache, pts[i], active
            )
            if ftype is FieldType.CELL:
                out[i] = source_field[j_found]
            else:
                t3 = self._triangle_cache[j_found].barycentric_coordinates(p_found)
                v = self._triangles[j_found]
                out[i] = sum(t3[k] * source_field[v[k]] for k in range(3))

        _LOGGER.info(
            "Interpolated field '%s' at %d point(s) in %.3f s",
            field_name,
            int(mask.sum()),
            time.perf_counter() - start,
        )
        return out

    # -------------------------------------------------------------- convert
    def convert(
        self,
        source_type: FieldTypeLike,
        source_name: str,
        target_type: FieldTypeLike,
        target_name: str = "",
    ) -> None:
        """Convert a field between cell and point representation.

        Cell -> point averages the values of all triangles sharing a point
        (points without triangles get 0). Point -> cell averages the three
        vertex values of each triangle. The result is stored under
        `target_name`, or `source_name` if empty, overwriting any existing
        field of that name in the target domain.

        Raises:
            UnsupportedConversionError: For any other type combination.
            UnknownFieldError: If the source field does not exist.
        """
        src = _field_type(source_type)
        dst = _field_type(target_type)
        name = target_name or source_name

        start = time.perf_counter()
        if src is FieldType.CELL and dst is FieldType.POINT:
            self._point_fields[name] = self._cell_to_point(source_name)
        elif src is FieldType.POINT and dst is FieldType.CELL:
            self._cell_fields[name] = self._point_to_cell(source_name)
        else:
            _LOGGER.error(
                "convert: unsupported combination %s -> %s", src.value, dst.value
            )
            raise UnsupportedConversionError(
                "Unsupported combination of source and target field types: "
                f"{src.value} -> {dst.value}."
            )
        _LOGGER.info(
            "Converted field '%s' from %s to %s ('%s') in %.3f s",
            source_name,
            src.value,
            dst.value,
            name,
            time.perf_counter() - start,
        )

    def _cell_to_point(self, source_name: str) -> NDArray[Any]:
        source = self._field(FieldType.CELL, source_name)
        total = np.zeros(self.n_points)
        count = np.zeros(self.n_points, dtype=int)
        for j in range(3):
            np.add.at(total, self._triangles[:, j], source)
            np.add.at(count, self._triangles[:, j], 1)

        out = np.zeros(self.n_points)
        touched = count > 0
        out[touched] = total[touched] / count[touched]
        return out

    def _point_to_cell(self, source_name: str) -> NDArray[Any]:
        source = self._field(FieldType.POINT, source_name)
        if self.n_triangles == 0:
            return np.zeros(0)
        return source[self._triangles].mean(axis=1)

    def __repr__(self) -> str:
        return (
            f"SurfaceInterpolator3D(n_points={self.n_points}, "
            f"n_triangles={self.n_triangles}, "
            f"cell_fields={self.field_names(FieldType.CELL)}, "
            f"point_fields={self.field_names(FieldType.POINT)})"
        )
