"""Module providing VTUReader for ASCII VTK XML UnstructuredGrid files.

Only single-piece, ASCII-encoded grids made of triangles are supported,
which is what `VTUWriter.write_triangle_vtu` produces.
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional
from numpy.typing import NDArray

import numpy as np

from utils.mesh_data import MeshFormatError, SurfaceMeshData

_LOGGER = logging.getLogger(__name__)

VTK_TRIANGLE = 5


class VTUReader:
    """Read triangulated surfaces from ``.vtu`` files."""

    @staticmethod
    def read(filename: str) -> SurfaceMeshData:
        """Read points, triangles and fields from a VTU file.

        Args:
            filename (str): Path to the ``.vtu`` file.

        Returns:
            SurfaceMeshData: Parsed mesh and fields.

        Raises:
            FileNotFoundError: If `filename` does not exist.
            MeshFormatError: On malformed XML, non-ASCII arrays, non-triangle
                cells or arrays whose length does not match the number of
                points or cells.
        """
        try:
            root = ET.parse(filename).getroot()
        except ET.ParseError as exc:
            raise MeshFormatError(f"{filename}: invalid XML ({exc})") from exc

        if root.tag != "VTKFile" or root.attrib.get("type") != "UnstructuredGrid":
            raise MeshFormatError(f"{filename}: not a VTK UnstructuredGrid file")

        piece = root.find("./UnstructuredGrid/Piece")
        if piece is None:
            raise MeshFormatError(f"{filename}: no <Piece> element")

        try:
            n_points = int(piece.attrib["NumberOfPoints"])
            n_cells = int(piece.attrib["NumberOfCells"])
        except (KeyError, ValueError) as exc:
            raise MeshFormatError(
                f"{filename}: missing or invalid NumberOfPoints/NumberOfCells"
            ) from exc

        data = SurfaceMeshData()

        points_array = piece.find("./Points/DataArray")
        if points_array is None:
            raise MeshFormatError(f"{filename}: no <Points> data")
        coords = VTUReader._values(filename, points_array, "Points")
        VTUReader._check_size(filename, "<Points>", "coordinates", 3 * n_points, coords)
        data.points = coords.reshape(n_points, 3)

        cells = piece.find("./Cells")
        if cells is None:
            raise MeshFormatError(f"{filename}: no <Cells> data")
        cell_arrays = {a.attrib.get("Name"): a for a in cells.findall("./DataArray")}
        if "connectivity" not in cell_arrays:
            raise MeshFormatError(
                f"{filename}: <Cells> without connectivity array"
            )

        if "types" in cell_arrays:
            types = VTUReader._values(filename, cell_arrays["types"], "types")
            bad = np.flatnonzero(types != VTK_TRIANGLE)
            if bad.size:
                raise MeshFormatError(
                    f"{filename}: triangle expected, cell {int(bad[0])} has "
                    f"type {int(types[bad[0]])}"
                )
        if "offsets" in cell_arrays:
            offsets = VTUReader._values(filename, cell_arrays["offsets"], "offsets")
            VTUReader._check_size(filename, "<Cells>", "offsets", n_cells, offsets)
            if not np.array_equal(offsets, 3 * np.arange(1, n_cells + 1)):
                raise MeshFormatError(
                    f"{filename}: triangle expected, offsets are not 3*k"
                )

        conn = VTUReader._values(filename, cell_arrays["connectivity"], "connectivity")
        VTUReader._check_size(filename, "<Cells>", "connectivity", 3 * n_cells, conn)
        data.triangles = conn.astype(int).reshape(n_cells, 3)

        VTUReader._read_section(
            filename, piece.find("./PointData"), "<PointData>", n_points,
            data.point_fields, None,
        )
        VTUReader._read_section(
            filename, piece.find("./CellData"), "<CellData>", n_cells,
            data.cell_fields, data.cell_vector_fields,
        )

        _LOGGER.info(
            "Loaded VTU from %s with %d points and %d triangles",
            filename,
            n_points,
            n_cells,
        )
        return data

    @staticmethod
    def _read_section(
        filename: str,
        section: Optional[ET.Element],
        domain: str,
        n: int,
        scalars: Dict[str, NDArray[Any]],
        vectors: Optional[Dict[str, NDArray[Any]]],
    ) -> None:
        if section is None:
            return
        for array in section.findall("./DataArray"):
            name = array.attrib.get("Name")
            if not name:
                raise MeshFormatError(
                    f"{filename}: {domain} DataArray without Name"
                )
            try:
                ncomp = int(array.attrib.get("NumberOfComponents", "1"))
            except ValueError as exc:
                raise MeshFormatError(
                    f"{filename}: {domain} {name} has invalid NumberOfComponents"
                ) from exc
            values = VTUReader._values(filename, array, name)
            VTUReader._check_size(filename, domain, name, ncomp * n, values)

            if ncomp == 1:
                scalars[name] = values
            elif ncomp == 3 and vectors is not None:
                vectors[name] = values.reshape(n, 3)
            else:
                _LOGGER.debug(
                    "Skipping %s array '%s' with %d components", domain, name, ncomp
                )

    @staticmethod
    def _values(filename: str, array: ET.Element, name: str) -> NDArray[Any]:
        fmt = array.attrib.get("format", array.attrib.get("Format", "ascii"))
        if fmt != "ascii":
            raise MeshFormatError(
                f"{filename}: DataArray '{name}' has unsupported format '{fmt}'"
            )
        text = array.text or ""
        try:
            return np.array(text.split(), dtype=float)
        except ValueError as exc:
            raise MeshFormatError(
                f"{filename}: invalid number in DataArray '{name}'"
            ) from exc

    @staticmethod
    def _check_size(
        filename: str, domain: str, name: str, expected: int, values: NDArray[Any]
    ) -> None:
        if values.size != expected:
            msg = (
                f"{filename}: {domain} {name} has {values.size} values, "
                f"expected {expected}"
            )
            _LOGGER.error("VTUReader: %s", msg)
            raise MeshFormatError(msg)
