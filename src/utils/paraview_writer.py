"""Module defining VTUWriter for exporting surfaces and polylines to VTU format.

This module provides VTUWriter, a utility class with static methods to
write triangle surfaces and line meshes, together with their fields, as
ASCII VTK UnstructuredGrid (.vtu) files.
"""

import xml.etree.ElementTree as ET
from typing import Any, Mapping, Optional, Sequence
from numpy.typing import NDArray

import numpy as np

VTK_LINE = 3
VTK_TRIANGLE = 5


def _format_floats(values: NDArray[Any], precision: int, per_line: int) -> str:
    """Format values in scientific notation, `per_line` values per line."""
    flat = np.asarray(values, dtype=float).reshape(-1)
    items = [f"{x:.{precision}e}" for x in flat]
    if per_line <= 1:
        return "\n" + "\n".join(items) + "\n"
    lines = (
        " ".join(items[i : i + per_line]) for i in range(0, len(items), per_line)
    )
    return "\n" + "\n".join(lines) + "\n"


def _float_array(
    parent: ET.Element,
    name: Optional[str],
    values: NDArray[Any],
    components: int,
    precision: int,
) -> ET.Element:
    attrib = {"type": "Float64"}
    if name is not None:
        attrib["Name"] = name
    if components > 1:
        attrib["NumberOfComponents"] = str(components)
    attrib["format"] = "ascii"
    array = ET.SubElement(parent, "DataArray", attrib)
    array.text = _format_floats(values, precision, components if components > 1 else 6)
    return array


def _int_array(parent: ET.Element, name: str, values: Sequence[str], dtype: str) -> None:
    array = ET.SubElement(
        parent, "DataArray", {"type": dtype, "Name": name, "format": "ascii"}
    )
    array.text = "\n" + "\n".join(values) + "\n"


class VTUWriter:
    """Utility class for writing meshes with fields to VTU format.

    Floating values are always written in scientific notation with
    `precision` digits after the decimal point.
    """

    @staticmethod
    def write_triangle_vtu(
        points: NDArray[Any],
        triangles: NDArray[Any],
        filename: str,
        cell_fields: Optional[Mapping[str, NDArray[Any]]] = None,
        cell_vector_fields: Optional[Mapping[str, NDArray[Any]]] = None,
        point_fields: Optional[Mapping[str, NDArray[Any]]] = None,
        precision: int = 14,
    ) -> None:
        """Write a triangle surface and its fields to a VTU file.

        Args:
            points (NDArray[Any]): (n_points, 3) coordinates.
            triangles (NDArray[Any]): (n_triangles, 3) vertex indices.
            filename (str): Path to the output .vtu file.
            cell_fields: Per-triangle scalar fields.
            cell_vector_fields: Per-triangle 3-vector fields.
            point_fields: Per-point scalar fields.
            precision (int): Digits after the decimal point.

        Returns:
            None: The file is written to disk.
        """
        points = np.asarray(points, dtype=float).reshape(-1, 3)
        triangles = np.asarray(triangles, dtype=int).reshape(-1, 3)
        n_tris = triangles.shape[0]

        file, piece = VTUWriter._start(points.shape[0], n_tris)

        cell_data = ET.SubElement(piece, "CellData")
        for name, values in (cell_fields or {}).items():
            _float_array(cell_data, name, values, 1, precision)
        for name, values in (cell_vector_fields or {}).items():
            _float_array(cell_data, name, values, 3, precision)

        point_data = ET.SubElement(piece, "PointData")
        for name, values in (point_fields or {}).items():
            _float_array(point_data, name, values, 1, precision)

        VTUWriter._points(piece, points, precision)

        # Cells
        cells = ET.SubElement(piece, "Cells")
        _int_array(
            cells, "connectivity", [f"{a} {b} {c}" for a, b, c in triangles], "Int64"
        )
        _int_array(
            cells, "offsets", [str(3 * (i + 1)) for i in range(n_tris)], "Int64"
        )
        _int_array(cells, "types", [str(VTK_TRIANGLE)] * n_tris, "UInt8")

        VTUWriter._write(file, filename)

    @staticmethod
    def write_line_vtu(
        nodes: NDArray[Any],
        elements: Sequence[Sequence[int]],
        filename: str,
        point_fields: Optional[Mapping[str, NDArray[Any]]] = None,
        precision: int = 14,
    ) -> None:
        """Write a line mesh and its point fields to a VTU file.

        Args:
            nodes (NDArray[Any]): (n_points, 3) coordinates.
            elements (Sequence[Sequence[int]]): (start, end) index pairs.
            filename (str): Path to the output .vtu file.
            point_fields: Per-point scalar fields.
            precision (int): Digits after the decimal point.

        Returns:
            None: The file is written to disk.
        """
        nodes = np.asarray(nodes, dtype=float).reshape(-1, 3)
        file, piece = VTUWriter._start(nodes.shape[0], len(elements))

        point_data = ET.SubElement(piece, "PointData")
        for name, values in (point_fields or {}).items():
            _float_array(point_data, name, values, 1, precision)

        VTUWriter._points(piece, nodes, precision)

        cells = ET.SubElement(piece, "Cells")
        _int_array(cells, "connectivity", [f"{a} {b}" for a, b in elements], "Int64")
        _int_array(
            cells,
            "offsets",
            [str(i) for i in range(2, 2 * len(elements) + 1, 2)],
            "Int64",
        )
        _int_array(cells, "types", [str(VTK_LINE)] * len(elements), "UInt8")

        VTUWriter._write(file, filename)

    @staticmethod
    def _start(n_points: int, n_cells: int) -> tuple:
        file = ET.Element(
            "VTKFile",
            {"type": "UnstructuredGrid", "version": "0.1", "byte_order": "LittleEndian"},
        )
        unstructured_grid = ET.SubElement(file, "UnstructuredGrid")
        piece = ET.SubElement(
            unstructured_grid,
            "Piece",
            {"NumberOfPoints": str(n_points), "NumberOfCells": str(n_cells)},
        )
        return file, piece

    @staticmethod
    def _points(piece: ET.Element, points: NDArray[Any], precision: int) -> None:
        points_el = ET.SubElement(piece, "Points")
        _float_array(points_el, None, points, 3, precision)

    @staticmethod
    def _write(file: ET.Element, filename: str) -> None:
        tree = ET.ElementTree(file)
        tree.write(filename, encoding="utf-8", xml_declaration=True)
