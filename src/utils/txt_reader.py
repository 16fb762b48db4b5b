"""Module providing TXTReader for whitespace-delimited polyline tables.

Expected layout::

    r      z      q      T
    0.0    0.0    1.5    300
    0.1    0.0    1.7    310

The header names the two coordinate columns followed by one column per
field. Each further non-empty line holds one point; row order is kept.
"""
from __future__ import annotations

import logging
from typing import List

import numpy as np

from utils.mesh_data import MeshFormatError, PolylineData

_LOGGER = logging.getLogger(__name__)


class TXTReader:
    """Read 2D polylines with point fields from plain text tables."""

    @staticmethod
    def read(filename: str) -> PolylineData:
        """Read a polyline table.

        Args:
            filename (str): Path to the text file.

        Returns:
            PolylineData: Points in file order and one array per field.

        Raises:
            FileNotFoundError: If `filename` does not exist.
            MeshFormatError: If the header has fewer than two columns, a row
                has the wrong number of columns or a value is not numeric.
        """
        header: List[str] = []
        rows: List[List[float]] = []

        with open(filename, "r") as f:
            for lineno, line in enumerate(f, start=1):
                vals = line.split()
                if not vals:
                    continue
                if not header:
                    if len(vals) < 2:
                        raise MeshFormatError(
                            f"{filename}:{lineno}: header needs two coordinate "
                            f"columns, got {len(vals)}"
                        )
                    header = vals
                    continue
                if len(vals) != len(header):
                    raise MeshFormatError(
                        f"{filename}:{lineno}: expected {len(header)} columns, "
                        f"got {len(vals)}"
                    )
                try:
                    rows.append([float(v) for v in vals])
                except ValueError as exc:
                    raise MeshFormatError(
                        f"{filename}:{lineno}: invalid number in row"
                    ) from exc

        field_names = header[2:]
        table = np.array(rows, dtype=float).reshape(len(rows), len(header) or 2)

        data = PolylineData(
            points=table[:, :2].copy(),
            fields={name: table[:, 2 + k].copy() for k, name in enumerate(field_names)},
            coordinate_names=tuple(header[:2]) if header else ("x", "y"),
        )
        _LOGGER.info(
            "Loaded TXT from %s with %d points and %d field(s)",
            filename,
            data.points.shape[0],
            len(field_names),
        )
        return data
