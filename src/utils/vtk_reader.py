"""Module providing VTKLegacyReader for legacy ASCII ``.vtk`` surface files.

The reader walks the file as a stream of whitespace-separated tokens and
reacts to the keywords it knows; every other token is skipped. Supported
keywords:

  - ``POINTS n type``: n coordinate triplets.
  - ``CELLS n size`` / ``POLYGONS n size``: n cells, each ``3 i j k``.
  - ``CELL_DATA n`` / ``POINT_DATA n``: switch the active domain.
  - ``SCALARS name type [ncomp]`` ``LOOKUP_TABLE table``: one value per entity.
  - ``VECTORS name type`` / ``NORMALS name type``: three values per entity.
  - ``FIELD FieldData k``: k arrays ``name ncomp ntuples type`` + values;
    arrays given before any domain keyword (e.g. ``TIME``) are skipped.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional
from numpy.typing import NDArray

import numpy as np

from utils.mesh_data import MeshFormatError, SurfaceMeshData

_LOGGER = logging.getLogger(__name__)


class _TokenStream:
    """Whitespace token iterator with one-token lookahead."""

    def __init__(self, lines: Iterator[str], filename: str) -> None:
        self._tokens = (tok for line in lines for tok in line.split())
        self._peeked: Optional[str] = None
        self.filename = filename

    def peek(self) -> Optional[str]:
        if self._peeked is None:
            self._peeked = next(self._tokens, None)
        return self._peeked

    def next(self, what: str = "token") -> str:
        tok = self.peek()
        if tok is None:
            raise MeshFormatError(
                f"{self.filename}: unexpected end of file while reading {what}"
            )
        self._peeked = None
        return tok

    def ints(self, n: int, what: str) -> List[int]:
        tokens = [self.next(what) for _ in range(n)]
        try:
            return [int(tok) for tok in tokens]
        except ValueError as exc:
            raise MeshFormatError(
                f"{self.filename}: invalid integer in {what}"
            ) from exc

    def floats(self, n: int, what: str) -> NDArray[Any]:
        tokens = [self.next(what) for _ in range(n)]
        try:
            return np.array(tokens, dtype=float)
        except ValueError as exc:
            raise MeshFormatError(
                f"{self.filename}: invalid number in {what}"
            ) from exc


class VTKLegacyReader:
    """Read triangulated surfaces from legacy ASCII VTK files.

    Only triangle cells are accepted; anything else is a `MeshFormatError`.
    """

    @staticmethod
    def read(filename: str) -> SurfaceMeshData:
        """Read points, triangles and fields from a legacy VTK file.

        Args:
            filename (str): Path to the ``.vtk`` file.

        Returns:
            SurfaceMeshData: Parsed mesh and fields.

        Raises:
            FileNotFoundError: If `filename` does not exist.
            MeshFormatError: On malformed content, non-triangle cells or field
                lengths that do not match the active domain.
        """
        with open(filename, "r") as f:
            return VTKLegacyReader._parse(_TokenStream(iter(f), str(filename)))

    @staticmethod
    def _parse(ts: _TokenStream) -> SurfaceMeshData:
        data = SurfaceMeshData()
        domain: Optional[str] = None

        def cardinality() -> int:
            if domain is None:
                raise MeshFormatError(
                    f"{ts.filename}: data array found before CELL_DATA/POINT_DATA"
                )
            return (
                data.triangles.shape[0]
                if domain == "CELL_DATA"
                else data.points.shape[0]
            )

        def scalar_target() -> Dict[str, NDArray[Any]]:
            return data.cell_fields if domain == "CELL_DATA" else data.point_fields

        while True:
            tok = ts.peek()
            if tok is None:
                break
            tok = ts.next()

            if tok == "BINARY":
                raise MeshFormatError(
                    f"{ts.filename}: binary VTK files are not supported"
                )

            if tok == "POINTS":
                n = ts.ints(1, "POINTS header")[0]
                ts.next("POINTS data type")
                data.points = ts.floats(3 * n, "POINTS").reshape(n, 3)

            elif tok in ("CELLS", "POLYGONS"):
                n = ts.ints(1, f"{tok} header")[0]
                ts.next(f"{tok} size")
                triangles = np.empty((n, 3), dtype=int)
                for i in range(n):
                    count = ts.next(tok)
                    if count != "3":
                        raise MeshFormatError(
                            f"{ts.filename}: triangle expected, cell {i} has "
                            f"numPoints={count}"
                        )
                    triangles[i] = ts.ints(3, tok)
                data.triangles = triangles

            elif tok in ("CELL_DATA", "POINT_DATA"):
                domain = tok
                n = ts.ints(1, f"{tok} header")[0]
                expected = cardinality()
                if n != expected:
                    raise MeshFormatError(
                        f"{ts.filename}: {tok} declares {n} values, "
                        f"expected {expected}"
                    )

            elif tok == "SCALARS":
                name = ts.next("SCALARS name")
                ts.next("SCALARS data type")
                ncomp = 1
                if ts.peek() != "LOOKUP_TABLE":
                    ncomp = ts.ints(1, "SCALARS components")[0]
                if ts.peek() == "LOOKUP_TABLE":
                    ts.next()
                    ts.next("LOOKUP_TABLE name")
                n = cardinality()
                values = ts.floats(n * ncomp, f"SCALARS {name}")
                if ncomp == 1:
                    scalar_target()[name] = values
                else:
                    _LOGGER.debug(
                        "Skipping SCALARS '%s' with %d components", name, ncomp
                    )

            elif tok in ("VECTORS", "NORMALS"):
                name = ts.next(f"{tok} name")
                ts.next(f"{tok} data type")
                n = cardinality()
                values = ts.floats(3 * n, f"{tok} {name}").reshape(n, 3)
                if domain == "CELL_DATA":
                    data.cell_vector_fields[name] = values
                else:
                    _LOGGER.debug("Skipping point %s '%s'", tok, name)

            elif tok == "FIELD":
                ts.next("FIELD name")
                n_arrays = ts.ints(1, "FIELD array count")[0]
                for _ in range(n_arrays):
                    name = ts.next("FIELD array name")
                    ncomp, ntuples = ts.ints(2, f"FIELD array {name}")
                    ts.next(f"FIELD array {name} data type")
                    values = ts.floats(ncomp * ntuples, f"FIELD array {name}")
                    if domain is None:
                        # dataset-level FieldData (e.g. TIME) has no domain
                        _LOGGER.debug("Skipping dataset FIELD array '%s'", name)
                        continue
                    n = cardinality()
                    if ntuples != n:
                        raise MeshFormatError(
                            f"{ts.filename}: {domain} {name} has {ntuples} "
                            f"tuples, expected {n}"
                        )
                    if ncomp == 1:
                        scalar_target()[name] = values
                    elif ncomp == 3 and domain == "CELL_DATA":
                        data.cell_vector_fields[name] = values.reshape(n, 3)
                    else:
                        _LOGGER.debug(
                            "Skipping FIELD array '%s' with %d components",
                            name,
                            ncomp,
                        )

        _LOGGER.info(
            "Loaded VTK from %s with %d points and %d triangles",
            ts.filename,
            data.points.shape[0],
            data.triangles.shape[0],
        )
        return data
