# conftest.py
import pytest
import numpy as np
from surface_interp import FieldType, SurfaceInterpolator3D


LEGACY_TWO_TRIANGLES = """\
# vtk DataFile Version 3.0
two triangles sharing the edge 0-2
ASCII
DATASET UNSTRUCTURED_GRID
POINTS 4 double
0 0 0
1 0 0
1 1 0
0 1 0
CELLS 2 8
3 0 1 2
3 0 2 3
CELL_TYPES 2
5
5
CELL_DATA 2
SCALARS q double 1
LOOKUP_TABLE default
1.0
3.0
POINT_DATA 4
FIELD FieldData 1
T 1 4 double
10 20 30 40
"""


@pytest.fixture
def two_triangle_square():
    """
    Unit square split into two triangles along the diagonal (0-2):
      v3 (0,1) ---- v2 (1,1)
        |  \\           |
        |    \\         |
        |      \\       |
      v0 (0,0) ---- v1 (1,0)
    Triangles: [0,1,2] and [0,2,3]
    Cell field q = [1, 3]; point field f = x + 2y.
    """
    verts = np.array(
        [
            [0.0, 0.0, 0.0],  # v0
            [1.0, 0.0, 0.0],  # v1
            [1.0, 1.0, 0.0],  # v2
            [0.0, 1.0, 0.0],
        ],  # v3
        dtype=float,
    )
    conn = np.array([[0, 1, 2], [0, 2, 3]], dtype=int)
    surf = SurfaceInterpolator3D()
    surf.set_mesh(verts, conn)
    surf.set_field(FieldType.CELL, "q", [1.0, 3.0])
    surf.set_field(FieldType.POINT, "f", verts[:, 0] + 2.0 * verts[:, 1])
    return surf


@pytest.fixture
def legacy_vtk_file(tmp_path):
    path = tmp_path / "q.vtk"
    path.write_text(LEGACY_TWO_TRIANGLES)
    return path
